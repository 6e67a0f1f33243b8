"""API gateway: configuration, file use case and HTTP server for file requests."""