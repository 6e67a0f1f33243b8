"""Content service: file storage in an S3-compatible object store over HTTP."""