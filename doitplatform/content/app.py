"""Assembly and entry point of the content service."""

from __future__ import annotations

import sys

from ..logsetup import new_logger
from .config import Config, ConfigError, load_config
from .files import FileUsecase
from .http_server import API
from .s3 import S3FileRepository

SERVICE_NAME = "content-service"


class App:
    """The content service: logger, object storage, use case and HTTP server."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.log = new_logger(SERVICE_NAME, config.logger.directory, config.logger.mode)

        file_repo = S3FileRepository(config.s3_storage.conn_str)
        self.file_usecase = FileUsecase(file_repo)
        self.http_server = API(config, self.file_usecase)

    def run(self) -> None:
        """Serve requests until the process is interrupted."""
        self.log.info("Starting the service")
        self.http_server.run()

    def stop(self) -> None:
        """Close the service's log outputs."""
        for handler in list(self.log.handlers):
            self.log.removeHandler(handler)
            handler.close()


def main(argv: list[str] | None = None) -> int:
    """Start the content service; returns the process exit status."""
    try:
        config = load_config()
    except ConfigError as err:
        print("Config Error:", err)
        return 1

    try:
        application = App(config)
    except Exception as err:
        print(err)
        return 1

    try:
        application.run()
    except KeyboardInterrupt:
        application.stop()
        return 0
    except Exception as err:
        print(err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())