"""Assembly and entry point of the quiz service."""

from __future__ import annotations

import json
import logging
import signal
import sys
import threading
from datetime import datetime
from typing import Any

from dotenv import load_dotenv

from ..logsetup import LoggingModeError
from .config import Config, connect_mongo, load_config
from .http_server import API
from .repository import QuestionRepository, QuizRepository, ResultRepository
from .usecases import QuestionUsecase, QuizUsecase, ResultUsecase

SERVICE_NAME = "quiz-service"

_CONSOLE_FORMAT = "%(asctime)s\t%(levelname)s\t%(filename)s:%(lineno)d\t%(message)s"


def _say(message: str) -> None:
    """Write a timestamped line to standard error."""
    print(f"{datetime.now():%Y/%m/%d %H:%M:%S} {message}", file=sys.stderr)


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": record.levelname.lower(),
            "ts": record.created,
            "caller": f"{record.filename}:{record.lineno}",
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def new_logger(config: Config) -> logging.Logger:
    """Build the service logger from the logging section of ``config``.

    File names are appended to the configured directory as they are, so the
    directory should end with a path separator.
    """
    directory = config.logger.directory
    mode = config.logger.mode
    if mode == "release":
        level, formatter = logging.INFO, _JSONFormatter()
        handlers: list[logging.Handler] = [
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(directory + "app.log", encoding="utf-8"),
        ]
    elif mode == "debug":
        level, formatter = logging.DEBUG, logging.Formatter(_CONSOLE_FORMAT)
        handlers = [
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(directory + "debug.log", encoding="utf-8"),
        ]
    elif mode == "test":
        level, formatter = logging.INFO, _JSONFormatter()
        handlers = [logging.FileHandler(directory + "test.log", encoding="utf-8")]
    else:
        raise LoggingModeError(f"unknown logging mode: {mode}")

    logger = logging.getLogger(SERVICE_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(level)
    logger.propagate = False
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


class App:
    """The quiz service: database, repositories, use cases and HTTP server."""

    def __init__(self, config: Config) -> None:
        _say(f"starting {SERVICE_NAME} server")
        self.log = new_logger(config)

        _say(f"connecting to mongo database {config.mongo.database}")
        try:
            self.db = connect_mongo(config.mongo)
        except ConnectionError as err:
            raise ConnectionError(f"mongo: {err}") from err

        database = self.db.database
        result_repo = ResultRepository(database)
        quiz_repo = QuizRepository(database)
        question_repo = QuestionRepository(database)

        result_usecase = ResultUsecase(result_repo, quiz_repo, question_repo)
        quiz_usecase = QuizUsecase(quiz_repo, question_repo)
        question_usecase = QuestionUsecase(quiz_repo, question_repo)

        self.http_server = API(config.server, result_usecase, quiz_usecase, question_usecase)
        self._stop = threading.Event()

    def run(self) -> None:
        """Serve until SIGINT or SIGTERM arrives or :meth:`close` is called."""
        self._stop.clear()
        received: list[signal.Signals] = []

        def on_signal(signum: int, _frame: Any) -> None:
            received.append(signal.Signals(signum))
            self._stop.set()

        previous: dict[signal.Signals, Any] = {}
        if threading.current_thread() is threading.main_thread():
            for sig in (signal.SIGINT, signal.SIGTERM):
                previous[sig] = signal.signal(sig, on_signal)
        try:
            self.http_server.run()
            _say(f"server {SERVICE_NAME} started")
            while not self._stop.wait(0.5):
                pass
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

        if received:
            _say(f"received signal: {received[0].name}. Running graceful shutdown...")
            self.close()
            _say("graceful shutdown completed!")

    def close(self) -> None:
        """Stop the server and release the database connection."""
        try:
            self.http_server.stop()
        except Exception as err:
            _say(f"failed to shutdown server {err}")
        self.db.client.close()
        self._stop.set()


def main(argv: list[str] | None = None) -> int:
    """Start the quiz service; returns the process exit status."""
    load_dotenv(".env")
    try:
        config = load_config()
    except ValueError as err:
        _say(f"failed to parse config: {err}")
        return 1

    try:
        application = App(config)
    except Exception as err:
        _say(f"failed to setup application: {err}")
        return 1

    try:
        application.run()
    except Exception as err:
        _say(f"failed to run application: {err}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())