"""Logger construction shared by the gateway and content services."""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_COLORS = {
    "DEBUG": "\x1b[35m",
    "INFO": "\x1b[34m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[31m",
}
_RESET = "\x1b[0m"

_STANDARD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class LoggingModeError(ValueError):
    """Raised for a logging mode other than release, debug or test."""


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": record.levelname.lower(),
            "ts": time.strftime(_TIME_FORMAT, time.localtime(record.created)),
            "caller": f"{record.filename}:{record.lineno}",
            "msg": record.getMessage(),
        }
        entry.update(_extras(record))
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        colored = f"{_COLORS.get(level, '')}{level}{_RESET}"
        parts = [
            time.strftime(_TIME_FORMAT, time.localtime(record.created)),
            colored,
            f"{record.filename}:{record.lineno}",
            record.getMessage(),
        ]
        extras = _extras(record)
        if extras:
            parts.append(json.dumps(extras, default=str))
        line = "\t".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def new_logger(name: str, directory: str, mode: str) -> logging.Logger:
    """Build a logger writing to stdout and/or a file in ``directory``.

    ``release`` logs JSON to stdout and ``app.json``; ``debug`` logs coloured
    console lines to stdout and ``debug.log``; ``test`` logs JSON to
    ``test.log`` only.
    """
    if directory:
        try:
            Path(directory).mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise OSError(f"failed to create log directory: {err}") from err

    def in_dir(filename: str) -> str:
        return os.path.join(directory, filename) if directory else filename

    if mode == "release":
        level, formatter = logging.INFO, _JSONFormatter()
        handlers: list[logging.Handler] = [
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(in_dir("app.json"), encoding="utf-8"),
        ]
    elif mode == "debug":
        level, formatter = logging.DEBUG, _ConsoleFormatter()
        handlers = [
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(in_dir("debug.log"), encoding="utf-8"),
        ]
    elif mode == "test":
        level, formatter = logging.INFO, _JSONFormatter()
        handlers = [logging.FileHandler(in_dir("test.log"), encoding="utf-8")]
    else:
        raise LoggingModeError(f"unknown logging mode: {mode}")

    logger = logging.getLogger(name)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(level)
    logger.propagate = False
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger