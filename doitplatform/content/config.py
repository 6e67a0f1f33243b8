"""Configuration of the content service, read from the environment."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, TypeVar

from dotenv import dotenv_values

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?\d+")
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


class ConfigError(ValueError):
    """Raised when the configuration cannot be loaded or is invalid."""


@dataclass(frozen=True)
class GRPCServerConfig:
    port: int = 0
    max_recv_msg_size_mib: int = 12
    max_connection_age: timedelta = timedelta(seconds=30)
    max_connection_age_grace: timedelta = timedelta(seconds=10)


@dataclass(frozen=True)
class HTTPServerConfig:
    port: int = 8080
    read_timeout: timedelta = timedelta(seconds=30)
    write_timeout: timedelta = timedelta(seconds=30)
    mode: str = "release"


@dataclass(frozen=True)
class ServerConfig:
    grpc_server: GRPCServerConfig = field(default_factory=GRPCServerConfig)
    http_server: HTTPServerConfig = field(default_factory=HTTPServerConfig)


@dataclass(frozen=True)
class S3StorageConfig:
    conn_str: str = "http://127.0.0.1:4400"
    data_directory: str = "./data"


@dataclass(frozen=True)
class LoggerConfig:
    directory: str = "./logs"
    mode: str = "debug"


@dataclass(frozen=True)
class TelemetryConfig:
    mode: str = "debug"
    exporter_otlp_endpoint: str = "http://localhost:4318"
    exporter_otlp_insecure: bool = True
    exporter_prom_port: int = 3003


@dataclass(frozen=True)
class Config:
    server: ServerConfig = field(default_factory=ServerConfig)
    s3_storage: S3StorageConfig = field(default_factory=S3StorageConfig)
    logger: LoggerConfig = field(default_factory=LoggerConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)


def _integer(bits: int) -> Callable[[str], int]:
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def parse(text: str) -> int:
        if not _INTEGER.fullmatch(text):
            raise ValueError(f'parsing "{text}": invalid syntax')
        value = int(text)
        if not low <= value <= high:
            raise ValueError(f'parsing "{text}": value out of range')
        return value

    return parse


def _boolean(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f'parsing "{text}": invalid syntax')


def _duration(text: str) -> timedelta:
    """Parse a duration such as ``30s``, ``1m30s`` or ``250ms``."""
    body, sign = text, 1.0
    if body[:1] in ("+", "-"):
        sign = -1.0 if body[0] == "-" else 1.0
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f'time: invalid duration "{text}"')
    seconds, pos = 0.0, 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        if match is None:
            raise ValueError(f'time: invalid duration "{text}"')
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return timedelta(seconds=sign * seconds)


class _Environment:
    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = values
        self.errors: list[str] = []

    def get(
        self,
        key: str,
        default: T,
        parse: Callable[[str], Any] | None = None,
        not_empty: bool = False,
    ) -> T:
        raw = self._values.get(key, "")
        if raw == "":
            if not_empty:
                self.errors.append(f'environment variable "{key}" should not be empty')
            return default
        if parse is None:
            return raw  # type: ignore[return-value]
        try:
            return parse(raw)
        except ValueError as err:
            self.errors.append(f'parse error on field "{key}": {err}')
            return default


def load_config(
    environ: Mapping[str, str] | None = None, env_file: str | os.PathLike | None = ".env"
) -> Config:
    """Load the configuration from ``env_file`` and the environment.

    The file must exist unless ``env_file`` is ``None``; variables already in
    the environment take precedence over those in the file.
    """
    values: dict[str, str] = {}
    if env_file is not None:
        if not Path(env_file).is_file():
            raise ConfigError(f"open {os.fspath(env_file)}: no such file or directory")
        values.update(
            {key: value for key, value in dotenv_values(env_file).items() if value is not None}
        )
    values.update(os.environ if environ is None else environ)

    env = _Environment(values)
    config = Config(
        server=ServerConfig(
            grpc_server=GRPCServerConfig(
                port=env.get("SERVER_GRPC_PORT", 0, _integer(32), not_empty=True),
                max_recv_msg_size_mib=env.get(
                    "SERVER_GRPC_MAX_MESSAGE_SIZE_MIB", 12, _integer(64)
                ),
                max_connection_age=env.get(
                    "SERVER_GRPC_MAX_CONNECTION_AGE", timedelta(seconds=30), _duration
                ),
                max_connection_age_grace=env.get(
                    "SERVER_GRPC_MAX_CONNECTION_AGE_GRACE", timedelta(seconds=10), _duration
                ),
            ),
            http_server=HTTPServerConfig(
                port=env.get("SERVER_HTTP_HTTP_PORT", 8080, _integer(64)),
                read_timeout=env.get(
                    "SERVER_HTTP_HTTP_READ_TIMEOUT", timedelta(seconds=30), _duration
                ),
                write_timeout=env.get(
                    "SERVER_HTTP_HTTP_WRITE_TIMEOUT", timedelta(seconds=30), _duration
                ),
                mode=env.get("SERVER_HTTP_GIN_MODE", "release"),
            ),
        ),
        s3_storage=S3StorageConfig(
            conn_str=env.get("S3_CONN_STR", "http://127.0.0.1:4400"),
            data_directory=env.get("S3_DATA_DIRECTORY", "./data"),
        ),
        logger=LoggerConfig(
            directory=env.get("ZAP_LOGGING_DIRECTORY", "./logs"),
            mode=env.get("ZAP_LOGGING_MODE", "debug"),
        ),
        telemetry=TelemetryConfig(
            mode=env.get("OTEL_MODE", "debug"),
            exporter_otlp_endpoint=env.get(
                "OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318"
            ),
            exporter_otlp_insecure=env.get("OTEL_EXPORTER_OTLP_INSECURE", True, _boolean),
            exporter_prom_port=env.get("OTEL_EXPORTER_PROM_PORT", 3003, _integer(64)),
        ),
    )
    if env.errors:
        raise ConfigError("env: " + "; ".join(env.errors))
    return config