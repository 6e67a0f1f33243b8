"""Configuration of the API gateway, read from the environment."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, TypeVar

from dotenv import dotenv_values

from ..content.config import _boolean, _duration, _Environment, _integer

T = TypeVar("T")


class ConfigError(ValueError):
    """Raised when the configuration cannot be loaded or is invalid."""


@dataclass(frozen=True)
class HTTPServerConfig:
    port: int = 0
    read_timeout: timedelta = timedelta(seconds=30)
    write_timeout: timedelta = timedelta(seconds=30)
    idle_timeout: timedelta = timedelta(seconds=60)
    max_header_bytes: int = 1048576
    trusted_proxies: tuple[str, ...] = ()
    mode: str = "release"


@dataclass(frozen=True)
class ServerConfig:
    http_server: HTTPServerConfig = field(default_factory=HTTPServerConfig)


@dataclass(frozen=True)
class GRPCClientConfig:
    content_service_url: str = ""


@dataclass(frozen=True)
class GRPCConfig:
    grpc_client: GRPCClientConfig = field(default_factory=GRPCClientConfig)


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
    logger: LoggerConfig = field(default_factory=LoggerConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    grpc: GRPCConfig = field(default_factory=GRPCConfig)
    version: str = ""


class _RequiringEnvironment(_Environment):
    """Environment lookup that can also demand a variable be set at all."""

    def get(
        self,
        key: str,
        default: T,
        parse: Callable[[str], Any] | None = None,
        not_empty: bool = False,
        required: bool = False,
    ) -> T:
        if required and key not in self._values:
            self.errors.append(f'required environment variable "{key}" is not set')
            return default
        return super().get(key, default, parse, not_empty)


def _separated(text: str) -> tuple[str, ...]:
    return tuple(text.split(","))


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

    env = _RequiringEnvironment(values)
    config = Config(
        server=ServerConfig(
            http_server=HTTPServerConfig(
                port=env.get("HTTP_PORT", 0, _integer(64), required=True),
                read_timeout=env.get("HTTP_READ_TIMEOUT", timedelta(seconds=30), _duration),
                write_timeout=env.get(
                    "HTTP_WRITE_TIMEOUT", timedelta(seconds=30), _duration
                ),
                idle_timeout=env.get("HTTP_IDLE_TIMEOUT", timedelta(seconds=60), _duration),
                max_header_bytes=env.get("HTTP_MAX_HEADER_BYTES", 1048576, _integer(64)),
                trusted_proxies=env.get("HTTP_TRUSTED_PROXIES", (), _separated),
                mode=env.get("GIN_MODE", "release"),
            )
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
        grpc=GRPCConfig(
            grpc_client=GRPCClientConfig(
                content_service_url=env.get("GRPC_CONTENT_SERVICE_URL", "", required=True)
            )
        ),
        version=env.get("VERSION", ""),
    )
    if env.errors:
        raise ConfigError("env: " + "; ".join(env.errors))
    return config