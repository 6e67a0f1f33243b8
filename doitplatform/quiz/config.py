"""Configuration and database connection of the quiz service."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_INTEGER = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class MongoConfig:
    database: str = ""
    uri: str = ""


@dataclass(frozen=True)
class HTTPServerConfig:
    mode: str = "release"
    port: str = ""


@dataclass(frozen=True)
class GRPCServerConfig:
    port: int = 0


@dataclass(frozen=True)
class ServerConfig:
    http_server: HTTPServerConfig = field(default_factory=HTTPServerConfig)
    grpc_server: GRPCServerConfig = field(default_factory=GRPCServerConfig)


@dataclass(frozen=True)
class LoggerConfig:
    directory: str = "./logs"
    mode: str = "./logs"


@dataclass(frozen=True)
class Config:
    mongo: MongoConfig = field(default_factory=MongoConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logger: LoggerConfig = field(default_factory=LoggerConfig)


def _int32(environ: Mapping[str, str], key: str) -> int:
    raw = environ.get(key, "")
    if not raw:
        return 0
    if not _INTEGER.fullmatch(raw):
        raise ValueError(f"invalid {key} {raw!r}: expected an integer")
    value = int(raw)
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"invalid {key} {raw!r}: value out of range")
    return value


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build the service configuration from environment variables."""
    env = os.environ if environ is None else environ
    return Config(
        mongo=MongoConfig(
            database=env.get("MONGO_DB", ""),
            uri=env.get("MONGO_DB_URI", ""),
        ),
        server=ServerConfig(
            http_server=HTTPServerConfig(
                mode=env.get("GIN_MODE", "release"),
                port=env.get("HTTP_PORT", ""),
            ),
            grpc_server=GRPCServerConfig(port=_int32(env, "GRPC_PORT")),
        ),
        logger=LoggerConfig(
            directory=env.get("ZAP_LOGGING_DIRECTORY", "./logs"),
            mode=env.get("ZAP_LOGGING_MODE", "./logs"),
        ),
    )


@dataclass
class MongoDatabase:
    """An open MongoDB client together with the service's database."""

    database: Database
    client: MongoClient

    def ping(self) -> None:
        try:
            self.client.admin.command("ping")
        except PyMongoError as err:
            raise ConnectionError(f"mongo connection error: {err}") from err


def connect_mongo(config: MongoConfig) -> MongoDatabase:
    """Connect to MongoDB and check the connection with a ping."""
    try:
        client: MongoClient = MongoClient(config.uri)
        database = client.get_database(config.database)
    except (PyMongoError, ValueError) as err:
        raise ConnectionError(f"connection to mongoDB Error: {err} {config.uri}") from err

    db = MongoDatabase(database=database, client=client)
    try:
        client.admin.command("ping")
    except PyMongoError as err:
        client.close()
        raise ConnectionError(f"ping connection mongoDB Error: {err}") from err
    return db