from unittest.mock import MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from doitplatform.quiz.config import (
    Config,
    GRPCServerConfig,
    HTTPServerConfig,
    LoggerConfig,
    MongoConfig,
    MongoDatabase,
    ServerConfig,
    connect_mongo,
    load_config,
)


def test_defaults_from_empty_environment():
    config = load_config({})
    assert config == Config()
    assert config.server.http_server.mode == "release"
    assert config.server.http_server.port == ""
    assert config.server.grpc_server.port == 0
    assert config.logger == LoggerConfig(directory="./logs", mode="./logs")


def test_values_read_from_environment():
    environ = {
        "MONGO_DB": "quizzes",
        "MONGO_DB_URI": "mongodb://localhost:27017",
        "GIN_MODE": "debug",
        "HTTP_PORT": "8081",
        "GRPC_PORT": "9090",
        "ZAP_LOGGING_DIRECTORY": "/tmp/logs/",
        "ZAP_LOGGING_MODE": "test",
    }
    config = load_config(environ)
    assert config.mongo == MongoConfig(database="quizzes", uri="mongodb://localhost:27017")
    assert config.server == ServerConfig(
        http_server=HTTPServerConfig(mode="debug", port="8081"),
        grpc_server=GRPCServerConfig(port=9090),
    )
    assert config.logger == LoggerConfig(directory="/tmp/logs/", mode="test")


def test_empty_grpc_port_means_zero():
    assert load_config({"GRPC_PORT": ""}).server.grpc_server.port == 0


@pytest.mark.parametrize("raw", ["abc", "12.5", "1_000", "99999999999"])
def test_invalid_grpc_port_raises(raw):
    with pytest.raises(ValueError, match="GRPC_PORT"):
        load_config({"GRPC_PORT": raw})


def test_connect_mongo_invalid_uri():
    with pytest.raises(ConnectionError, match="connection to mongoDB Error"):
        connect_mongo(MongoConfig(database="quizzes", uri="mongodb://"))


def test_ping_success_sends_ping_command():
    client = MagicMock()
    db = MongoDatabase(database=MagicMock(), client=client)
    db.ping()
    client.admin.command.assert_called_once_with("ping")


def test_ping_failure_raises_connection_error():
    client = MagicMock()
    client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
    db = MongoDatabase(database=MagicMock(), client=client)
    with pytest.raises(ConnectionError, match="mongo connection error: no servers"):
        db.ping()