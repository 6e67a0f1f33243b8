"""HTTP interface of the API gateway: file handlers and the server."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Protocol
from wsgiref.simple_server import WSGIRequestHandler, make_server

from flask import Flask, Response, jsonify, request

from .config import HTTPServerConfig
from .files import File

_log = logging.getLogger(__name__)

_SERVER_HOST = "0.0.0.0"


class _FileUsecase(Protocol):
    def create(self, file: File) -> str: ...

    def get(self, key: str) -> File: ...

    def delete(self, key: str) -> None: ...


def file_from_create_request(
    body: bytes, content_length: int | None, content_type: str | None
) -> File:
    """Build the file to forward from an upload; an unknown length becomes -1."""
    return File(
        body=bytes(body),
        size=-1 if content_length is None else content_length,
        type=content_type or "",
    )


def _error(status: HTTPStatus, err: Exception) -> tuple[Any, int]:
    return jsonify({"error": str(err)}), int(status)


class FileHandler:
    """Request handlers for uploading, downloading and deleting files."""

    def __init__(self, usecase: _FileUsecase) -> None:
        self.usecase = usecase

    def create(self) -> tuple[Any, int]:
        try:
            body = request.get_data()
        except Exception as err:
            return _error(HTTPStatus.BAD_REQUEST, err)
        file = file_from_create_request(
            body, request.content_length, request.headers.get("Content-Type")
        )
        try:
            key = self.usecase.create(file)
        except Exception as err:
            _log.error("%s", err)
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, err)
        body_json = {"message": "File updated successfully", "key": key}
        return jsonify(body_json), int(HTTPStatus.OK)

    def get(self, key: str) -> Any:
        try:
            file = self.usecase.get(key)
        except Exception as err:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, err)
        return Response(file.body, status=int(HTTPStatus.OK), content_type=file.type)

    def delete(self, key: str) -> tuple[Any, int]:
        try:
            self.usecase.delete(key)
        except Exception as err:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, err)
        return "", int(HTTPStatus.NO_CONTENT)


class _QuietRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        _log.debug("%s - %s", self.address_string(), format % args)


class API:
    """The gateway's HTTP server with its health check and file routes."""

    def __init__(
        self, config: HTTPServerConfig, logger: logging.Logger, file_usecase: _FileUsecase
    ) -> None:
        self.config = config
        self.log = logger
        self.addr = f"{_SERVER_HOST}:{config.port}"
        self.file_handler = FileHandler(file_usecase)

        self.app = Flask(__name__)
        self.app.debug = config.mode == "debug"
        self.app.testing = config.mode == "test"
        # Handler failures are always turned into responses, never re-raised.
        self.app.config["PROPAGATE_EXCEPTIONS"] = False
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.add_url_rule(
            "/health", "health", view_func=self._health, methods=["GET"]
        )
        routes = [
            ("/api/v1/file/", "PUT", self.file_handler.create),
            ("/api/v1/file/<key>", "GET", self.file_handler.get),
            ("/api/v1/file/<key>", "DELETE", self.file_handler.delete),
        ]
        for rule, method, view in routes:
            self.app.add_url_rule(
                rule, f"{method.lower()}:{rule}", view_func=view, methods=[method]
            )

    @staticmethod
    def _health() -> tuple[Any, int]:
        return jsonify({"message": "OK"}), int(HTTPStatus.OK)

    def run(self) -> None:
        """Serve requests until the process is interrupted."""
        port = self.config.port
        if not 0 <= port <= 65535:
            raise ValueError(f"listen tcp: address {port}: invalid port")
        self.log.info(
            "Running http server", extra={"addr": self.addr, "gin_mode": self.config.mode}
        )
        with make_server(
            _SERVER_HOST, port, self.app, handler_class=_QuietRequestHandler
        ) as server:
            server.serve_forever()