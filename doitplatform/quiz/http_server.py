"""HTTP interface of the quiz service: request handlers and the server."""

from __future__ import annotations

import logging
import threading
from http import HTTPStatus
from typing import Any, Protocol
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from flask import Flask, jsonify, request

from . import http_dto as dto
from .config import ServerConfig
from .models import Question, Quiz, Result

_log = logging.getLogger(__name__)

_SERVER_HOST = "0.0.0.0"


class _QuizUseCase(Protocol):
    def create_quiz(self, request: Quiz) -> Quiz: ...

    def get_quiz_by_id(self, quiz_id: str) -> Quiz: ...

    def update_quiz(self, request: Quiz) -> Quiz: ...

    def delete_quiz(self, quiz_id: str) -> Quiz: ...


class _QuestionUseCase(Protocol):
    def create_question(self, request: Question) -> Question: ...

    def create_questions(self, requests: list[Question]) -> list[Question]: ...

    def get_question_by_id(self, question_id: str) -> Question: ...

    def get_questions_by_quiz_id(self, quiz_id: str) -> list[Question]: ...

    def update_question(self, request: Question) -> Question: ...

    def delete_question(self, question_id: str) -> Question: ...


class _ResultUseCase(Protocol):
    def create_result(self, request: Result) -> Result: ...

    def get_result_by_id(self, result_id: str) -> Result: ...

    def get_results_by_quiz_id(self, quiz_id: str) -> list[Result]: ...

    def get_results_by_user_id(self, user_id: str) -> list[Result]: ...

    def delete_result(self, result_id: str) -> Result: ...


def _reply(body: Any, status: HTTPStatus) -> tuple[Any, int]:
    return jsonify(body), int(status)


def _error(status: HTTPStatus, message: str) -> tuple[Any, int]:
    return _reply({"error": message}, status)


def _bad_request() -> tuple[Any, int]:
    return _error(HTTPStatus.BAD_REQUEST, "bad request")


def _binding_failure(err: Exception) -> tuple[Any, int]:
    # A body that cannot be bound is reported as a bad request.
    return _error(HTTPStatus.BAD_REQUEST, dto.from_error(err).message)


def _internal(err: Exception) -> tuple[Any, int]:
    return _error(HTTPStatus.INTERNAL_SERVER_ERROR, str(err))


class QuestionHandler:
    """Request handlers for questions."""

    def __init__(self, usecase: _QuestionUseCase) -> None:
        self.usecase = usecase

    def create_question(self) -> tuple[Any, int]:
        try:
            question = dto.from_question_create_request(request.get_data())
        except dto.RequestBindingError as err:
            return _binding_failure(err)
        try:
            created = self.usecase.create_question(question)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_question_response(created), HTTPStatus.CREATED)

    def create_questions(self) -> tuple[Any, int]:
        try:
            questions = dto.from_question_create_requests(request.get_data())
        except dto.RequestBindingError as err:
            return _binding_failure(err)
        try:
            created = self.usecase.create_questions(questions)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_question_responses(created), HTTPStatus.CREATED)

    def get_question_by_id(self, question_id: str) -> tuple[Any, int]:
        if not question_id:
            return _bad_request()
        try:
            question = self.usecase.get_question_by_id(question_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_question_get_response(question), HTTPStatus.OK)

    def get_questions_by_quiz_id(self, quiz_id: str) -> tuple[Any, int]:
        if not quiz_id:
            return _bad_request()
        try:
            questions = self.usecase.get_questions_by_quiz_id(quiz_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_question_get_all_response(questions), HTTPStatus.OK)

    def update_question(self, question_id: str) -> tuple[Any, int]:
        if not question_id:
            return _bad_request()
        try:
            question = dto.from_question_update_request(request.get_data())
        except dto.RequestBindingError as err:
            return _binding_failure(err)
        question.id = question_id
        try:
            updated = self.usecase.update_question(question)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_question_response(updated), HTTPStatus.OK)

    def delete_question(self, question_id: str) -> tuple[Any, int]:
        if not question_id:
            return _bad_request()
        try:
            deleted = self.usecase.delete_question(question_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_question_response(deleted), HTTPStatus.OK)


class QuizHandler:
    """Request handlers for quizzes."""

    def __init__(self, usecase: _QuizUseCase) -> None:
        self.usecase = usecase

    def create_quiz(self) -> tuple[Any, int]:
        try:
            quiz = dto.from_quiz_create_request(request.get_data())
        except dto.RequestBindingError as err:
            return _binding_failure(err)
        try:
            created = self.usecase.create_quiz(quiz)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_quiz_response(created), HTTPStatus.CREATED)

    def get_quiz_by_id(self, quiz_id: str) -> tuple[Any, int]:
        if not quiz_id:
            return _bad_request()
        try:
            quiz = self.usecase.get_quiz_by_id(quiz_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_quiz_get_response(quiz), HTTPStatus.OK)

    def update_quiz(self, quiz_id: str) -> tuple[Any, int]:
        if not quiz_id:
            return _bad_request()
        try:
            quiz = dto.from_quiz_update_request(request.get_data())
        except dto.RequestBindingError as err:
            return _binding_failure(err)
        quiz.id = quiz_id
        try:
            updated = self.usecase.update_quiz(quiz)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_quiz_response(updated), HTTPStatus.OK)

    def delete_quiz(self, quiz_id: str) -> tuple[Any, int]:
        if not quiz_id:
            return _bad_request()
        try:
            deleted = self.usecase.delete_quiz(quiz_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_quiz_response(deleted), HTTPStatus.OK)


class ResultHandler:
    """Request handlers for quiz results."""

    def __init__(self, usecase: _ResultUseCase) -> None:
        self.usecase = usecase

    def create_result(self) -> tuple[Any, int]:
        try:
            result = dto.from_result_create_request(request.get_data())
        except dto.RequestBindingError as err:
            return _binding_failure(err)
        try:
            created = self.usecase.create_result(result)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_result_response(created), HTTPStatus.CREATED)

    def get_result_by_id(self, result_id: str) -> tuple[Any, int]:
        if not result_id:
            return _bad_request()
        try:
            result = self.usecase.get_result_by_id(result_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_result_get_response(result), HTTPStatus.OK)

    def get_results_by_quiz_id(self, quiz_id: str) -> tuple[Any, int]:
        if not quiz_id:
            return _bad_request()
        try:
            results = self.usecase.get_results_by_quiz_id(quiz_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_result_get_all_response(results), HTTPStatus.OK)

    def get_results_by_user_id(self, user_id: str) -> tuple[Any, int]:
        if not user_id:
            return _bad_request()
        try:
            results = self.usecase.get_results_by_user_id(user_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_result_get_all_response(results), HTTPStatus.OK)

    def delete_result(self, result_id: str) -> tuple[Any, int]:
        if not result_id:
            return _bad_request()
        try:
            deleted = self.usecase.delete_result(result_id)
        except Exception as err:
            return _internal(err)
        return _reply(dto.to_result_response(deleted), HTTPStatus.OK)


class _QuietRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        _log.debug("%s - %s", self.address_string(), format % args)


class API:
    """The quiz service's HTTP server with its routes."""

    def __init__(
        self,
        config: ServerConfig,
        result_usecase: _ResultUseCase,
        quiz_usecase: _QuizUseCase,
        question_usecase: _QuestionUseCase,
    ) -> None:
        self.config = config.http_server
        self.addr = f"{_SERVER_HOST}:{self.config.port}"
        self.result_handler = ResultHandler(result_usecase)
        self.quiz_handler = QuizHandler(quiz_usecase)
        self.question_handler = QuestionHandler(question_usecase)

        self.app = Flask(__name__)
        self.app.debug = self.config.mode == "debug"
        self.app.testing = self.config.mode == "test"
        self._setup_routes()

        self._server: WSGIServer | None = None
        self._thread: threading.Thread | None = None

    def _setup_routes(self) -> None:
        routes = [
            ("/api/v1/quizzes/", "POST", self.quiz_handler.create_quiz),
            ("/api/v1/quizzes/<quiz_id>", "GET", self.quiz_handler.get_quiz_by_id),
            ("/api/v1/quizzes/<quiz_id>", "PUT", self.quiz_handler.update_quiz),
            ("/api/v1/quizzes/<quiz_id>", "DELETE", self.quiz_handler.delete_quiz),
            ("/api/v1/questions/", "POST", self.question_handler.create_question),
            ("/api/v1/questions/many", "POST", self.question_handler.create_questions),
            (
                "/api/v1/questions/<question_id>",
                "GET",
                self.question_handler.get_question_by_id,
            ),
            (
                "/api/v1/questions/quiz/<quiz_id>",
                "GET",
                self.question_handler.get_questions_by_quiz_id,
            ),
            (
                "/api/v1/questions/<question_id>",
                "PUT",
                self.question_handler.update_question,
            ),
            (
                "/api/v1/questions/<question_id>",
                "DELETE",
                self.question_handler.delete_question,
            ),
            ("/api/v1/result/", "POST", self.result_handler.create_result),
            ("/api/v1/result/<result_id>", "GET", self.result_handler.get_result_by_id),
            (
                "/api/v1/result/quiz/<quiz_id>",
                "GET",
                self.result_handler.get_results_by_quiz_id,
            ),
            (
                "/api/v1/result/user/<user_id>",
                "GET",
                self.result_handler.get_results_by_user_id,
            ),
            ("/api/v1/result/<result_id>", "DELETE", self.result_handler.delete_result),
        ]
        for rule, method, view in routes:
            endpoint = f"{method.lower()}:{rule}"
            self.app.add_url_rule(rule, endpoint, view_func=view, methods=[method])

    @property
    def server_address(self) -> tuple[str, int] | None:
        """The host and port the server is bound to, or ``None`` when stopped."""
        if self._server is None:
            return None
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def run(self) -> None:
        """Bind the listening socket and serve requests in a background thread."""
        if self._server is not None:
            raise RuntimeError("HTTP server is already running")
        port_text = self.config.port
        try:
            port = int(port_text) if port_text else 0
        except ValueError as err:
            raise ValueError(
                f"failed to start HTTP server: invalid port {port_text!r}"
            ) from err

        _log.info("HTTP server starting on: %s", self.addr)
        try:
            server = make_server(
                _SERVER_HOST, port, self.app, handler_class=_QuietRequestHandler
            )
        except OSError as err:
            raise OSError(err.errno, f"failed to start HTTP server: {err}") from err

        thread = threading.Thread(
            target=server.serve_forever, name="quiz-http-server", daemon=True
        )
        self._server = server
        self._thread = thread
        thread.start()

    def stop(self) -> None:
        """Stop serving, letting the request in progress finish."""
        server, thread = self._server, self._thread
        if server is None:
            return
        _log.info("HTTP server shutting down gracefully")
        server.shutdown()
        server.server_close()
        if thread is not None:
            thread.join()
        self._server = None
        self._thread = None
        _log.info("HTTP server stopped successfully")