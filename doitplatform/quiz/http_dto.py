"""JSON request and response shapes of the quiz service's HTTP interface."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from .models import Answer, Question, Quiz, Result

_ZERO_TIME = "0001-01-01T00:00:00Z"


@dataclass(frozen=True)
class HTTPError:
    """An HTTP status code with the message to report."""

    code: int
    message: str


class RequestBindingError(ValueError):
    """Raised when a request body cannot be read into the expected shape."""


def from_error(error: BaseException) -> HTTPError:
    """Map an error to the HTTP status it is reported with."""
    return HTTPError(code=500, message=str(error))


def _decode(payload: Any) -> Any:
    """Accept raw JSON text or bytes, or an already decoded JSON value."""
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as err:
            raise RequestBindingError(f"invalid request body: {err}") from err
    if isinstance(payload, str):
        if not payload.strip():
            raise RequestBindingError("EOF")
        try:
            return json.loads(payload)
        except json.JSONDecodeError as err:
            raise RequestBindingError(f"invalid JSON: {err}") from err
    return payload


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RequestBindingError(
            f"cannot unmarshal {type(value).__name__} into {what}"
        )
    return value


def _string(obj: dict[str, Any], key: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise RequestBindingError(f"field {key!r} must be a string")
    return value


def _number(obj: dict[str, Any], key: str) -> float:
    value = obj.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RequestBindingError(f"field {key!r} must be a number")
    return float(value)


def _boolean(obj: dict[str, Any], key: str) -> bool:
    value = obj.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise RequestBindingError(f"field {key!r} must be a boolean")
    return value


def _array(obj: dict[str, Any], key: str) -> list[Any]:
    value = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise RequestBindingError(f"field {key!r} must be an array")
    return value


def _format_time(moment: datetime | None) -> str:
    """Render a timestamp in RFC 3339 form; naive values are taken as UTC."""
    if moment is None:
        return _ZERO_TIME
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _bind_question(value: Any) -> Question:
    obj = _object(value, "QuestionRequest")
    for answer in _array(obj, "answers"):
        answer_obj = _object(answer, "AnswerRequest")
        _string(answer_obj, "text")
        _boolean(answer_obj, "is_correct")
    return Question(
        text=_string(obj, "text"),
        type=_string(obj, "type"),
        points=_number(obj, "points"),
        quiz_id=_string(obj, "quiz_id"),
    )


def from_question_create_request(payload: Any) -> Question:
    """Read a question to create; the submitted answers are not carried over."""
    return _bind_question(_decode(payload))


def from_question_create_requests(payload: Any) -> list[Question]:
    """Read a JSON array of questions to create."""
    data = _decode(payload)
    if data is None:
        return []
    if not isinstance(data, list):
        raise RequestBindingError(
            f"cannot unmarshal {type(data).__name__} into []QuestionRequest"
        )
    return [_bind_question(item) for item in data]


def from_question_update_request(payload: Any) -> Question:
    """Read the fields of a question update."""
    return _bind_question(_decode(payload))


def to_question_response(question: Question) -> dict[str, Any]:
    return {"id": question.id}


def to_question_responses(questions: list[Question] | None) -> list[dict[str, Any]]:
    return [to_question_response(question) for question in questions or []]


def to_answer_get_response(answer: Answer) -> dict[str, Any]:
    """Describe an answer without revealing whether it is correct."""
    return {"id": answer.answer_id, "text": answer.text}


def to_answer_get_all_response(answers: list[Answer] | None) -> list[dict[str, Any]]:
    return [to_answer_get_response(answer) for answer in answers or []]


def to_question_get_response(question: Question) -> dict[str, Any]:
    return {
        "id": question.id,
        "text": question.text,
        "type": question.type,
        "quiz_id": question.quiz_id,
        "points": question.points,
        "answers": to_answer_get_all_response(question.answers),
    }


def to_question_get_all_response(questions: list[Question] | None) -> list[dict[str, Any]]:
    return [to_question_get_response(question) for question in questions or []]


def _bind_quiz(payload: Any) -> dict[str, str]:
    obj = _object(_decode(payload), "QuizRequest")
    return {
        "title": _string(obj, "title"),
        "description": _string(obj, "description"),
        "created_by": _string(obj, "created_by"),
        "status": _string(obj, "status"),
    }


def from_quiz_create_request(payload: Any) -> Quiz:
    """Read a quiz to create, stamping its creation and update time."""
    fields = _bind_quiz(payload)
    now = _now()
    return Quiz(**fields, created_at=now, updated_at=now)


def from_quiz_update_request(payload: Any) -> Quiz:
    """Read the fields of a quiz update, stamping its update time."""
    return Quiz(**_bind_quiz(payload), updated_at=_now())


def to_quiz_response(quiz: Quiz) -> dict[str, Any]:
    return {"id": quiz.id}


def to_quiz_get_response(quiz: Quiz) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "created_by": quiz.created_by,
        "status": quiz.status,
        "total_points": quiz.total_points,
        "questions": to_question_get_all_response(quiz.questions),
        "created_at": _format_time(quiz.created_at),
        "updated_at": _format_time(quiz.updated_at),
    }


def from_result_create_request(payload: Any) -> Result:
    """Read a quiz submission; without questions, ``questions`` is ``None``."""
    obj = _object(_decode(payload), "ResultRequest")
    questions = []
    for item in _array(obj, "questions"):
        question_obj = _object(item, "ResultQuestion")
        answers = [
            Answer(answer_id=_string(_object(answer, "ResultAnswer"), "id"))
            for answer in _array(question_obj, "answers")
        ]
        questions.append(Question(id=_string(question_obj, "id"), answers=answers))
    return Result(
        user_id=_string(obj, "user_id"),
        quiz_id=_string(obj, "quiz_id"),
        status=_string(obj, "status"),
        questions=questions or None,
        passed_at=_now(),
    )


def to_result_response(result: Result) -> dict[str, Any]:
    return {"id": result.id}


def to_result_get_response(result: Result) -> dict[str, Any]:
    return {
        "id": result.id,
        "user_id": result.user_id,
        "quiz_id": result.quiz_id,
        "score": result.score,
        "questions": to_question_get_all_response(result.questions),
        "passed_at": _format_time(result.passed_at),
    }


def to_result_get_all_response(results: list[Result] | None) -> list[dict[str, Any]]:
    return [to_result_get_response(result) for result in results or []]