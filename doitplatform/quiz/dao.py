"""Conversion between quiz domain objects and MongoDB documents."""

from __future__ import annotations

from typing import Any

from .models import Answer, Question, Quiz, Result

Document = dict[str, Any]


def _id_str(value: Any) -> str:
    """Render a stored identifier (ObjectId or string) as a string."""
    return "" if value is None else str(value)


def _with_id(identifier: str, fields: Document) -> Document:
    document: Document = {"_id": identifier} if identifier else {}
    document.update(fields)
    return document


def from_question(question: Question) -> Document:
    """Build the stored form of a question; an empty id is left out."""
    return _with_id(
        question.id,
        {
            "text": question.text,
            "type": question.type,
            "points": question.points,
            "quiz_id": question.quiz_id,
            "answers": [
                {
                    "answer_id": answer.answer_id,
                    "text": answer.text,
                    "is_correct": answer.is_correct,
                }
                for answer in question.answers
            ],
        },
    )


def to_question(document: Document) -> Question:
    """Read a question from its stored form."""
    return Question(
        id=_id_str(document.get("_id")),
        text=document.get("text") or "",
        type=document.get("type") or "",
        points=float(document.get("points") or 0.0),
        quiz_id=document.get("quiz_id") or "",
        answers=[
            Answer(
                answer_id=answer.get("answer_id") or "",
                text=answer.get("text") or "",
                is_correct=bool(answer.get("is_correct", False)),
            )
            for answer in document.get("answers") or []
        ],
    )


def from_quiz(quiz: Quiz) -> Document:
    """Build the stored form of a quiz; its questions are stored separately."""
    return _with_id(
        quiz.id,
        {
            "title": quiz.title,
            "description": quiz.description,
            "created_by": quiz.created_by,
            "status": quiz.status,
            "total_points": quiz.total_points,
            "created_at": quiz.created_at,
            "updated_at": quiz.updated_at,
        },
    )


def to_quiz(document: Document) -> Quiz:
    """Read a quiz from its stored form."""
    return Quiz(
        id=_id_str(document.get("_id")),
        title=document.get("title") or "",
        description=document.get("description") or "",
        created_by=document.get("created_by") or "",
        status=document.get("status") or "",
        total_points=float(document.get("total_points") or 0.0),
        created_at=document.get("created_at"),
        updated_at=document.get("updated_at"),
    )


def from_result(result: Result) -> Document:
    """Build the stored form of a result: only question and answer ids are kept."""
    questions = None
    if result.questions is not None:
        questions = [
            {
                "question_id": question.id,
                "answers": [{"answer_id": answer.answer_id} for answer in question.answers],
            }
            for question in result.questions
        ]
    return _with_id(
        result.id,
        {
            "user_id": result.user_id,
            "quiz_id": result.quiz_id,
            "score": result.score,
            "status": result.status,
            "questions": questions,
            "passed_at": result.passed_at,
        },
    )


def to_result(document: Document) -> Result:
    """Read a result from its stored form.

    The status is not carried over, and a result without stored questions
    has ``questions`` set to ``None``.
    """
    questions = [
        Question(
            id=question.get("question_id") or "",
            answers=[
                Answer(answer_id=answer.get("answer_id") or "")
                for answer in question.get("answers") or []
            ],
        )
        for question in document.get("questions") or []
    ]
    return Result(
        id=_id_str(document.get("_id")),
        user_id=document.get("user_id") or "",
        quiz_id=document.get("quiz_id") or "",
        score=float(document.get("score") or 0.0),
        questions=questions or None,
        passed_at=document.get("passed_at"),
    )