"""Domain objects of the quiz service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Answer:
    """One answer option of a question."""

    answer_id: str = ""
    text: str = ""
    is_correct: bool = False


@dataclass
class Question:
    """A question belonging to a quiz."""

    id: str = ""
    text: str = ""
    type: str = ""
    points: float = 0.0
    quiz_id: str = ""
    answers: list[Answer] = field(default_factory=list)


@dataclass
class Quiz:
    """A quiz with its questions and point total."""

    id: str = ""
    title: str = ""
    description: str = ""
    created_by: str = ""
    status: str = ""
    total_points: float = 0.0
    questions: list[Question] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Result:
    """A user's submission for a quiz.

    ``questions`` is ``None`` when the submission carried no question list
    at all, which is distinct from an empty list.
    """

    id: str = ""
    user_id: str = ""
    quiz_id: str = ""
    score: float = 0.0
    questions: list[Question] | None = None
    status: str = ""
    passed_at: datetime | None = None