"""Business rules for quizzes, questions and results."""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Protocol

from .models import Question, Quiz, Result


class InvalidInputError(ValueError):
    """Raised when a request lacks required data or does not add up."""


class QuizRepo(Protocol):
    def create_quiz(self, quiz: Quiz) -> Quiz: ...

    def get_quiz_by_id(self, quiz_id: str) -> Quiz: ...

    def update_quiz(self, quiz: Quiz) -> None: ...

    def change_total_points_quiz(self, quiz_id: str, change: float) -> None: ...

    def delete_quiz(self, quiz_id: str) -> None: ...


class QuestionRepo(Protocol):
    def create_question(self, question: Question) -> Question: ...

    def create_questions(self, questions: list[Question]) -> list[Question]: ...

    def get_questions_by_quiz_id(self, quiz_id: str) -> list[Question]: ...

    def get_question_by_id(self, question_id: str) -> Question: ...

    def update_question(self, question: Question) -> None: ...

    def delete_question(self, question_id: str) -> None: ...


class ResultRepo(Protocol):
    def create_result(self, result: Result) -> Result: ...

    def get_result_by_id(self, result_id: str) -> Result: ...

    def get_results_by_quiz_id(self, quiz_id: str) -> list[Result]: ...

    def get_results_by_user_id(self, user_id: str) -> list[Result]: ...

    def delete_result(self, result_id: str) -> None: ...


def _is_complete(question: Question) -> bool:
    return bool(question.text and question.type and question.quiz_id and question.points > 0)


def _lookup_question(repo: QuestionRepo, question_id: str) -> Question:
    """Fetch a stored question, falling back to an empty one if it cannot be read."""
    try:
        return repo.get_question_by_id(question_id)
    except Exception:
        return Question()


def _fill_from_stored(repo: QuestionRepo, questions: list[Question] | None) -> None:
    """Copy question details and answer texts from the stored questions."""
    for question in questions or []:
        stored = _lookup_question(repo, question.id)
        question.text = stored.text
        question.type = stored.type
        question.points = stored.points
        question.quiz_id = stored.quiz_id
        texts = {answer.answer_id: answer.text for answer in stored.answers}
        for answer in question.answers:
            if answer.answer_id in texts:
                answer.text = texts[answer.answer_id]


def _ratio(score: float, total: float) -> float:
    if total == 0:
        return math.nan if score == 0 else math.copysign(math.inf, score)
    return score / total


class QuestionUsecase:
    """Operations on quiz questions."""

    def __init__(self, quiz_repo: QuizRepo, question_repo: QuestionRepo) -> None:
        self._quiz_repo = quiz_repo
        self._question_repo = question_repo

    def create_question(self, request: Question) -> Question:
        if not _is_complete(request):
            raise InvalidInputError("invalid input data")
        return self._question_repo.create_question(request)

    def create_questions(self, requests: list[Question]) -> list[Question]:
        if not all(_is_complete(question) for question in requests):
            raise InvalidInputError("invalid input data")
        return self._question_repo.create_questions(requests)

    def get_question_by_id(self, question_id: str) -> Question:
        return self._question_repo.get_question_by_id(question_id)

    def get_questions_by_quiz_id(self, quiz_id: str) -> list[Question]:
        try:
            return self._question_repo.get_questions_by_quiz_id(quiz_id)
        except Exception as err:
            raise LookupError(f"wrong QuizID or quiz does not exist: {err}") from err

    def update_question(self, request: Question) -> Question:
        self._question_repo.update_question(request)
        return Question(id=request.id)

    def delete_question(self, question_id: str) -> Question:
        self._question_repo.delete_question(question_id)
        return Question(id=question_id)


class QuizUsecase:
    """Operations on quizzes."""

    def __init__(self, quiz_repo: QuizRepo, question_repo: QuestionRepo) -> None:
        self._quiz_repo = quiz_repo
        self._question_repo = question_repo

    def create_quiz(self, request: Quiz) -> Quiz:
        if not (request.title and request.description and request.created_by and request.status):
            raise InvalidInputError("invalid input data")
        return self._quiz_repo.create_quiz(request)

    def get_quiz_by_id(self, quiz_id: str) -> Quiz:
        """Return the quiz with its questions, re-counting and storing its point total."""
        quiz = self._quiz_repo.get_quiz_by_id(quiz_id)
        questions = list(self._question_repo.get_questions_by_quiz_id(quiz_id))
        total_points = sum((question.points for question in questions), 0.0)
        try:
            self._quiz_repo.update_quiz(Quiz(id=quiz_id, total_points=total_points))
        except Exception as err:
            raise RuntimeError(f"failed to re-count total points of quiz: {err}") from err
        return replace(quiz, questions=questions, total_points=total_points)

    def update_quiz(self, request: Quiz) -> Quiz:
        self._quiz_repo.update_quiz(request)
        return Quiz(id=request.id)

    def delete_quiz(self, quiz_id: str) -> Quiz:
        self._quiz_repo.delete_quiz(quiz_id)
        return Quiz(id=quiz_id)


class ResultUsecase:
    """Scoring and retrieval of quiz results."""

    def __init__(
        self, result_repo: ResultRepo, quiz_repo: QuizRepo, question_repo: QuestionRepo
    ) -> None:
        self._result_repo = result_repo
        self._quiz_repo = quiz_repo
        self._question_repo = question_repo

    def create_result(self, request: Result) -> Result:
        """Score a submission against the stored questions and save it.

        The score is the number of correct answers chosen divided by the
        total points of the answered questions.
        """
        if not request.user_id or not request.status or request.questions is None:
            raise InvalidInputError("invalid request")

        try:
            quiz = self._quiz_repo.get_quiz_by_id(request.quiz_id)
        except Exception as err:
            raise InvalidInputError(
                "wrong QuizID format or Quiz with this ID does not exist"
            ) from err

        total_points = 0.0
        score = 0.0
        scored: list[Question] = []
        for submitted in request.questions:
            stored = _lookup_question(self._question_repo, submitted.id)
            total_points += stored.points
            score += sum(
                1
                for answer in submitted.answers
                for stored_answer in stored.answers
                if answer.answer_id == stored_answer.answer_id and stored_answer.is_correct
            )
            scored.append(replace(submitted, points=stored.points))

        if total_points != quiz.total_points:
            raise InvalidInputError("totalPoints does not match")

        return self._result_repo.create_result(
            replace(request, questions=scored, score=_ratio(score, total_points))
        )

    def get_result_by_id(self, result_id: str) -> Result:
        result = self._result_repo.get_result_by_id(result_id)
        _fill_from_stored(self._question_repo, result.questions)
        return result

    def get_results_by_quiz_id(self, quiz_id: str) -> list[Result]:
        results = list(self._result_repo.get_results_by_quiz_id(quiz_id))
        for result in results:
            _fill_from_stored(self._question_repo, result.questions)
        return results

    def get_results_by_user_id(self, user_id: str) -> list[Result]:
        results = list(self._result_repo.get_results_by_user_id(user_id))
        for result in results:
            _fill_from_stored(self._question_repo, result.questions)
        return results

    def delete_result(self, result_id: str) -> Result:
        self._result_repo.delete_result(result_id)
        return Result(id=result_id)