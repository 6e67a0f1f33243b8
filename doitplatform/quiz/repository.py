"""MongoDB repositories for quizzes, questions and results."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from bson import ObjectId
from pymongo.errors import PyMongoError

from . import dao
from .models import Question, Quiz, Result

_NO_DOCUMENTS = "mongo: no documents in result"


class RepositoryError(Exception):
    """Raised when a stored object cannot be created, read, changed or removed."""


def _object_id(value: str, message: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise RepositoryError(f"{message}: {value!r} is not a valid ObjectID")
    return ObjectId(value)


def _quiz_object_id(value: str) -> ObjectId:
    """Quiz lookups and deletions treat a malformed id as a programming error."""
    if not ObjectId.is_valid(value):
        raise ValueError(f"{value!r} is not a valid ObjectID")
    return ObjectId(value)


class _Repository:
    collection_name = ""

    def __init__(self, database: Any) -> None:
        self._database = database

    @property
    def _collection(self) -> Any:
        return self._database[self.collection_name]

    def _find_one(self, object_id: ObjectId, what: str, identifier: str) -> dict:
        try:
            document = self._collection.find_one({"_id": object_id})
        except PyMongoError as err:
            raise RepositoryError(
                f"{what} with ID {identifier} has not been found: {err}"
            ) from err
        if document is None:
            raise RepositoryError(
                f"{what} with ID {identifier} has not been found: {_NO_DOCUMENTS}"
            )
        return document

    def _find_many(self, query: dict, what: str) -> list[dict]:
        try:
            return list(self._collection.find(query))
        except PyMongoError as err:
            raise RepositoryError(f"failed to fetch {what}: {err}") from err

    def _insert(self, document: dict, what: str, identifier: str) -> str:
        try:
            inserted = self._collection.insert_one(document)
        except PyMongoError as err:
            raise RepositoryError(
                f"{what} with ID {identifier} has not been created: {err}"
            ) from err
        return str(inserted.inserted_id)

    def _update(self, object_id: ObjectId, update: dict, what: str, identifier: str) -> None:
        try:
            outcome = self._collection.update_one({"_id": object_id}, update)
        except PyMongoError as err:
            raise RepositoryError(f"failed to update {what} with ID {identifier}: {err}") from err
        if outcome.matched_count == 0:
            raise RepositoryError(f"{what.lower()} with ID {identifier} not found")

    def _delete(self, object_id: ObjectId, what: str, identifier: str) -> None:
        try:
            outcome = self._collection.delete_one({"_id": object_id})
        except PyMongoError as err:
            raise RepositoryError(f"failed to delete {what} with ID {identifier}: {err}") from err
        if outcome.deleted_count == 0:
            raise RepositoryError(f"{what.lower()} with ID {identifier} not found")


class QuestionRepository(_Repository):
    """Questions stored in the ``questions`` collection."""

    collection_name = "questions"

    def __init__(self, database: Any) -> None:
        super().__init__(database)

    def create_question(self, question: Question) -> Question:
        inserted = self._insert(dao.from_question(question), "question", question.id)
        return Question(id=inserted)

    def create_questions(self, questions: list[Question]) -> list[Question]:
        """Insert all questions at once and return them with their new ids."""
        if not questions:
            raise RepositoryError(
                "questions have not been created: must provide at least one element"
            )
        try:
            inserted = self._collection.insert_many(
                [dao.from_question(question) for question in questions]
            )
        except PyMongoError as err:
            raise RepositoryError(f"questions have not been created: {err}") from err

        ids = list(inserted.inserted_ids)
        if len(ids) != len(questions):
            raise RepositoryError("number of inserted IDs does not match number of questions")
        if not all(isinstance(new_id, ObjectId) for new_id in ids):
            raise RepositoryError("failed to cast inserted ID to ObjectID")
        return [replace(question, id=str(new_id)) for question, new_id in zip(questions, ids)]

    def get_question_by_id(self, question_id: str) -> Question:
        object_id = _object_id(question_id, "error converting ObjectID")
        return dao.to_question(self._find_one(object_id, "question", question_id))

    def get_questions_by_quiz_id(self, quiz_id: str) -> list[Question]:
        return [dao.to_question(doc) for doc in self._find_many({"quiz_id": quiz_id}, "Questions")]

    def update_question(self, question: Question) -> None:
        """Set the non-empty fields of ``question`` on the stored question."""
        object_id = _object_id(question.id, "error converting ObjectID")
        fields: dict[str, Any] = {}
        if question.text:
            fields["text"] = question.text
        if question.points > 0:
            fields["points"] = question.points
        if question.type:
            fields["type"] = question.type
        if question.quiz_id:
            fields["quiz_id"] = question.quiz_id
        if not fields:
            raise RepositoryError("no fields provided to update")
        self._update(object_id, {"$set": fields}, "Question", question.id)

    def delete_question(self, question_id: str) -> None:
        object_id = _object_id(question_id, "error converting ObjectID")
        self._delete(object_id, "Question", question_id)


class QuizRepository(_Repository):
    """Quizzes stored in the ``quizzes`` collection."""

    collection_name = "quizzes"

    def __init__(self, database: Any) -> None:
        super().__init__(database)

    def create_quiz(self, quiz: Quiz) -> Quiz:
        return Quiz(id=self._insert(dao.from_quiz(quiz), "quiz", quiz.id))

    def get_quiz_by_id(self, quiz_id: str) -> Quiz:
        object_id = _quiz_object_id(quiz_id)
        return dao.to_quiz(self._find_one(object_id, "quiz", quiz_id))

    def update_quiz(self, quiz: Quiz) -> None:
        """Set the non-empty fields of ``quiz`` on the stored quiz."""
        object_id = _object_id(quiz.id, "invalid quiz ID")
        fields: dict[str, Any] = {}
        if quiz.title:
            fields["title"] = quiz.title
        if quiz.description:
            fields["description"] = quiz.description
        if quiz.created_by:
            fields["created_by"] = quiz.created_by
        if quiz.status:
            fields["status"] = quiz.status
        if quiz.total_points != 0:
            fields["total_points"] = quiz.total_points
        if not fields:
            raise RepositoryError("no fields provided to update")
        self._update(object_id, {"$set": fields}, "Quiz", quiz.id)

    def change_total_points_quiz(self, quiz_id: str, change: float) -> None:
        object_id = _object_id(quiz_id, "invalid quiz ID")
        self._update(object_id, {"$inc": {"total_points": change}}, "Quiz", quiz_id)

    def delete_quiz(self, quiz_id: str) -> None:
        self._delete(_quiz_object_id(quiz_id), "Quiz", quiz_id)


class ResultRepository(_Repository):
    """Results stored in the ``results`` collection."""

    collection_name = "results"

    def __init__(self, database: Any) -> None:
        super().__init__(database)

    def create_result(self, result: Result) -> Result:
        return Result(id=self._insert(dao.from_result(result), "result", result.id))

    def get_result_by_id(self, result_id: str) -> Result:
        object_id = _object_id(result_id, "error converting ObjectID")
        return dao.to_result(self._find_one(object_id, "result", result_id))

    def get_results_by_quiz_id(self, quiz_id: str) -> list[Result]:
        return [dao.to_result(doc) for doc in self._find_many({"quiz_id": quiz_id}, "Results")]

    def get_results_by_user_id(self, user_id: str) -> list[Result]:
        return [dao.to_result(doc) for doc in self._find_many({"user_id": user_id}, "Results")]

    def delete_result(self, result_id: str) -> None:
        object_id = _object_id(result_id, "error converting ObjectID")
        self._delete(object_id, "Result", result_id)