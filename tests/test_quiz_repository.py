from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure

from doitplatform.quiz.models import Answer, Question, Quiz, Result
from doitplatform.quiz.repository import (
    QuestionRepository,
    QuizRepository,
    RepositoryError,
    ResultRepository,
)


def _matches(document, query):
    return all(document.get(key) == value for key, value in query.items())


class FakeCollection:
    def __init__(self):
        self.documents = []

    def insert_one(self, document):
        stored = dict(document)
        stored.setdefault("_id", ObjectId())
        self.documents.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    def insert_many(self, documents):
        return SimpleNamespace(
            inserted_ids=[self.insert_one(doc).inserted_id for doc in documents]
        )

    def find_one(self, query):
        return next((dict(d) for d in self.documents if _matches(d, query)), None)

    def find(self, query):
        return [dict(d) for d in self.documents if _matches(d, query)]

    def update_one(self, query, update):
        for document in self.documents:
            if _matches(document, query):
                document.update(update.get("$set", {}))
                for key, change in update.get("$inc", {}).items():
                    document[key] = document.get(key, 0) + change
                return SimpleNamespace(matched_count=1)
        return SimpleNamespace(matched_count=0)

    def delete_one(self, query):
        for document in self.documents:
            if _matches(document, query):
                self.documents.remove(document)
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


class FailingCollection:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise OperationFailure("boom")

        return fail


class FailingDatabase:
    def __getitem__(self, name):
        return FailingCollection()


@pytest.fixture
def database():
    return FakeDatabase()


def _question(quiz_id="quiz-1", points=1.0):
    return Question(
        text="Pick one",
        type="single",
        points=points,
        quiz_id=quiz_id,
        answers=[Answer("a1", "yes", True)],
    )


def test_question_create_and_get(database):
    repo = QuestionRepository(database)
    created = repo.create_question(_question())
    assert ObjectId.is_valid(created.id)
    fetched = repo.get_question_by_id(created.id)
    assert fetched.text == "Pick one"
    assert fetched.answers == [Answer("a1", "yes", True)]
    assert fetched.id == created.id
    assert "questions" in database.collections


def test_create_questions_assigns_distinct_ids(database):
    repo = QuestionRepository(database)
    created = repo.create_questions([_question(), _question(points=3.0)])
    assert len({q.id for q in created}) == 2
    assert [q.points for q in created] == [1.0, 3.0]
    assert all(ObjectId.is_valid(q.id) for q in created)


def test_create_questions_empty_raises(database):
    with pytest.raises(RepositoryError):
        QuestionRepository(database).create_questions([])


def test_get_question_invalid_id(database):
    with pytest.raises(RepositoryError, match="error converting ObjectID"):
        QuestionRepository(database).get_question_by_id("not-an-id")


def test_get_question_missing(database):
    with pytest.raises(RepositoryError, match="has not been found"):
        QuestionRepository(database).get_question_by_id(str(ObjectId()))


def test_questions_by_quiz_id_filters(database):
    repo = QuestionRepository(database)
    repo.create_questions([_question("quiz-1"), _question("quiz-2"), _question("quiz-1")])
    found = repo.get_questions_by_quiz_id("quiz-1")
    assert len(found) == 2
    assert all(q.quiz_id == "quiz-1" for q in found)
    assert repo.get_questions_by_quiz_id("absent") == []


def test_update_question_sets_given_fields(database):
    repo = QuestionRepository(database)
    created = repo.create_question(_question())
    repo.update_question(Question(id=created.id, text="New text", points=0))
    fetched = repo.get_question_by_id(created.id)
    assert fetched.text == "New text"
    assert fetched.points == 1.0


def test_update_question_without_fields(database):
    repo = QuestionRepository(database)
    created = repo.create_question(_question())
    with pytest.raises(RepositoryError, match="no fields provided to update"):
        repo.update_question(Question(id=created.id))


def test_update_question_not_found(database):
    with pytest.raises(RepositoryError, match="not found"):
        QuestionRepository(database).update_question(Question(id=str(ObjectId()), text="x"))


def test_delete_question(database):
    repo = QuestionRepository(database)
    created = repo.create_question(_question())
    repo.delete_question(created.id)
    with pytest.raises(RepositoryError):
        repo.get_question_by_id(created.id)
    with pytest.raises(RepositoryError, match="not found"):
        repo.delete_question(created.id)


def test_quiz_create_get_and_update(database):
    repo = QuizRepository(database)
    created = repo.create_quiz(Quiz(title="T", description="D", created_by="c", status="open"))
    repo.update_quiz(Quiz(id=created.id, total_points=4.0))
    fetched = repo.get_quiz_by_id(created.id)
    assert fetched.title == "T"
    assert fetched.total_points == 4.0
    assert fetched.questions == []


def test_quiz_change_total_points(database):
    repo = QuizRepository(database)
    created = repo.create_quiz(Quiz(title="T", total_points=2.0))
    repo.change_total_points_quiz(created.id, 1.5)
    repo.change_total_points_quiz(created.id, -0.5)
    assert repo.get_quiz_by_id(created.id).total_points == 3.0


def test_quiz_invalid_id_on_get_and_delete(database):
    repo = QuizRepository(database)
    with pytest.raises(ValueError):
        repo.get_quiz_by_id("bad")
    with pytest.raises(ValueError):
        repo.delete_quiz("bad")


def test_quiz_update_errors(database):
    repo = QuizRepository(database)
    with pytest.raises(RepositoryError, match="invalid quiz ID"):
        repo.update_quiz(Quiz(id="bad", title="x"))
    created = repo.create_quiz(Quiz(title="T"))
    with pytest.raises(RepositoryError, match="no fields provided to update"):
        repo.update_quiz(Quiz(id=created.id))
    with pytest.raises(RepositoryError, match="not found"):
        repo.change_total_points_quiz(str(ObjectId()), 1.0)


def test_quiz_delete(database):
    repo = QuizRepository(database)
    created = repo.create_quiz(Quiz(title="T"))
    repo.delete_quiz(created.id)
    with pytest.raises(RepositoryError, match="not found"):
        repo.delete_quiz(created.id)


def test_results_round_trip_and_filters(database):
    repo = ResultRepository(database)
    submitted = [Question(id="q1", answers=[Answer(answer_id="a1")])]
    first = repo.create_result(Result(user_id="u1", quiz_id="z1", score=0.5, questions=submitted))
    repo.create_result(Result(user_id="u2", quiz_id="z1", questions=submitted))
    repo.create_result(Result(user_id="u1", quiz_id="z2", questions=submitted))

    fetched = repo.get_result_by_id(first.id)
    assert fetched.score == 0.5
    assert fetched.questions == submitted
    assert {r.user_id for r in repo.get_results_by_quiz_id("z1")} == {"u1", "u2"}
    assert {r.quiz_id for r in repo.get_results_by_user_id("u1")} == {"z1", "z2"}


def test_result_delete_and_errors(database):
    repo = ResultRepository(database)
    created = repo.create_result(Result(user_id="u1"))
    repo.delete_result(created.id)
    with pytest.raises(RepositoryError, match="has not been found"):
        repo.get_result_by_id(created.id)
    with pytest.raises(RepositoryError, match="not found"):
        repo.delete_result(created.id)
    with pytest.raises(RepositoryError, match="error converting ObjectID"):
        repo.delete_result("bad")


def test_driver_errors_are_wrapped():
    with pytest.raises(RepositoryError, match="has not been created"):
        QuestionRepository(FailingDatabase()).create_question(_question())
    with pytest.raises(RepositoryError, match="failed to fetch Results"):
        ResultRepository(FailingDatabase()).get_results_by_user_id("u1")
    with pytest.raises(RepositoryError, match="questions have not been created"):
        QuestionRepository(FailingDatabase()).create_questions([_question()])