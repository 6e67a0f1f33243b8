from datetime import datetime, timezone

import pytest

from doitplatform.quiz import http_dto
from doitplatform.quiz.models import Answer, Question, Quiz, Result


def test_from_error_reports_internal_error_with_message():
    err = http_dto.from_error(RuntimeError("boom"))
    assert err.code == 500
    assert err.message == "boom"


def test_question_create_request_from_text():
    question = http_dto.from_question_create_request(
        '{"text": "2+2?", "type": "single", "points": 3, "quiz_id": "q1",'
        ' "answers": [{"text": "4", "is_correct": true}]}'
    )
    assert question.text == "2+2?"
    assert question.type == "single"
    assert question.points == 3.0
    assert question.quiz_id == "q1"
    assert question.answers == []


def test_question_create_request_from_dict_and_bytes_agree():
    data = {"text": "t", "type": "x", "points": 1.5, "quiz_id": "z"}
    from_dict = http_dto.from_question_create_request(data)
    from_bytes = http_dto.from_question_create_request(b'{"text":"t","type":"x","points":1.5,"quiz_id":"z"}')
    assert from_dict == from_bytes


@pytest.mark.parametrize(
    "payload",
    ["", "{not json", '{"points": "many"}', '{"text": 5}', "[1, 2]", b"\xff\xfe"],
)
def test_question_create_request_rejects_bad_bodies(payload):
    with pytest.raises(http_dto.RequestBindingError):
        http_dto.from_question_create_request(payload)


def test_question_create_request_rejects_bool_points():
    with pytest.raises(http_dto.RequestBindingError):
        http_dto.from_question_create_request({"points": True})


def test_question_create_requests_reads_array():
    questions = http_dto.from_question_create_requests(
        [{"text": "a", "quiz_id": "q"}, {"text": "b", "quiz_id": "q"}]
    )
    assert [q.text for q in questions] == ["a", "b"]
    assert all(q.quiz_id == "q" for q in questions)


def test_question_create_requests_null_is_empty():
    assert http_dto.from_question_create_requests("null") == []


def test_question_create_requests_rejects_object():
    with pytest.raises(http_dto.RequestBindingError):
        http_dto.from_question_create_requests({"text": "a"})


def test_question_update_request_leaves_id_empty():
    question = http_dto.from_question_update_request({"text": "new"})
    assert question.id == ""
    assert question.text == "new"
    assert question.points == 0.0


def test_question_responses():
    questions = [Question(id="a"), Question(id="b")]
    assert http_dto.to_question_response(questions[0]) == {"id": "a"}
    assert http_dto.to_question_responses(questions) == [{"id": "a"}, {"id": "b"}]
    assert http_dto.to_question_responses(None) == []


def test_question_get_response_hides_correctness():
    question = Question(
        id="q", text="t", type="multi", points=2.0, quiz_id="z",
        answers=[Answer(answer_id="a1", text="yes", is_correct=True)],
    )
    response = http_dto.to_question_get_response(question)
    assert response == {
        "id": "q", "text": "t", "type": "multi", "quiz_id": "z", "points": 2.0,
        "answers": [{"id": "a1", "text": "yes"}],
    }
    assert http_dto.to_question_get_all_response([question]) == [response]
    assert http_dto.to_answer_get_all_response(None) == []


def test_quiz_create_request_stamps_times():
    before = datetime.now(timezone.utc)
    quiz = http_dto.from_quiz_create_request(
        {"title": "T", "description": "D", "created_by": "u", "status": "draft"}
    )
    after = datetime.now(timezone.utc)
    assert (quiz.title, quiz.description, quiz.created_by, quiz.status) == ("T", "D", "u", "draft")
    assert before <= quiz.created_at <= after
    assert quiz.created_at == quiz.updated_at


def test_quiz_update_request_has_no_creation_time():
    quiz = http_dto.from_quiz_update_request('{"title": "T2"}')
    assert quiz.title == "T2"
    assert quiz.created_at is None
    assert quiz.updated_at is not None and quiz.updated_at.tzinfo is not None


def test_quiz_update_request_rejects_bad_type():
    with pytest.raises(http_dto.RequestBindingError):
        http_dto.from_quiz_update_request({"status": 1})


def test_quiz_get_response_fields_and_times():
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    quiz = Quiz(
        id="q", title="T", description="D", created_by="u", status="s",
        total_points=4.0, questions=[Question(id="x")], created_at=created,
    )
    response = http_dto.to_quiz_get_response(quiz)
    assert http_dto.to_quiz_response(quiz) == {"id": "q"}
    assert response["total_points"] == 4.0
    assert [q["id"] for q in response["questions"]] == ["x"]
    assert response["created_at"] == "2024-01-02T03:04:05Z"
    assert response["updated_at"] == "0001-01-01T00:00:00Z"


def test_naive_times_are_taken_as_utc():
    naive = datetime(2024, 1, 2, 3, 4, 5, 120000)
    aware = naive.replace(tzinfo=timezone.utc)
    naive_out = http_dto.to_quiz_get_response(Quiz(created_at=naive))["created_at"]
    aware_out = http_dto.to_quiz_get_response(Quiz(created_at=aware))["created_at"]
    assert naive_out == aware_out
    assert datetime.fromisoformat(aware_out.replace("Z", "+00:00")) == aware


def test_result_create_request():
    result = http_dto.from_result_create_request(
        {"user_id": "u", "quiz_id": "z", "status": "done",
         "questions": [{"id": "q1", "answers": [{"id": "a1"}, {"id": "a2"}]}]}
    )
    assert (result.user_id, result.quiz_id, result.status) == ("u", "z", "done")
    assert [q.id for q in result.questions] == ["q1"]
    assert [a.answer_id for a in result.questions[0].answers] == ["a1", "a2"]
    assert result.passed_at is not None


def test_result_create_request_without_questions_has_none():
    result = http_dto.from_result_create_request({"user_id": "u", "status": "s"})
    assert result.questions is None


def test_result_create_request_rejects_bad_answers():
    with pytest.raises(http_dto.RequestBindingError):
        http_dto.from_result_create_request({"questions": [{"id": "q", "answers": "a"}]})


def test_result_get_responses():
    result = Result(id="r", user_id="u", quiz_id="z", score=0.5, questions=None)
    response = http_dto.to_result_get_response(result)
    assert http_dto.to_result_response(result) == {"id": "r"}
    assert response["questions"] == []
    assert response["score"] == 0.5
    assert (response["id"], response["user_id"], response["quiz_id"]) == ("r", "u", "z")
    assert http_dto.to_result_get_all_response([result, result]) == [response, response]
    assert http_dto.to_result_get_all_response(None) == []