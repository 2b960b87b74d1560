"""
Completion resolver tests
"""
from datetime import datetime

from conftest import FakeApi
from survey_site.completion import (
    CompletionStatus,
    latest_response_for,
    project_answers,
    resolve_completed_ids,
    resolve_completion,
)
from survey_site.exceptions import ApiConnectionError, ApiResponseError, AuthenticationError
from survey_site.models import Answer, ResponseRecord


def test_project_answers_prefers_rating():
    answers = [Answer(question_id=1, answer_text="x", rating_value=4),
               Answer(question_id=2, answer_text="hello")]
    assert project_answers(answers) == {1: 4, 2: "hello"}


def test_server_answers_mean_completed(user_session):
    api = FakeApi(my_answers=[Answer(question_id=1, rating_value=7)])
    result = resolve_completion(api, user_session, 1)
    assert result.status == CompletionStatus.COMPLETED
    assert result.answers == {1: 7}
    assert result.source == "server"


def test_server_empty_beats_local_marker(user_session):
    user_session.mark_completed(1)
    result = resolve_completion(FakeApi(my_answers=[]), user_session, 1)
    assert result.status == CompletionStatus.NOT_COMPLETED
    assert not result.completed


def test_server_failure_falls_back_to_marker(user_session):
    for error in (ApiConnectionError("down"), AuthenticationError("401", 401), ApiResponseError("boom", 500)):
        assert resolve_completion(FakeApi(my_answers=error), user_session, 1).status == CompletionStatus.UNKNOWN
    user_session.mark_completed(1)
    result = resolve_completion(FakeApi(my_answers=ApiConnectionError("down")), user_session, 1)
    assert result.status == CompletionStatus.COMPLETED
    assert result.source == "local"


def test_anonymous_uses_marker_only(session):
    api = FakeApi()
    assert resolve_completion(api, session, 1).status == CompletionStatus.UNKNOWN
    session.mark_completed(1)
    assert resolve_completion(api, session, 1).completed
    assert api.calls == []


def test_bulk_completion(user_session):
    api = FakeApi(completed_survey_ids={"1", "9"})
    assert resolve_completed_ids(api, user_session, [1, 2, 3]) == {"1"}

    user_session.mark_completed(2)
    api = FakeApi(completed_survey_ids=ApiConnectionError("down"))
    assert resolve_completed_ids(api, user_session, [1, 2, 3]) == {"2"}


def test_latest_response_for():
    records = [
        ResponseRecord(id=1, username="alice", submitted_at=datetime(2025, 1, 1)),
        ResponseRecord(id=2, username="bob", submitted_at=datetime(2025, 1, 5)),
        ResponseRecord(id=3, username="alice", submitted_at=datetime(2025, 1, 3)),
        ResponseRecord(id=4, username="alice", submitted_at=datetime(2024, 12, 1)),
    ]
    assert latest_response_for(records, "alice").id == 3
    assert latest_response_for(records, "carol") is None
    assert latest_response_for(records, None) is None
