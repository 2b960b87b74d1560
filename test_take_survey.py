"""
Survey-taking state machine tests
"""
import pytest

from conftest import FakeApi
from survey_site.exceptions import (
    AccessDeniedError,
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
)
from survey_site.models import Answer, Question, ResponseRecord, Survey
from survey_site.questions import CONSENT_MESSAGE, REQUIRED_MESSAGE
from survey_site.share import mint_share_token
from survey_site.take_survey import (
    ACCESS_DENIED_MESSAGE,
    INVALID_SHARE_MESSAGE,
    LOAD_ERROR_MESSAGE,
    SUBMIT_ERROR_MESSAGE,
    SurveyState,
    TakeSurveyMachine,
)


def rating_survey():
    return Survey(id=1, title="Satisfaction", questions=[
        Question(id=1, question_text="How satisfied are you?", question_type="Rating", is_required=True),
        Question(id=2, question_text="I accept the privacy policy", question_type="Text"),
    ])


def mixed_survey():
    return Survey(id=2, title="Mixed", questions=[
        Question(id=10, question_text="Name", question_type="Text", is_required=True),
        Question(id=11, question_text="Pick", question_type="MultipleChoice",
                 options=" Yes , No ,Maybe", is_required=True),
        Question(id=12, question_text="Comments", question_type="Text"),
    ])


def loaded(api, session, survey_id=1, **kwargs):
    machine = TakeSurveyMachine(api, session, survey_id, **kwargs)
    machine.load()
    return machine


def test_load_filters_consent_questions(user_session):
    machine = loaded(FakeApi(get_survey=rating_survey()), user_session)
    assert machine.state == SurveyState.ANSWERING
    assert [q.id for q in machine.questions] == [1]


def test_no_questions(user_session):
    survey = Survey(id=4, title="Empty", questions=[
        Question(id=1, question_text="Consent?", is_consent_question=True)])
    machine = loaded(FakeApi(get_survey=survey), user_session, 4)
    assert machine.state == SurveyState.NO_QUESTIONS


@pytest.mark.parametrize("error,message", [
    (AccessDeniedError("forbidden", 403), ACCESS_DENIED_MESSAGE),
    (ApiConnectionError("down"), LOAD_ERROR_MESSAGE),
    (ApiResponseError("nope", 404), LOAD_ERROR_MESSAGE),
])
def test_load_errors(user_session, error, message):
    machine = loaded(FakeApi(get_survey=error), user_session)
    assert machine.state == SurveyState.ERROR
    assert machine.error == message
    assert machine.survey is None


def test_load_401_forces_logout(user_session):
    machine = loaded(FakeApi(get_survey=AuthenticationError("expired", 401)), user_session)
    assert machine.state == SurveyState.ERROR
    assert not user_session.is_authenticated
    assert machine.navigate_to.path == "/login"


def test_required_answers_block_submit_locally(user_session):
    api = FakeApi(get_survey=mixed_survey())
    machine = loaded(api, user_session, 2)
    machine.set_consent(True)
    machine.answer(10, "Alice")

    assert machine.submit() is False
    assert machine.invalid_ids == [11]
    assert machine.error == REQUIRED_MESSAGE
    assert api.called("submit_response") == []
    assert machine.state == SurveyState.ANSWERING


def test_answering_clears_only_that_invalid_flag(user_session):
    machine = loaded(FakeApi(get_survey=mixed_survey()), user_session, 2)
    machine.submit()
    assert machine.invalid_ids == [10, 11]
    machine.answer(11, "No")
    assert machine.invalid_ids == [10]


def test_multiple_choice_answer_is_trimmed_option(user_session):
    api = FakeApi(get_survey=mixed_survey())
    machine = loaded(api, user_session, 2)
    machine.answer(10, "Alice")
    machine.answer(11, " No ")
    machine.set_consent(True)
    assert machine.submit() is True

    (_, (survey_id, response), kwargs) = api.called("submit_response")[0]
    payload = response.to_payload()
    assert survey_id == "2"
    assert payload["username"] == "alice"
    assert payload["consentGiven"] is True
    assert payload["answers"] == [
        {"questionId": 10, "answerText": "Alice", "ratingValue": None},
        {"questionId": 11, "answerText": "No", "ratingValue": None},
        {"questionId": 12, "answerText": "", "ratingValue": None},
    ]


def test_consent_blocks_submission(user_session):
    api = FakeApi(get_survey=mixed_survey())
    machine = loaded(api, user_session, 2)
    machine.answer(10, "Alice")
    machine.answer(11, "Yes")
    assert machine.submit() is False
    assert machine.messages == [CONSENT_MESSAGE]
    assert api.called("submit_response") == []

    # consent alone is not enough either
    machine = loaded(FakeApi(get_survey=mixed_survey()), user_session, 2)
    machine.set_consent(True)
    assert machine.submit() is False
    assert machine.messages == [REQUIRED_MESSAGE]


def test_rating_scenario(session):
    """Anonymous visitor: blocked first, then rating 7 with consent goes out"""
    api = FakeApi(get_survey=rating_survey())
    machine = loaded(api, session)
    assert machine.state == SurveyState.ANSWERING

    assert machine.submit() is False
    assert machine.invalid_ids == [1]
    assert api.called("submit_response") == []

    machine.answer(1, 7)
    machine.set_consent(True)
    assert machine.submit() is True

    response = api.called("submit_response")[0][1][1]
    assert response.to_payload()["answers"] == [{"questionId": 1, "answerText": None, "ratingValue": 7}]
    assert session.has_completion_marker(1, "Anonymous")
    assert machine.navigate_to.path == "/surveys"
    assert machine.answers == {}
    assert machine.consent is False


def test_submit_failures_keep_answers(user_session):
    for error, expected in ((ApiConnectionError("down"), SUBMIT_ERROR_MESSAGE),
                            (ApiResponseError("Survey is closed", 400), "Survey is closed")):
        machine = loaded(FakeApi(get_survey=rating_survey(), submit_response=error), user_session)
        machine.answer(1, 5)
        machine.set_consent(True)
        assert machine.submit() is False
        assert machine.error == expected
        assert machine.answers == {1: 5}
        assert machine.state == SurveyState.ANSWERING
        assert not user_session.has_completion_marker(1)


def test_submit_401_forces_logout(user_session):
    machine = loaded(FakeApi(get_survey=rating_survey(), submit_response=AuthenticationError("x", 401)),
                     user_session)
    machine.answer(1, 5)
    machine.set_consent(True)
    assert machine.submit() is False
    assert not user_session.is_authenticated
    assert machine.navigate_to.path == "/login"


def test_answer_rejects_unknown_question_and_bad_rating(user_session):
    machine = loaded(FakeApi(get_survey=rating_survey()), user_session)
    with pytest.raises(KeyError):
        machine.answer(99, "x")
    with pytest.raises(ValueError):
        machine.answer(1, 42)
    machine.answer(1, 3)
    machine.answer(1, None)
    assert machine.answers == {}


def test_server_answers_open_review(user_session):
    api = FakeApi(get_survey=rating_survey(), my_answers=[Answer(question_id=1, rating_value=9)])
    machine = loaded(api, user_session)
    assert machine.state == SurveyState.REVIEW
    assert machine.review_answers == {1: 9}
    assert machine.review_source == "server"


def test_server_empty_beats_stale_marker(user_session):
    user_session.mark_completed(1)
    machine = loaded(FakeApi(get_survey=rating_survey(), my_answers=[]), user_session)
    assert machine.state == SurveyState.ANSWERING


def test_review_from_marker_uses_response_list(user_session):
    user_session.mark_completed(1)
    records = [ResponseRecord(id=5, username="alice", answers=[Answer(question_id=1, rating_value=6)])]
    api = FakeApi(get_survey=rating_survey(), my_answers=ApiConnectionError("down"), list_responses=records)
    machine = loaded(api, user_session)
    assert machine.state == SurveyState.REVIEW
    assert machine.review_answers == {1: 6}
    assert machine.review_source == "responses"


def test_explicit_review_request(user_session):
    machine = loaded(FakeApi(get_survey=rating_survey(), my_answers=[]), user_session, review=True)
    assert machine.state == SurveyState.REVIEW
    assert machine.review_answers == {}


def test_retake_suppresses_review_once(user_session):
    api = FakeApi(get_survey=rating_survey(), my_answers=[Answer(question_id=1, rating_value=9)])
    user_session.mark_completed(1)
    machine = loaded(api, user_session)
    assert machine.state == SurveyState.REVIEW

    machine.retake()
    assert not user_session.has_completion_marker(1)
    assert machine.state == SurveyState.LOADING
    assert machine.navigate_to.path == "/survey/1"
    assert "review" not in machine.navigate_to.params

    # next load: straight to the form even though the server still has answers
    assert loaded(api, user_session).state == SurveyState.ANSWERING
    # the load after that: auto-review again
    assert loaded(api, user_session).state == SurveyState.REVIEW


def test_mismatched_share_token_is_terminal(session):
    api = FakeApi(get_survey=rating_survey())
    machine = loaded(api, session, 1, share=mint_share_token(2))
    assert machine.state == SurveyState.ERROR
    assert machine.error == INVALID_SHARE_MESSAGE
    assert machine.survey is None and machine.questions == []
    assert api.calls == []
    assert not session.share.is_active


def test_valid_share_token_starts_share_session(session):
    token = mint_share_token(1)
    api = FakeApi(get_survey=rating_survey())
    machine = loaded(api, session, 1, share=token)
    assert machine.state == SurveyState.ANSWERING
    assert api.called("get_survey")[0][2] == {"share": token}
    assert session.share.get().survey_id == "1"
    assert machine.survey_location(review=True).params == {"share": token, "review": "true"}

    machine.answer(1, 8)
    machine.set_consent(True)
    assert machine.submit() is True
    assert api.called("submit_response")[0][2] == {"share": token}
    assert not session.share.is_active


def test_exit_shared_view(session):
    machine = loaded(FakeApi(get_survey=rating_survey()), session, 1, share=mint_share_token(1))
    machine.exit_shared_view()
    assert not session.share.is_active
    assert machine.navigate_to.path == "/surveys"


def test_progress(user_session):
    machine = loaded(FakeApi(get_survey=mixed_survey()), user_session, 2)
    assert machine.progress == 0
    machine.answer(10, "x")
    assert machine.progress == pytest.approx(1 / 3)
