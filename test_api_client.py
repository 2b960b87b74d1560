"""
Survey API client tests against a fake requests.Session
"""
import json

import pytest
import requests

from survey_site.api_client import SurveyApiClient, extract_error_message
from survey_site.exceptions import (
    AccessDeniedError,
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
)
from survey_site.models import Answer, Question, SurveyResponse
from survey_site.session import SessionContext
from survey_site.share import SHARE_HEADER


def make_response(status=200, body=None, text=None, reason="OK"):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    if text is not None:
        resp._content = text.encode("utf-8")
    elif body is not None:
        resp._content = json.dumps(body).encode("utf-8")
    else:
        resp._content = b""
    return resp


class FakeHttp:
    """requests.Session surface: replies come from a {(method, path): reply} map"""

    def __init__(self, replies=None, error=None):
        self.replies = replies or {}
        self.error = error
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        path = url.split("://", 1)[1].split("/", 1)[1]
        reply = self.replies.get((method, "/" + path), make_response(404, {"message": "not found"}))
        return reply


def client(replies=None, token=None, error=None):
    local = {"token": token} if token else {}
    http = FakeHttp(replies, error)
    return SurveyApiClient(SessionContext(local, {}), base_url="https://api.test/", http=http), http


def test_bearer_token_and_json_headers():
    api, http = client({("GET", "/api/surveys"): make_response(body=[{"id": 1, "title": "A", "questions": None}])},
                       token="tok")
    surveys = api.list_surveys()
    assert surveys[0].title == "A"
    assert surveys[0].questions == []

    method, url, kwargs = http.requests[0]
    assert url == "https://api.test/api/surveys"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["headers"]["Content-Type"] == "application/json"


def test_login_is_sent_without_token():
    api, http = client({("POST", "/api/auth/login"): make_response(body={"token": "t", "role": "Admin"})},
                       token="old")
    result = api.login("boss", "pw")
    assert result.token == "t" and result.role == "Admin"
    kwargs = http.requests[0][2]
    assert "Authorization" not in kwargs["headers"]
    assert kwargs["json"] == {"username": "boss", "password": "pw"}


def test_share_token_goes_in_query_and_header():
    survey = {"id": 3, "title": "S", "questions": [{"id": 1, "questionText": "Q", "questionType": "Text"}]}
    api, http = client({("GET", "/api/surveys/3"): make_response(body=survey)})
    result = api.get_survey(3, share="abc")
    assert result.questions[0].question_text == "Q"
    kwargs = http.requests[0][2]
    assert kwargs["params"] == {"share": "abc"}
    assert kwargs["headers"][SHARE_HEADER] == "abc"


def test_submit_response_payload():
    api, http = client({("POST", "/api/surveys/1/responses"): make_response(201, {"id": 9})})
    response = SurveyResponse(username="alice", consent_given=True,
                              answers=[Answer(question_id=1, rating_value=7)])
    assert api.submit_response(1, response) == {"id": 9}
    assert http.requests[0][2]["json"] == {
        "username": "alice",
        "answers": [{"questionId": 1, "answerText": None, "ratingValue": 7}],
        "consentGiven": True,
    }


@pytest.mark.parametrize("status,error", [
    (401, AuthenticationError), (403, AccessDeniedError), (400, ApiResponseError), (500, ApiResponseError),
])
def test_status_mapping(status, error):
    api, _ = client({("GET", "/api/surveys/1"): make_response(status, {"message": "nope"})})
    with pytest.raises(error) as exc_info:
        api.get_survey(1)
    assert exc_info.value.status_code == status
    assert exc_info.value.message == "nope"


def test_transport_failure():
    api, _ = client(error=requests.ConnectionError("refused"))
    with pytest.raises(ApiConnectionError):
        api.list_surveys()


def test_extract_error_message():
    assert extract_error_message(make_response(400, {"title": "Bad"})) == "Bad"
    assert extract_error_message(make_response(400, {"errors": {"Email": ["Invalid email"], "Age": "Too young"}})) \
        == "Invalid email Too young"
    assert extract_error_message(make_response(500, text="Server exploded")) == "Server exploded"
    assert extract_error_message(make_response(502, reason="Bad Gateway")) == "Bad Gateway"


@pytest.mark.parametrize("body", [
    [{"questionId": 1, "ratingValue": 4}],
    {"answers": [{"questionId": 1, "ratingValue": 4}]},
    [{"id": 1, "answers": [{"questionId": 1, "ratingValue": 2}]},
     {"id": 2, "answers": [{"questionId": 1, "ratingValue": 4}]}],
])
def test_my_answers_shapes(body):
    api, _ = client({("GET", "/api/surveys/1/responses/user/me/answers"): make_response(body=body)}, token="t")
    assert api.my_answers(1) == [Answer(question_id=1, rating_value=4)]


def test_my_answers_empty():
    api, _ = client({("GET", "/api/surveys/1/responses/user/me/answers"): make_response(body=[])}, token="t")
    assert api.my_answers(1) == []


def test_completed_ids_falls_through_endpoints():
    api, http = client({("GET", "/api/surveys/completed"): make_response(body=[{"surveyId": 2}, 5])}, token="t")
    assert api.completed_survey_ids() == {"2", "5"}
    assert [r[1] for r in http.requests] == [
        "https://api.test/api/users/me/completed-surveys",
        "https://api.test/api/surveys/completed",
    ]


def test_completed_ids_all_fail():
    api, _ = client(token="t")
    with pytest.raises(ApiResponseError):
        api.completed_survey_ids()


def test_add_question_drops_id():
    api, http = client({("POST", "/api/surveys/4/questions"): make_response(201, {"id": 7, "questionText": "Q"})})
    created = api.add_question(4, Question(id=99, question_text="Q"))
    assert created.id == 7
    assert "id" not in http.requests[0][2]["json"]


def test_delete_endpoints():
    api, http = client({("DELETE", "/api/surveyresponses/5"): make_response(204),
                        ("DELETE", "/api/surveys/4"): make_response(204)})
    api.delete_response(5)
    api.delete_survey(4)
    assert [r[1] for r in http.requests] == ["https://api.test/api/surveyresponses/5",
                                            "https://api.test/api/surveys/4"]
