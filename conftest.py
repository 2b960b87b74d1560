"""Shared test fixtures: an in-memory survey API and a session context."""
import pytest

from survey_site.models import LoginResult
from survey_site.session import SessionContext


class FakeApi:
    """Stands in for SurveyApiClient. Each endpoint returns its configured
    value, or raises it when it is an exception. Calls are recorded."""

    def __init__(self, **responses):
        self.responses = responses
        self.calls = []

    def _reply(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        value = self.responses.get(name)
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(*args, **kwargs)
        return value

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    def login(self, username, password):
        return self._reply("login", username, password)

    def register(self, payload):
        return self._reply("register", payload)

    def list_surveys(self):
        return self._reply("list_surveys") or []

    def get_survey(self, survey_id, share=None):
        return self._reply("get_survey", survey_id, share=share)

    def create_survey(self, payload):
        return self._reply("create_survey", payload)

    def update_survey(self, survey_id, payload):
        return self._reply("update_survey", survey_id, payload)

    def delete_survey(self, survey_id):
        return self._reply("delete_survey", survey_id)

    def add_question(self, survey_id, question):
        return self._reply("add_question", survey_id, question)

    def list_responses(self, survey_id):
        return self._reply("list_responses", survey_id) or []

    def submit_response(self, survey_id, response, share=None):
        return self._reply("submit_response", survey_id, response, share=share)

    def my_answers(self, survey_id):
        return self._reply("my_answers", survey_id) or []

    def completed_survey_ids(self):
        return self._reply("completed_survey_ids") or set()

    def delete_response(self, response_id):
        return self._reply("delete_response", response_id)

    def get_analytics(self, survey_id):
        return self._reply("get_analytics", survey_id)


@pytest.fixture
def session():
    return SessionContext({}, {})


@pytest.fixture
def user_session(session):
    session.login(LoginResult(token="user-token", role="User", username="alice"))
    return session


@pytest.fixture
def admin_session(session):
    session.login(LoginResult(token="admin-token", role="Admin", username="admin1"))
    return session
