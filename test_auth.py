"""
Login, admin login and registration tests
"""
from datetime import date

import pytest

from conftest import FakeApi
from survey_site import auth
from survey_site.exceptions import ApiConnectionError, ApiResponseError, AuthenticationError, ValidationFailed
from survey_site.models import LoginResult

TODAY = date(2025, 6, 15)


def valid_form(**overrides):
    form = {
        "first_name": "Alice",
        "middle_name": "",
        "last_name": "Smith",
        "date_of_birth": date(2000, 1, 1),
        "email": "alice@example.com",
        "phone_number": "",
        "username": "alice01",
        "password": "secret1",
        "confirm_password": "secret1",
    }
    form.update(overrides)
    return form


def test_user_login_routes_by_role(session):
    api = FakeApi(login=LoginResult(token="t", role="User", username="alice"))
    assert auth.login(api, session, "alice", "pw").path == "/"
    assert session.username == "alice"

    api = FakeApi(login=LoginResult(token="t", role="Admin"))
    assert auth.login(api, session, "boss", "pw").path == "/admin"
    assert session.username == "boss"


@pytest.mark.parametrize("reply", [AuthenticationError("bad", 401), ApiConnectionError("down"),
                                   LoginResult(token=None, role="User")])
def test_user_login_failures_are_generic(session, reply):
    with pytest.raises(ValidationFailed) as exc_info:
        auth.login(FakeApi(login=reply), session, "alice", "pw")
    assert exc_info.value.errors == [auth.INVALID_CREDENTIALS]
    assert not session.is_authenticated


def test_admin_login(session):
    with pytest.raises(ValidationFailed) as exc_info:
        auth.admin_login(FakeApi(), session, " ", "pw")
    assert exc_info.value.errors == ["Please enter username and password."]

    with pytest.raises(ValidationFailed) as exc_info:
        auth.admin_login(FakeApi(login=LoginResult(token="t", role="User")), session, "bob", "pw")
    assert exc_info.value.errors == ["You are not authorized as an admin."]
    assert not session.is_authenticated

    with pytest.raises(ValidationFailed) as exc_info:
        auth.admin_login(FakeApi(login=LoginResult(token=None, role="Admin")), session, "boss", "pw")
    assert "no token" in exc_info.value.message

    with pytest.raises(ValidationFailed) as exc_info:
        auth.admin_login(FakeApi(login=AuthenticationError("Account locked", 401)), session, "boss", "pw")
    assert exc_info.value.errors == ["Account locked"]

    target = auth.admin_login(FakeApi(login=LoginResult(token="t", role="Admin")), session, "boss", "pw")
    assert target.path == "/admin"
    assert session.is_admin


@pytest.mark.parametrize("overrides,message", [
    ({"first_name": "Al"}, "First Name must be at least 3 characters."),
    ({"last_name": "Sm"}, "Last Name must be at least 3 characters."),
    ({"date_of_birth": None}, "Date of Birth is required."),
    ({"date_of_birth": date(2009, 6, 16)}, "You must be at least 16 years old to register."),
    ({"email": "alice@example"}, "A valid email is required."),
    ({"username": "alice"}, "Username must be at least 6 characters."),
    ({"password": "12345", "confirm_password": "12345"}, "Password must be at least 6 characters."),
    ({"confirm_password": "other1"}, "Passwords do not match."),
])
def test_registration_validation(overrides, message):
    assert auth.validate_registration(valid_form(**overrides), TODAY) == message


def test_sixteenth_birthday_is_old_enough():
    assert auth.validate_registration(valid_form(date_of_birth=date(2009, 6, 15)), TODAY) is None
    assert auth.validate_registration(valid_form(date_of_birth="2009-06-15"), TODAY) is None


def test_register_sends_pascal_case_payload():
    api = FakeApi(register={"message": "ok"})
    assert auth.register(api, valid_form(), TODAY).path == "/login"
    payload = api.called("register")[0][1][0]
    assert payload["FirstName"] == "Alice"
    assert payload["DateOfBirth"] == "2000-01-01"
    assert payload["Role"] == "User"
    assert payload["MiddleName"] is None


def test_register_invalid_form_never_calls_api():
    api = FakeApi()
    with pytest.raises(ValidationFailed):
        auth.register(api, valid_form(email="bad"), TODAY)
    assert api.calls == []


def test_register_surfaces_server_message():
    api = FakeApi(register=ApiResponseError("Username already taken", 400))
    with pytest.raises(ValidationFailed) as exc_info:
        auth.register(api, valid_form(), TODAY)
    assert exc_info.value.errors == ["Username already taken"]
