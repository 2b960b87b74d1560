"""Login, admin login and registration flows."""
import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from survey_site.exceptions import ApiConnectionError, SurveyApiError, ValidationFailed
from survey_site.models import ROLE_ADMIN, ROLE_USER
from survey_site.router import Location

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
MIN_AGE = 16
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def login(api, session, username: str, password: str) -> Location:
    """User login. Returns where to go next; raises ValidationFailed on any failure."""
    try:
        result = api.login(username, password)
    except SurveyApiError as exc:
        logger.info("Login failed for %s: %s", username, exc.message)
        raise ValidationFailed([INVALID_CREDENTIALS]) from exc
    if not result.token:
        raise ValidationFailed([INVALID_CREDENTIALS])
    session.login(result, fallback_username=username)
    return Location("/admin") if result.role == ROLE_ADMIN else Location("/")


def admin_login(api, session, username: str, password: str) -> Location:
    """Admin login: surfaces server messages and rejects non-admin accounts"""
    user = (username or "").strip()
    if not user or not password:
        raise ValidationFailed(["Please enter username and password."])
    try:
        result = api.login(user, password)
    except ApiConnectionError as exc:
        raise ValidationFailed([INVALID_CREDENTIALS]) from exc
    except SurveyApiError as exc:
        raise ValidationFailed([exc.message or "Login failed"]) from exc

    if result.role != ROLE_ADMIN:
        raise ValidationFailed(["You are not authorized as an admin."])
    if not result.token:
        raise ValidationFailed(["Authentication succeeded but no token was returned by the server."])
    session.login(result, fallback_username=user)
    return Location("/admin")


def age_on(dob: date, today: date) -> int:
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years


def validate_registration(form: Dict[str, Any], today: Optional[date] = None) -> Optional[str]:
    """First failing rule as a message, or None when the form is valid"""
    today = today or date.today()
    first_name = (form.get("first_name") or "").strip()
    last_name = (form.get("last_name") or "").strip()
    email = (form.get("email") or "").strip()
    username = (form.get("username") or "").strip()
    password = form.get("password") or ""
    dob = form.get("date_of_birth")

    if len(first_name) < 3:
        return "First Name must be at least 3 characters."
    if len(last_name) < 3:
        return "Last Name must be at least 3 characters."
    if not dob:
        return "Date of Birth is required."
    if isinstance(dob, str):
        try:
            dob = date.fromisoformat(dob)
        except ValueError:
            return "Date of Birth is required."
    if age_on(dob, today) < MIN_AGE:
        return f"You must be at least {MIN_AGE} years old to register."
    if not EMAIL_PATTERN.match(email):
        return "A valid email is required."
    if len(username) < 6:
        return "Username must be at least 6 characters."
    if len(password) < 6:
        return "Password must be at least 6 characters."
    if password != form.get("confirm_password"):
        return "Passwords do not match."
    return None


def registration_payload(form: Dict[str, Any]) -> Dict[str, Any]:
    """Body for POST /api/auth/register (PascalCase, as the API's user DTO expects)"""
    dob = form.get("date_of_birth")
    return {
        "FirstName": form["first_name"].strip(),
        "MiddleName": (form.get("middle_name") or "").strip() or None,
        "LastName": form["last_name"].strip(),
        "DateOfBirth": dob.isoformat() if isinstance(dob, date) else dob,
        "Email": form["email"].strip(),
        "PhoneNumber": (form.get("phone_number") or "").strip() or None,
        "Username": form["username"].strip(),
        "Password": form["password"],
        "ConfirmPassword": form.get("confirm_password"),
        "Role": ROLE_USER,
    }


def register(api, form: Dict[str, Any], today: Optional[date] = None) -> Location:
    problem = validate_registration(form, today)
    if problem:
        raise ValidationFailed([problem])
    try:
        api.register(registration_payload(form))
    except ApiConnectionError as exc:
        raise ValidationFailed(["Registration failed. Try again."]) from exc
    except SurveyApiError as exc:
        raise ValidationFailed([exc.message or "Registration failed. Try again."]) from exc
    logger.info("Registered user %s", form.get("username"))
    return Location("/login")
