"""Error taxonomy for the survey API client and local validation."""
from typing import Any, List, Optional


class SurveyApiError(Exception):
    """Base class for every failure talking to the survey API."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class ApiConnectionError(SurveyApiError):
    """The API could not be reached (DNS, TLS, refused connection, timeout)."""


class AuthenticationError(SurveyApiError):
    """401 from the API. Callers log the user out and send them to the login page."""


class AccessDeniedError(SurveyApiError):
    """403 from the API, e.g. a survey that needs a valid share link."""


class ApiResponseError(SurveyApiError):
    """Any other non-2xx response; `message` carries the server text when there is one."""


class ValidationFailed(Exception):
    """Local validation failure. Never reaches the network."""

    def __init__(self, errors: List[str]):
        super().__init__('; '.join(errors))
        self.errors = errors

    @property
    def message(self) -> str:
        return ' '.join(self.errors)
