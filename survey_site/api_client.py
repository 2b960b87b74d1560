"""
Survey REST API client

Thin wrapper over requests.Session:
- attaches `Authorization: Bearer <token>` when the session has a token
- sends JSON with `Content-Type: application/json`
- passes a share token both as `?share=` and as the `X-Share-Key` header
- maps failures onto the error taxonomy in survey_site.exceptions
"""
import logging
from typing import Any, Dict, List, Optional, Set

import requests

from survey_site import config
from survey_site.exceptions import (
    AccessDeniedError,
    ApiConnectionError,
    ApiResponseError,
    AuthenticationError,
)
from survey_site.models import (
    Analytics,
    Answer,
    LoginResult,
    Question,
    ResponseRecord,
    Survey,
    SurveyResponse,
)
from survey_site.share import SHARE_HEADER

logger = logging.getLogger(__name__)

# Bulk "which surveys has the current user completed" lookups, first success wins
COMPLETED_SURVEY_ENDPOINTS = [
    "/api/users/me/completed-surveys",
    "/api/surveys/completed",
]


def extract_error_message(resp: requests.Response) -> str:
    """Best human-readable message from an error response body"""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "error", "title", "detail"):
            if body.get(key):
                return str(body[key])
        errors = body.get("errors")
        if isinstance(errors, dict):
            parts: List[str] = []
            for value in errors.values():
                if isinstance(value, list):
                    parts.extend(str(v) for v in value)
                else:
                    parts.append(str(value))
            if parts:
                return " ".join(parts)
    text = (resp.text or "").strip()
    return text or resp.reason or f"HTTP {resp.status_code}"


def _redact(token: Optional[str]) -> str:
    return f"{token[:8]}..." if token else "<none>"


class SurveyApiClient:
    """Client for the survey platform API"""

    def __init__(
        self,
        session_context=None,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.API_TIMEOUT,
        verify: bool = config.API_VERIFY_TLS,
        http: Optional[requests.Session] = None,
    ):
        self.session_context = session_context
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify = verify
        self.http = http or requests.Session()

    def url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    @property
    def token(self) -> Optional[str]:
        return self.session_context.token if self.session_context is not None else None

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        share: Optional[str] = None,
        auth: bool = True,
    ) -> requests.Response:
        """Send one request and raise on any non-2xx status"""
        headers = dict(headers or {})
        headers.setdefault("Content-Type", "application/json")
        headers.setdefault("Accept", "application/json")
        token = self.token if auth else None
        if token and "Authorization" not in headers:
            headers["Authorization"] = f"Bearer {token}"

        params = dict(params or {})
        if share:
            params["share"] = share
            headers[SHARE_HEADER] = share

        url = self.url(path)
        logger.debug("%s %s token=%s", method, url, _redact(token))
        try:
            resp = self.http.request(
                method,
                url,
                json=json,
                params=params or None,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ApiConnectionError(f"{type(exc).__name__}: {exc}") from exc

        if resp.ok:
            return resp

        message = extract_error_message(resp)
        logger.warning("%s %s -> %s %s", method, url, resp.status_code, message)
        if resp.status_code == 401:
            raise AuthenticationError(message, resp.status_code, resp.text)
        if resp.status_code == 403:
            raise AccessDeniedError(message, resp.status_code, resp.text)
        raise ApiResponseError(message, resp.status_code, resp.text)

    def _json(self, resp: requests.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiResponseError("Response body is not valid JSON", resp.status_code, resp.text) from exc

    # ---- auth ----
    def login(self, username: str, password: str) -> LoginResult:
        resp = self.request("POST", "/api/auth/login", json={"username": username, "password": password}, auth=False)
        return LoginResult.model_validate(self._json(resp) or {})

    def register(self, payload: Dict[str, Any]) -> Any:
        resp = self.request("POST", "/api/auth/register", json=payload, auth=False)
        return self._json(resp)

    # ---- surveys ----
    def list_surveys(self) -> List[Survey]:
        data = self._json(self.request("GET", "/api/surveys")) or []
        return [Survey.model_validate(item) for item in data]

    def get_survey(self, survey_id, share: Optional[str] = None) -> Survey:
        resp = self.request("GET", f"/api/surveys/{survey_id}", share=share)
        return Survey.model_validate(self._json(resp))

    def create_survey(self, payload: Dict[str, Any]) -> Any:
        return self._json(self.request("POST", "/api/surveys", json=payload))

    def update_survey(self, survey_id, payload: Dict[str, Any]) -> Any:
        return self._json(self.request("PUT", f"/api/surveys/{survey_id}", json=payload))

    def delete_survey(self, survey_id):
        self.request("DELETE", f"/api/surveys/{survey_id}")

    def add_question(self, survey_id, question: Question) -> Optional[Question]:
        payload = question.to_payload()
        payload.pop("id", None)
        data = self._json(self.request("POST", f"/api/surveys/{survey_id}/questions", json=payload))
        return Question.model_validate(data) if isinstance(data, dict) else None

    # ---- responses ----
    def list_responses(self, survey_id) -> List[ResponseRecord]:
        data = self._json(self.request("GET", f"/api/surveys/{survey_id}/responses")) or []
        return [ResponseRecord.model_validate(item) for item in data]

    def submit_response(self, survey_id, response: SurveyResponse, share: Optional[str] = None) -> Any:
        resp = self.request("POST", f"/api/surveys/{survey_id}/responses", json=response.to_payload(), share=share)
        return self._json(resp)

    def my_answers(self, survey_id) -> List[Answer]:
        """Current user's own answers to a survey; empty when not answered yet"""
        data = self._json(self.request("GET", f"/api/surveys/{survey_id}/responses/user/me/answers"))
        if not data:
            return []
        if isinstance(data, dict):
            data = data.get("answers") or []
        if data and isinstance(data[0], dict) and "answers" in data[0]:
            # Whole response records: use the last one
            data = data[-1].get("answers") or []
        return [Answer.model_validate(item) for item in data]

    def completed_survey_ids(self) -> Set[str]:
        """Ids of surveys the current user has completed, from the first endpoint that answers"""
        last_error: Optional[Exception] = None
        for path in COMPLETED_SURVEY_ENDPOINTS:
            try:
                data = self._json(self.request("GET", path))
            except (ApiConnectionError, AuthenticationError, AccessDeniedError, ApiResponseError) as exc:
                logger.info("Completed-surveys lookup via %s failed: %s", path, exc.message)
                last_error = exc
                continue
            return _parse_survey_ids(data)
        raise last_error

    def delete_response(self, response_id):
        self.request("DELETE", f"/api/surveyresponses/{response_id}")

    # ---- analytics ----
    def get_analytics(self, survey_id) -> Analytics:
        return Analytics.model_validate(self._json(self.request("GET", f"/api/analytics/{survey_id}")) or {})


def _parse_survey_ids(data: Any) -> Set[str]:
    if isinstance(data, dict):
        for key in ("surveyIds", "completedSurveyIds", "completed", "items"):
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            data = []
    ids: Set[str] = set()
    for item in data or []:
        if isinstance(item, dict):
            value = item.get("surveyId", item.get("id"))
        else:
            value = item
        if value is not None:
            ids.add(str(value))
    return ids
