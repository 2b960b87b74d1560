"""
Survey share links
- share token codec (base64 of a JSON bundle {id, uuid})
- ShareSession store kept in session-scoped storage under `active_share`
- per-survey share key registry kept in persistent storage under `surveyShares`
- share URL / QR image URL builders

The token is not an access-control mechanism: the client only uses the
embedded id as a format and mismatch guard and passes the token through to
the API, which decides access.
"""
import base64
import binascii
import json
import logging
import uuid
from dataclasses import dataclass
from typing import MutableMapping, Optional
from urllib.parse import quote, urlencode

from survey_site import config

logger = logging.getLogger(__name__)

ACTIVE_SHARE_KEY = "active_share"
SURVEY_SHARES_KEY = "surveyShares"
SHARE_HEADER = "X-Share-Key"


class InvalidShareToken(ValueError):
    """The token could not be decoded into a {id, uuid} bundle."""


def mint_share_token(survey_id) -> str:
    """Create a new opaque token for a survey"""
    bundle = json.dumps({"id": survey_id, "uuid": str(uuid.uuid4())}, separators=(",", ":"))
    return base64.b64encode(bundle.encode("utf-8")).decode("ascii")


def decode_share_token(token: str) -> str:
    """Return the survey id embedded in a token, as a string.

    Raises InvalidShareToken when the token is not base64 JSON with an `id`.
    """
    if not token or not token.strip():
        raise InvalidShareToken("empty share token")
    # '+' turns into ' ' when a token travels unencoded through a query string
    cleaned = token.strip().replace(" ", "+")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        raw = base64.b64decode(cleaned, validate=True)
        bundle = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeDecodeError) as e:
        raise InvalidShareToken(f"undecodable share token: {e}") from e
    if not isinstance(bundle, dict) or bundle.get("id") is None:
        raise InvalidShareToken("share token carries no survey id")
    return str(bundle["id"])


def share_token_matches(token: str, survey_id) -> bool:
    try:
        return decode_share_token(token) == str(survey_id)
    except InvalidShareToken as e:
        logger.warning("Rejected share token for survey %s: %s", survey_id, e)
        return False


@dataclass
class ShareSession:
    """Active shared-link context"""
    survey_id: str
    share: str

    @property
    def path(self) -> str:
        return f"/survey/{self.survey_id}"


class ShareSessionStore:
    """ShareSession kept in session-scoped storage"""

    def __init__(self, session: MutableMapping):
        self._session = session

    def get(self) -> Optional[ShareSession]:
        raw = self._session.get(ACTIVE_SHARE_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw) if isinstance(raw, str) else raw
            return ShareSession(survey_id=str(data["id"]), share=str(data["share"]))
        except (ValueError, KeyError, TypeError):
            logger.warning("Dropping malformed %s entry", ACTIVE_SHARE_KEY)
            self.clear()
            return None

    def set(self, survey_id, share: str):
        self._session[ACTIVE_SHARE_KEY] = json.dumps({"id": str(survey_id), "share": share})
        logger.info("Shared-link session started for survey %s", survey_id)

    def clear(self):
        if ACTIVE_SHARE_KEY in self._session:
            del self._session[ACTIVE_SHARE_KEY]
            logger.info("Shared-link session cleared")

    @property
    def is_active(self) -> bool:
        return self.get() is not None


class ShareKeyRegistry:
    """One persistent share token per survey, minted on first use"""

    def __init__(self, local: MutableMapping):
        self._local = local

    def _load(self) -> dict:
        raw = self._local.get(SURVEY_SHARES_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw) if isinstance(raw, str) else raw
            return dict(data) if isinstance(data, dict) else {}
        except ValueError:
            logger.warning("Stored %s is not valid JSON, starting over", SURVEY_SHARES_KEY)
            return {}

    def get(self, survey_id) -> Optional[str]:
        return self._load().get(str(survey_id))

    def get_or_create(self, survey_id) -> str:
        stored = self._load()
        key = stored.get(str(survey_id))
        if not key:
            key = mint_share_token(survey_id)
            stored[str(survey_id)] = key
            self._local[SURVEY_SHARES_KEY] = json.dumps(stored)
            logger.info("Minted share key for survey %s", survey_id)
        return key


def build_share_url(survey_id, token: str, base_url: Optional[str] = None) -> str:
    base = (base_url or config.APP_PUBLIC_URL).rstrip("/")
    query = urlencode({"page": f"/survey/{survey_id}", "share": token}, quote_via=quote, safe="/")
    return f"{base}/?{query}"


def build_qr_url(target_url: str, size: str = config.QR_SIZE) -> str:
    return f"{config.QR_SERVICE_URL}?size={size}&data={quote(target_url, safe='')}"
