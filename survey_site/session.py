"""
Session context
Single owner of the ambient identity and per-survey flags. Pages and the
survey state machine receive a SessionContext instead of reading storage
directly.

Three stores back it:
- `local`: per browser (token, role, username, surveyShares, anonymous
  completion markers)
- `session`: session-scoped (active_share, skip_review_{id})
- `markers`: optional store shared across browsers; holds completion markers
  of signed-in users only, keyed by username
"""
import logging
from typing import Callable, Dict, List, MutableMapping, Optional

from survey_site.models import ROLE_ADMIN, LoginResult
from survey_site.share import ShareKeyRegistry, ShareSessionStore

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
ROLE_KEY = "role"
USERNAME_KEY = "username"
ANONYMOUS = "Anonymous"
COMPLETED = "completed"
BROWSER_STORE_KEY = "browser_store"


def completion_key(survey_id, username: Optional[str]) -> str:
    return f"survey_{survey_id}_{username or ANONYMOUS}"


def skip_review_key(survey_id) -> str:
    return f"skip_review_{survey_id}"


def _remove(store: MutableMapping, key: str):
    if key in store:
        del store[key]


class SessionContext:
    """Identity, completion markers, share state and change notification"""

    def __init__(self, local: MutableMapping, session: MutableMapping,
                 markers: Optional[MutableMapping] = None):
        self.local = local
        self.session = session
        self.markers = markers
        self.share = ShareSessionStore(session)
        self.share_keys = ShareKeyRegistry(local)
        self._subscribers: List[Callable[[str], None]] = []

    # ---- identity ----
    @property
    def token(self) -> Optional[str]:
        return self.local.get(TOKEN_KEY) or None

    @property
    def role(self) -> Optional[str]:
        return self.local.get(ROLE_KEY) or None

    @property
    def username(self) -> Optional[str]:
        return self.local.get(USERNAME_KEY) or None

    @property
    def display_username(self) -> str:
        return self.username or ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def snapshot(self) -> Dict[str, Optional[str]]:
        return {"token": self.token, "role": self.role, "username": self.username}

    def login(self, result: LoginResult, fallback_username: Optional[str] = None):
        self.local[TOKEN_KEY] = result.token
        self.local[ROLE_KEY] = result.role
        self.local[USERNAME_KEY] = result.username or fallback_username
        logger.info("Logged in as %s (role=%s)", self.username, self.role)
        self._notify("login")

    def logout(self):
        """Clear identity and any shared-link session. Completion markers stay."""
        for key in (TOKEN_KEY, ROLE_KEY, USERNAME_KEY):
            _remove(self.local, key)
        self.share.clear()
        logger.info("Logged out")
        self._notify("logout")

    def force_logout(self):
        """401 from the API: the token is no longer valid."""
        logger.warning("Session expired, forcing logout")
        self.logout()

    # ---- completion markers ----
    def _marker_store(self, username: Optional[str]) -> MutableMapping:
        return self.markers if username and self.markers is not None else self.local

    def has_completion_marker(self, survey_id, username: Optional[str] = None) -> bool:
        username = username or self.username
        return bool(self._marker_store(username).get(completion_key(survey_id, username)))

    def mark_completed(self, survey_id, username: Optional[str] = None):
        username = username or self.username
        self._marker_store(username)[completion_key(survey_id, username)] = COMPLETED
        self._notify("completion")

    def clear_completion_marker(self, survey_id, username: Optional[str] = None):
        username = username or self.username
        _remove(self._marker_store(username), completion_key(survey_id, username))
        self._notify("completion")

    # ---- one-shot review suppression ----
    def set_skip_review(self, survey_id):
        self.session[skip_review_key(survey_id)] = "1"

    def consume_skip_review(self, survey_id) -> bool:
        """True once after set_skip_review; the flag is removed by reading it."""
        key = skip_review_key(survey_id)
        if self.session.get(key):
            del self.session[key]
            return True
        return False

    # ---- subscription ----
    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Register a change callback; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)
        return unsubscribe

    def _notify(self, event: str):
        for callback in list(self._subscribers):
            callback(event)


def browser_session(state: MutableMapping, markers: Optional[MutableMapping] = None) -> SessionContext:
    """SessionContext for one browser session.

    Identity lives in a dict kept inside `state` (Streamlit's session_state),
    so each browser signs in on its own.
    """
    local = state.setdefault(BROWSER_STORE_KEY, {})
    return SessionContext(local, state, markers)
