"""
Route table and layout resolution

Every route declares its page name, the chrome it is rendered with and the
role it needs. The current location lives in the `page` query parameter,
e.g. `?page=/survey/3&share=...`; other parameters ride along.

Resolution order:
1. an active shared-link session confines the visitor to its survey page
2. unknown paths go home
3. role-restricted routes send everyone else to the login page
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import quote, urlencode

from survey_site.models import ROLE_ADMIN

logger = logging.getLogger(__name__)

PAGE_PARAM = "page"

CHROME_SITE = "site"
CHROME_ADMIN = "admin"
CHROME_NONE = "none"


@dataclass
class Location:
    path: str = "/"
    params: Dict[str, str] = field(default_factory=dict)

    def query(self) -> Dict[str, str]:
        query = {PAGE_PARAM: self.path}
        query.update({k: v for k, v in self.params.items() if v is not None and k != PAGE_PARAM})
        return query

    def href(self) -> str:
        return "?" + urlencode(self.query(), quote_via=quote, safe="/")


@dataclass
class Route:
    pattern: str
    name: str
    chrome: str = CHROME_SITE
    role: Optional[str] = None
    title: str = ""

    def __post_init__(self):
        regex = re.sub(r"\{(\w+)\}", r"(?P<\1>[^/]+)", self.pattern)
        self._regex = re.compile(f"^{regex}$", re.IGNORECASE)

    def match(self, path: str) -> Optional[Dict[str, str]]:
        m = self._regex.match(path)
        return m.groupdict() if m else None


ROUTES: List[Route] = [
    Route("/", "home", title="Home"),
    Route("/about", "about", title="About"),
    Route("/services", "services", title="Services"),
    Route("/surveys", "survey_list", title="Surveys"),
    Route("/survey/{id}", "take_survey", title="Survey"),
    Route("/create-survey", "create_survey", CHROME_ADMIN, ROLE_ADMIN, "Create Survey"),
    Route("/edit-survey/{id}", "edit_survey", CHROME_ADMIN, ROLE_ADMIN, "Edit Survey"),
    Route("/admin", "admin_dashboard", CHROME_ADMIN, ROLE_ADMIN, "Admin"),
    Route("/login", "login", CHROME_NONE, title="Login"),
    Route("/register", "register", CHROME_NONE, title="Register"),
    Route("/admin-login", "admin_login", CHROME_NONE, title="Admin Login"),
]


@dataclass
class Resolution:
    route: Route
    path_params: Dict[str, str]
    location: Location
    redirected: bool = False
    show_nav: bool = True


def normalize_path(path: Optional[str]) -> str:
    path = (path or "/").strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def find_route(path: str):
    for route in ROUTES:
        params = route.match(path)
        if params is not None:
            return route, params
    return None, None


def confinement_redirect(location: Location, share_session) -> Optional[Location]:
    """Location to force while a shared-link session is active, or None"""
    if share_session is None:
        return None
    if normalize_path(location.path).lower() == share_session.path.lower():
        if location.params.get("share"):
            return None
        return Location(location.path, dict(location.params, share=share_session.share))
    return Location(share_session.path, {"share": share_session.share})


def resolve(location: Location, session) -> Resolution:
    redirected = False
    share_session = session.share.get()

    forced = confinement_redirect(location, share_session)
    if forced is not None:
        logger.info("Shared-link session active, redirecting %s -> %s", location.path, forced.path)
        location, redirected = forced, True

    path = normalize_path(location.path)
    route, path_params = find_route(path)
    if route is None:
        logger.info("Unknown path %s, redirecting home", path)
        location, redirected = Location("/"), True
        route, path_params = find_route("/")

    if route.role == ROLE_ADMIN and not session.is_admin:
        logger.info("Route %s needs the Admin role, redirecting to login", route.pattern)
        location, redirected = Location("/login"), True
        route, path_params = find_route("/login")

    location = Location(path if not redirected else location.path, dict(location.params))
    show_nav = route.chrome != CHROME_NONE and share_session is None
    return Resolution(route, path_params, location, redirected, show_nav)


def nav_links(session) -> List[Location]:
    """Links for the site navigation bar"""
    links = [Location("/"), Location("/about"), Location("/services"), Location("/surveys")]
    if session.is_admin:
        links += [Location("/create-survey"), Location("/admin")]
    return links


def route_title(location: Location) -> str:
    route, _ = find_route(normalize_path(location.path))
    return route.title if route else location.path
