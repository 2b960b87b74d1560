"""Survey site Streamlit entry point.
Run via: streamlit run app.py
"""
import logging

import streamlit as st

from shared_styles import apply_unified_theme, create_footer
from survey_site import config
from survey_site.api_client import SurveyApiClient
from survey_site.pages import PAGES
from survey_site.pages.admin_dashboard import DASHBOARD_KEY
from survey_site.pages.common import PageContext, nav_button, navigate
from survey_site.pages.create_survey import DRAFT_KEY
from survey_site.pages.take_survey import MACHINE_KEY
from survey_site.router import CHROME_ADMIN, PAGE_PARAM, Location, nav_links, resolve, route_title
from survey_site.session import SessionContext, browser_session
from survey_site.utils.persistence import PersistentStore

logger = logging.getLogger(__name__)

st.set_page_config(
    page_title=config.SITE_NAME,
    page_icon="📋",
    layout="wide",
    initial_sidebar_state="expanded",
)

# cached page models that belong to one identity
USER_SCOPED_KEYS = (DASHBOARD_KEY, MACHINE_KEY, DRAFT_KEY)


@st.cache_resource(show_spinner=False)
def get_marker_store() -> PersistentStore:
    """Completion markers of signed-in users, created once per server process."""
    config.setup_logging()
    logger.info("Survey site starting, API at %s", config.API_BASE_URL)
    return PersistentStore(config.DATA_DIR, config.MARKER_STORE_FILE)


def current_location() -> Location:
    params = {k: st.query_params[k] for k in st.query_params.keys() if k != PAGE_PARAM}
    return Location(st.query_params.get(PAGE_PARAM, "/"), params)


def build_session() -> SessionContext:
    session = browser_session(st.session_state, get_marker_store())

    def drop_user_state(event: str):
        if event in ("login", "logout"):
            for key in USER_SCOPED_KEYS:
                st.session_state.pop(key, None)

    session.subscribe(drop_user_state)
    return session


def render_site_nav(session: SessionContext, active: Location):
    with st.sidebar:
        st.markdown(f"## 📋 {config.SITE_NAME}")
        for link in nav_links(session):
            nav_button(route_title(link), link, key=f"sidebar_{link.path}",
                       use_container_width=True,
                       type="primary" if link.path == active.path else "secondary")
        st.markdown("---")
        render_account(session)


def render_admin_nav(session: SessionContext, active: Location):
    with st.sidebar:
        st.markdown("## 🛡️ Administration")
        for link in (Location("/admin"), Location("/create-survey")):
            nav_button(route_title(link), link, key=f"admin_{link.path}",
                       use_container_width=True,
                       type="primary" if link.path == active.path else "secondary")
        nav_button("⬅️ Back to site", Location("/"), use_container_width=True)
        st.markdown("---")
        render_account(session)


def render_account(session: SessionContext):
    if session.is_authenticated:
        st.markdown(f"👤 **{session.display_username}**" + (" · Admin" if session.is_admin else ""))
        if st.button("Logout", use_container_width=True):
            session.logout()
            navigate(Location("/"))
    else:
        nav_button("Login", Location("/login"), key="sidebar_login", use_container_width=True)


def main():
    apply_unified_theme()
    session = build_session()
    api = SurveyApiClient(session)

    resolution = resolve(current_location(), session)
    if resolution.redirected:
        st.query_params.clear()
        st.query_params.update(resolution.location.query())

    if resolution.show_nav:
        if resolution.route.chrome == CHROME_ADMIN:
            render_admin_nav(session, resolution.location)
        else:
            render_site_nav(session, resolution.location)

    ctx = PageContext(api, session, resolution.location, resolution.path_params)
    PAGES[resolution.route.name](ctx)

    if resolution.show_nav:
        create_footer(system_name=config.SITE_NAME, additional_info="Your opinion matters")


if __name__ == "__main__":
    main()
