"""Helpers shared by the Streamlit pages."""
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import streamlit as st

from survey_site.api_client import SurveyApiClient
from survey_site.router import Location
from survey_site.session import SessionContext

logger = logging.getLogger(__name__)


@dataclass
class PageContext:
    api: SurveyApiClient
    session: SessionContext
    location: Location
    path_params: Dict[str, str] = field(default_factory=dict)

    def param(self, name: str) -> Optional[str]:
        return self.location.params.get(name)


def navigate(location: Location):
    """Point the browser at another route and rerun the script"""
    logger.debug("navigate -> %s", location.href())
    st.query_params.clear()
    st.query_params.update(location.query())
    st.rerun()


def nav_button(label: str, location: Location, key: Optional[str] = None, **kwargs):
    if st.button(label, key=key or f"nav_{location.href()}_{label}", **kwargs):
        navigate(location)


def follow(model) -> None:
    """Follow a model's pending navigation, if any"""
    target = getattr(model, "navigate_to", None)
    if target is not None:
        model.navigate_to = None
        navigate(target)


def session_expired(ctx: PageContext):
    """401 from the API: drop the identity and go to the login page"""
    ctx.session.force_logout()
    navigate(Location("/login"))
