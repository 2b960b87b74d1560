"""/surveys page"""
import html

import streamlit as st

from shared_styles import create_header, create_info_card, create_status_badge
from survey_site.pages.common import PageContext, follow, nav_button
from survey_site.router import Location
from survey_site.survey_list import SurveyListModel


def render(ctx: PageContext):
    create_header("Available Surveys", icon="📝")
    model = SurveyListModel(ctx.api, ctx.session)
    if model.needs_login:
        st.info("Please log in to see the available surveys.")
        col1, col2 = st.columns(2)
        with col1:
            nav_button("Log in", Location("/login"), type="primary", use_container_width=True)
        with col2:
            nav_button("Register", Location("/register"), use_container_width=True)
        return

    with st.spinner("Loading surveys..."):
        cards = model.load()
    follow(model)

    if model.error:
        st.error(model.error)
        return
    if not cards:
        st.info("No surveys available right now.")
        return

    for card in cards:
        with st.container():
            create_info_card(
                f"<strong>{html.escape(card.survey.title)}</strong><br>"
                f"<span style='color:#666'>{html.escape(card.survey.description or '')}</span>",
                card_type="success" if card.completed else "info",
            )
            col1, col2 = st.columns([3, 1])
            with col1:
                create_status_badge(card.badge, "success" if card.completed else "warning")
            with col2:
                nav_button(card.action_label, card.target, key=f"survey_card_{card.survey.id}",
                           use_container_width=True)
