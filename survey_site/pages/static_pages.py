"""Home, About and Services pages."""
import streamlit as st

from shared_styles import create_header, create_info_card
from survey_site import config
from survey_site.pages.common import PageContext, nav_button
from survey_site.router import Location


def render_home(ctx: PageContext):
    create_header(f"Welcome to {config.SITE_NAME}", "Share your opinion in a few minutes", icon="📋")
    if ctx.session.is_authenticated:
        st.write(f"Hello, **{ctx.session.display_username}**!")
    else:
        st.write("Log in to see the surveys waiting for you.")

    col1, col2 = st.columns(2)
    with col1:
        create_info_card("<strong>📝 Take a survey</strong><br>Browse the open surveys and answer them.")
        nav_button("Go to surveys", Location("/surveys"), type="primary", use_container_width=True)
    with col2:
        if ctx.session.is_admin:
            create_info_card("<strong>⚙️ Administration</strong><br>Create surveys and review the responses.")
            nav_button("Open admin dashboard", Location("/admin"), use_container_width=True)
        elif not ctx.session.is_authenticated:
            create_info_card("<strong>🔐 Account</strong><br>Log in or create an account.")
            nav_button("Log in", Location("/login"), use_container_width=True)


def render_about(ctx: PageContext):
    create_header("About us", icon="ℹ️")
    st.markdown(
        f"""
{config.SITE_NAME} collects feedback through short, focused surveys.
Answers are tied to your account so you can come back and review what you submitted,
and every survey asks for your explicit consent before anything is stored.
"""
    )


SERVICES = [
    ("📝", "Online surveys", "Text, rating and multiple-choice questions with required-answer checks."),
    ("🔗", "Shareable links", "Send a survey to anyone with a link or a QR code."),
    ("📊", "Analytics", "Average, highest and lowest ratings per survey."),
    ("📤", "Exports", "Download responses as an Excel workbook or a PDF table."),
]


def render_services(ctx: PageContext):
    create_header("Our services", icon="🛠️")
    cols = st.columns(2)
    for i, (icon, name, text) in enumerate(SERVICES):
        with cols[i % 2]:
            create_info_card(f"<strong>{icon} {name}</strong><br>{text}")
