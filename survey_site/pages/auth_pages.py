"""Login, admin login and registration pages (rendered without site chrome)."""
from datetime import date

import streamlit as st

from shared_styles import create_header
from survey_site import auth
from survey_site.exceptions import ValidationFailed
from survey_site.pages.common import PageContext, nav_button, navigate
from survey_site.router import Location


def render_login(ctx: PageContext):
    create_header("Login", "Welcome back", icon="🔐")
    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login", type="primary", use_container_width=True)

    if submitted:
        try:
            target = auth.login(ctx.api, ctx.session, username, password)
        except ValidationFailed as exc:
            st.error(exc.message)
        else:
            navigate(target)

    col1, col2, col3 = st.columns(3)
    with col1:
        nav_button("Create an account", Location("/register"))
    with col2:
        nav_button("Admin login", Location("/admin-login"))
    with col3:
        nav_button("Back to home", Location("/"))


def render_admin_login(ctx: PageContext):
    create_header("Admin Login", icon="🛡️", admin=True)
    with st.form("admin_login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login as admin", type="primary", use_container_width=True)

    if submitted:
        try:
            target = auth.admin_login(ctx.api, ctx.session, username, password)
        except ValidationFailed as exc:
            st.error(exc.message)
        else:
            navigate(target)

    nav_button("Back to user login", Location("/login"))


def render_register(ctx: PageContext):
    create_header("Create an account", icon="🧾")
    with st.form("register_form"):
        col1, col2, col3 = st.columns(3)
        first_name = col1.text_input("First Name")
        middle_name = col2.text_input("Middle Name (optional)")
        last_name = col3.text_input("Last Name")
        date_of_birth = st.date_input("Date of Birth", value=None, min_value=date(1900, 1, 1),
                                      max_value=date.today())
        email = st.text_input("Email")
        phone_number = st.text_input("Phone Number (optional)")
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        confirm_password = st.text_input("Confirm Password", type="password")
        submitted = st.form_submit_button("Register", type="primary", use_container_width=True)

    if submitted:
        form = {
            "first_name": first_name,
            "middle_name": middle_name,
            "last_name": last_name,
            "date_of_birth": date_of_birth,
            "email": email,
            "phone_number": phone_number,
            "username": username,
            "password": password,
            "confirm_password": confirm_password,
        }
        try:
            target = auth.register(ctx.api, form)
        except ValidationFailed as exc:
            st.error(exc.message)
        else:
            st.success("Registration successful. You can log in now.")
            navigate(target)

    nav_button("Already have an account? Log in", Location("/login"))
