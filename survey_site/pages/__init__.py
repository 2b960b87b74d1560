"""Streamlit page renderers, one module per route group."""
from survey_site.pages import (
    admin_dashboard,
    auth_pages,
    create_survey,
    edit_survey,
    static_pages,
    survey_list,
    take_survey,
)

# route name -> render(ctx)
PAGES = {
    "home": static_pages.render_home,
    "about": static_pages.render_about,
    "services": static_pages.render_services,
    "survey_list": survey_list.render,
    "take_survey": take_survey.render,
    "create_survey": create_survey.render,
    "edit_survey": edit_survey.render,
    "admin_dashboard": admin_dashboard.render,
    "login": auth_pages.render_login,
    "register": auth_pages.render_register,
    "admin_login": auth_pages.render_admin_login,
}
