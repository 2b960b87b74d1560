"""/edit-survey/{id} page (admin)"""
import streamlit as st

from shared_styles import create_header
from survey_site.authoring import add_question_to_survey, save_survey_edits
from survey_site.exceptions import AuthenticationError, SurveyApiError, ValidationFailed
from survey_site.pages.common import PageContext, nav_button, session_expired
from survey_site.pages.create_survey import render_question_builder
from survey_site.router import Location


def render(ctx: PageContext):
    survey_id = ctx.path_params["id"]
    create_header("Edit Survey", icon="✏️", admin=True)
    try:
        survey = ctx.api.get_survey(survey_id)
    except AuthenticationError:
        session_expired(ctx)
        return
    except SurveyApiError as exc:
        st.error(f"Failed to load survey: {exc.message}")
        nav_button("Back to dashboard", Location("/admin"))
        return

    title = st.text_input("Title", value=survey.title)
    description = st.text_area("Description", value=survey.description or "")
    if st.button("Save changes", type="primary"):
        try:
            save_survey_edits(ctx.api, survey, title, description)
        except AuthenticationError:
            session_expired(ctx)
        except ValidationFailed as exc:
            st.error(exc.message)
        else:
            st.success("Survey saved.")

    st.subheader("Questions")
    for number, q in enumerate(survey.questions, start=1):
        required = " (required)" if q.is_required else ""
        st.markdown(f"**{number}.** {q.question_text} · _{q.question_type}_{required}")

    st.subheader("Add a question")
    question = render_question_builder(f"edit_{survey_id}")
    if question is not None:
        try:
            add_question_to_survey(ctx.api, survey, question)
        except AuthenticationError:
            session_expired(ctx)
        except ValidationFailed as exc:
            st.error(exc.message)
        else:
            st.success("Question added.")
            st.rerun()

    nav_button("Back to dashboard", Location("/admin"))
