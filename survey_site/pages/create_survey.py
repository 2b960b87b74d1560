"""/create-survey page (admin)"""
import streamlit as st

from shared_styles import create_header
from survey_site.authoring import SurveyDraft, make_question
from survey_site.exceptions import AuthenticationError, ValidationFailed
from survey_site.models import QUESTION_MULTIPLE_CHOICE, QUESTION_TYPES
from survey_site.pages.common import PageContext, session_expired

DRAFT_KEY = "survey_draft"


def render_question_builder(key_prefix: str):
    """Question form; returns a validated Question or None"""
    with st.form(f"{key_prefix}_question_form", clear_on_submit=True):
        text = st.text_input("Question text")
        question_type = st.selectbox("Question type", QUESTION_TYPES)
        options = st.text_input("Choices (comma-separated, MultipleChoice only)", placeholder="Yes,No,Maybe")
        col1, col2 = st.columns(2)
        is_required = col1.checkbox("Required")
        is_consent = col2.checkbox("Consent question")
        added = st.form_submit_button("Add question")
    if not added:
        return None
    try:
        return make_question(text, question_type,
                             options if question_type == QUESTION_MULTIPLE_CHOICE else "",
                             is_required, is_consent)
    except ValidationFailed as exc:
        st.error(exc.message)
        return None


def render(ctx: PageContext):
    create_header("Create Survey", icon="➕", admin=True)
    draft = st.session_state.setdefault(DRAFT_KEY, SurveyDraft())

    draft.title = st.text_input("Title", value=draft.title)
    draft.description = st.text_area("Description", value=draft.description)

    st.subheader("Questions")
    question = render_question_builder("create")
    if question is not None:
        draft.add_question(question)

    if not draft.questions:
        st.caption("No questions added yet.")
    for index, q in enumerate(draft.questions):
        col1, col2 = st.columns([5, 1])
        required = " (required)" if q.is_required else ""
        choices = f" [{q.options}]" if q.options else ""
        col1.markdown(f"**{index + 1}.** {q.question_text} · _{q.question_type}_{choices}{required}")
        if col2.button("Remove", key=f"remove_question_{index}"):
            draft.remove_question(index)
            st.rerun()

    if st.button("Save survey", type="primary"):
        try:
            draft.save(ctx.api, ctx.session.username)
        except AuthenticationError:
            session_expired(ctx)
        except ValidationFailed as exc:
            st.error(exc.message)
        else:
            st.success("Survey created successfully!")
