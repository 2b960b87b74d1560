"""/survey/{id} page: answer, review and retake."""
import html

import streamlit as st

from shared_styles import create_header, create_question_title
from survey_site import config
from survey_site.models import QUESTION_MULTIPLE_CHOICE, QUESTION_RATING, QUESTION_TEXT
from survey_site.pages.common import PageContext, follow, nav_button
from survey_site.questions import parse_options
from survey_site.router import Location
from survey_site.take_survey import SurveyState, TakeSurveyMachine

MACHINE_KEY = "take_survey_machine"
RATING_CHOICES = list(range(config.RATING_MIN, config.RATING_MAX + 1))


def _machine(ctx: PageContext) -> TakeSurveyMachine:
    survey_id = ctx.path_params["id"]
    review = (ctx.param("review") or "").lower() == "true"
    share = ctx.param("share")
    key = (survey_id, review, share)

    machine = st.session_state.get(MACHINE_KEY)
    if machine is None or getattr(machine, "route_key", None) != key or machine.state == SurveyState.LOADING:
        machine = TakeSurveyMachine(ctx.api, ctx.session, survey_id, review=review, share=share)
        machine.route_key = key
        st.session_state[MACHINE_KEY] = machine
    machine.api, machine.session = ctx.api, ctx.session
    return machine


def _leave(machine: TakeSurveyMachine):
    if machine.navigate_to is not None:
        st.session_state.pop(MACHINE_KEY, None)
        follow(machine)


def render(ctx: PageContext):
    machine = _machine(ctx)
    if machine.state == SurveyState.LOADING:
        with st.spinner("Loading survey..."):
            machine.load()
    _leave(machine)

    if machine.state == SurveyState.ERROR:
        st.error(machine.error)
        if ctx.session.share.is_active:
            if st.button("Exit shared view"):
                machine.exit_shared_view()
                _leave(machine)
        else:
            nav_button("Back to surveys", Location("/surveys"))
        return

    survey = machine.survey
    create_header(survey.title, survey.description or "", icon="📝")
    if ctx.session.share.is_active:
        st.caption("You are viewing a shared survey.")
        if st.button("Exit shared view"):
            machine.exit_shared_view()
            _leave(machine)

    if machine.state == SurveyState.NO_QUESTIONS:
        st.info("This survey has no questions yet.")
        return
    if machine.state == SurveyState.REVIEW:
        _render_review(machine)
        return
    _render_form(machine)


def _render_review(machine: TakeSurveyMachine):
    st.success("You have already completed this survey. Here are your answers.")
    for number, question in enumerate(machine.questions, start=1):
        create_question_title(number, question.question_text, question.is_required)
        value = machine.review_answers.get(question.id)
        shown = "<em>No answer</em>" if value in (None, "") else html.escape(str(value))
        st.markdown(f'<div class="review-answer">{shown}</div>', unsafe_allow_html=True)
    if st.button("Retake survey", type="primary"):
        machine.retake()
        _leave(machine)


def _render_form(machine: TakeSurveyMachine):
    st.progress(machine.progress, text=f"{int(machine.progress * 100)}% answered")
    invalid = set(machine.invalid_ids)

    for number, question in enumerate(machine.questions, start=1):
        create_question_title(number, question.question_text, question.is_required, question.id in invalid)
        widget_key = f"q_{machine.survey_id}_{question.id}"
        current = machine.answers.get(question.id)

        if question.question_type == QUESTION_RATING:
            value = st.radio("Rating", RATING_CHOICES, key=widget_key, horizontal=True,
                             index=RATING_CHOICES.index(current) if current in RATING_CHOICES else None,
                             label_visibility="collapsed")
        elif question.question_type == QUESTION_MULTIPLE_CHOICE:
            options = parse_options(question)
            value = st.radio("Choice", options, key=widget_key,
                             index=options.index(current) if current in options else None,
                             label_visibility="collapsed")
        elif question.question_type == QUESTION_TEXT:
            value = st.text_area("Answer", value=current or "", key=widget_key,
                                 label_visibility="collapsed") or None
        else:
            value = st.text_input("Answer", value=current or "", key=widget_key,
                                  label_visibility="collapsed") or None

        if value != current:
            machine.answer(question.id, value)

    machine.set_consent(st.checkbox(
        "I consent to the processing of my answers in accordance with the privacy policy.",
        value=machine.consent,
        key=f"consent_{machine.survey_id}",
    ))

    if machine.error:
        st.error(machine.error)

    if st.button("Submit", type="primary", disabled=machine.state == SurveyState.SUBMITTING):
        with st.spinner("Submitting..."):
            accepted = machine.submit()
        if accepted:
            st.toast("Survey submitted successfully!")
            _leave(machine)
        else:
            _leave(machine)
            st.rerun()
