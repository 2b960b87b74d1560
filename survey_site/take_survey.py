"""
Survey-taking state machine

    loading ──> error | no-questions | answering | review
    answering ──submit──> submitting ──> answering (error kept) | list page (success)
    review ──retake──> loading (plain survey URL, auto-review suppressed once)

The machine is UI-free: pages read its attributes, call its operations and
follow `navigate_to` when it is set.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from survey_site.completion import latest_response_for, project_answers, resolve_completion
from survey_site.exceptions import (
    AccessDeniedError,
    ApiConnectionError,
    AuthenticationError,
    SurveyApiError,
)
from survey_site.models import (
    QUESTION_MULTIPLE_CHOICE,
    QUESTION_RATING,
    QUESTION_TEXT,
    Answer,
    Question,
    Survey,
    SurveyResponse,
)
from survey_site.questions import filter_consent_questions, normalize_answer, validate_submission
from survey_site.router import Location
from survey_site.share import share_token_matches

logger = logging.getLogger(__name__)

INVALID_SHARE_MESSAGE = "This share link is invalid. Please ask for a new link."
ACCESS_DENIED_MESSAGE = "Access denied. This survey is not publicly available; a valid share link is required."
LOAD_ERROR_MESSAGE = "Error fetching survey. Please try again later."
SUBMIT_ERROR_MESSAGE = "Failed to submit survey. Please try again later."
SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."


class SurveyState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    NO_QUESTIONS = "no-questions"
    ANSWERING = "answering"
    SUBMITTING = "submitting"
    REVIEW = "review"


class TakeSurveyMachine:
    """State for one visit to /survey/{id}"""

    def __init__(self, api, session, survey_id, review: bool = False, share: Optional[str] = None):
        self.api = api
        self.session = session
        self.survey_id = str(survey_id)
        self.review_requested = review
        self.share_token = share or None

        self.state = SurveyState.LOADING
        self.survey: Optional[Survey] = None
        self.questions: List[Question] = []
        self.answers: Dict[int, Any] = {}
        self.invalid_ids: List[int] = []
        self.consent = False
        self.error = ""
        self.messages: List[str] = []
        self.review_answers: Dict[int, Any] = {}
        self.review_source: Optional[str] = None
        self.navigate_to: Optional[Location] = None

    # ---- load ----
    def load(self):
        self._reset_form()
        self.state = SurveyState.LOADING
        self.survey = None
        self.questions = []
        self.review_answers = {}
        self.review_source = None

        if self.share_token and not share_token_matches(self.share_token, self.survey_id):
            self._fail(INVALID_SHARE_MESSAGE)
            return

        try:
            survey = self.api.get_survey(self.survey_id, share=self.share_token)
        except AuthenticationError:
            self.session.force_logout()
            self.navigate_to = Location("/login")
            self._fail(SESSION_EXPIRED_MESSAGE)
            return
        except AccessDeniedError:
            self._fail(ACCESS_DENIED_MESSAGE)
            return
        except SurveyApiError as exc:
            logger.error("Error fetching survey %s: %s", self.survey_id, exc.message)
            self._fail(LOAD_ERROR_MESSAGE)
            return

        self.survey = survey
        self.questions = filter_consent_questions(survey.questions)
        if self.share_token:
            self.session.share.set(self.survey_id, self.share_token)

        if not self.questions:
            self.state = SurveyState.NO_QUESTIONS
            return

        skip_review = self.session.consume_skip_review(self.survey_id)
        if self.review_requested or not skip_review:
            result = resolve_completion(self.api, self.session, self.survey_id)
            if self.review_requested or result.completed:
                self.state = SurveyState.REVIEW
                self.review_answers = result.answers
                self.review_source = result.source
                if not self.review_answers:
                    self._load_review_fallback()
                logger.info("Survey %s opened in review mode (source=%s)", self.survey_id, self.review_source)
                return

        self.state = SurveyState.ANSWERING

    def _load_review_fallback(self):
        """Project the user's latest stored response when no per-user answers came back"""
        try:
            records = self.api.list_responses(self.survey_id)
        except SurveyApiError as exc:
            logger.info("Review fallback for survey %s unavailable: %s", self.survey_id, exc.message)
            return
        record = latest_response_for(records, self.session.username)
        if record is not None:
            self.review_answers = project_answers(record.answers)
            self.review_source = "responses"

    def _fail(self, message: str):
        self.survey = None
        self.questions = []
        self.error = message
        self.state = SurveyState.ERROR

    def _reset_form(self):
        self.answers = {}
        self.invalid_ids = []
        self.consent = False
        self.error = ""
        self.messages = []

    # ---- answering ----
    def question(self, question_id) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def answer(self, question_id, value):
        if self.state != SurveyState.ANSWERING:
            logger.warning("Ignoring answer to question %s in state %s", question_id, self.state.value)
            return
        question = self.question(question_id)
        if question is None:
            raise KeyError(f"Question {question_id} is not part of survey {self.survey_id}")

        normalized = normalize_answer(question, value)
        if normalized is None:
            self.answers.pop(question_id, None)
        else:
            self.answers[question_id] = normalized
        if question_id in self.invalid_ids:
            self.invalid_ids = [qid for qid in self.invalid_ids if qid != question_id]

    def set_consent(self, value: bool):
        self.consent = bool(value)

    @property
    def progress(self) -> float:
        if not self.questions:
            return 0.0
        answered = sum(1 for q in self.questions if q.id in self.answers)
        return answered / len(self.questions)

    # ---- submit ----
    def build_response(self) -> SurveyResponse:
        answers = []
        for q in self.questions:
            value = self.answers.get(q.id)
            if q.question_type == QUESTION_RATING:
                answers.append(Answer(question_id=q.id, answer_text=None,
                                      rating_value=int(value) if value is not None else None))
            elif q.question_type in (QUESTION_TEXT, QUESTION_MULTIPLE_CHOICE):
                answers.append(Answer(question_id=q.id, answer_text=value or "", rating_value=None))
            else:
                answers.append(Answer(question_id=q.id, answer_text=None if value is None else str(value)))
        return SurveyResponse(
            username=self.session.display_username,
            answers=answers,
            consent_given=self.consent,
        )

    def submit(self) -> bool:
        """Validate and post. Returns True when the response was accepted."""
        if self.state != SurveyState.ANSWERING:
            logger.warning("Submit ignored in state %s", self.state.value)
            return False

        self.invalid_ids, self.messages = validate_submission(self.questions, self.answers, self.consent)
        if self.messages:
            self.error = " ".join(self.messages)
            return False

        response = self.build_response()
        self.state = SurveyState.SUBMITTING
        self.error = ""
        try:
            self.api.submit_response(self.survey_id, response, share=self.share_token)
        except AuthenticationError:
            self.state = SurveyState.ANSWERING
            self.session.force_logout()
            self.navigate_to = Location("/login")
            self.error = SESSION_EXPIRED_MESSAGE
            return False
        except ApiConnectionError as exc:
            logger.error("Submit error for survey %s: %s", self.survey_id, exc.message)
            self.state = SurveyState.ANSWERING
            self.error = SUBMIT_ERROR_MESSAGE
            return False
        except SurveyApiError as exc:
            logger.error("Submit rejected for survey %s: %s", self.survey_id, exc.message)
            self.state = SurveyState.ANSWERING
            self.error = exc.message or SUBMIT_ERROR_MESSAGE
            return False

        self.session.mark_completed(self.survey_id, response.username)
        self._reset_form()
        if self.share_token:
            self.session.share.clear()
        self.state = SurveyState.ANSWERING
        self.navigate_to = Location("/surveys")
        logger.info("Survey %s submitted by %s", self.survey_id, response.username)
        return True

    # ---- review ----
    def retake(self):
        if self.state != SurveyState.REVIEW:
            logger.warning("Retake ignored in state %s", self.state.value)
            return
        self.session.clear_completion_marker(self.survey_id)
        self.session.set_skip_review(self.survey_id)
        self._reset_form()
        self.review_answers = {}
        self.review_source = None
        self.review_requested = False
        self.state = SurveyState.LOADING
        self.navigate_to = self.survey_location()

    def survey_location(self, review: bool = False) -> Location:
        params: Dict[str, str] = {}
        active = self.session.share.get()
        if active is not None and active.survey_id == self.survey_id:
            params["share"] = active.share
        if review:
            params["review"] = "true"
        return Location(f"/survey/{self.survey_id}", params)

    def exit_shared_view(self):
        self.session.share.clear()
        self.navigate_to = Location("/surveys")
