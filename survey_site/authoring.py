"""Survey authoring for admins: create, edit, add questions."""
import logging
from typing import List, Optional

from survey_site.exceptions import ApiConnectionError, AuthenticationError, SurveyApiError, ValidationFailed
from survey_site.models import QUESTION_MULTIPLE_CHOICE, QUESTION_TYPES, Question, Survey

logger = logging.getLogger(__name__)


def make_question(text: str, question_type: str, options: str = "", is_required: bool = False,
                  is_consent_question: bool = False) -> Question:
    """Validated draft question"""
    if not (text or "").strip():
        raise ValidationFailed(["Please enter a question text."])
    if question_type not in QUESTION_TYPES:
        raise ValidationFailed([f"Unknown question type: {question_type}"])
    if question_type == QUESTION_MULTIPLE_CHOICE:
        choices = [c.strip() for c in (options or "").split(",") if c.strip()]
        if not choices:
            raise ValidationFailed(["Enter choices separated by commas (e.g. Yes,No,Maybe)."])
        options = ",".join(choices)
    else:
        options = None
    return Question(
        question_text=text.strip(),
        question_type=question_type,
        options=options,
        is_required=is_required,
        is_consent_question=is_consent_question,
    )


class SurveyDraft:
    """New survey being assembled on the create page"""

    def __init__(self):
        self.title = ""
        self.description = ""
        self.questions: List[Question] = []

    def add_question(self, question: Question):
        self.questions.append(question)

    def remove_question(self, index: int):
        if 0 <= index < len(self.questions):
            del self.questions[index]

    def payload(self, created_by: Optional[str]) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "createdBy": created_by,
            "questions": [_question_payload(q) for q in self.questions],
        }

    def save(self, api, created_by: Optional[str]):
        if not self.title.strip() or not self.questions:
            raise ValidationFailed(["Please add a title and at least one question."])
        try:
            created = api.create_survey(self.payload(created_by))
        except AuthenticationError:
            raise
        except ApiConnectionError as exc:
            raise ValidationFailed(["Error creating survey. Please try again later."]) from exc
        except SurveyApiError as exc:
            raise ValidationFailed([exc.message or "Failed to create survey"]) from exc
        logger.info("Survey created: %s", self.title)
        self.title = ""
        self.description = ""
        self.questions = []
        return created


def _question_payload(question: Question) -> dict:
    payload = question.to_payload()
    if payload.get("id") is None:
        payload.pop("id", None)
    return payload


def save_survey_edits(api, survey: Survey, title: str, description: str):
    """PUT the new title/description; the question list goes back unchanged"""
    if not (title or "").strip():
        raise ValidationFailed(["Please add a title."])
    payload = {
        "title": title,
        "description": description,
        "questions": [_question_payload(q) for q in survey.questions],
    }
    try:
        api.update_survey(survey.id, payload)
    except AuthenticationError:
        raise
    except ApiConnectionError as exc:
        raise ValidationFailed(["Error saving survey."]) from exc
    except SurveyApiError as exc:
        raise ValidationFailed([exc.message or "Failed to save survey"]) from exc
    survey.title = title
    survey.description = description
    logger.info("Survey %s updated", survey.id)


def add_question_to_survey(api, survey: Survey, question: Question) -> Question:
    try:
        created = api.add_question(survey.id, question)
    except AuthenticationError:
        raise
    except ApiConnectionError as exc:
        raise ValidationFailed([f"Failed to create question: {exc.message}"]) from exc
    except SurveyApiError as exc:
        raise ValidationFailed([f"Failed to create question: {exc.message}"]) from exc
    created = created or question
    survey.questions.append(created)
    return created
