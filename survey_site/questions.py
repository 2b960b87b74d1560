"""Question rules: consent filtering, choice parsing, answered checks and validation."""
from typing import Any, Dict, List

from survey_site import config
from survey_site.models import (
    QUESTION_MULTIPLE_CHOICE,
    QUESTION_RATING,
    QUESTION_TEXT,
    Question,
)

REQUIRED_MESSAGE = "Please answer all required questions (highlighted in red)."
CONSENT_MESSAGE = "You must give consent to submit this survey."


def looks_like_consent(text: str) -> bool:
    """Substring heuristic for questions authored before the explicit flag existed"""
    lowered = (text or "").lower()
    if "privacy" in lowered or "consent" in lowered:
        return True
    return "terms" in lowered and "conditions" in lowered


def is_consent_question(question: Question) -> bool:
    if question.is_consent_question is not None:
        return question.is_consent_question
    return looks_like_consent(question.question_text)


def filter_consent_questions(questions: List[Question]) -> List[Question]:
    """Questions that are actually answered on the page. Consent is a separate checkbox."""
    return [q for q in questions if not is_consent_question(q)]


def parse_options(question: Question) -> List[str]:
    """Trimmed choices of a MultipleChoice question, empty fragments dropped"""
    if question.question_type != QUESTION_MULTIPLE_CHOICE or not question.options:
        return []
    return [opt.strip() for opt in question.options.split(",") if opt.strip()]


def normalize_answer(question: Question, value: Any) -> Any:
    """Coerce a raw widget value into the stored answer value"""
    if value is None:
        return None
    if question.question_type == QUESTION_RATING:
        rating = int(value)
        if rating < config.RATING_MIN or rating > config.RATING_MAX:
            raise ValueError(f"Rating must be between {config.RATING_MIN} and {config.RATING_MAX}, got {rating}")
        return rating
    if question.question_type == QUESTION_MULTIPLE_CHOICE:
        return str(value).strip()
    return str(value)


def is_answered(question: Question, value: Any) -> bool:
    if question.question_type in (QUESTION_TEXT, QUESTION_MULTIPLE_CHOICE):
        return isinstance(value, str) and value.strip() != ""
    if question.question_type == QUESTION_RATING:
        return value is not None
    # Unknown types cannot be validated client-side
    return True


def find_unanswered_required(questions: List[Question], answers: Dict[int, Any]) -> List[int]:
    """Ids of required questions without a valid answer, in question order"""
    return [
        q.id for q in questions
        if q.is_required and not is_answered(q, answers.get(q.id))
    ]


def validate_submission(questions: List[Question], answers: Dict[int, Any], consent: bool):
    """Run both checks independently.

    Returns (invalid_ids, messages). An empty messages list means the
    submission may go out.
    """
    invalid = find_unanswered_required(questions, answers)
    messages: List[str] = []
    if invalid:
        messages.append(REQUIRED_MESSAGE)
    if not consent:
        messages.append(CONSENT_MESSAGE)
    return invalid, messages
