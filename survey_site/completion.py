"""
Completion resolver

"Has this user completed this survey?" has two sources:
1. the server (GET /api/surveys/{id}/responses/user/me/answers), authoritative
2. the local completion marker written after a successful submission

The local marker is consulted only when the server cannot answer (no token,
transport failure, auth failure, other HTTP error). A definitive empty answer
from the server means NotCompleted even if a stale local marker exists.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from survey_site.exceptions import SurveyApiError
from survey_site.models import Answer, ResponseRecord

logger = logging.getLogger(__name__)


class CompletionStatus(str, Enum):
    COMPLETED = "Completed"
    NOT_COMPLETED = "NotCompleted"
    UNKNOWN = "Unknown"


@dataclass
class CompletionResult:
    status: CompletionStatus
    answers: Dict[int, Any] = field(default_factory=dict)
    source: Optional[str] = None  # "server" or "local"

    @property
    def completed(self) -> bool:
        return self.status == CompletionStatus.COMPLETED


def project_answers(answers: Iterable[Answer]) -> Dict[int, Any]:
    """questionId -> displayed value (rating wins over text when both are set)"""
    projected: Dict[int, Any] = {}
    for answer in answers:
        if answer.rating_value is not None:
            projected[answer.question_id] = answer.rating_value
        else:
            projected[answer.question_id] = answer.answer_text
    return projected


def latest_response_for(records: List[ResponseRecord], username: Optional[str]) -> Optional[ResponseRecord]:
    """Most recent record submitted by `username`; list order breaks ties"""
    if not username:
        return None
    best: Optional[ResponseRecord] = None
    for record in records:
        if record.username != username:
            continue
        if best is None:
            best = record
        elif record.submitted_at is None or best.submitted_at is None:
            best = record
        elif record.submitted_at >= best.submitted_at:
            best = record
    return best


def resolve_completion(api, session, survey_id) -> CompletionResult:
    if session.is_authenticated:
        try:
            answers = api.my_answers(survey_id)
        except SurveyApiError as exc:
            logger.info("Server completion check for survey %s unavailable (%s), using local marker",
                        survey_id, exc.message)
        else:
            if answers:
                return CompletionResult(CompletionStatus.COMPLETED, project_answers(answers), "server")
            return CompletionResult(CompletionStatus.NOT_COMPLETED, source="server")

    if session.has_completion_marker(survey_id):
        return CompletionResult(CompletionStatus.COMPLETED, source="local")
    return CompletionResult(CompletionStatus.UNKNOWN)


def resolve_completed_ids(api, session, survey_ids: Iterable) -> Set[str]:
    """Bulk variant for the survey list: server set if any endpoint answers, else local markers"""
    survey_ids = [str(sid) for sid in survey_ids]
    if session.is_authenticated:
        try:
            return api.completed_survey_ids() & set(survey_ids)
        except SurveyApiError as exc:
            logger.info("Bulk completion lookup unavailable (%s), using local markers", exc.message)
    return {sid for sid in survey_ids if session.has_completion_marker(sid)}
