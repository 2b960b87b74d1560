"""Survey API data models (camelCase on the wire, snake_case in Python)."""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

QUESTION_TEXT = "Text"
QUESTION_RATING = "Rating"
QUESTION_MULTIPLE_CHOICE = "MultipleChoice"
QUESTION_TYPES = [QUESTION_TEXT, QUESTION_RATING, QUESTION_MULTIPLE_CHOICE]

ROLE_USER = "User"
ROLE_ADMIN = "Admin"


class ApiModel(BaseModel):
    """Base model: accepts both alias and field names, ignores unknown keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Question(ApiModel):
    """One survey question"""
    id: Optional[int] = None
    question_text: str = Field(..., description="Prompt shown to the respondent")
    question_type: str = Field(default=QUESTION_TEXT, description="Text, Rating or MultipleChoice")
    options: Optional[str] = Field(None, description="Comma-separated choices, MultipleChoice only")
    is_required: bool = False
    is_consent_question: Optional[bool] = Field(None, description="Explicit consent flag; None means unknown")


class Survey(ApiModel):
    """Survey definition"""
    id: int
    title: str = ""
    description: Optional[str] = ""
    questions: List[Question] = Field(default_factory=list)

    @field_validator("questions", mode="before")
    @classmethod
    def _none_questions(cls, v):
        return v or []


class Answer(ApiModel):
    """Answer to one question. Exactly one of answer_text / rating_value is meaningful."""
    question_id: int
    answer_text: Optional[str] = None
    rating_value: Optional[int] = None


class SurveyResponse(ApiModel):
    """Body of POST /api/surveys/{id}/responses"""
    username: str
    answers: List[Answer]
    consent_given: bool


class ResponseRecord(ApiModel):
    """A stored response as listed by the API"""
    id: Optional[int] = None
    username: Optional[str] = None
    submitted_at: Optional[datetime] = None
    answers: List[Answer] = Field(default_factory=list)
    consent_given: Optional[bool] = None

    @field_validator("answers", mode="before")
    @classmethod
    def _none_answers(cls, v):
        return v or []

    @field_validator("submitted_at")
    @classmethod
    def _naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Mixed aware/naive timestamps would not compare; keep everything naive UTC
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @property
    def display_name(self) -> str:
        return self.username or "Anonymous"


class Analytics(ApiModel):
    """Pre-aggregated stats for one survey"""
    total_responses: int = 0
    average_rating: Optional[float] = None
    highest_rating: Optional[float] = None
    lowest_rating: Optional[float] = None


class LoginResult(ApiModel):
    """POST /api/auth/login response"""
    token: Optional[str] = None
    role: Optional[str] = None
    username: Optional[str] = None
