"""Survey list: available surveys with completion badges."""
import logging
from dataclasses import dataclass
from typing import List, Optional

from survey_site.completion import resolve_completed_ids
from survey_site.exceptions import AuthenticationError, SurveyApiError
from survey_site.models import Survey
from survey_site.router import Location

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load surveys. Please try again later."


@dataclass
class SurveyCard:
    survey: Survey
    completed: bool

    @property
    def badge(self) -> str:
        return "✅ Completed" if self.completed else "⏳ Not Completed"

    @property
    def action_label(self) -> str:
        return "View" if self.completed else "Answer"

    @property
    def target(self) -> Location:
        params = {"review": "true"} if self.completed else {}
        return Location(f"/survey/{self.survey.id}", params)


class SurveyListModel:
    """Data behind the /surveys page"""

    def __init__(self, api, session):
        self.api = api
        self.session = session
        self.cards: List[SurveyCard] = []
        self.error = ""
        self.navigate_to: Optional[Location] = None

    @property
    def needs_login(self) -> bool:
        return not self.session.is_authenticated

    def load(self) -> List[SurveyCard]:
        self.cards = []
        self.error = ""
        if self.needs_login:
            return self.cards

        try:
            surveys = self.api.list_surveys()
        except AuthenticationError:
            self.session.force_logout()
            self.navigate_to = Location("/login")
            return self.cards
        except SurveyApiError as exc:
            logger.error("Failed to load surveys: %s", exc.message)
            self.error = LOAD_ERROR_MESSAGE
            return self.cards

        completed = resolve_completed_ids(self.api, self.session, [s.id for s in surveys])
        self.cards = [SurveyCard(s, str(s.id) in completed) for s in surveys]
        logger.info("Loaded %d surveys, %d completed", len(self.cards), len(completed))
        return self.cards
