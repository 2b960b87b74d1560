"""
Admin dashboard logic: survey selection, response filters, deletes, sharing.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from survey_site import config
from survey_site.exceptions import AuthenticationError, SurveyApiError, ValidationFailed
from survey_site.export import export_excel, export_pdf
from survey_site.models import Analytics, ResponseRecord, Survey
from survey_site.router import Location
from survey_site.share import build_qr_url, build_share_url

logger = logging.getLogger(__name__)

DATE_RANGE_MESSAGE = "Select start and end dates"
DATE_ORDER_MESSAGE = "Start date must be on or before end date"


def filter_by_date(records: List[ResponseRecord], start: date, end: date) -> List[ResponseRecord]:
    """Responses submitted on any day from start to end, both days included"""
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end + timedelta(days=1), time.min)
    return [r for r in records if r.submitted_at is not None and lower <= r.submitted_at < upper]


def filter_by_username(records: List[ResponseRecord], text: str) -> List[ResponseRecord]:
    needle = (text or "").strip().lower()
    if not needle:
        return list(records)
    return [r for r in records if needle in r.display_name.lower()]


class AdminDashboard:
    """State behind the /admin page"""

    def __init__(self, api, session):
        self.api = api
        self.session = session
        self.surveys: List[Survey] = []
        self.selected: Optional[Survey] = None
        self.responses: List[ResponseRecord] = []
        self.analytics: Optional[Analytics] = None
        self.start_date: Optional[date] = None
        self.end_date: Optional[date] = None
        self.search = ""
        self.date_filter_active = False
        self.load_error = ""
        self.responses_error = ""
        self.error = ""
        self.notice = ""
        self.pending_delete_response: Optional[int] = None
        self.pending_delete_survey: Optional[int] = None
        self.navigate_to: Optional[Location] = None
        self._exports: Optional[tuple] = None

    # ---- loading ----
    def _session_expired(self):
        self.session.force_logout()
        self.navigate_to = Location("/login")

    def load_surveys(self) -> List[Survey]:
        self.load_error = ""
        if not self.session.is_admin:
            self.navigate_to = Location("/login")
            return []
        try:
            self.surveys = self.api.list_surveys()
        except AuthenticationError:
            self._session_expired()
            return []
        except SurveyApiError as exc:
            logger.error("Failed to load surveys: %s", exc.message)
            self.load_error = "Failed to load surveys."
            self.surveys = []
        return self.surveys

    def select(self, survey_id):
        """Select a survey and load its responses and analytics"""
        self.selected = next((s for s in self.surveys if str(s.id) == str(survey_id)), None)
        self.responses = []
        self.analytics = None
        self.responses_error = ""
        self.reset_filters()
        if self.selected is None:
            return

        try:
            self.responses = self.api.list_responses(self.selected.id)
        except AuthenticationError:
            self._session_expired()
            return
        except SurveyApiError as exc:
            logger.error("Failed to load responses for survey %s: %s", self.selected.id, exc.message)
            self.responses_error = "Failed to load responses."

        try:
            self.analytics = self.api.get_analytics(self.selected.id)
        except AuthenticationError:
            self._session_expired()
        except SurveyApiError as exc:
            # stats panel is simply hidden
            logger.info("Analytics unavailable for survey %s: %s", self.selected.id, exc.message)

    def take_messages(self) -> Tuple[str, str]:
        """Pending action error and notice; both are cleared once taken"""
        error, notice = self.error, self.notice
        self.error = self.notice = ""
        return error, notice

    # ---- filters ----
    def apply_date_filter(self, start: Optional[date], end: Optional[date]):
        if start is None or end is None:
            raise ValidationFailed([DATE_RANGE_MESSAGE])
        if start > end:
            raise ValidationFailed([DATE_ORDER_MESSAGE])
        self.start_date, self.end_date = start, end
        self.date_filter_active = True

    def set_search(self, text: str):
        self.search = text or ""

    def reset_filters(self):
        self.start_date = None
        self.end_date = None
        self.search = ""
        self.date_filter_active = False

    @property
    def filtered(self) -> List[ResponseRecord]:
        rows = list(self.responses)
        if self.date_filter_active:
            rows = filter_by_date(rows, self.start_date, self.end_date)
        return filter_by_username(rows, self.search)

    # ---- exports ----
    def _export_key(self) -> tuple:
        survey = self.selected
        return (survey.id, survey.title) if survey else None, tuple(r.id for r in self.filtered)

    def prepare_exports(self) -> Tuple[bytes, bytes]:
        """Build the Excel and PDF files for the filtered rows"""
        rows = self.filtered
        title = self.selected.title if self.selected is not None else None
        excel, pdf = export_excel(rows), export_pdf(rows, title)
        self._exports = (self._export_key(), excel, pdf)
        return excel, pdf

    @property
    def prepared_exports(self) -> Optional[Tuple[bytes, bytes]]:
        """Files from the last prepare_exports, or None once the filtered rows changed"""
        if self._exports is None or self._exports[0] != self._export_key():
            return None
        return self._exports[1], self._exports[2]

    # ---- deletes ----
    def request_delete_response(self, response_id: int):
        self.pending_delete_response = response_id

    def cancel_delete(self):
        self.pending_delete_response = None
        self.pending_delete_survey = None

    def confirm_delete_response(self) -> bool:
        response_id = self.pending_delete_response
        self.pending_delete_response = None
        if response_id is None:
            return False
        try:
            self.api.delete_response(response_id)
        except AuthenticationError:
            self._session_expired()
            return False
        except SurveyApiError as exc:
            self.error = f"Failed to delete response: {exc.message}"
            return False
        self.responses = [r for r in self.responses if r.id != response_id]
        self.notice = "Response deleted."
        logger.info("Deleted response %s", response_id)
        return True

    def request_delete_survey(self, survey_id: int):
        self.pending_delete_survey = survey_id

    def confirm_delete_survey(self) -> bool:
        survey_id = self.pending_delete_survey
        self.pending_delete_survey = None
        if survey_id is None:
            return False
        try:
            self.api.delete_survey(survey_id)
        except AuthenticationError:
            self._session_expired()
            return False
        except SurveyApiError as exc:
            self.error = f"Failed to delete survey: {exc.message}"
            return False
        self.surveys = [s for s in self.surveys if s.id != survey_id]
        if self.selected is not None and self.selected.id == survey_id:
            self.selected = None
            self.responses = []
            self.analytics = None
        self.notice = "Survey deleted."
        logger.info("Deleted survey %s", survey_id)
        return True

    # ---- sharing ----
    def share_link(self, survey_id, base_url: Optional[str] = None) -> str:
        token = self.session.share_keys.get_or_create(survey_id)
        return build_share_url(survey_id, token, base_url or config.APP_PUBLIC_URL)

    def share_qr(self, survey_id, base_url: Optional[str] = None) -> str:
        return build_qr_url(self.share_link(survey_id, base_url), config.QR_SIZE)
