"""Lead capture, listing and integration queries."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Any, Tuple, Union

from ..accounts.app_config import AppConfigService
from ..landing_pages.forms import validate_submission, clean_custom_submission
from ..notifications import LeadNotifier
from ..storage import Database
from ..storage.database import to_timestamp
from ..storage.models import Lead, LandingPage, FormType

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def parse_date(value: Optional[str], name: str) -> Optional[date]:
    """Parse a YYYY-MM-DD query value."""
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"{name} must be a date in YYYY-MM-DD format")


def _day_start(day: date) -> str:
    return to_timestamp(datetime(day.year, day.month, day.day, tzinfo=timezone.utc))


def matches_search(lead: Lead, search: str) -> bool:
    query = search.strip().lower()
    if not query:
        return True
    for value in (lead.data or {}).values():
        if query in str(value).lower():
            return True
    return any(
        query in (text or "").lower()
        for text in (lead.landing_page_title, lead.landing_page_slug)
    )


class LeadService:
    """Stores submissions and answers lead queries."""

    def __init__(
        self,
        db: Database,
        notifier: Optional[LeadNotifier] = None,
        config_service: Optional[AppConfigService] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.config_service = config_service or AppConfigService(db)

    def submit(
        self,
        slug_or_page: Union[str, LandingPage],
        data: Dict[str, Any],
        notify: bool = True,
    ) -> Optional[Lead]:
        """Capture a form submission for a published page.

        Returns None when the page does not exist or is not published.
        Raises ValueError when the submission does not pass validation.
        Pass ``notify=False`` to send notifications later with ``notify()``.
        """
        if isinstance(slug_or_page, LandingPage):
            page = slug_or_page
        else:
            page = self.db.get_landing_page_by_slug(slug_or_page)
        if not page or not page.published:
            return None

        if page.form_type == FormType.CUSTOM.value:
            cleaned = clean_custom_submission(data)
        else:
            cleaned = validate_submission(page.form_fields, data)
            if not cleaned:
                raise ValueError("Submission is empty")

        lead = Lead(landing_page_id=page.id, data=cleaned)
        self.db.insert_lead(lead)
        lead.landing_page_title = page.title
        lead.landing_page_slug = page.slug
        logger.info(f"Captured lead {lead.id} on {page.slug}")

        if notify:
            self.notify(lead)
        return lead

    def notify(self, lead: Lead):
        if self.notifier is None:
            return
        try:
            self.notifier.notify_new_lead(lead.to_dict(), self.config_service.get())
        except Exception:
            logger.exception(f"Notification failed for lead {lead.id}")

    def get(self, lead_id: str, user_id: Optional[str] = None) -> Optional[Lead]:
        lead = self.db.get_lead(lead_id)
        if not lead:
            return None
        if user_id:
            page = self.db.get_landing_page(lead.landing_page_id)
            if not page or (page.user_id and page.user_id != user_id):
                return None
        return lead

    def delete(self, lead_id: str, user_id: Optional[str] = None) -> bool:
        if not self.get(lead_id, user_id):
            return False
        deleted = self.db.delete_lead(lead_id)
        if deleted:
            logger.info(f"Deleted lead {lead_id}")
        return deleted

    def list_leads(
        self,
        user_id: Optional[str] = None,
        landing_page_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Lead]:
        """All matching leads, newest first."""
        leads, _ = self.db.query_leads(user_id=user_id, landing_page_id=landing_page_id)
        if search:
            leads = [lead for lead in leads if matches_search(lead, search)]
        return leads

    def query(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        landing_page_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Tuple[List[Lead], int]:
        """Paginated lead query. ``end_date`` includes the whole day."""
        if page < 1:
            raise ValueError("page must be at least 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        start = parse_date(start_date, "start_date")
        end = parse_date(end_date, "end_date")
        if start and end and start > end:
            raise ValueError("start_date must not be after end_date")

        return self.db.query_leads(
            user_id=user_id,
            landing_page_id=landing_page_id,
            start=_day_start(start) if start else None,
            end_before=_day_start(end + timedelta(days=1)) if end else None,
            limit=limit,
            offset=(page - 1) * limit,
        )

    def count_for_page(self, landing_page_id: str) -> int:
        _, total = self.db.query_leads(landing_page_id=landing_page_id, limit=0)
        return total

    def count_since(self, user_id: Optional[str], since: datetime) -> int:
        _, total = self.db.query_leads(user_id=user_id, start=to_timestamp(since), limit=0)
        return total
