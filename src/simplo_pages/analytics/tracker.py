"""Visit and interaction tracking for public pages."""

import logging
import re
from typing import Dict, Optional, Any

from ..storage import Database
from ..storage.models import PageView, AnalyticsEvent

logger = logging.getLogger(__name__)

EVENT_TYPES = ("scroll_50_percent", "scroll_90_percent", "form_submit")
EVENT_TYPE_PATTERN = re.compile(r"^[a-z0-9_]{1,50}$")
SESSION_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

MAX_HEADER_LENGTH = 500
MAX_DURATION_SECONDS = 24 * 60 * 60


class PageTracker:
    """Records page views, visit durations and interaction events."""

    def __init__(self, db: Database):
        self.db = db

    def _check_session(self, session_id: str) -> str:
        if not session_id or not SESSION_PATTERN.match(session_id):
            raise ValueError("Invalid session id")
        return session_id

    def _page_exists(self, landing_page_id: str) -> bool:
        return bool(landing_page_id) and self.db.get_landing_page(landing_page_id) is not None

    def track_view(
        self,
        landing_page_id: str,
        session_id: str,
        referrer: Optional[str] = "",
        user_agent: Optional[str] = "",
    ) -> Optional[PageView]:
        """Record a visit. Returns None for unknown pages."""
        session_id = self._check_session(session_id)
        if not self._page_exists(landing_page_id):
            return None

        view = PageView(
            landing_page_id=landing_page_id,
            session_id=session_id,
            referrer=(referrer or "")[:MAX_HEADER_LENGTH],
            user_agent=(user_agent or "")[:MAX_HEADER_LENGTH],
        )
        self.db.insert_page_view(view)
        return view

    def track_duration(self, session_id: str, seconds: Any) -> int:
        """Store how long a visit lasted. Returns the number of views updated."""
        session_id = self._check_session(session_id)
        try:
            duration = int(seconds)
        except (TypeError, ValueError):
            raise ValueError("Duration must be a number of seconds")
        duration = max(0, min(duration, MAX_DURATION_SECONDS))
        return self.db.update_view_duration(session_id, duration)

    def track_event(
        self,
        landing_page_id: str,
        session_id: str,
        event_type: str,
        event_data: Optional[Dict[str, Any]] = None,
    ) -> Optional[AnalyticsEvent]:
        session_id = self._check_session(session_id)
        if not event_type or not EVENT_TYPE_PATTERN.match(event_type):
            raise ValueError("Invalid event type")
        if event_data is not None and not isinstance(event_data, dict):
            raise ValueError("Event data must be an object")
        if not self._page_exists(landing_page_id):
            return None

        event = AnalyticsEvent(
            landing_page_id=landing_page_id,
            session_id=session_id,
            event_type=event_type,
            event_data=event_data or {},
        )
        self.db.insert_event(event)
        if event_type not in EVENT_TYPES:
            logger.debug(f"Recorded custom event {event_type} on {landing_page_id}")
        return event
