"""Landing page metrics: visitors, conversions and traffic sources."""

import csv
import io
import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Any

from ..storage import Database
from ..storage.database import to_timestamp
from ..storage.models import PageView, utcnow

logger = logging.getLogger(__name__)

DATE_RANGES = (7, 30, 90)
MAX_DAYS = 365

TRAFFIC_SOURCES = ("google", "facebook", "instagram")


@dataclass
class PageMetrics:
    """Aggregated metrics for one landing page over a period."""
    landing_page_id: str
    landing_page_title: str
    slug: str
    total_visitors: int = 0
    total_leads: int = 0
    conversion_rate: float = 0.0
    avg_duration_seconds: float = 0.0
    visitors_from_google: int = 0
    visitors_from_facebook: int = 0
    visitors_from_instagram: int = 0
    visitors_from_other: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def traffic_sources(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Google", "value": self.visitors_from_google},
            {"name": "Facebook", "value": self.visitors_from_facebook},
            {"name": "Instagram", "value": self.visitors_from_instagram},
            {"name": "Outros", "value": self.visitors_from_other},
        ]


@dataclass
class DailyMetrics:
    """Visitors and leads on one day."""
    date: str
    visitors: int = 0
    leads: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def classify_referrer(referrer: Optional[str]) -> str:
    """Map a referrer to google, facebook, instagram or other."""
    value = (referrer or "").lower()
    for source in TRAFFIC_SOURCES:
        if source in value:
            return source
    return "other"


def check_days(days: int) -> int:
    try:
        days = int(days)
    except (TypeError, ValueError):
        raise ValueError("days must be a number")
    if days < 1 or days > MAX_DAYS:
        raise ValueError(f"days must be between 1 and {MAX_DAYS}")
    return days


class AnalyticsService:
    """Computes dashboard metrics from page views and leads."""

    def __init__(self, db: Database, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def _since(self, days: int) -> datetime:
        start = (self.clock() - timedelta(days=days)).date()
        return datetime(start.year, start.month, start.day, tzinfo=timezone.utc)

    def _metrics_for(self, page, views: List[PageView], lead_count: int) -> PageMetrics:
        total_visitors = len(views)
        sources = {"google": 0, "facebook": 0, "instagram": 0, "other": 0}
        total_duration = 0
        for view in views:
            sources[classify_referrer(view.referrer)] += 1
            total_duration += view.duration_seconds or 0

        conversion = (lead_count / total_visitors) * 100 if total_visitors else 0.0
        avg_duration = total_duration / (total_visitors or 1)

        return PageMetrics(
            landing_page_id=page.id,
            landing_page_title=page.title,
            slug=page.slug,
            total_visitors=total_visitors,
            total_leads=lead_count,
            conversion_rate=round(conversion, 2),
            avg_duration_seconds=round(avg_duration, 2),
            visitors_from_google=sources["google"],
            visitors_from_facebook=sources["facebook"],
            visitors_from_instagram=sources["instagram"],
            visitors_from_other=sources["other"],
        )

    def page_metrics(self, user_id: Optional[str] = None, days: int = 30) -> List[PageMetrics]:
        """Metrics for each of the user's landing pages over the last ``days`` days."""
        days = check_days(days)
        since = to_timestamp(self._since(days))

        results = []
        for page in self.db.list_landing_pages(user_id):
            views = self.db.list_page_views(landing_page_id=page.id, since=since)
            _, lead_count = self.db.query_leads(landing_page_id=page.id, start=since, limit=0)
            results.append(self._metrics_for(page, views, lead_count))
        return results

    def daily_metrics(self, landing_page_id: str, days: int = 30) -> List[DailyMetrics]:
        """One entry per day for the last ``days`` days, oldest first."""
        days = check_days(days)
        today = self.clock().date()
        stats: Dict[str, DailyMetrics] = {}
        for offset in range(days - 1, -1, -1):
            day = (today - timedelta(days=offset)).isoformat()
            stats[day] = DailyMetrics(date=day)

        since = to_timestamp(self._since(days))
        for view in self.db.list_page_views(landing_page_id=landing_page_id, since=since):
            key = view.created_at.date().isoformat()
            if key in stats:
                stats[key].visitors += 1

        leads, _ = self.db.query_leads(landing_page_id=landing_page_id, start=since)
        for lead in leads:
            key = lead.created_at.date().isoformat()
            if key in stats:
                stats[key].leads += 1

        return list(stats.values())

    @staticmethod
    def export_csv(metrics: PageMetrics, daily: List[DailyMetrics]) -> str:
        """Summary rows, a blank row, then the daily series."""
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerows([
            ["Métrica", "Valor"],
            ["Landing Page", metrics.landing_page_title],
            ["Total de Visitantes", metrics.total_visitors],
            ["Total de Leads", metrics.total_leads],
            ["Taxa de Conversão", f"{metrics.conversion_rate}%"],
            ["Tempo Médio (segundos)", metrics.avg_duration_seconds],
            ["Visitantes do Google", metrics.visitors_from_google],
            ["Visitantes do Facebook", metrics.visitors_from_facebook],
            ["Visitantes do Instagram", metrics.visitors_from_instagram],
            ["Outros Visitantes", metrics.visitors_from_other],
            ["", ""],
            ["Data", "Visitantes", "Leads"],
        ])
        for day in daily:
            formatted = date.fromisoformat(day.date).strftime("%d/%m/%Y")
            writer.writerow([formatted, day.visitors, day.leads])
        return output.getvalue()

    def export_filename(self) -> str:
        return f"analytics_{self.clock().strftime('%Y-%m-%d')}.csv"

    def dashboard_summary(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        """Headline numbers for the dashboard home."""
        pages = self.db.list_landing_pages(user_id)
        recent, total_leads = self.db.query_leads(user_id=user_id, limit=5)
        week_ago = to_timestamp(self.clock() - timedelta(days=7))
        _, leads_last_7_days = self.db.query_leads(user_id=user_id, start=week_ago, limit=0)
        total_views = len(self.db.list_page_views(user_id=user_id))

        return {
            "total_pages": len(pages),
            "published_pages": sum(1 for p in pages if p.published),
            "total_leads": total_leads,
            "leads_last_7_days": leads_last_7_days,
            "total_views": total_views,
            "conversion_rate": round(total_leads / total_views * 100, 2) if total_views else 0.0,
            "recent_leads": [lead.to_dict() for lead in recent],
        }
