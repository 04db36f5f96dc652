"""Tests for page tracking and landing page metrics."""

import csv
import io
from datetime import datetime, timedelta, timezone

import pytest

from simplo_pages.analytics import AnalyticsService, PageTracker, classify_referrer
from simplo_pages.analytics.metrics import DailyMetrics, PageMetrics
from simplo_pages.landing_pages import LandingPageService
from simplo_pages.storage.models import Lead, PageView

DESCRIPTION = "Uma descrição longa o bastante"
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def page(db, user):
    return LandingPageService(db).create(user.id, "Evento", DESCRIPTION, slug="evento")


@pytest.fixture
def tracker(db):
    return PageTracker(db)


@pytest.fixture
def analytics(db):
    return AnalyticsService(db, clock=lambda: NOW)


def add_view(db, page, referrer="", duration=None, created_at=NOW, session_id="visit"):
    view = PageView(
        landing_page_id=page.id,
        session_id=session_id,
        referrer=referrer,
        duration_seconds=duration,
        created_at=created_at,
    )
    db.insert_page_view(view)
    return view


class TestPageTracker:
    def test_track_view(self, db, tracker, page):
        view = tracker.track_view(page.id, "abc-123", "https://www.google.com/", "Mozilla")
        assert view is not None
        assert len(db.list_page_views(landing_page_id=page.id)) == 1

    def test_unknown_page_is_ignored(self, tracker):
        assert tracker.track_view("missing", "abc-123") is None

    def test_invalid_session_id(self, tracker, page):
        with pytest.raises(ValueError, match="session"):
            tracker.track_view(page.id, "<script>")

    def test_long_headers_are_truncated(self, db, tracker, page):
        tracker.track_view(page.id, "abc", "r" * 2000, "u" * 2000)
        view = db.list_page_views(landing_page_id=page.id)[0]
        assert len(view.referrer) == 500
        assert len(view.user_agent) == 500

    def test_track_duration(self, db, tracker, page):
        tracker.track_view(page.id, "visit-1")
        assert tracker.track_duration("visit-1", 42) == 1
        assert db.list_page_views(landing_page_id=page.id)[0].duration_seconds == 42

    def test_duration_is_clamped(self, db, tracker, page):
        tracker.track_view(page.id, "visit-1")
        tracker.track_duration("visit-1", -5)
        assert db.list_page_views(landing_page_id=page.id)[0].duration_seconds == 0
        with pytest.raises(ValueError):
            tracker.track_duration("visit-1", "forever")

    def test_track_event(self, db, tracker, page):
        event = tracker.track_event(page.id, "visit-1", "scroll_50_percent", {"depth": 50})
        assert event.event_data == {"depth": 50}
        assert db.count_events(page.id, "scroll_50_percent") == 1

    def test_event_validation(self, tracker, page):
        with pytest.raises(ValueError, match="event type"):
            tracker.track_event(page.id, "visit-1", "Scroll 50%")
        with pytest.raises(ValueError):
            tracker.track_event(page.id, "visit-1", "form_submit", ["not", "a", "dict"])
        assert tracker.track_event("missing", "visit-1", "form_submit") is None


class TestReferrers:
    @pytest.mark.parametrize("referrer,source", [
        ("https://www.google.com/search?q=x", "google"),
        ("https://l.facebook.com/", "facebook"),
        ("https://www.Instagram.com/", "instagram"),
        ("https://bing.com", "other"),
        ("", "other"),
        (None, "other"),
    ])
    def test_classify(self, referrer, source):
        assert classify_referrer(referrer) == source


class TestAnalyticsService:
    def test_page_metrics(self, db, analytics, page):
        add_view(db, page, "https://google.com", duration=30, session_id="a")
        add_view(db, page, "https://facebook.com", duration=60, session_id="b")
        add_view(db, page, "https://instagram.com", session_id="c")
        add_view(db, page, "", session_id="d")
        add_view(db, page, "https://google.com", session_id="old", created_at=NOW - timedelta(days=40))
        db.insert_lead(Lead(landing_page_id=page.id, data={"n": "1"}, created_at=NOW))

        [metrics] = analytics.page_metrics(days=30)
        assert metrics.total_visitors == 4
        assert metrics.total_leads == 1
        assert metrics.conversion_rate == 25.0
        assert metrics.avg_duration_seconds == 22.5
        assert metrics.visitors_from_google == 1
        assert metrics.visitors_from_facebook == 1
        assert metrics.visitors_from_instagram == 1
        assert metrics.visitors_from_other == 1

    def test_no_visitors_means_zero_conversion(self, db, analytics, page):
        db.insert_lead(Lead(landing_page_id=page.id, data={"n": "1"}, created_at=NOW))
        [metrics] = analytics.page_metrics(days=7)
        assert metrics.conversion_rate == 0.0
        assert metrics.avg_duration_seconds == 0.0

    def test_metrics_are_scoped_to_owner(self, analytics, page, other_user):
        assert analytics.page_metrics(other_user.id) == []

    @pytest.mark.parametrize("days", [0, -1, 366, "abc"])
    def test_invalid_days(self, analytics, days):
        with pytest.raises(ValueError):
            analytics.page_metrics(days=days)

    def test_daily_metrics(self, db, analytics, page):
        add_view(db, page, session_id="a", created_at=NOW)
        add_view(db, page, session_id="b", created_at=NOW - timedelta(days=1))
        add_view(db, page, session_id="c", created_at=NOW - timedelta(days=1))
        db.insert_lead(Lead(landing_page_id=page.id, data={"n": "1"}, created_at=NOW - timedelta(days=1)))

        daily = analytics.daily_metrics(page.id, days=7)
        assert len(daily) == 7
        assert daily[0].date == "2024-06-09"
        assert daily[-1].date == "2024-06-15"
        assert (daily[-1].visitors, daily[-1].leads) == (1, 0)
        assert (daily[-2].visitors, daily[-2].leads) == (2, 1)

    def test_export_csv(self, analytics):
        metrics = PageMetrics(
            landing_page_id="p1", landing_page_title="Evento", slug="evento",
            total_visitors=10, total_leads=2, conversion_rate=20.0, avg_duration_seconds=12.5,
            visitors_from_google=4, visitors_from_other=6,
        )
        daily = [DailyMetrics(date="2024-06-14", visitors=3, leads=1)]
        rows = list(csv.reader(io.StringIO(analytics.export_csv(metrics, daily))))

        assert rows[0] == ["Métrica", "Valor"]
        assert rows[1] == ["Landing Page", "Evento"]
        assert rows[4] == ["Taxa de Conversão", "20.0%"]
        assert rows[10] == ["", ""]
        assert rows[11] == ["Data", "Visitantes", "Leads"]
        assert rows[12] == ["14/06/2024", "3", "1"]

    def test_export_filename(self, analytics):
        assert analytics.export_filename() == "analytics_2024-06-15.csv"

    def test_traffic_sources(self):
        metrics = PageMetrics("p1", "Evento", "evento", visitors_from_google=2, visitors_from_other=1)
        assert metrics.traffic_sources()[0] == {"name": "Google", "value": 2}
        assert metrics.traffic_sources()[-1] == {"name": "Outros", "value": 1}

    def test_dashboard_summary(self, db, analytics, page, user):
        LandingPageService(db).publish(page.id, user.id)
        add_view(db, page, session_id="a")
        add_view(db, page, session_id="b")
        db.insert_lead(Lead(landing_page_id=page.id, data={"n": "1"}, created_at=NOW - timedelta(days=1)))
        db.insert_lead(Lead(landing_page_id=page.id, data={"n": "2"}, created_at=NOW - timedelta(days=20)))

        summary = analytics.dashboard_summary(user.id)
        assert summary["total_pages"] == 1
        assert summary["published_pages"] == 1
        assert summary["total_leads"] == 2
        assert summary["leads_last_7_days"] == 1
        assert summary["total_views"] == 2
        assert summary["conversion_rate"] == 100.0
        assert len(summary["recent_leads"]) == 2
