"""Dashboard analytics routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..deps import Services, get_current_user, get_services, not_found, validation_error
from ...storage import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["analytics"])


@router.get("/summary")
def summary(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    return services.analytics.dashboard_summary(user.id)


@router.get("/analytics")
def page_metrics(
    days: int = 30,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    try:
        metrics = services.analytics.page_metrics(user.id, days=days)
    except ValueError as e:
        raise validation_error(e)
    return {
        "days": days,
        "metrics": [
            {**m.to_dict(), "traffic_sources": m.traffic_sources()} for m in metrics
        ],
    }


@router.get("/analytics/daily")
def daily_metrics(
    landing_page_id: str,
    days: int = 30,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    if not services.pages.get(landing_page_id, user.id):
        raise not_found("Landing page")
    try:
        daily = services.analytics.daily_metrics(landing_page_id, days=days)
    except ValueError as e:
        raise validation_error(e)
    return {"days": days, "landing_page_id": landing_page_id, "daily": [d.to_dict() for d in daily]}


@router.get("/analytics/export")
def export_metrics(
    landing_page_id: Optional[str] = None,
    days: int = Query(default=30),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """CSV with the selected page's summary and daily series (first page when none is selected)."""
    try:
        metrics = services.analytics.page_metrics(user.id, days=days)
    except ValueError as e:
        raise validation_error(e)

    selected = next((m for m in metrics if m.landing_page_id == landing_page_id), None)
    if selected is None:
        if landing_page_id or not metrics:
            raise not_found("Landing page")
        selected = metrics[0]

    daily = services.analytics.daily_metrics(selected.landing_page_id, days=days)
    content = services.analytics.export_csv(selected, daily)
    filename = services.analytics.export_filename()
    return Response(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
