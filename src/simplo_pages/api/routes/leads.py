"""Dashboard routes for captured leads."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..deps import Services, get_current_user, get_services, not_found
from ...leads import LeadExporter
from ...storage import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard/leads", tags=["dashboard"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("")
def list_leads(
    landing_page_id: Optional[str] = None,
    search: Optional[str] = None,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """List leads, newest first, optionally filtered by page and search text."""
    leads = services.leads.list_leads(user.id, landing_page_id=landing_page_id, search=search)
    return {"total": len(leads), "leads": [lead.to_dict() for lead in leads]}


@router.get("/export")
def export_leads(
    format: str = Query(default="xlsx", pattern="^(csv|xlsx)$"),
    landing_page_id: Optional[str] = None,
    search: Optional[str] = None,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    leads = services.leads.list_leads(user.id, landing_page_id=landing_page_id, search=search)
    exporter = LeadExporter(leads)
    filename = exporter.filename(format)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}

    if format == "csv":
        return Response(exporter.to_csv(), media_type="text/csv; charset=utf-8", headers=headers)
    return Response(exporter.to_xlsx(), media_type=XLSX_MEDIA_TYPE, headers=headers)


@router.get("/{lead_id}")
def get_lead(lead_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    lead = services.leads.get(lead_id, user.id)
    if not lead:
        raise not_found("Lead")
    return lead.to_dict()


@router.delete("/{lead_id}")
def delete_lead(lead_id: str, user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    if not services.leads.delete(lead_id, user.id):
        raise not_found("Lead")
    return {"success": True}
