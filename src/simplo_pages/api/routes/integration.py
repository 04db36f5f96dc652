"""Integration API for external systems, authenticated with ``x-api-key``."""

import logging
import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Request

from ..deps import IntegrationError, Services, get_services, require_api_key
from ...leads import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, parse_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leads", tags=["integration"], dependencies=[Depends(require_api_key)])


def _int_param(request: Request, name: str, default: int, errors: dict) -> int:
    raw = request.query_params.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        errors[name] = f"{name} must be an integer"
        return default


def parse_lead_query(request: Request) -> dict:
    """Validate the query string, collecting every problem before failing."""
    errors = {}
    page = _int_param(request, "page", 1, errors)
    limit = _int_param(request, "limit", DEFAULT_PAGE_SIZE, errors)
    if "page" not in errors and page < 1:
        errors["page"] = "page must be at least 1"
    if "limit" not in errors and not 1 <= limit <= MAX_PAGE_SIZE:
        errors["limit"] = f"limit must be between 1 and {MAX_PAGE_SIZE}"

    landing_page_id: Optional[str] = request.query_params.get("landing_page_id") or None
    if landing_page_id:
        try:
            uuid.UUID(landing_page_id)
        except ValueError:
            errors["landing_page_id"] = "landing_page_id must be a UUID"

    dates = {}
    for name in ("start_date", "end_date"):
        value = request.query_params.get(name) or None
        try:
            dates[name] = parse_date(value, name)
        except ValueError as e:
            errors[name] = str(e)
            dates[name] = None
    if dates["start_date"] and dates["end_date"] and dates["start_date"] > dates["end_date"]:
        errors["start_date"] = "start_date must not be after end_date"

    if errors:
        raise IntegrationError(400, "Parâmetros inválidos", errors)

    return {
        "page": page,
        "limit": limit,
        "landing_page_id": landing_page_id,
        "start_date": request.query_params.get("start_date") or None,
        "end_date": request.query_params.get("end_date") or None,
    }


@router.get("")
def list_leads(request: Request, services: Services = Depends(get_services)):
    params = parse_lead_query(request)
    try:
        leads, total = services.leads.query(**params)
    except ValueError as e:
        raise IntegrationError(400, "Parâmetros inválidos", str(e))

    return {
        "data": [lead.to_dict() for lead in leads],
        "pagination": {
            "page": params["page"],
            "total_pages": math.ceil(total / params["limit"]),
            "total_items": total,
        },
    }


@router.get("/{lead_id}")
def get_lead(lead_id: str, services: Services = Depends(get_services)):
    lead = services.leads.get(lead_id)
    if not lead:
        raise IntegrationError(404, "Lead não encontrado")
    return lead.to_dict()
