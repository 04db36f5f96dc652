"""Pydantic models for the public tracking endpoints."""

from typing import Optional, Dict, Any
from pydantic import BaseModel


class TrackViewRequest(BaseModel):
    landing_page_id: str
    session_id: str
    referrer: Optional[str] = ""
    user_agent: Optional[str] = None


class TrackDurationRequest(BaseModel):
    session_id: str
    duration_seconds: int


class TrackEventRequest(BaseModel):
    landing_page_id: str
    session_id: str
    event_type: str
    event_data: Optional[Dict[str, Any]] = None
