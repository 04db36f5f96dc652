"""Pydantic models for workspace settings."""

from typing import Optional
from pydantic import BaseModel


class SettingsUpdate(BaseModel):
    site_name: Optional[str] = None
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    primary_color: Optional[str] = None
    notify_on_lead: Optional[bool] = None
    admin_email: Optional[str] = None
    whatsapp_number: Optional[str] = None
    whatsapp_message: Optional[str] = None
