"""Pydantic models for notification endpoints."""

from typing import Dict, Any
from pydantic import BaseModel


class EmailNotificationRequest(BaseModel):
    to: str
    subject: str = "Novo Lead Capturado!"
    lead: Dict[str, Any]


class WhatsAppNotificationRequest(BaseModel):
    to: str
    message: str
    lead: Dict[str, Any]
