"""New-lead notifications (email and WhatsApp)."""

from .channels import (
    NotificationChannel,
    EmailChannel,
    WhatsAppChannel,
    NotificationError,
    build_email_html,
    build_whatsapp_message,
    format_capture_date,
    NEW_LEAD_SUBJECT,
)
from .notifier import LeadNotifier

__all__ = [
    "NotificationChannel",
    "EmailChannel",
    "WhatsAppChannel",
    "NotificationError",
    "build_email_html",
    "build_whatsapp_message",
    "format_capture_date",
    "NEW_LEAD_SUBJECT",
    "LeadNotifier",
]
