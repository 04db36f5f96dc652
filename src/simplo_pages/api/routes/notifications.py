"""Manual notification endpoints."""

import logging

from fastapi import APIRouter, Depends

from ..deps import IntegrationError, Services, get_services, require_user_or_api_key
from ..schemas.notifications import EmailNotificationRequest, WhatsAppNotificationRequest
from ...notifications import NotificationError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/notifications",
    tags=["notifications"],
    dependencies=[Depends(require_user_or_api_key)],
)


@router.post("/email")
def send_email(payload: EmailNotificationRequest, services: Services = Depends(get_services)):
    channel = services.notifier.email
    if channel is None:
        logger.error("Email notification requested but no email channel is configured")
        raise IntegrationError(500, "Erro ao enviar email")
    try:
        channel.send(payload.to, payload.lead, subject=payload.subject)
    except NotificationError as e:
        logger.error(f"Email notification failed: {e}")
        raise IntegrationError(500, "Erro ao enviar email")
    return {"success": True}


@router.post("/whatsapp")
def send_whatsapp(payload: WhatsAppNotificationRequest, services: Services = Depends(get_services)):
    try:
        services.notifier.whatsapp.send(payload.to, payload.lead, message=payload.message)
    except NotificationError as e:
        logger.error(f"WhatsApp notification failed: {e}")
        raise IntegrationError(500, "Erro ao enviar WhatsApp")
    return {"success": True}
