"""Fan out new-lead notifications according to the workspace settings."""

import logging
from typing import Dict, Any, List, Optional

from ..storage.models import AppConfig
from .channels import EmailChannel, WhatsAppChannel, NotificationError, NEW_LEAD_SUBJECT

logger = logging.getLogger(__name__)


class LeadNotifier:
    """Sends email and WhatsApp notifications for captured leads."""

    def __init__(self, email: Optional[EmailChannel] = None, whatsapp: Optional[WhatsAppChannel] = None):
        self.email = email
        self.whatsapp = whatsapp or WhatsAppChannel()

    def notify_new_lead(self, lead: Dict[str, Any], config: Optional[AppConfig]) -> List[str]:
        """Notify about a lead. Returns the names of channels that delivered.

        Channel failures are logged and do not stop the other channels.
        """
        if not config or not config.notify_on_lead:
            return []

        delivered = []
        if config.admin_email:
            if self.email is None:
                logger.warning("Email channel not configured, skipping lead email")
            else:
                try:
                    self.email.send(config.admin_email, lead, subject=NEW_LEAD_SUBJECT)
                    delivered.append(self.email.get_name())
                except NotificationError as e:
                    logger.error(f"Failed to send lead email: {e}")

        if config.whatsapp_number and config.whatsapp_message:
            try:
                self.whatsapp.send(config.whatsapp_number, lead, message=config.whatsapp_message)
                delivered.append(self.whatsapp.get_name())
            except NotificationError as e:
                logger.error(f"Failed to send WhatsApp notification: {e}")

        return delivered
