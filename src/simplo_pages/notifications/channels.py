"""Notification delivery channels for new leads."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from html import escape
from typing import Dict, Any, Optional, Callable

import requests

from ..core.utils import with_retry

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_FROM = "Simplo Pages <noreply@simplopages.com.br>"
NEW_LEAD_SUBJECT = "Novo Lead Capturado!"


class NotificationError(Exception):
    """A channel could not deliver a notification."""


def format_capture_date(value: Any) -> str:
    """Format a timestamp the way pt-BR locales print it (dd/mm/YYYY, HH:MM:SS)."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if not isinstance(value, datetime):
        return "N/A"
    return value.strftime("%d/%m/%Y, %H:%M:%S")


def lead_data_lines(lead: Dict[str, Any]) -> str:
    return "\n".join(f"{key}: {value}" for key, value in (lead.get("data") or {}).items())


def landing_page_title(lead: Dict[str, Any]) -> str:
    page = lead.get("landing_page") or {}
    return page.get("title") or "N/A"


def build_email_html(lead: Dict[str, Any]) -> str:
    return f"""
      <h1>Novo Lead Capturado!</h1>
      <p>Um novo lead foi capturado na landing page "{escape(landing_page_title(lead))}".</p>

      <h2>Dados do Lead:</h2>
      <pre>{escape(lead_data_lines(lead))}</pre>

      <p>Data de captura: {format_capture_date(lead.get("created_at"))}</p>

      <hr />
      <p>Este é um email automático, não responda.</p>
    """


def build_whatsapp_message(message: str, lead: Dict[str, Any]) -> str:
    return (
        f"{message}\n\n"
        f"*Dados do Lead:*\n"
        f"{lead_data_lines(lead)}\n\n"
        f"Landing Page: {landing_page_title(lead)}\n"
        f"Data: {format_capture_date(lead.get('created_at'))}"
    ).strip()


class NotificationChannel(ABC):
    """Base class for notification channels."""

    @abstractmethod
    def send(self, to: str, lead: Dict[str, Any], **kwargs) -> bool:
        """Deliver a new-lead notification. Raises NotificationError on failure."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        pass


class EmailChannel(NotificationChannel):
    """Email through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        from_email: str = DEFAULT_FROM,
        session: Optional[requests.Session] = None,
        retries: int = 3,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.session = session or requests.Session()
        self.retries = retries
        self.sleep = sleep

    def get_name(self) -> str:
        return "email"

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        response = self.session.post(
            RESEND_API_URL,
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=10,
        )
        response.raise_for_status()
        return response

    def send(self, to: str, lead: Dict[str, Any], subject: str = NEW_LEAD_SUBJECT, **kwargs) -> bool:
        if not self.api_key:
            raise NotificationError("RESEND_API_KEY is not configured")
        if not to:
            raise NotificationError("Missing recipient")

        payload = {
            "from": self.from_email,
            "to": [to],
            "subject": subject or NEW_LEAD_SUBJECT,
            "html": build_email_html(lead),
        }
        retry_kwargs = {"sleep": self.sleep} if self.sleep else {}
        try:
            with_retry(
                lambda: self._post(payload),
                retries=self.retries,
                exceptions=(requests.RequestException,),
                **retry_kwargs,
            )
        except requests.RequestException as e:
            raise NotificationError(f"Email delivery failed: {e}") from e

        logger.info(f"Lead notification email sent to {to}")
        return True


class WhatsAppChannel(NotificationChannel):
    """Builds the WhatsApp message and logs it; there is no provider behind it."""

    def get_name(self) -> str:
        return "whatsapp"

    def send(self, to: str, lead: Dict[str, Any], message: str = "", **kwargs) -> bool:
        if not to:
            raise NotificationError("Missing recipient")
        text = build_whatsapp_message(message, lead)
        logger.info(f"WhatsApp message for {to}:\n{text}")
        return True
