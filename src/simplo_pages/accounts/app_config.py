"""Workspace settings and the integration API key."""

import hmac
import logging
import re
import secrets
from typing import Optional

from ..storage import Database
from ..storage.models import AppConfig

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "site_name",
    "logo_url",
    "favicon_url",
    "primary_color",
    "notify_on_lead",
    "admin_email",
    "whatsapp_number",
    "whatsapp_message",
}

OPTIONAL_FIELDS = {"logo_url", "favicon_url", "whatsapp_number", "whatsapp_message"}

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def generate_api_key() -> str:
    """Generate a new integration key."""
    return f"sk_{secrets.token_hex(24)}"


class AppConfigService:
    """Read and update the active workspace configuration."""

    def __init__(self, db: Database):
        self.db = db

    def get(self) -> AppConfig:
        """Get the active configuration, creating defaults on first use."""
        config = self.db.get_active_config()
        if config is None:
            config = AppConfig()
            self.db.save_config(config)
            logger.info("Created default app configuration")
        return config

    def update(self, **changes) -> AppConfig:
        config = self.get()
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        if "primary_color" in changes and not HEX_COLOR.match(changes["primary_color"] or ""):
            raise ValueError("primary_color must be a hex color like #0066FF")
        if changes.get("admin_email"):
            email = changes["admin_email"].strip()
            if "@" not in email:
                raise ValueError("Invalid admin email")
            changes["admin_email"] = email
        if "site_name" in changes and not (changes["site_name"] or "").strip():
            raise ValueError("Site name cannot be empty")

        for key, value in changes.items():
            if key in OPTIONAL_FIELDS and not value:
                value = None
            elif key == "notify_on_lead":
                value = bool(value)
            setattr(config, key, value)
        self.db.save_config(config)
        return config

    def regenerate_api_key(self) -> str:
        config = self.get()
        config.integration_api_key = generate_api_key()
        self.db.save_config(config)
        logger.info("Integration API key regenerated")
        return config.integration_api_key

    def revoke_api_key(self):
        config = self.get()
        config.integration_api_key = None
        self.db.save_config(config)

    def verify_api_key(self, api_key: Optional[str]) -> bool:
        """Check a key against the active config in constant time."""
        if not api_key:
            return False
        config = self.db.get_active_config()
        if not config or not config.integration_api_key:
            return False
        return hmac.compare_digest(api_key, config.integration_api_key)
