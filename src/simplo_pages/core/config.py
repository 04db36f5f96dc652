"""Environment-based configuration for the service."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".simplo-pages"

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


class Settings:
    """Service configuration loaded from environment variables."""

    def __init__(self):
        self.host = os.getenv("SIMPLO_HOST", "0.0.0.0")
        self.port = int(os.getenv("SIMPLO_PORT", "8000"))
        self.db_path = os.getenv(
            "SIMPLO_DATABASE_PATH",
            str(DEFAULT_HOME / "simplo.db"),
        )
        self.upload_dir = os.getenv(
            "SIMPLO_UPLOAD_DIR",
            str(DEFAULT_HOME / "uploads"),
        )
        self.public_url = os.getenv("SIMPLO_PUBLIC_URL", "http://localhost:8000").rstrip("/")
        self.session_hours = int(os.getenv("SIMPLO_SESSION_HOURS", "168"))
        self.debug = os.getenv("SIMPLO_ENV", "production") != "production"

        # Outbound email (Resend)
        self.resend_api_key = os.getenv("RESEND_API_KEY", "")
        self.email_from = os.getenv(
            "SIMPLO_EMAIL_FROM", "Simplo Pages <noreply@simplopages.com.br>"
        )

        # CORS
        extra = [
            o.strip()
            for o in os.getenv("SIMPLO_ALLOWED_ORIGINS", "").split(",")
            if o.strip()
        ]
        self.allowed_origins = list(dict.fromkeys(DEV_ORIGINS + extra))

        if not self.resend_api_key:
            logger.info("RESEND_API_KEY not set, email notifications disabled")


_settings = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None


class _SettingsProxy:
    """Lazy proxy so settings aren't loaded until first access."""

    def __getattr__(self, name):
        return getattr(_get_settings(), name)


settings = _SettingsProxy()
