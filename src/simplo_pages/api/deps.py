"""Shared route dependencies: service wiring, bearer sessions and API keys."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..accounts import AccountService, AppConfigService
from ..analytics import AnalyticsService, PageTracker
from ..core.config import settings
from ..landing_pages import (
    LandingPageService,
    PageRenderer,
    TemplateService,
    ThankYouPageService,
)
from ..leads import LeadService
from ..notifications import EmailChannel, LeadNotifier, WhatsAppChannel
from ..storage import Database, FileStorage, User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class IntegrationError(Exception):
    """An integration API failure rendered as a plain ``{"error": ...}`` body."""

    def __init__(self, status_code: int, error: str, details=None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


@dataclass
class Services:
    """Everything the routes need, built once per application."""
    db: Database
    files: FileStorage
    accounts: AccountService
    config: AppConfigService
    pages: LandingPageService
    templates: TemplateService
    thank_you: ThankYouPageService
    leads: LeadService
    tracker: PageTracker
    analytics: AnalyticsService
    renderer: PageRenderer
    notifier: LeadNotifier


def build_services(
    db: Optional[Database] = None,
    files: Optional[FileStorage] = None,
    notifier: Optional[LeadNotifier] = None,
) -> Services:
    """Wire the services from explicit parts or from the environment."""
    db = db or Database(settings.db_path)
    files = files or FileStorage(settings.upload_dir, settings.public_url)

    if notifier is None:
        email = None
        if settings.resend_api_key:
            email = EmailChannel(settings.resend_api_key, settings.email_from)
        notifier = LeadNotifier(email=email, whatsapp=WhatsAppChannel())

    config = AppConfigService(db)
    return Services(
        db=db,
        files=files,
        accounts=AccountService(db, session_hours=settings.session_hours),
        config=config,
        pages=LandingPageService(db, files),
        templates=TemplateService(db),
        thank_you=ThankYouPageService(db, files),
        leads=LeadService(db, notifier=notifier, config_service=config),
        tracker=PageTracker(db),
        analytics=AnalyticsService(db),
        renderer=PageRenderer(files),
        notifier=notifier,
    )


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        services = build_services()
        request.app.state.services = services
    return services


def validation_error(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"success": False, "error": "validation_error", "detail": str(e)},
    )


def not_found(what: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"success": False, "error": "not_found", "detail": f"{what} not found"},
    )


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"success": False, "error": "auth_error", "detail": "Invalid or missing session"},
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> User:
    """Resolve the bearer session to its user or fail with 401."""
    if not token:
        raise _unauthorized()
    user = services.accounts.get_user_for_token(token)
    if not user:
        raise _unauthorized()
    return user


def require_api_key(request: Request, services: Services = Depends(get_services)) -> bool:
    """Check the ``x-api-key`` header against the active configuration."""
    api_key = request.headers.get("x-api-key")
    if not api_key:
        raise IntegrationError(401, "API key não fornecida")
    if not services.config.verify_api_key(api_key):
        raise IntegrationError(401, "API key inválida")
    return True


def require_user_or_api_key(
    request: Request,
    token: Optional[str] = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> bool:
    """Accept either a dashboard session or the integration key."""
    if token and services.accounts.get_user_for_token(token):
        return True
    return require_api_key(request, services)
