"""Storage layer for pages, leads and uploads."""

from .database import Database
from .files import FileStorage
from .models import (
    User,
    Profile,
    Session,
    LandingPage,
    Template,
    ThankYouPage,
    Lead,
    PageView,
    AnalyticsEvent,
    AppConfig,
    FormType,
    FormPosition,
)

__all__ = [
    "Database",
    "FileStorage",
    "User",
    "Profile",
    "Session",
    "LandingPage",
    "Template",
    "ThankYouPage",
    "Lead",
    "PageView",
    "AnalyticsEvent",
    "AppConfig",
    "FormType",
    "FormPosition",
]
