"""HTTP route modules. ``public`` holds catch-all paths and is included last."""

from . import (
    analytics,
    auth,
    health,
    integration,
    landing_pages,
    leads,
    notifications,
    public,
    settings,
    templates,
    thank_you_pages,
)

ROUTERS = [
    health.router,
    auth.router,
    landing_pages.router,
    templates.router,
    thank_you_pages.router,
    leads.router,
    analytics.router,
    settings.router,
    integration.router,
    notifications.router,
    public.router,
]

__all__ = ["ROUTERS"]
