"""FastAPI application for Simplo Pages."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.config import settings
from ..notifications import LeadNotifier
from ..storage import Database, FileStorage
from .deps import IntegrationError, build_services
from .routes import ROUTERS

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Simplo Pages API")
    yield
    logger.info("Simplo Pages API shutting down")


async def integration_error_handler(request: Request, exc: IntegrationError) -> JSONResponse:
    return JSONResponse(exc.to_body(), status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        {"success": False, "error": "server_error", "detail": "An unexpected error occurred"},
        status_code=500,
    )


def create_app(
    db: Optional[Database] = None,
    files: Optional[FileStorage] = None,
    notifier: Optional[LeadNotifier] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Services are built on the first request from the environment unless
    explicit parts are passed in.
    """
    app = FastAPI(
        title="Simplo Pages API",
        description="Landing page builder, lead capture and analytics",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(IntegrationError, integration_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    for router in ROUTERS:
        app.include_router(router)

    if db is not None or files is not None or notifier is not None:
        app.state.services = build_services(db=db, files=files, notifier=notifier)

    return app


# Module-level app instance for uvicorn
app = create_app()
