"""
FastAPI application for the client intake service.

Production deployment configuration via environment variables.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.intake import IntakeError
from utils.config import Config
from web.client_routes import router as client_router


logger = logging.getLogger(__name__)


# =============================================================================
# Error Handlers
# =============================================================================


async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
    """Render an intake failure in the shared error envelope."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.error)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and query parameters, before any intake logic runs."""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    logger.warning("%s %s rejected: malformed request", request.method, request.url.path)
    return JSONResponse(
        {"success": False, "error": "Invalid request", "details": details},
        status_code=400,
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()
    configure_logging(config.log_level)

    app = FastAPI(
        title="Client Intake Service",
        description="Multi-section client intake with completion tracking",
        version="0.1.0",
        # Production settings: disable docs/redoc for private deployment
        docs_url=None if config.production else "/docs",
        redoc_url=None if config.production else "/redoc",
        openapi_url=None if config.production else "/openapi.json",
        debug=config.debug,
    )

    # Healthcheck endpoints first; no dependencies, no IO
    @app.get("/", include_in_schema=False)
    def root():
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        return {"status": "healthy"}

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT"],
            allow_headers=["*"],
        )

    app.add_exception_handler(IntakeError, intake_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(client_router)

    logger.info("Client intake service configured (production=%s)", config.production)
    return app


app = create_app()
