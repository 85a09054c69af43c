"""
FastAPI application entry point for the Agency Command Centre backend.

This module creates the FastAPI app instance and registers all routers.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from command_centre.config import settings
from command_centre.routes.auth import router as auth_router
from command_centre.routes.clients import router as clients_router
from command_centre.routes.dashboard import router as dashboard_router
from command_centre.routes.employees import router as employees_router
from command_centre.routes.finance import router as finance_router
from command_centre.routes.health import router as health_router
from command_centre.routes.invitations import router as invitations_router
from command_centre.routes.projects import router as projects_router
from command_centre.routes.reports import router as reports_router
from command_centre.routes.settings import router as settings_router
from command_centre.routes.time_entries import router as time_entries_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    """
    Get allowed CORS origins based on environment.

    - ENVIRONMENT=production: CORS_ALLOWED_ORIGINS (none allowed if unset)
    - Any other environment: all origins, for the local dashboard dev server

    Returns:
        List of allowed origin URLs, or ["*"] outside production.
    """
    if settings.is_production():
        origins = settings.CORS_ALLOWED_ORIGINS
        if origins:
            logger.info(f"CORS configured for production with {len(origins)} allowed origins")
            return origins

        logger.warning(
            "CORS_ALLOWED_ORIGINS not set in production. "
            "The dashboard will be unable to call the API from a browser."
        )
        return []

    logger.info(f"CORS configured for {settings.ENVIRONMENT}: allowing all origins")
    return ["*"]


# Create FastAPI app
app = FastAPI(
    title="Agency Command Centre API",
    description="Backend for the agency dashboard: clients, employees, projects, finance, time tracking and reports",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Log detailed validation errors and return them in the API error shape.
    """
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "details": jsonable_errors(exc),
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw input and exception context objects."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


# Configure CORS with environment-based origins
cors_origins = _get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(clients_router)
app.include_router(employees_router)
app.include_router(projects_router)
app.include_router(invitations_router)
app.include_router(time_entries_router)
app.include_router(finance_router)
app.include_router(reports_router)
app.include_router(settings_router)

logger.info("FastAPI app initialized successfully")
