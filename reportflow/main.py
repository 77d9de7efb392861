"""
Main Application Entry Point
============================

Responsibilities:
- Initialize FastAPI application
- Configure middleware stack
- Register API and page routers
- Set up exception handlers
- Provide health check endpoints
- Configure CORS

Schema management:
    With DATABASE_AUTO_INIT enabled the tables are created and seeded on
    start-up. Managed deployments disable it and run Alembic migrations.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from reportflow.core.config import settings
from reportflow.core.exceptions import ReportFlowException, error_body
from reportflow.core.logging import configure_logging, get_logger
from reportflow.db.init_db import init_database
from reportflow.db.providers import get_database_provider
from reportflow.db.session import SessionLocal, check_database_connection

# Import routers
from reportflow.routes import admin_routes, auth_routes, pages, v1_routes

# Import middleware
from reportflow.middleware.auth_middleware import (
    RateLimitMiddleware,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
    SessionRedirectMiddleware,
)

configure_logging()

# Initialize logger
logger = get_logger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


# =====================================
# Application Lifespan Handler
# =====================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events.

    Startup:
    - Log application start
    - Check database connection
    - Create and seed the schema when DATABASE_AUTO_INIT is set

    Shutdown:
    - Dispose the engine's connection pool
    """
    logger.info(
        "Application starting",
        extra={
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "database_provider": get_database_provider().name,
        }
    )

    if not check_database_connection():
        logger.error("Database connection failed on startup")
    else:
        logger.info("Database connection established")
        if settings.DATABASE_AUTO_INIT:
            db = SessionLocal()
            try:
                init_database(db)
            finally:
                db.close()

    try:
        yield
    except asyncio.CancelledError:
        logger.debug("Application shutdown requested (CancelledError caught)")
        raise
    finally:
        get_database_provider().dispose()
        logger.info("Application shutdown complete")


# =====================================
# FastAPI App Initialization
# =====================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ReportFlow - Multi-Tenant Reporting Console

    ## Features

    * **Organizations**: Users and reports grouped per tenant
    * **Role-Based Access Control**: Roles hold resource:action permissions
    * **Session Authentication**: Signed httpOnly session cookie
    * **Audit Trail**: Every login and admin change is recorded
    * **Pluggable Database**: SQLite, MySQL or Postgres

    ## Authentication

    POST credentials to `/api/auth/login`; the response sets the
    `auth-token` cookie used by every other endpoint.
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)


# =====================================
# Middleware
# =====================================

# Added last runs first: request context wraps everything
app.add_middleware(SessionRedirectMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
    max_age=3600,
)
app.add_middleware(RequestContextMiddleware)


# =====================================
# Exception Handlers
# =====================================

@app.exception_handler(ReportFlowException)
async def reportflow_exception_handler(request: Request, exc: ReportFlowException):
    """Render domain exceptions as ``{"error": ...}``."""
    logger.warning(
        "ReportFlow exception",
        extra={
            "exception_type": type(exc).__name__,
            "message": exc.message,
            "status_code": exc.status_code,
            "path": request.url.path,
        }
    )

    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors.

    Responds 400 with one entry per invalid field.
    """
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    logger.warning(
        "Request validation error",
        extra={
            "path": request.url.path,
            "errors": errors,
        }
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation error",
            "details": errors,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(
        "Integrity error",
        extra={"path": request.url.path, "error": str(exc.orig)}
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "The request conflicts with existing data"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    Logs the error and returns a generic error message.
    """
    logger.error(
        "Unhandled exception",
        extra={
            "exception_type": type(exc).__name__,
            "message": str(exc),
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )

    # Don't expose internal errors in production
    if settings.is_production:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An unexpected error occurred"},
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": str(exc),
            "details": {"type": type(exc).__name__},
        },
    )


# =====================================
# Register Routers
# =====================================

app.include_router(auth_routes.router)
app.include_router(admin_routes.router)
app.include_router(v1_routes.router)
app.include_router(pages.router)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


# =====================================
# Health Check Endpoints
# =====================================

@app.get(
    "/health",
    tags=["Health"],
    summary="Detailed Health Check",
    description="Returns health status including database connectivity.",
)
def detailed_health_check():
    db_healthy = check_database_connection()

    return {
        "status": "healthy" if db_healthy else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
        },
    }


@app.get(
    "/ready",
    tags=["Health"],
    summary="Readiness Check",
    description="Returns whether the service is ready to accept requests.",
)
def readiness_check():
    """
    Readiness check for container orchestration.

    Returns:
        200 if ready, 503 if not ready
    """
    if not check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )

    return {"status": "ready"}


@app.get(
    "/db-check",
    tags=["Health"],
    summary="Database Connection Check",
    description="Opens a session and executes SELECT 1.",
)
def database_check():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return {"status": "Database Connected", "provider": get_database_provider().name}
    except Exception as e:
        logger.error(
            "Database connection check failed",
            extra={"error": str(e)}
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "Database Connection Failed",
                "error": str(e) if settings.DEBUG else "Unable to connect to database",
            },
        )
    finally:
        db.close()


# =====================================
# Application Info
# =====================================

@app.get(
    "/info",
    tags=["Info"],
    summary="Application Information",
    description="Returns application configuration information (non-sensitive).",
)
def application_info():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database_provider": get_database_provider().name,
        "features": {
            "multi_tenant": True,
            "rbac": True,
            "session_auth": True,
            "audit_log": True,
            "rate_limiting": settings.RATE_LIMIT_ENABLED,
        },
        "session_settings": {
            "cookie_name": settings.SESSION_COOKIE_NAME,
            "max_age_seconds": settings.SESSION_MAX_AGE_SECONDS,
        },
    }
