"""RentLink Rental Marketplace - Main Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .core.exceptions import RentLinkException
from .core.logging import RequestIdMiddleware, get_logger, setup_logging, shutdown_logging
from .database import AsyncSessionLocal

# Import routers
from .modules.admin import SweepScheduler
from .modules.admin import router as admin_router
from .modules.auth import router as auth_router
from .modules.auth import services as auth_services
from .modules.auth.crud import count_users
from .modules.deposits import router as deposits_router
from .modules.leases import router as leases_router
from .modules.listings import router as properties_router
from .modules.messaging import router as inquiries_router
from .modules.payments import router as payments_router
from .modules.verification import router as verification_router

logger = get_logger(__name__)


async def seed_initial_admin() -> None:
    """Create the configured admin account on an empty database."""
    if not (settings.init_admin_email and settings.init_admin_password):
        return

    async with AsyncSessionLocal() as session:
        if await count_users(session) > 0:
            return
        await auth_services.create_initial_admin(
            session,
            admin_email=settings.init_admin_email,
            admin_password=settings.init_admin_password,
            admin_first_name=settings.init_admin_first_name or "Admin",
            admin_last_name=settings.init_admin_last_name,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging()
    logger.info("Starting RentLink application...")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"Debug mode: {settings.app_debug}")
    await seed_initial_admin()

    scheduler = None
    if settings.sweeps_enabled:
        scheduler = SweepScheduler(settings.sweeps_interval_seconds, initial_delay=60)
        scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down RentLink application...")
    if scheduler:
        await scheduler.stop()
    shutdown_logging()


# Create FastAPI application
app = FastAPI(
    title="RentLink API",
    description="Rental marketplace for tenants, landlords and admins",
    version="1.0.0",
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
    openapi_url="/api/openapi.json" if settings.app_debug else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request ID middleware for request tracing
app.add_middleware(RequestIdMiddleware)


def error_response(status_code: int, message: str, error=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": error if error is not None else message,
            "data": None,
        },
    )


# Global exception handlers
@app.exception_handler(RentLinkException)
async def rentlink_exception_handler(request: Request, exc: RentLinkException):
    """Handle RentLink-specific exceptions."""
    status_code = getattr(exc, "status_code", 400)
    if status_code >= 500:
        logger.error(f"Request failed: {exc.message}", extra={"path": request.url.path})
    return error_response(status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Wrap request validation failures in the standard envelope."""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return error_response(422, "Request validation failed", errors)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error: {exc}")
    return error_response(500, "Failed to save changes")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return error_response(
        500,
        "Internal server error",
        str(exc) if settings.app_debug else "Internal server error",
    )


# Health check endpoint
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "env": settings.app_env,
    }


# Register routers with /api prefix
API_PREFIX = settings.api_prefix

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(properties_router, prefix=API_PREFIX)
app.include_router(verification_router, prefix=API_PREFIX)
app.include_router(leases_router, prefix=API_PREFIX)
app.include_router(payments_router, prefix=API_PREFIX)
app.include_router(deposits_router, prefix=API_PREFIX)
app.include_router(inquiries_router, prefix=API_PREFIX)
app.include_router(admin_router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rentlink_backend.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app_debug,
    )
