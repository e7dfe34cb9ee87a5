from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded
from typing import Any, Dict

from soho_transport.api.responses import error_envelope
from soho_transport.api.router import api_router
from soho_transport.core.config import settings
from soho_transport.core.database import AsyncSessionLocal, close_db, init_db
from soho_transport.core.exceptions import AuthenticationError, ServiceError, SohoError, error_response
from soho_transport.core.logging_config import logger
from soho_transport.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from soho_transport.core.rate_limiter import limiter, rate_limit_exceeded_handler
from soho_transport.db.seed_data import seed_number_plates

# Messages for fields whose pydantic error text is not user facing
FIELD_MESSAGES = {
    "studentId": "studentId must be a positive integer.",
}


def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        if settings.IS_PRODUCTION:
            errors.append("JWT_SECRET_KEY is not set or using default value")
        else:
            logger.warning("[Startup] WARNING: JWT_SECRET_KEY is using the default value")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    logger.info("[Startup] ✓ Critical configuration validated")


async def ensure_database_ready():
    """Create missing tables and seed the configured number plates"""
    await init_db()

    plates = settings.SEED_NUMBER_PLATE_LIST
    if plates:
        async with AsyncSessionLocal() as db:
            created = await seed_number_plates(db, plates)
            await db.commit()
        logger.info(f"[Startup] Seeded {len(created)} new number plates")

    logger.info("[Startup] Database ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    validate_critical_config()
    await ensure_database_ready()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


def _error_field(error: Dict[str, Any]) -> str:
    names = [part for part in error.get("loc", ()) if isinstance(part, str)]
    return names[-1] if names else "body"


def _error_message(error: Dict[str, Any], field: str) -> str:
    if error.get("type") == "missing":
        return f"{field} is required."
    if field in FIELD_MESSAGES:
        return FIELD_MESSAGES[field]
    message = str(error.get("msg", "Invalid value."))
    return message.removeprefix("Value error, ")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Role-based school transport management API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # Add rate limiter state and exception handler
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Add middleware (order matters - last added runs first)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    # Exception handlers
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        logger.info(
            f"{request.method} {request.url.path} rejected: {exc.code}",
            extra={"event_type": "service_error", "error_code": exc.code},
        )
        return JSONResponse(status_code=exc.status_code, content=error_response(exc))

    @app.exception_handler(SohoError)
    async def soho_error_handler(request: Request, exc: SohoError):
        status_code = 401 if isinstance(exc, AuthenticationError) else 400
        return JSONResponse(status_code=status_code, content=error_envelope(exc.message, code=exc.code))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            field = _error_field(error)
            errors.append({"field": field, "message": _error_message(error, field)})
        return JSONResponse(status_code=400, content=error_envelope("Validation failed.", errors=errors))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_envelope("Internal server error."),
        )

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "OK"}

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()


def run():
    """Console entry point: soho-transport"""
    import uvicorn
    uvicorn.run(
        "soho_transport.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG and not settings.IS_PRODUCTION,
    )


if __name__ == "__main__":
    run()
