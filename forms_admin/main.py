"""FastAPI application entry point"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from forms_admin import __version__
from forms_admin.api import admin_users, auth, health, onboarding, password_reset
from forms_admin.config import get_settings
from forms_admin.database import SessionLocal
from forms_admin.middleware.monitoring import MonitoringMiddleware
from forms_admin.middleware.rate_limit import get_client_ip, limiter
from forms_admin.services.sessions import SessionManager
from forms_admin.utils.errors import AppError
from forms_admin.utils.logger import logger, redact_sensitive, setup_logging

settings = get_settings()

# Setup logging
setup_logging(settings.LOG_LEVEL)


def _purge_expired_sessions() -> None:
    db = SessionLocal()
    try:
        purged = SessionManager(db, settings).purge_expired()
        if purged:
            logger.info(f"Purged {purged} expired admin session(s)")
    except SQLAlchemyError:
        # Schema not migrated yet; readiness reports it
        logger.warning("Could not purge expired sessions", exc_info=True)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("Forms Admin starting up", extra={
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED
    })
    if not settings.SESSION_SECRET:
        logger.warning("SESSION_SECRET not set; using the development fallback secret")
    if not settings.sendgrid_configured:
        logger.warning("SendGrid not configured; reset and onboarding links will be logged instead of emailed")
    _purge_expired_sessions()
    yield
    logger.info("Forms Admin shutting down")


app = FastAPI(
    title="Forms Admin",
    description="Admin authentication and account lifecycle for the forms back office",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

# CORS (credentials are required for the session cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation ids are always assigned; error envelopes rely on them
app.add_middleware(MonitoringMiddleware)

if settings.METRICS_ENABLED:
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
        inprogress_name="forms_admin_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# Rate limiting
app.state.limiter = limiter

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(password_reset.router)
app.include_router(onboarding.router)
app.include_router(admin_users.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "forms-admin",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None
    }


# ===== Error Handlers =====

def _correlation_id(request: Request):
    return getattr(request.state, "correlation_id", None)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Translate typed application errors into the JSON error envelope"""
    extra = {
        "correlation_id": _correlation_id(request),
        "path": request.url.path,
        "method": request.method,
        "status_code": exc.status_code,
    }
    if exc.status_code >= 500:
        logger.error(exc.message, extra=extra, exc_info=exc)
    else:
        logger.warning(exc.message, extra=extra)

    body = exc.to_dict()
    if exc.status_code >= 500:
        body["correlationId"] = _correlation_id(request)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Request body/query validation failures answer 400 with per-field messages"""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or "body", "message": message})

    logger.warning(
        "Request validation failed",
        extra={
            "correlation_id": _correlation_id(request),
            "path": request.url.path,
            "method": request.method,
            "status_code": 400,
            "request_body": redact_sensitive(exc.body) if isinstance(exc.body, (dict, list)) else None,
        },
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Validation failed", "errors": errors},
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client_ip": get_client_ip(request),
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests. Please try again later.",
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}",
        extra={
            "correlation_id": _correlation_id(request),
            "path": request.url.path,
            "method": request.method
        },
        exc_info=exc
    )
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "An unexpected error occurred. Please contact support.",
            "correlationId": _correlation_id(request),
        }
    )
