"""Request throttling for unauthenticated account endpoints"""
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from forms_admin.config import get_settings

settings = get_settings()


def get_client_ip(request: Request) -> str:
    """Client address, honouring ``X-Forwarded-For`` only behind a trusted proxy"""
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()
    return get_remote_address(request) or "unknown"


# Create limiter instance
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


# Rate limit configurations for different endpoints
RATE_LIMITS = {
    # Credential endpoints, keyed by client IP
    "login": "5 per 15 minutes",
    "forgot_password": "5 per hour",
    "reset_password": "10 per 15 minutes",
    "onboarding": "10 per 15 minutes",

    # Session-gated admin API
    "admin_api": "100 per 15 minutes",
}


def get_rate_limit(endpoint: str) -> str:
    """Get rate limit for specific endpoint"""
    return RATE_LIMITS.get(endpoint, settings.RATE_LIMIT_DEFAULT[0])
