"""Middleware modules for production-ready features"""
from forms_admin.middleware.monitoring import (
    MonitoringMiddleware,
    record_account_frozen,
    record_login_failure,
    record_password_reset_request,
)
from forms_admin.middleware.rate_limit import get_client_ip, get_rate_limit, limiter

__all__ = [
    "MonitoringMiddleware",
    "record_account_frozen",
    "record_login_failure",
    "record_password_reset_request",
    "get_client_ip",
    "get_rate_limit",
    "limiter",
]
