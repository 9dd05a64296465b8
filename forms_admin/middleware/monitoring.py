"""Request correlation ids and Prometheus metrics for the account lifecycle"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from forms_admin.utils.logger import logger

SLOW_REQUEST_SECONDS = 1.0


# ===== Prometheus Metrics =====

http_requests_total = Counter(
    "forms_admin_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"]
)

http_request_duration_seconds = Histogram(
    "forms_admin_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "route"]
)

login_failures_total = Counter(
    "forms_admin_login_failures_total",
    "Rejected admin login attempts",
    ["reason"]  # unknown_account, no_password, wrong_password, frozen_after_failures, inactive, frozen
)

accounts_frozen_total = Counter(
    "forms_admin_accounts_frozen_total",
    "Accounts frozen by consecutive failed logins",
)

password_reset_requests_total = Counter(
    "forms_admin_password_reset_requests_total",
    "Password reset requests",
    ["outcome"]  # issued, no_account, rate_limited_email, rate_limited_ip
)

requests_in_flight = Gauge(
    "forms_admin_requests_in_flight",
    "Requests currently being handled",
)


def _route_label(request: Request) -> str:
    """Templated route path (``/admin/users/{user_id}``) so ids never become label values"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation id and records latency per route.

    The id comes from ``X-Request-ID`` when the caller sends one and is echoed
    back on the response; error handlers include it in 5xx bodies.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("x-request-id") or f"req_{uuid.uuid4().hex}"
        request.state.correlation_id = correlation_id

        started = time.perf_counter()
        requests_in_flight.inc()
        try:
            response = await call_next(request)
        except Exception:
            http_requests_total.labels(method=request.method, route=_route_label(request), status=500).inc()
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={"correlation_id": correlation_id, "method": request.method, "path": request.url.path},
                exc_info=True,
            )
            raise
        finally:
            requests_in_flight.dec()

        elapsed = time.perf_counter() - started
        route = _route_label(request)
        http_requests_total.labels(method=request.method, route=route, status=response.status_code).inc()
        http_request_duration_seconds.labels(method=request.method, route=route).observe(elapsed)

        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"Slow request: {request.method} {route}",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                },
            )

        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"
        return response


def record_login_failure(reason: str):
    """Record a rejected login with its internal reason"""
    login_failures_total.labels(reason=reason).inc()


def record_account_frozen():
    accounts_frozen_total.inc()


def record_password_reset_request(outcome: str):
    password_reset_requests_total.labels(outcome=outcome).inc()
