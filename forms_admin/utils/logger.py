"""Structured logging configuration"""
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Mapping

# Copied from ``extra=`` into every JSON line when present
_EXTRA_FIELDS = (
    "correlation_id",
    "admin_user_id",
    "email",
    "client_ip",
    "reason",
    "failed_attempts",
    "status_code",
    "method",
    "path",
    "role",
    "action",
    "request_body",
)

SENSITIVE_FIELDS = {
    "password",
    "currentPassword",
    "newPassword",
    "confirmPassword",
    "passwordHash",
    "password_hash",
    "token",
}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def redact_sensitive(data: Any) -> Any:
    """Return a copy of ``data`` with password and token values masked."""
    if isinstance(data, Mapping):
        return {
            key: "[REDACTED]" if key in SENSITIVE_FIELDS else redact_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_sensitive(item) for item in data]
    return data


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Setup structured JSON logging"""
    logger = logging.getLogger("forms_admin")
    logger.setLevel(log_level)

    # Remove existing handlers
    logger.handlers = []

    # Create console handler with JSON formatter
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logging()
