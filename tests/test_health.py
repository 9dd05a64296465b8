"""Tests for health endpoints, error envelopes, configuration and log redaction"""
import json
import logging

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from forms_admin.config import Settings
from forms_admin.utils.logger import JSONFormatter, redact_sensitive

STRONG_SECRET = "s" * 32


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_ready(client: TestClient):
    response = client.get("/health/ready")
    assert response.status_code == 200
    checks = response.json()["checks"]
    assert checks["database"] is True
    assert checks["mail"] == "log_only"


def test_live(client: TestClient):
    assert client.get("/health/live").json()["status"] == "alive"


def test_correlation_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req_test123"})
    assert response.headers["X-Request-ID"] == "req_test123"


def test_unknown_route_uses_error_envelope(client: TestClient):
    response = client.get("/no-such-route")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_production_requires_session_secret():
    with pytest.raises(ValidationError):
        Settings(ENVIRONMENT="production", SESSION_SECRET=None, BASE_URL="https://forms.example")


def test_production_requires_base_url():
    with pytest.raises(ValidationError):
        Settings(ENVIRONMENT="production", SESSION_SECRET=STRONG_SECRET, BASE_URL=None)


def test_short_session_secret_rejected():
    with pytest.raises(ValidationError):
        Settings(SESSION_SECRET="too-short")


def test_production_settings():
    settings = Settings(
        ENVIRONMENT="production",
        SESSION_SECRET=STRONG_SECRET,
        BASE_URL="https://forms.example/",
    )
    assert settings.is_production is True
    assert settings.base_url == "https://forms.example"
    assert settings.session_secret == STRONG_SECRET
    assert settings.reset_token_ttl.total_seconds() == 30 * 60


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.MAX_FAILED_LOGIN_ATTEMPTS = 10


def test_redact_sensitive():
    body = {"email": "a@b.example", "password": "secret", "nested": [{"token": "abc"}]}
    assert redact_sensitive(body) == {
        "email": "a@b.example",
        "password": "[REDACTED]",
        "nested": [{"token": "[REDACTED]"}],
    }


def test_json_formatter_copies_known_extras():
    record = logging.LogRecord("forms_admin", logging.WARNING, __file__, 1, "Login rejected", None, None)
    record.reason = "wrong_password"
    record.failed_attempts = 2
    record.unrelated = "ignored"

    line = json.loads(JSONFormatter().format(record))
    assert line["message"] == "Login rejected"
    assert line["reason"] == "wrong_password"
    assert line["failed_attempts"] == 2
    assert "unrelated" not in line
