"""Tests for admin login, failed-attempt tracking and account freeze"""
from fastapi.testclient import TestClient
from sqlalchemy import Update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from forms_admin.models.admin_session import AdminSession
from forms_admin.models.admin_user import AdminUser
from forms_admin.services.sessions import SessionManager

DEFAULT_PASSWORD = "Correct#Horse9"

GENERIC = "Invalid email or password"


def _reload(db: Session, user_id: int) -> AdminUser:
    db.expire_all()
    return db.query(AdminUser).filter(AdminUser.id == user_id).one()


def test_login_success(client: TestClient, db: Session, make_user, login, settings):
    """Test a valid login returns the user projection and sets the session cookie"""
    user = make_user(email="agent@broker.example")

    response = login("  Agent@Broker.Example ")
    assert response.status_code == 200

    data = response.json()
    assert data["success"] is True
    assert data["user"] == {
        "id": user.id,
        "firstName": "Dana",
        "lastName": "Reyes",
        "email": "agent@broker.example",
        "role": "administrator",
    }
    assert "password" not in str(data).lower()
    assert settings.SESSION_COOKIE_NAME in response.cookies

    user = _reload(db, user.id)
    assert user.last_login_at is not None
    assert user.failed_login_attempts == 0


def test_login_unknown_email(client: TestClient, login):
    response = login("nobody@broker.example")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": GENERIC}


def test_login_account_without_password(client: TestClient, make_user, login):
    """Accounts that never completed onboarding cannot log in"""
    make_user(password=None, is_active=False)
    response = login()
    assert response.status_code == 401
    assert response.json()["error"] == GENERIC


def test_wrong_password_increments_counter(client: TestClient, db: Session, make_user, login):
    user = make_user()

    response = login(password="Wrong#Pass1")
    assert response.status_code == 401
    assert response.json()["error"] == GENERIC

    user = _reload(db, user.id)
    assert user.failed_login_attempts == 1
    assert user.last_failed_login_at is not None
    assert user.is_frozen is False


def test_account_freezes_after_five_failures(client: TestClient, db: Session, make_user, login):
    """Fifth consecutive wrong password freezes; the right password is then refused too"""
    user = make_user()

    for _ in range(5):
        assert login(password="Wrong#Pass1").status_code == 401

    frozen = _reload(db, user.id)
    assert frozen.failed_login_attempts == 5
    assert frozen.is_frozen is True
    assert frozen.frozen_at is not None

    response = login(password=DEFAULT_PASSWORD)
    assert response.status_code == 401
    assert response.json()["error"] == GENERIC

    # Correct password on a frozen account leaves the counter alone
    assert _reload(db, user.id).failed_login_attempts == 5


def test_four_failures_do_not_freeze(client: TestClient, db: Session, make_user, login):
    user = make_user()
    for _ in range(4):
        login(password="Wrong#Pass1")

    assert _reload(db, user.id).is_frozen is False
    assert login().status_code == 200


def test_successful_login_resets_counter(client: TestClient, db: Session, make_user, login):
    user = make_user()
    for _ in range(3):
        login(password="Wrong#Pass1")

    assert login().status_code == 200
    user = _reload(db, user.id)
    assert user.failed_login_attempts == 0
    assert user.last_failed_login_at is None


def test_inactive_account_rejected_without_counting(client: TestClient, db: Session, make_user, login):
    user = make_user(is_active=False)

    response = login()
    assert response.status_code == 401
    assert response.json()["error"] == GENERIC
    assert _reload(db, user.id).failed_login_attempts == 0


def test_login_validation_error_envelope(client: TestClient):
    """Malformed requests answer 400 with field-level errors"""
    response = client.post("/admin/login", json={"email": "not-an-email", "password": ""})
    assert response.status_code == 400

    data = response.json()
    assert data["success"] is False
    fields = {error["field"] for error in data["errors"]}
    assert {"email", "password"} <= fields
    email_error = next(e for e in data["errors"] if e["field"] == "email")
    assert email_error["message"] == "Valid email is required"


def test_login_replaces_existing_session(client: TestClient, make_user, login, settings):
    """Logging in again issues a new session id and drops the old one"""
    make_user()
    first = login().cookies[settings.SESSION_COOKIE_NAME]

    second_response = login()
    second = second_response.cookies[settings.SESSION_COOKIE_NAME]
    assert first != second

    client.cookies.clear()
    client.cookies.set(settings.SESSION_COOKIE_NAME, first)
    assert client.get("/admin/check-session").json() == {"authenticated": False}


def test_login_database_failure_is_masked(client: TestClient, db: Session, make_user, login, monkeypatch):
    """A storage error while recording the login answers 500 without leaking details"""
    make_user()
    real_execute = db.execute

    def execute_failing_on_update(statement, *args, **kwargs):
        if isinstance(statement, Update):
            raise OperationalError(str(statement), {}, Exception("database is locked"))
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", execute_failing_on_update)
    response = login(password="Wrong#Pass1")

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Login failed"
    assert data["correlationId"] == response.headers["X-Request-ID"]
    assert "locked" not in response.text


def test_login_session_store_failure(client: TestClient, db: Session, make_user, login, settings, monkeypatch):
    make_user()

    def failing_create(self, user, ip_address=None, user_agent=None):
        raise OperationalError("INSERT INTO admin_sessions", {}, Exception("disk I/O error"))

    monkeypatch.setattr(SessionManager, "create", failing_create)
    response = login()

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to create session"
    assert response.json()["correlationId"].startswith("req_")
    assert settings.SESSION_COOKIE_NAME not in response.cookies
    assert db.query(AdminSession).count() == 0
