"""Tests for session checks, logout, rolling expiry and the session gate"""
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from forms_admin.models.admin_session import AdminSession
from forms_admin.models.admin_user import AdminUser
from forms_admin.utils.tokens import utcnow


def test_check_session_without_cookie(client: TestClient):
    response = client.get("/admin/check-session")
    assert response.status_code == 200
    assert response.json() == {"authenticated": False}


def test_check_session_after_login(admin_client: TestClient):
    response = admin_client.get("/admin/check-session")
    assert response.status_code == 200

    data = response.json()
    assert data["authenticated"] is True
    assert data["user"]["email"] == "admin@broker.example"
    assert data["user"]["role"] == "administrator"


def test_session_row_stores_projection_not_raw_id(admin_client: TestClient, db: Session, settings):
    cookie = admin_client.cookies.get(settings.SESSION_COOKIE_NAME)
    session = db.query(AdminSession).one()

    assert session.data["email"] == "admin@broker.example"
    assert "password" not in str(session.data).lower()
    assert session.session_id not in cookie


def test_check_session_slides_expiry(admin_client: TestClient, db: Session):
    session = db.query(AdminSession).one()
    session.expires_at = utcnow() + timedelta(minutes=5)
    db.commit()

    assert admin_client.get("/admin/check-session").json()["authenticated"] is True

    db.expire_all()
    refreshed = db.query(AdminSession).one()
    assert refreshed.expires_at > utcnow() + timedelta(hours=23)


def test_expired_session_is_rejected(admin_client: TestClient, db: Session):
    session = db.query(AdminSession).one()
    session.expires_at = utcnow() - timedelta(seconds=1)
    db.commit()

    assert admin_client.get("/admin/check-session").json() == {"authenticated": False}


def test_forged_cookie_is_rejected(client: TestClient, settings):
    client.cookies.set(settings.SESSION_COOKIE_NAME, "not.a.jwt")
    assert client.get("/admin/check-session").json() == {"authenticated": False}


def test_deactivated_account_loses_session(admin_client: TestClient, db: Session):
    """Sessions are revalidated against the account on every check"""
    user = db.query(AdminUser).filter(AdminUser.email == "admin@broker.example").one()
    user.is_active = False
    db.commit()

    assert admin_client.get("/admin/check-session").json() == {"authenticated": False}
    assert db.query(AdminSession).count() == 0


def test_frozen_account_is_refused_by_gate(admin_client: TestClient, db: Session):
    user = db.query(AdminUser).filter(AdminUser.email == "admin@broker.example").one()
    user.is_frozen = True
    db.commit()

    response = admin_client.get("/admin/users")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized. Please log in."}


def test_logout_destroys_session(admin_client: TestClient, db: Session):
    response = admin_client.post("/admin/logout")
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert db.query(AdminSession).count() == 0
    assert admin_client.get("/admin/check-session").json() == {"authenticated": False}


def test_logout_is_idempotent(client: TestClient):
    assert client.post("/admin/logout").status_code == 200
    assert client.post("/admin/logout").status_code == 200


def test_gate_requires_session(client: TestClient):
    response = client.get("/admin/users")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized. Please log in."


def test_change_password(admin_client: TestClient, login):
    response = admin_client.post("/admin/change-password", json={
        "currentPassword": "Correct#Horse9",
        "newPassword": "Brand#New77",
        "confirmPassword": "Brand#New77",
    })
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert login("admin@broker.example", "Correct#Horse9").status_code == 401
    assert login("admin@broker.example", "Brand#New77").status_code == 200


def test_change_password_wrong_current(admin_client: TestClient):
    response = admin_client.post("/admin/change-password", json={
        "currentPassword": "Nope#Nope1",
        "newPassword": "Brand#New77",
        "confirmPassword": "Brand#New77",
    })
    assert response.status_code == 401
    assert response.json()["error"] == "Current password is incorrect"


def test_change_password_confirmation_mismatch(admin_client: TestClient):
    response = admin_client.post("/admin/change-password", json={
        "currentPassword": "Correct#Horse9",
        "newPassword": "Brand#New77",
        "confirmPassword": "Brand#New78",
    })
    assert response.status_code == 400
    messages = [error["message"] for error in response.json()["errors"]]
    assert "Password confirmation does not match new password" in messages


def test_change_password_requires_session(client: TestClient):
    response = client.post("/admin/change-password", json={
        "currentPassword": "Correct#Horse9",
        "newPassword": "Brand#New77",
        "confirmPassword": "Brand#New77",
    })
    assert response.status_code == 401
