"""Tests for the session-gated admin user endpoints"""
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from forms_admin.models.admin_user import AdminUser


def _user(db: Session, email: str) -> AdminUser:
    db.expire_all()
    return db.query(AdminUser).filter(AdminUser.email == email).one()


def test_list_users(admin_client: TestClient, make_user):
    make_user(email="second@broker.example", role="user")

    response = admin_client.get("/admin/users")
    assert response.status_code == 200

    users = response.json()
    assert {u["email"] for u in users} == {"admin@broker.example", "second@broker.example"}
    for user in users:
        assert "passwordHash" not in user and "password_hash" not in user
        assert "onboarding_token" not in user
        assert {"firstName", "lastName", "isActive", "isFrozen", "failedLoginAttempts"} <= set(user)


def test_create_user_duplicate_email(admin_client: TestClient):
    response = admin_client.post("/admin/users", json={
        "firstName": "Dup",
        "lastName": "Licate",
        "email": "ADMIN@broker.example",
        "role": "user",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "Email already exists"


def test_create_user_invalid_role(admin_client: TestClient):
    response = admin_client.post("/admin/users", json={
        "firstName": "Role",
        "lastName": "Less",
        "email": "role@broker.example",
        "role": "superuser",
    })
    assert response.status_code == 400
    assert response.json()["errors"][0] == {"field": "role", "message": "Invalid role"}


def test_update_user(admin_client: TestClient, make_user):
    target = make_user(email="edit@broker.example", role="user")

    response = admin_client.put(f"/admin/users/{target.id}", json={
        "firstName": "Edited",
        "lastName": "Name",
        "email": "Edited@Broker.example",
        "role": "administrator",
    })
    assert response.status_code == 200

    user = response.json()["user"]
    assert user["firstName"] == "Edited"
    assert user["email"] == "edited@broker.example"
    assert user["role"] == "administrator"


def test_update_user_email_conflict(admin_client: TestClient, make_user):
    target = make_user(email="edit@broker.example")
    response = admin_client.put(f"/admin/users/{target.id}", json={
        "firstName": "Dana",
        "lastName": "Reyes",
        "email": "admin@broker.example",
        "role": "user",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "Email already in use"


def test_update_unknown_user(admin_client: TestClient):
    response = admin_client.put("/admin/users/9999", json={
        "firstName": "No",
        "lastName": "Body",
        "email": "nobody@broker.example",
        "role": "user",
    })
    assert response.status_code == 404


def test_toggle_user_status(admin_client: TestClient, db: Session, make_user):
    target = make_user(email="toggle@broker.example")

    response = admin_client.post(f"/admin/users/{target.id}/toggle")
    assert response.json() == {"success": True, "isActive": False}
    assert _user(db, "toggle@broker.example").is_active is False

    response = admin_client.post(f"/admin/users/{target.id}/toggle")
    assert response.json()["isActive"] is True


def test_set_status_with_unfreeze(admin_client: TestClient, db: Session, make_user):
    target = make_user(email="frozen@broker.example", is_frozen=True, failed_login_attempts=5)

    response = admin_client.post(
        f"/admin/users/{target.id}/set-status",
        json={"isActive": True, "shouldUnfreeze": True},
    )
    assert response.status_code == 200

    user = _user(db, "frozen@broker.example")
    assert user.is_active is True
    assert user.is_frozen is False
    assert user.failed_login_attempts == 0


def test_set_status_deactivate_keeps_freeze(admin_client: TestClient, db: Session, make_user):
    target = make_user(email="frozen@broker.example", is_frozen=True, failed_login_attempts=5)

    admin_client.post(f"/admin/users/{target.id}/set-status", json={"isActive": False, "shouldUnfreeze": True})

    user = _user(db, "frozen@broker.example")
    assert user.is_active is False
    assert user.is_frozen is True


def test_unfreeze_user_allows_login_again(admin_client: TestClient, make_user, login):
    target = make_user(email="frozen@broker.example", is_frozen=True, failed_login_attempts=5)

    response = admin_client.post(f"/admin/users/{target.id}/unfreeze")
    assert response.status_code == 200
    assert response.json()["user"]["isFrozen"] is False
    assert response.json()["user"]["failedLoginAttempts"] == 0

    assert login("frozen@broker.example").status_code == 200


def test_unfreeze_unknown_user(admin_client: TestClient):
    assert admin_client.post("/admin/users/9999/unfreeze").status_code == 404


def test_user_endpoints_require_session(client: TestClient):
    assert client.get("/admin/users").status_code == 401
    assert client.post("/admin/users", json={}).status_code == 401
    assert client.post("/admin/users/1/unfreeze").status_code == 401
