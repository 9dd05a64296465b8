"""Pytest configuration and fixtures"""
import os

# Settings are read once at import time; configure the test environment first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("BASE_URL", "http://testserver.local")

from typing import Generator, List, Tuple  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from forms_admin.api.deps import get_mailer  # noqa: E402
from forms_admin.config import get_settings  # noqa: E402
from forms_admin.database import Base, get_db  # noqa: E402
from forms_admin.main import app  # noqa: E402
from forms_admin.models.admin_user import ROLE_ADMINISTRATOR, AdminUser  # noqa: E402
from forms_admin.repositories import AdminUserRepository  # noqa: E402
from forms_admin.utils.passwords import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Correct#Horse9"


class RecordingMailer:
    """Stands in for the SendGrid mailer and remembers every link it was asked to send"""

    def __init__(self):
        self.sent: List[Tuple[str, str, bool]] = []

    def send_reset_email(self, email: str, url: str, is_onboarding: bool = False) -> bool:
        self.sent.append((email, url, is_onboarding))
        return True

    @property
    def last_url(self) -> str:
        return self.sent[-1][1]


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(scope="function")
def client(db: Session, mailer: RecordingMailer) -> Generator[TestClient, None, None]:
    """Create test client with database session and mailer overrides"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def make_user(db: Session):
    """Factory for accounts; active with ``DEFAULT_PASSWORD`` unless told otherwise"""

    def _make_user(
        email: str = "agent@broker.example",
        password: str = DEFAULT_PASSWORD,
        role: str = ROLE_ADMINISTRATOR,
        is_active: bool = True,
        **fields,
    ) -> AdminUser:
        return AdminUserRepository(db).create(
            first_name=fields.pop("first_name", "Dana"),
            last_name=fields.pop("last_name", "Reyes"),
            email=email,
            password_hash=hash_password(password, 4) if password else None,
            role=role,
            is_active=is_active,
            is_frozen=fields.pop("is_frozen", False),
            failed_login_attempts=fields.pop("failed_login_attempts", 0),
            **fields,
        )

    return _make_user


@pytest.fixture
def login(client: TestClient):
    """POST /admin/login and return the response"""

    def _login(email: str = "agent@broker.example", password: str = DEFAULT_PASSWORD):
        return client.post("/admin/login", json={"email": email, "password": password})

    return _login


@pytest.fixture
def admin_client(client: TestClient, make_user, login) -> TestClient:
    """A client already holding a session for an active administrator"""
    make_user(email="admin@broker.example")
    response = login("admin@broker.example")
    assert response.status_code == 200
    return client
