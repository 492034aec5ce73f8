"""Shared test fixtures and configuration."""

import os

# Set up test environment BEFORE importing app modules that read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SMTP_ENABLED"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.adapters.db import models  # noqa: E402,F401
from src.adapters.db.base import Base  # noqa: E402
from src.adapters.db.repositories.user_repo import UserRepository  # noqa: E402
from src.api.dependencies import get_db, get_mailer  # noqa: E402
from src.api.main import app  # noqa: E402
from src.services.internal.email import Mailer  # noqa: E402

PASSWORD = "Secret-pass1"


class RecordingMailer(Mailer):
    """Keeps outgoing mail in memory instead of talking to SMTP."""

    def __init__(self):
        self.sent: list[dict] = []

    def send(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> bool:
        self.sent.append({"to": to_email, "subject": subject, "body": text_body, "html": html_body})
        return True

    def to(self, email: str) -> list[dict]:
        return [m for m in self.sent if m["to"] == email]


@pytest.fixture
def db_session():
    """In-memory SQLite session with the full schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    session = TestingSession()
    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def client(db_session, mailer):
    """Test client bound to the test session and the recording mailer."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def user(db_session):
    return UserRepository(db_session).create_user(
        email="alice@example.com",
        name="Alice Smith",
        password=PASSWORD,
    )


@pytest.fixture
def other_user(db_session):
    return UserRepository(db_session).create_user(
        email="bob@example.com",
        name="Bob Jones",
        password=PASSWORD,
    )


def login(client: TestClient, email: str, password: str = PASSWORD) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client, user) -> dict[str, str]:
    return bearer(login(client, user.email))
