"""Pytest configuration and fixtures."""

import os

# Must be set before the app (and its cached settings) are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""

from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.invoice_api.database import Base, get_db
from app.invoice_api.main import app
from app.invoice_api.services.ai import AIService, get_ai_service


class FakeResponses:
    """Stands in for ``client.responses``; records every prompt it receives."""

    def __init__(self):
        self.result: Any = None
        self.error: Exception | None = None
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


class FakeOpenAIClient:
    """Minimal OpenAI-like client exposing ``responses.create``."""

    def __init__(self):
        self.responses = FakeResponses()


@pytest.fixture
def fake_client() -> FakeOpenAIClient:
    """Create a fake model client."""
    return FakeOpenAIClient()


@pytest.fixture
def ai_service(fake_client: FakeOpenAIClient) -> AIService:
    """AI service wired to the fake client."""
    return AIService(api_key="test-key", model="test-model", client=fake_client)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session shared across threads."""
    from app.invoice_api import models_db  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session: Session, ai_service: AIService) -> Generator[TestClient, None, None]:
    """Create a test client with the database and AI service overridden."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: ai_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def register_user(client: TestClient, email: str = "owner@example.com", name: str = "Owner") -> dict:
    """Register a user and return the auth payload."""
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": "secret123"},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    """Bearer headers for a freshly registered user."""
    token = register_user(client)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(client: TestClient) -> dict[str, str]:
    """Bearer headers for a second, unrelated user."""
    token = register_user(client, email="other@example.com", name="Other")["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def invoice_payload() -> dict:
    """A valid invoice creation body."""
    return {
        "invoiceNumber": "INV-001",
        "invoiceDate": "2024-05-01",
        "dueDate": "May 15, 2024",
        "billFrom": {"businessName": "Studio Nine", "email": "billing@studio9.test"},
        "billTo": {"clientName": "Acme Corp", "email": "ap@acme.test"},
        "items": [
            {"name": "Design", "quantity": 2, "unitPrice": 150, "taxPercent": 10},
            {"name": "Logo", "quantity": 1, "unitPrice": 800},
        ],
        "notes": "Thanks for your business",
    }
