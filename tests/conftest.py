from __future__ import annotations

import datetime as dt
import os
import warnings

os.environ["APP_ENV"] = "test"
os.environ["AUDIT_LOG_FILE"] = os.getenv("AUDIT_LOG_FILE", "storage/test-audit.log")

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from cisops.core.config import settings  # noqa: E402
from cisops.db import session as db_session  # noqa: E402
from cisops.db.base_class import Base  # noqa: E402
from cisops.db.session import SessionLocal  # noqa: E402
from cisops.models import models  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")

# Fixed clock for request handlers: 10 April 2024, inside the period starting 6 April
NOW = dt.datetime(2024, 4, 10, tzinfo=dt.timezone.utc)

test_engine = create_engine(
    TEST_DATABASE_URL,
    future=True,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Ensure application code uses the test engine
settings.DATABASE_URL = TEST_DATABASE_URL  # type: ignore[attr-defined]
db_session.engine = test_engine  # type: ignore[assignment]
SessionLocal.configure(bind=test_engine)

# Suppress known third-party deprecation warnings (e.g., passlib crypt removal) to keep test output clean.
warnings.filterwarnings("ignore", category=DeprecationWarning, module="passlib.utils")


@pytest.fixture(autouse=True)
def _reset_database_state():
    """Ensure each test sees a fresh database schema."""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


from fastapi.testclient import TestClient  # noqa: E402

from cisops.api.dependencies import get_now  # noqa: E402
from cisops.api.main import app  # noqa: E402
from cisops.api.rate_limit import limiter  # noqa: E402

PASSWORD = "Password123"


@pytest.fixture
def client():
    """TestClient with the request clock pinned to ``NOW``."""
    limiter.reset()
    app.dependency_overrides[get_now] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.pop(get_now, None)


def register_and_login(client: TestClient, username: str, role: str = "user") -> dict[str, str]:
    """Create an account (optionally promoting it) and return bearer auth headers."""
    resp = client.post(
        "/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    if role != "user":
        with SessionLocal() as session:
            user = session.get(models.User, resp.json()["id"])
            user.role = role
            session.commit()
    login = client.post("/auth/login", json={"username": username, "password": PASSWORD})
    assert login.status_code == 200, login.text
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


@pytest.fixture
def user_headers(client):
    return register_and_login(client, "siteuser")


@pytest.fixture
def admin_headers(client):
    return register_and_login(client, "officeadmin", role="admin")


def subcontractor_payload(**overrides) -> dict:
    data = {
        "name": "Dave Smith",
        "company": "Smith Groundworks Ltd",
        "line1": "1 High Street",
        "city": "Leeds",
        "county": "West Yorkshire",
        "postal_code": "LS1 1AA",
        "cis_number": "CIS123456",
        "utr_number": "1234567890",
        "is_gross": False,
        "deduction": "0.2",
    }
    data.update(overrides)
    return data


def invoice_payload(subcontractor_id: int, **overrides) -> dict:
    data = {
        "subcontractorId": subcontractor_id,
        "invoiceNumber": "INV-001",
        "kashflowNumber": "KF-1001",
        "invoiceDate": "2024-04-08",
        "remittanceDate": "2024-04-20",
        "labourCost": 1000,
        "materialCost": 500,
        "month": 4,
        "year": 2024,
        "submissionDate": "",
    }
    data.update(overrides)
    return data


@pytest.fixture
def subcontractor(client, admin_headers):
    resp = client.post("/subcontractors/", json=subcontractor_payload(), headers=admin_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
