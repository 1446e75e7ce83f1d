import json
import os

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt

# -------------------------------------------------------------------------------------------------
# Environment setup (must happen BEFORE importing the app)
# -------------------------------------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["AUTH_JWT_ALGORITHM"] = "HS256"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["RETELL_API_KEY"] = "test-retell-key"
os.environ["LIVE_URL"] = "app.vocalhire.test"

from vocalhire.config.database import Base, SessionLocal, engine  # noqa: E402
from vocalhire.integrations.retell import RetellClient, get_retell_client  # noqa: E402
from vocalhire.main import app  # noqa: E402
from vocalhire.models import Interview, Interviewer, PhoneNumber, Response  # noqa: E402

TEST_ORG = "org_test"
OTHER_ORG = "org_other"
RETELL_BASE_URL = "https://api.retell.test"


# -------------------------------------------------------------------------------------------------
# Database
# -------------------------------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def reset_db():
    """Drop + recreate the in-memory schema before each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# -------------------------------------------------------------------------------------------------
# Fake voice provider (served through httpx.MockTransport, no network)
# -------------------------------------------------------------------------------------------------
class FakeProvider:
    """Canned provider responses keyed by (method, path), with a request log."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, json_body=None, status=200, text=None):
        """Serve `json_body`, or `text` verbatim when given."""
        if text is None:
            text = json.dumps(json_body if json_body is not None else {})
        self.routes[(method, path)] = (status, text)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"error_message": "Not Found"})
        status, body = self.routes[key]
        return httpx.Response(status, content=body)

    def sent(self, method, path):
        """JSON bodies of requests sent to (method, path)."""
        return [
            json.loads(r.content) if r.content else None
            for r in self.requests
            if r.method == method and r.url.path == path
        ]


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def retell(provider):
    return RetellClient(
        api_key="test-retell-key",
        base_url=RETELL_BASE_URL,
        transport=httpx.MockTransport(provider),
    )


@pytest.fixture
def client(retell):
    app.dependency_overrides[get_retell_client] = lambda: retell
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_retell_client, None)


# -------------------------------------------------------------------------------------------------
# Auth
# -------------------------------------------------------------------------------------------------
def make_token(sub="user_test", org_id=TEST_ORG, **claims):
    payload = {"sub": sub, **claims}
    if org_id:
        payload["org_id"] = org_id
    return jwt.encode(payload, "test-secret", algorithm="HS256")


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


# -------------------------------------------------------------------------------------------------
# Data helpers
# -------------------------------------------------------------------------------------------------
@pytest.fixture
def interviewer(db):
    row = Interviewer(name="Sweet Shimmer", agent_id="agent1", rapport=7, exploration=10, empathy=7, speed=5)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def interview(db, interviewer):
    row = Interview(
        id="iv1",
        name="Backend Engineer",
        objective="Assess API design skills",
        organization_id=TEST_ORG,
        interviewer_id=interviewer.id,
        agent_id="agent1",
        questions=[{"question": "Describe a service you built."}, {"question": "How do you test it?"}],
        metric_weights={"communication": 0.6, "technical": 0.4},
        time_duration="10",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def add_response(db, call_id, interview_id="iv1", **fields):
    row = Response(call_id=call_id, interview_id=interview_id, **fields)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def add_phone_number(db, number="+14155551234", organization_id=TEST_ORG, **fields):
    row = PhoneNumber(number=number, organization_id=organization_id, **fields)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row
