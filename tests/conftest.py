import json
import os

# Settings and the engine are created at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ["ENTITY_BACKEND"] = "database"

import httpx
import pytest
from fastapi.testclient import TestClient
from pulse_onboarding.database import Base, SessionLocal, engine
from pulse_onboarding import models  # noqa: F401
from pulse_onboarding import crud
from pulse_onboarding.core.security import create_access_token
from pulse_onboarding.services.entity_store import SqlEntityStore, PlatformEntityStore, record_to_dict
from pulse_onboarding.services.onboarding_state import OnboardingStateManager
from pulse_onboarding.services.platform_client import PlatformClient

ADMIN_HEADERS = {"x-admin-key": os.environ["ADMIN_API_KEY"]}


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db):
    return SqlEntityStore(db)


@pytest.fixture
def state_manager(store):
    return OnboardingStateManager(store)


@pytest.fixture
def make_user(db):
    """Create a user row and return it as a record dict."""
    counter = {"n": 0}

    def _make_user(subscription_tier="Free", is_active=True, **fields):
        counter["n"] += 1
        values = {
            "email": f"agent{counter['n']}@example.com",
            "subscription_tier": subscription_tier,
            "is_active": is_active,
            **fields,
        }
        return record_to_dict(crud.user.create(db, obj_in=values))

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token(data={"id": user["id"], "email": user["email"]})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def client(db):
    from main import app

    with TestClient(app) as test_client:
        yield test_client


class FakePlatform:
    """
    In-memory stand-in for the hosted platform API.

    Records are kept exactly as they travel on the wire (camelCase keys),
    so tests can check the conversion done by the client.
    """

    def __init__(self, users=None, fail=False):
        self.records = {}
        self.users_by_token = users or {}
        self.fail = fail
        self.requests = []
        self._next_id = 0

    def _new_id(self):
        self._next_id += 1
        return f"rec{self._next_id}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("Network error", request=request)

        path = request.url.path
        if "/functions/" in path:
            name = path.rsplit("/functions/", 1)[1]
            if name == "broken":
                return httpx.Response(500, json={"message": "boom"})
            return httpx.Response(200, json={"function": name, "payload": json.loads(request.content)})

        if path.endswith("/auth/logout"):
            return httpx.Response(204)

        entity_path = path.split("/entities/", 1)[1]
        parts = entity_path.split("/")
        entity = parts[0]

        if entity == "User" and len(parts) == 2 and parts[1] == "me":
            token = request.headers.get("Authorization", "").replace("Bearer ", "")
            user = self.users_by_token.get(token)
            if user is None:
                return httpx.Response(401, json={"message": "Unauthorized"})
            if request.method == "PUT":
                user.update(json.loads(request.content))
            return httpx.Response(200, json=user)

        table = self.records.setdefault(entity, {})
        if request.method == "GET":
            criteria = json.loads(request.url.params.get("q", "{}"))
            matches = [r for r in table.values() if all(r.get(k) == v for k, v in criteria.items())]
            return httpx.Response(200, json=matches)
        if request.method == "POST":
            record = {"id": self._new_id(), **json.loads(request.content)}
            table[record["id"]] = record
            return httpx.Response(201, json=record)
        if request.method == "PUT":
            record_id = parts[1]
            if record_id not in table:
                return httpx.Response(404, json={"message": "Not found"})
            table[record_id].update(json.loads(request.content))
            return httpx.Response(200, json=table[record_id])
        return httpx.Response(405)


@pytest.fixture
def fake_platform():
    return FakePlatform()


@pytest.fixture
def platform_client(fake_platform):
    client = PlatformClient(
        base_url="https://platform.test/api/apps/test-app",
        service_token="service-token",
        transport=httpx.MockTransport(fake_platform.handler),
    )
    yield client
    client.close()


@pytest.fixture
def platform_store(platform_client):
    return PlatformEntityStore(platform_client)
