import os
import sys
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

ROOT_DIR = os.path.dirname(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Must be set before main is imported: startup uses the module engine.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REPL_ID", None)
os.environ.pop("ISSUER_URL", None)

from main import app, get_session, get_auth_provider  # noqa: E402
from auth import DEMO_IDENTITY, SESSION_COOKIE, SessionAuthProvider, create_session  # noqa: E402
from starlette.responses import Response  # noqa: E402
import storage  # noqa: E402
from utils import utcnow  # noqa: E402


test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
DBSession = Session


@pytest.fixture(scope="function")
def db_session():
    """A session on a fresh in-memory database, with the demo user seeded."""
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)
    with DBSession(test_engine) as session:
        storage.ensure_user(session, DEMO_IDENTITY)
        yield session


@pytest.fixture(scope="function")
def client(db_session):
    """Return a TestClient in demo (bypass) mode wired to the test database."""

    def override_get_session():
        with DBSession(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def enforced_client(client):
    """Same client, but every gated route requires a real session cookie."""
    app.dependency_overrides[get_auth_provider] = lambda: SessionAuthProvider()
    return client


@pytest.fixture
def session_helpers(db_session):
    """
    Common session utilities shared across test modules.
    Creates users and issues session tokens straight through the store.
    """

    def make_user(user_id: str = "user-1", email: str = "user1@example.com"):
        return storage.ensure_user(
            db_session,
            {"id": user_id, "email": email, "first_name": "Test", "last_name": "User"},
        )

    def issue_token(user_id: str = "user-1", age: timedelta = timedelta(0)) -> str:
        """Create a session as if it had been issued `age` ago."""
        make_user(user_id, f"{user_id}@example.com")
        return create_session(db_session, Response(), user_id, now=utcnow() - age)

    def cookie_headers(token: str) -> dict:
        return {"Cookie": f"{SESSION_COOKIE}={token}"}

    return {
        "make_user": make_user,
        "issue_token": issue_token,
        "cookie_headers": cookie_headers,
    }
