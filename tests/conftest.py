"""Shared test fixtures for gamecard-core."""

import os
import sqlite3
import tempfile

# Configure before any gamecard_core import builds its Settings
_fd, _import_db_path = tempfile.mkstemp(suffix=".db")
os.close(_fd)
os.environ.setdefault("DATABASE_PATH", _import_db_path)
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

import pytest

from gamecard_core.main import app
from gamecard_core.config import settings
from gamecard_core.db import Core, SCHEMA_PATH
from gamecard_core.limiter import limiter
from gamecard_core.auth.schemas import RegisterRequest
from gamecard_core.auth.service import get_session_authority

TEST_PASSWORD = "Secret123"


@pytest.fixture
def test_db():
    """Create in-memory test database with schema."""
    db = sqlite3.connect(":memory:")
    db.row_factory = sqlite3.Row
    db.execute("PRAGMA foreign_keys = ON")
    db.executescript(SCHEMA_PATH.read_text())
    db.commit()

    yield db

    db.close()


@pytest.fixture
def core(test_db):
    """Non-atomic Core over the in-memory test database."""
    return Core(test_db, atomic=False)


@pytest.fixture
def authority():
    """Session authority wired from settings."""
    return get_session_authority()


@pytest.fixture
def test_account(core, authority):
    """Register alice directly through the session authority.

    Returns a tuple of (account, tokens, password).
    """
    data = RegisterRequest(username="alice", email="alice@x.com", password=TEST_PASSWORD)
    account, tokens = authority.register(core, data)
    return account, tokens, TEST_PASSWORD


@pytest.fixture
def client():
    """Create test client backed by a fresh temp-file database.

    Each test gets a fresh database and fresh rate limit counters.
    """
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    os.unlink(db_path)

    original_db_path = settings.database_path
    settings.database_path = db_path
    try:
        from gamecard_core.db import init_db
        init_db()
        limiter.reset()

        app.config['TESTING'] = True
        with app.test_client() as client:
            yield client
    finally:
        settings.database_path = original_db_path
        if os.path.exists(db_path):
            os.unlink(db_path)


@pytest.fixture
def registered_client(client):
    """Test client with alice registered; the refresh cookie is in its jar.

    Returns a tuple of (client, user_json, auth_headers).
    """
    response = client.post(
        f"{settings.api_prefix}/auth/register",
        json={"username": "alice", "email": "alice@x.com", "password": TEST_PASSWORD}
    )
    assert response.status_code == 201
    data = response.get_json()
    auth_headers = {"Authorization": f"Bearer {data['access_token']}"}
    return client, data["user"], auth_headers


def refresh_cookie_value(response) -> str | None:
    """Extract the refresh token value from a response's Set-Cookie headers."""
    for header in response.headers.getlist("Set-Cookie"):
        name, _, rest = header.partition("=")
        if name == settings.refresh_cookie_name:
            value = rest.split(";", 1)[0]
            return value or None
    return None


def refresh_cookie_header(response) -> str | None:
    for header in response.headers.getlist("Set-Cookie"):
        if header.startswith(f"{settings.refresh_cookie_name}="):
            return header
    return None


@pytest.fixture
def cookie_value():
    """Helper: refresh token value from a response's Set-Cookie header."""
    return refresh_cookie_value


@pytest.fixture
def cookie_header():
    """Helper: full Set-Cookie header for the refresh cookie."""
    return refresh_cookie_header
