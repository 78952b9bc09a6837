"""
Shared fixtures: every test gets a fresh in-memory store and its own app.
"""
import uuid

import pytest
from fastapi.testclient import TestClient

from credential_platform.credential_platform.auth_service.auth import Authenticator
from credential_platform.credential_platform.auth_service.config import Settings
from credential_platform.credential_platform.auth_service.db import Store
from credential_platform.credential_platform.auth_service.main import create_app

TEST_SECRET = "test-signing-key-long-enough-for-hs256-signatures"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_SECRET,
        HASH_ROUNDS=1000,
        URL_CORS="http://localhost:3000",
        LOG_LEVEL="WARNING"
    )


@pytest.fixture
def store(settings):
    store = Store.from_settings(settings)
    store.init_db()
    yield store
    store.dispose()


@pytest.fixture
def authenticator(settings):
    return Authenticator(settings)


@pytest.fixture
def db(store):
    session = store.session()
    yield session
    session.close()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def username():
    return f"user_{uuid.uuid4().hex[:8]}"
