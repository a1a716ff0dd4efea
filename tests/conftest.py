"""
Shared fixtures: one app for the session, a fresh SQLite database and
local storage directory per test, and helpers to sign accounts up.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from worktracker.config import settings

# must be set before the app (and its limiter) is built
settings.rate_limit = "10000/minute"
settings.admin_emails = "admin@itdept.org"
settings.jwt_secret = "test-secret"

from worktracker.db import Base, get_db  # noqa: E402
from worktracker.main import app  # noqa: E402
from worktracker.routes.files import get_storage  # noqa: E402
from worktracker.storage.local_provider import LocalStorageProvider  # noqa: E402


ADMIN_EMAIL = "admin@itdept.org"
USER_EMAIL = "kofi.mensah@itdept.org"
PASSWORD = "Secret123!"


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    engine.dispose()


@pytest.fixture
def storage_dir(tmp_path, monkeypatch):
    path = tmp_path / "storage"
    monkeypatch.setattr(settings, "local_storage_dir", str(path))
    return path


@pytest.fixture
def client(session_factory, storage_dir):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: LocalStorageProvider(str(storage_dir))
    yield TestClient(app)
    app.dependency_overrides.clear()


def signup(client, email, full_name="Test Person", department=None, password=PASSWORD):
    res = client.post(
        "/auth/signup",
        json={"email": email, "password": password, "full_name": full_name, "department": department},
    )
    assert res.status_code == 201, res.text
    return res.json()


def bearer(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def sign_up(client):
    def _sign_up(email, **kwargs):
        return signup(client, email, **kwargs)

    return _sign_up


@pytest.fixture
def admin_tokens(client):
    return signup(client, ADMIN_EMAIL, full_name="IT Admin", department="Processing")


@pytest.fixture
def user_tokens(client):
    return signup(client, USER_EMAIL, full_name="Kofi Mensah", department="Transport")


@pytest.fixture
def admin_headers(admin_tokens):
    return bearer(admin_tokens)


@pytest.fixture
def user_headers(user_tokens):
    return bearer(user_tokens)
