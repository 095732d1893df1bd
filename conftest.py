import pytest
from fastapi.testclient import TestClient

from chat_api import crud
from chat_api.config import Settings
from chat_api.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'chat.db'}",
        FILES_DIR=str(tmp_path / "files"),
        JWT_SECRET="test-secret",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def app(settings):
    application = create_app(settings)
    yield application
    application.state.database.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app):
    session = app.state.database.get_session_local()()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(app):
    return app.state.storage


@pytest.fixture
def make_user(db):
    """Create users straight through the user store."""
    counter = {"n": 0}

    def _make(name=None, email=None, password="secret1"):
        counter["n"] += 1
        n = counter["n"]
        return crud.create_user(
            db,
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password=password,
        )

    return _make


@pytest.fixture
def register_user(client):
    """Register a user over HTTP and return the user summary."""

    def _register(name, email, password, image=None):
        payload = {"name": name, "email": email, "password": password}
        if image is not None:
            payload["image"] = image
        response = client.post("/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["user"]

    return _register
