import jwt
import pytest

from chat_api import crud
from chat_api.exceptions import DuplicateEmail, NotFound, Unauthorized, ValidationFailed
from chat_api.models import User


def test_register_returns_created_summary(client):
    response = client.post("/register", json={
        "name": "Alice",
        "email": "alice@example.com",
        "password": "secret1",
        "image": "https://example.com/alice.png",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["name"] == "Alice"
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["image"] == "https://example.com/alice.png"
    assert body["user"]["id"]
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]


def test_password_is_stored_hashed(client, db, register_user):
    user = register_user("Alice", "alice@example.com", "secret1")

    stored = db.query(User).filter(User.id == user["id"]).one()
    assert stored.password_hash != "secret1"
    assert stored.password_hash.startswith("$argon2")


@pytest.mark.parametrize("payload", [
    {"name": "Other", "email": "alice@example.com", "password": "another-password"},
    {"name": "", "email": "alice@example.com", "password": "x"},
    {"name": "Alice", "email": "ALICE@example.com", "password": "secret1"},
    {"email": "alice@example.com", "password": "x"},
    {"name": "Bob", "email": "alice@example.com"},
    {"name": None, "email": "alice@example.com", "password": "secret1"},
])
def test_register_duplicate_email_is_conflict(client, register_user, payload):
    register_user("Alice", "alice@example.com", "secret1")

    response = client.post("/register", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


def test_create_user_duplicate_checked_before_other_fields(db, make_user):
    make_user(email="taken@example.com")

    with pytest.raises(DuplicateEmail):
        crud.create_user(db, name="", email="taken@example.com", password="1")


def test_register_missing_name_or_password_is_validation_error(client):
    for payload in [
        {"email": "bob@example.com", "password": "secret2"},
        {"name": "Bob", "email": "bob@example.com"},
    ]:
        response = client.post("/register", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"] == "All fields are required"


def test_register_short_password_rejected(client):
    response = client.post("/register", json={
        "name": "Bob", "email": "bob@example.com", "password": "12345",
    })

    assert response.status_code == 400
    assert "at least 6" in response.json()["detail"]


def test_create_user_blank_name_rejected(db):
    with pytest.raises(ValidationFailed):
        crud.create_user(db, name="   ", email="blank@example.com", password="secret1")


@pytest.mark.parametrize("payload", [
    {"email": "bob@example.com", "password": "secret2"},
    {"name": "Bob", "password": "secret2"},
    {"name": "Bob", "email": "bob@example.com"},
    {"name": "Bob", "email": "not-an-email", "password": "secret2"},
])
def test_register_missing_or_malformed_fields(client, payload):
    response = client.post("/register", json=payload)

    assert response.status_code == 400


def test_login_returns_one_hour_token(client, settings, register_user):
    user = register_user("Alice", "alice@example.com", "secret1")

    response = client.post("/login", json={"email": "alice@example.com", "password": "secret1"})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == user["id"]
    claims = jwt.decode(body["token"], settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert claims["sub"] == user["id"]
    assert claims["exp"] - claims["iat"] == 3600


def test_login_updates_last_seen(client, db, register_user):
    user = register_user("Alice", "alice@example.com", "secret1")
    assert crud.get_user(db, user["id"]).last_seen is None

    client.post("/login", json={"email": "alice@example.com", "password": "secret1"})

    db.expire_all()
    assert crud.get_user(db, user["id"]).last_seen is not None


def test_login_unknown_email_is_not_found(client):
    response = client.post("/login", json={"email": "nobody@example.com", "password": "secret1"})

    assert response.status_code == 404


def test_login_wrong_password_is_unauthorized(client, register_user):
    register_user("Alice", "alice@example.com", "secret1")

    response = client.post("/login", json={"email": "alice@example.com", "password": "wrong-one"})

    assert response.status_code == 401


def test_login_missing_fields(client):
    response = client.post("/login", json={"email": "alice@example.com"})

    assert response.status_code == 400


def test_authenticate_user_errors(db, make_user):
    make_user(email="carol@example.com", password="secret3")

    with pytest.raises(NotFound):
        crud.authenticate_user(db, "missing@example.com", "secret3")
    with pytest.raises(Unauthorized):
        crud.authenticate_user(db, "carol@example.com", "nope-nope")
    assert crud.authenticate_user(db, "Carol@Example.com", "secret3").email == "carol@example.com"


def test_logout_requires_valid_token(client, register_user):
    register_user("Alice", "alice@example.com", "secret1")
    token = client.post("/login", json={"email": "alice@example.com", "password": "secret1"}).json()["token"]

    assert client.post("/logout").status_code == 401
    assert client.post("/logout", headers={"Authorization": "Bearer garbage"}).status_code == 401

    response = client.post("/logout", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["message"] == "Logged out successfully"


def test_get_user_details(client, register_user):
    alice = register_user("Alice", "alice@example.com", "secret1")

    response = client.get(f"/user/{alice['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == alice["id"]
    assert body["friends"] == []
    assert body["pending_incoming"] == []
    assert body["pending_outgoing"] == []
    assert "password_hash" not in body


def test_get_user_details_not_found(client):
    response = client.get("/user/does-not-exist")

    assert response.status_code == 404
