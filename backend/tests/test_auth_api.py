"""
Authentication API tests: registration, login, logout and session checks.
"""

from datetime import timedelta

from stockroom.services import session_service
from stockroom.stores import get_record_store
from stockroom.time_utils import utcnow

from conftest import DEFAULT_PASSWORD, DEFAULT_USERNAME, auth_headers


def test_register_returns_user_and_token(register_user):
    response = register_user("MARIA", "CLAVE2024")
    assert response.status_code == 201
    body = response.get_json()
    assert body["user"]["username"] == "MARIA"
    assert "password_hash" not in body["user"]
    assert len(body["token"]) == 64
    assert body["expires_at"].endswith("Z")


def test_register_duplicate_username(register_user):
    assert register_user().status_code == 201
    response = register_user()
    assert response.status_code == 409
    assert response.get_json()["field"] == "username"


def test_register_validation(register_user):
    response = register_user("maria", "short")
    assert response.status_code == 400
    fields = {e["field"] for e in response.get_json()["errors"]}
    assert fields == {"username", "password"}


def test_password_is_stored_hashed(register_user, store):
    register_user()
    user = store.get_user_by_username(DEFAULT_USERNAME)
    assert user.password_hash != DEFAULT_PASSWORD
    assert user.password_hash.startswith("$2")


def test_login_success(client, register_user):
    register_user()
    response = client.post("/api/auth/login", json={
        "username": DEFAULT_USERNAME,
        "password": DEFAULT_PASSWORD,
    })
    assert response.status_code == 200
    token = response.get_json()["token"]

    me = client.get("/api/auth/user", headers=auth_headers(token))
    assert me.status_code == 200
    assert me.get_json()["username"] == DEFAULT_USERNAME


def test_login_wrong_password(client, register_user):
    register_user()
    response = client.post("/api/auth/login", json={
        "username": DEFAULT_USERNAME,
        "password": "WRONG1234",
    })
    assert response.status_code == 401


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"username": "NADIE", "password": "ABC12345"})
    assert response.status_code == 401


def test_login_missing_fields(client):
    assert client.post("/api/auth/login", json={"username": "ADMIN"}).status_code == 400
    assert client.post("/api/auth/login", data="not json").status_code == 400


def test_logout_revokes_token(client, headers):
    assert client.get("/api/auth/user", headers=headers).status_code == 200

    response = client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200

    assert client.get("/api/auth/user", headers=headers).status_code == 401
    assert client.post("/api/auth/logout", headers=headers).status_code == 401


def test_logout_without_header(client):
    assert client.post("/api/auth/logout").status_code == 401


def test_idle_session_is_rejected(app, client, register_user):
    token = register_user().get_json()["token"]
    sessions = get_record_store().session_store
    token_hash = session_service.hash_token(token)

    sessions.touch(token_hash, utcnow() - timedelta(hours=3))

    assert client.get("/api/auth/user", headers=auth_headers(token)).status_code == 401
    assert sessions.get(token_hash).is_revoked


def test_cleanup_removes_old_revoked_sessions(app, client, register_user):
    token = register_user().get_json()["token"]
    session_service.revoke_session(token)
    assert session_service.cleanup_expired_sessions() == 0

    sessions = get_record_store().session_store
    record = sessions.get(session_service.hash_token(token))
    assert record.is_revoked
    assert record.created_at > utcnow() - timedelta(days=1)
