from conftest import register, bearer, ADMIN_EMAIL, ADMIN_PASSWORD
from utils.hash import hash_password, verify_password
from utils.jwt_handler import create_access_token, decode_access_token
import pytest


def test_password_hash_and_verify_roundtrip():
    """A hashed password verifies, a different one does not."""
    hashed = hash_password("My_S3cret_pass")
    assert hashed != "My_S3cret_pass"
    assert verify_password("My_S3cret_pass", hashed) is True
    assert verify_password("other_pass", hashed) is False


def test_token_carries_identity_and_role():
    token = create_access_token({"sub": "a@b.com", "id": "abc", "role": "CUSTOMER", "token_version": 0})
    assert len(token.split(".")) == 3
    payload = decode_access_token(token)
    assert payload["sub"] == "a@b.com"
    assert payload["role"] == "CUSTOMER"
    assert "exp" in payload


def test_invalid_token_raises_value_error():
    with pytest.raises(ValueError):
        decode_access_token("invalid.token.value")


def test_register_creates_customer(client):
    body = register(client, "new.user@example.com")
    assert body["email"] == "new.user@example.com"
    assert body["role"] == "CUSTOMER"
    assert body["id"]
    assert body["token_type"] == "bearer"


def test_register_duplicate_email(client):
    register(client, "dup@example.com")
    resp = client.post("/api/auth/register", json={"email": "dup@example.com", "password": "whatever"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "CONFLICT"


def test_login_and_me(client):
    register(client, "me@example.com", password="pw-123456")
    resp = client.post("/api/auth/login", json={"email": "me@example.com", "password": "pw-123456"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    me = client.get("/api/auth/me", headers=bearer(token))
    assert me.status_code == 200
    assert me.json()["email"] == "me@example.com"
    assert me.json()["role"] == "CUSTOMER"


def test_admin_login_reports_role(client, admin_headers):
    me = client.get("/api/auth/me", headers=admin_headers).json()
    assert me["email"] == ADMIN_EMAIL
    assert me["role"] == "ADMIN"


def test_login_with_wrong_password(client):
    register(client, "wrong@example.com", password="right-one")
    resp = client.post("/api/auth/login", json={"email": "wrong@example.com", "password": "wrong-one"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "INVALID_CREDENTIALS"


def test_login_unknown_user(client):
    resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": ADMIN_PASSWORD})
    assert resp.status_code == 401


def test_me_without_session(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"


def test_me_with_garbage_token(client):
    assert client.get("/api/auth/me", headers=bearer("garbage")).status_code == 401


def test_logout_ends_session(client, customer_headers):
    assert client.get("/api/auth/me", headers=customer_headers).status_code == 200

    resp = client.post("/api/auth/logout", headers=customer_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Logout successful"

    assert client.get("/api/auth/me", headers=customer_headers).status_code == 401
    assert client.post("/api/auth/logout", headers=customer_headers).status_code == 401
