"""
Tests de autenticación local: registro, login, /me y reseteo de contraseña.
"""

from datetime import timedelta

import pytest

from recipe_ai_core import mailer
from recipe_ai_core.db.helpers import PASSWORD_RESET_MESSAGE, get_user_by_email
from recipe_ai_core.db.models import utcnow
from recipe_ai_core.errors import AuthenticationError
from recipe_ai_core.security import (
    create_access_token,
    decode_access_token,
    generate_reset_token,
    gravatar_url,
    hash_password,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("otra", hashed)
    assert not verify_password("secret123", "")


def test_access_token_claims():
    token = create_access_token("user-1", ["user", "admin"], True)
    payload = decode_access_token(token)
    assert payload["sub"] == "user-1"
    assert payload["roles"] == ["user", "admin"]
    assert payload["is_approved"] is True
    assert payload["jti"]


def test_expired_token_is_rejected():
    token = create_access_token("user-1", ["user"], True, expires_minutes=-1)
    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_reset_token_is_64_hex_chars():
    token = generate_reset_token()
    assert len(token) == 64
    int(token, 16)


def test_gravatar_url_normalizes_email():
    assert gravatar_url(" Ana@Example.com ") == gravatar_url("ana@example.com")


def test_signup_creates_pending_user(client, db_session):
    resp = client.post(
        "/api/v1/auth/signup",
        json={"email": "Nuevo@Example.com", "password": "secret123", "display_name": "Nuevo"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["email"] == "nuevo@example.com"
    assert body["user"]["is_approved"] is False
    assert body["user"]["roles"] == ["user"]

    user = get_user_by_email(db_session, "nuevo@example.com")
    assert user.password_hash != "secret123"


def test_signup_notifies_admins(client, admin, monkeypatch):
    sent = []
    monkeypatch.setattr(mailer, "send_email", lambda to, subject, text, html=None: sent.append(to) or True)

    resp = client.post("/api/v1/auth/signup", json={"email": "nuevo@example.com", "password": "secret123"})
    assert resp.status_code == 201
    assert sent == ["admin@example.com"]


def test_signup_duplicate_email(client, user):
    resp = client.post("/api/v1/auth/signup", json={"email": "ANA@example.com", "password": "secret123"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "auth/email-already-in-use"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "no-es-email", "password": "secret123"},
        {"email": "x@example.com", "password": "123"},
        {"email": "x@example.com", "password": "secret123", "display_name": "X"},
    ],
)
def test_signup_validation(client, payload):
    resp = client.post("/api/v1/auth/signup", json=payload)
    assert resp.status_code == 400


def test_login_and_me(client, user):
    resp = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "secret123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == user.id

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ana@example.com"
    assert me.json()["gravatar_url"].startswith("https://www.gravatar.com/avatar/")


def test_login_wrong_password(client, user):
    resp = client.post("/api/v1/auth/login", json={"email": "ana@example.com", "password": "mala"})
    assert resp.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    bad = client.get("/api/v1/auth/me", headers={"Authorization": "Token abc"})
    assert bad.status_code == 401
    invalid = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer abc.def.ghi"})
    assert invalid.status_code == 401


def test_forgot_password_same_message_for_unknown_email(client, user):
    known = client.post("/api/v1/auth/forgot-password", json={"email": "ana@example.com"})
    unknown = client.post("/api/v1/auth/forgot-password", json={"email": "nadie@example.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json() == {"message": PASSWORD_RESET_MESSAGE}


def test_forgot_password_sends_link(client, user, monkeypatch):
    sent = {}

    def fake_send(to, subject, text, html=None):
        sent["to"] = to
        sent["text"] = text
        return True

    monkeypatch.setattr(mailer, "send_email", fake_send)
    client.post("/api/v1/auth/forgot-password", json={"email": "ana@example.com"})

    assert sent["to"] == "ana@example.com"
    assert f"/reset-password?token={user.reset_token}" in sent["text"]


def test_reset_password_flow(client, db_session, user):
    client.post("/api/v1/auth/forgot-password", json={"email": "ana@example.com"})
    token = user.reset_token
    assert token

    resp = client.put("/api/v1/auth/reset-password", json={"token": token, "new_password": "nueva123"})
    assert resp.status_code == 200
    assert user.reset_token is None
    assert verify_password("nueva123", user.password_hash)

    # El token es de un solo uso
    again = client.put("/api/v1/auth/reset-password", json={"token": token, "new_password": "otra1234"})
    assert again.status_code == 400


def test_reset_password_expired_token(client, db_session, user):
    user.reset_token = "a" * 64
    user.reset_token_expiry = utcnow() - timedelta(minutes=1)
    db_session.flush()

    resp = client.put("/api/v1/auth/reset-password", json={"token": "a" * 64, "new_password": "nueva123"})
    assert resp.status_code == 400


def test_send_email_skipped_without_smtp_host():
    assert mailer.send_email("ana@example.com", "Hola", "texto") is False


def test_health(client):
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json()["service"] == "recipe-ai-core-api"
