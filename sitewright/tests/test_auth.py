"""Authentication: Clerk JWTs, the X-User-Id fallback and admin credentials."""

import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from sitewright.conftest import TEST_CLERK_SECRET
from sitewright.core import clerk_auth
from sitewright.core.clerk_auth import create_test_jwt
from sitewright.core.config import settings
from sitewright.features.users.service import get_user


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_jwt_creates_user_from_claims(client):
    token = create_test_jwt(
        sub="user_jwt",
        email="jwt@example.com",
        given_name="Jo",
        family_name="Writer",
        picture="https://img.example.com/jo.png",
        secret=TEST_CLERK_SECRET,
    )

    resp = client.get("/api/auth/user", headers=_bearer(token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == "user_jwt"
    assert body["email"] == "jwt@example.com"
    assert body["firstName"] == "Jo"
    assert body["lastName"] == "Writer"
    assert body["profileImageUrl"] == "https://img.example.com/jo.png"
    assert body["plan"] == "free"
    assert body["aiGenerationsUsed"] == 0


def test_jwt_login_refreshes_profile(client):
    client.get("/api/auth/user", headers=_bearer(create_test_jwt(sub="user_jwt", given_name="Jo", secret=TEST_CLERK_SECRET)))
    client.get("/api/auth/user", headers=_bearer(create_test_jwt(sub="user_jwt", given_name="Joanna", secret=TEST_CLERK_SECRET)))
    assert get_user("user_jwt").first_name == "Joanna"


def test_expired_jwt_is_401(client):
    token = create_test_jwt(sub="user_jwt", exp_minutes=-5, secret=TEST_CLERK_SECRET)
    resp = client.get("/api/auth/user", headers=_bearer(token))
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token expired"


def test_jwt_signed_with_wrong_secret_is_401(client):
    token = create_test_jwt(sub="user_jwt", secret="not-the-secret")
    resp = client.get("/api/auth/user", headers=_bearer(token))
    assert resp.status_code == 401
    assert get_user("user_jwt") is None


def test_invalid_jwt_does_not_fall_back_to_header(client):
    headers = {**_bearer("garbage"), "X-User-Id": "user_header"}
    assert client.get("/api/auth/user", headers=headers).status_code == 401


def test_header_fallback_creates_user(client):
    resp = client.get("/api/auth/user", headers={"X-User-Id": "user_header"})
    assert resp.status_code == 200
    assert resp.json()["id"] == "user_header"


def test_header_fallback_disabled_is_401(client, monkeypatch):
    monkeypatch.setattr(settings, "AUTH_HEADER_FALLBACK", False)
    resp = client.get("/api/auth/user", headers={"X-User-Id": "user_header"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


def test_missing_credentials_is_401(client):
    assert client.get("/api/auth/user").status_code == 401


def _b64url_uint(value: int) -> str:
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def test_rs256_jwt_verified_against_jwks(client, monkeypatch):
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    numbers = private_key.public_key().public_numbers()
    jwks = {"keys": [{"kid": "kid-1", "kty": "RSA", "alg": "RS256", "use": "sig",
                      "n": _b64url_uint(numbers.n), "e": _b64url_uint(numbers.e)}]}

    issuer = "https://sitewright-test.clerk.accounts.dev"
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", None)
    monkeypatch.setattr(settings, "CLERK_ISSUER", issuer)
    requested = []
    clerk_auth.set_jwks_provider_for_tests(lambda iss, url: requested.append(url) or jwks)

    token = create_test_jwt(sub="user_rsa", algorithm="RS256", private_key=pem, kid="kid-1", issuer=issuer)
    resp = client.get("/api/auth/user", headers=_bearer(token))

    assert resp.status_code == 200
    assert resp.json()["id"] == "user_rsa"
    assert requested == [f"{issuer}/.well-known/jwks.json"]


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

def test_admin_key_updates_plan(client, make_user, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_KEY", "admin-secret")
    make_user("user_1")

    resp = client.put("/api/admin/users/user_1/plan", json={"plan": "pro"}, headers={"X-Admin-Key": "admin-secret"})

    assert resp.status_code == 200
    assert resp.json()["plan"] == "pro"
    assert get_user("user_1").plan.value == "pro"


def test_admin_jwt_role_updates_plan(client, make_user):
    make_user("user_1")
    token = create_test_jwt(sub="admin_1", role="admin", secret=TEST_CLERK_SECRET)

    resp = client.put("/api/admin/users/user_1/plan", json={"plan": "done-for-you"}, headers=_bearer(token))

    assert resp.status_code == 200
    assert resp.json()["plan"] == "done-for-you"


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"X-Admin-Key": "wrong"},
        {"X-User-Id": "user_1"},
        {"Authorization": "Bearer " + create_test_jwt(sub="user_1", secret=TEST_CLERK_SECRET)},
    ],
)
def test_admin_endpoint_rejects_non_admins(client, make_user, monkeypatch, headers):
    monkeypatch.setattr(settings, "ADMIN_KEY", "admin-secret")
    make_user("user_1")

    resp = client.put("/api/admin/users/user_1/plan", json={"plan": "pro"}, headers=headers)

    assert resp.status_code == 401
    assert get_user("user_1").plan.value == "free"


def test_admin_plan_update_validation_and_missing_user(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_KEY", "admin-secret")
    headers = {"X-Admin-Key": "admin-secret"}

    assert client.put("/api/admin/users/ghost/plan", json={"plan": "pro"}, headers=headers).status_code == 404
    assert client.put("/api/admin/users/ghost/plan", json={"plan": "platinum"}, headers=headers).status_code == 400
