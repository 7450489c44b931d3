"""
Clerk JWT verification.

Handles:
- HS256 verification with CLERK_SECRET_KEY (development/testing)
- RS256 verification against the instance JWKS (production)
- Role extraction for admin checks
- Test helpers for deterministic testing (no network)

Testing:
- Use create_test_jwt() to mint tokens
- Install a JWKS fetcher with set_jwks_provider_for_tests()
"""
import json
import time
from typing import Any, Callable, Dict, Optional

import httpx
import jwt
from jwt.algorithms import RSAAlgorithm

from sitewright.core.config import settings

JWKS_FETCH_TIMEOUT_SECONDS = 5.0

# JWKS override (tests) and cache keyed by issuer/jwks_url
_jwks_provider_override: Optional[Callable[[str, str], Dict[str, Any]]] = None
_jwks_cache: Dict[str, Dict[str, Any]] = {}


def set_jwks_provider_for_tests(provider: Optional[Callable[[str, str], Dict[str, Any]]]) -> None:
    """Set or clear JWKS provider override for deterministic testing (no network)."""
    global _jwks_provider_override
    _jwks_provider_override = provider
    _jwks_cache.clear()


def _default_fetch_jwks(issuer: str, jwks_url: str) -> Dict[str, Any]:
    response = httpx.get(jwks_url, timeout=JWKS_FETCH_TIMEOUT_SECONDS)
    response.raise_for_status()
    return response.json()


def get_jwks(issuer: str, jwks_url: Optional[str] = None) -> Dict[str, Any]:
    """Fetch JWKS using override (tests) or default fetcher. Cached per issuer/url."""
    resolved_url = jwks_url or f"{issuer.rstrip('/')}/.well-known/jwks.json"
    cache_key = f"{issuer}|{resolved_url}"

    if cache_key in _jwks_cache:
        return _jwks_cache[cache_key]

    if _jwks_provider_override:
        jwks = _jwks_provider_override(issuer, resolved_url)
    else:
        try:
            jwks = _default_fetch_jwks(issuer, resolved_url)
        except httpx.HTTPError as e:
            raise jwt.PyJWTError(f"Failed to fetch JWKS: {e}") from e

    _jwks_cache[cache_key] = jwks
    return jwks


def verify_jwt_token(token: str) -> Dict[str, Any]:
    """
    Verify a Clerk JWT and return its claims.

    Args:
        token: Raw JWT string (without "Bearer " prefix)

    Returns:
        Decoded claims dict (sub, email, given_name, family_name, picture,
        public_metadata, ...)

    Raises:
        jwt.PyJWTError: invalid, expired or unverifiable token
    """
    secret = settings.CLERK_SECRET_KEY
    if secret:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            options={"verify_signature": True, "verify_exp": True, "verify_aud": False},
        )

    issuer = settings.CLERK_ISSUER
    jwks_url = settings.CLERK_JWKS_URL
    if not issuer and not jwks_url:
        raise jwt.PyJWTError("CLERK_ISSUER or CLERK_JWKS_URL must be configured for RS256 verification")

    kid = jwt.get_unverified_header(token).get("kid")
    if not kid:
        raise jwt.PyJWTError("Token missing 'kid' in header")

    jwks = get_jwks(issuer or "https://clerk.invalid", jwks_url)
    matching_key = next((key for key in jwks.get("keys", []) if key.get("kid") == kid), None)
    if not matching_key:
        raise jwt.PyJWTError(f"Key ID '{kid}' not found in JWKS")

    public_key = RSAAlgorithm.from_jwk(json.dumps(matching_key))
    return jwt.decode(
        token,
        public_key,
        algorithms=["RS256"],
        audience=settings.CLERK_AUDIENCE,
        issuer=issuer,
        options={"verify_signature": True, "verify_exp": True, "verify_aud": bool(settings.CLERK_AUDIENCE)},
    )


def is_admin_user(claims: Dict[str, Any]) -> bool:
    """public_metadata.role == "admin" (or org_role == "admin" for Clerk organizations)."""
    public_metadata = claims.get("public_metadata") or {}
    if isinstance(public_metadata, dict) and public_metadata.get("role") == "admin":
        return True
    return claims.get("org_role") == "admin"


# ============================================================================
# Test Helpers (deterministic, no network)
# ============================================================================

def create_test_jwt(
    sub: str = "user_test_123",
    email: Optional[str] = "owner@example.com",
    role: Optional[str] = None,
    exp_minutes: int = 60,
    secret: str = "test-secret-key",
    algorithm: str = "HS256",
    private_key: Optional[str] = None,
    kid: Optional[str] = None,
    issuer: Optional[str] = None,
    audience: Optional[str] = None,
    given_name: Optional[str] = None,
    family_name: Optional[str] = None,
    picture: Optional[str] = None,
) -> str:
    """
    Create a signed JWT for tests.

    HS256 by default; pass algorithm="RS256" with a PEM private_key and kid for
    JWKS-based verification. A negative exp_minutes yields an expired token.
    """
    now = int(time.time())
    payload: Dict[str, Any] = {
        "sub": sub,
        "email": email,
        "iat": now,
        "exp": now + (exp_minutes * 60),
        "iss": issuer or settings.CLERK_ISSUER or "https://test.clerk.accounts.dev",
        "aud": audience or settings.CLERK_AUDIENCE or "test-audience",
        "public_metadata": {},
    }
    if given_name:
        payload["given_name"] = given_name
    if family_name:
        payload["family_name"] = family_name
    if picture:
        payload["picture"] = picture
    if role:
        payload["public_metadata"]["role"] = role

    headers = {"kid": kid} if kid else None
    key = private_key if algorithm == "RS256" and private_key else secret
    return jwt.encode(payload, key, algorithm=algorithm, headers=headers)
