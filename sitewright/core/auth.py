"""
Request authentication.

Priority:
1. Clerk JWT from the Authorization header (user upserted from its claims)
2. X-User-Id header, only when AUTH_HEADER_FALLBACK is enabled (dev/tests)
3. AuthenticationError (401)
"""
import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Header, Request

from sitewright.core.clerk_auth import verify_jwt_token
from sitewright.core.config import settings
from sitewright.core.errors import AuthenticationError, StorageError
from sitewright.features.users.service import upsert_user

logger = logging.getLogger("sitewright")


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None


def verify_bearer(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.

    Raises:
        AuthenticationError: expired, invalid or subject-less token
    """
    try:
        claims = verify_jwt_token(token)
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired") from e
    except jwt.PyJWTError as e:
        logger.debug(f"Invalid token: {e}")
        raise AuthenticationError("Invalid token") from e

    if not claims.get("sub"):
        raise AuthenticationError("Invalid token")
    return claims


def _sync_user(user_id: str, claims: Optional[Dict[str, Any]] = None) -> None:
    claims = claims or {}
    try:
        upsert_user(
            user_id,
            email=claims.get("email"),
            first_name=claims.get("given_name") or claims.get("first_name"),
            last_name=claims.get("family_name") or claims.get("last_name"),
            profile_image_url=claims.get("picture") or claims.get("image_url"),
        )
    except StorageError as e:
        # Don't block auth if upsert fails
        logger.warning(f"Failed to upsert user {user_id}: {e}")


async def get_current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, description="Dev/test only: caller user id"),
) -> str:
    """
    Resolve the authenticated user id and make sure the user row exists.

    Raises:
        AuthenticationError: missing or invalid credentials
    """
    token = bearer_token(request)
    if token:
        # An invalid token never falls through to X-User-Id
        claims = verify_bearer(token)
        user_id = claims["sub"]
        _sync_user(user_id, claims)
        request.state.user_id = user_id
        return user_id

    if x_user_id and x_user_id.strip() and settings.AUTH_HEADER_FALLBACK:
        user_id = x_user_id.strip()
        _sync_user(user_id)
        request.state.user_id = user_id
        return user_id

    raise AuthenticationError("Unauthorized")
