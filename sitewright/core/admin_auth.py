"""
Admin authentication for operator endpoints (plan changes).

Accepted credentials:
- Clerk JWT whose public_metadata.role is "admin"
- X-Admin-Key header equal to ADMIN_KEY
"""
import hashlib
import hmac
from dataclasses import dataclass
from typing import Literal, Optional

import jwt
from fastapi import Request

from sitewright.core.auth import bearer_token
from sitewright.core.clerk_auth import is_admin_user, verify_jwt_token
from sitewright.core.config import settings
from sitewright.core.errors import AuthenticationError
from sitewright.core.logging import log_event


@dataclass
class AdminActor:
    """Represents an authenticated admin actor."""
    actor_id: str  # Clerk user ID or "key:<hash>"
    auth_mechanism: Literal["clerk_jwt", "x_admin_key"]
    actor_email: Optional[str] = None


def verify_admin_key(request: Request) -> Optional[AdminActor]:
    expected_key = settings.ADMIN_KEY
    if not expected_key:
        return None

    header_key = request.headers.get("X-Admin-Key", "").strip()
    if not header_key or not hmac.compare_digest(header_key, expected_key):
        return None

    key_hash = hashlib.sha256(header_key.encode()).hexdigest()[:16]
    return AdminActor(actor_id=f"key:{key_hash}", auth_mechanism="x_admin_key")


def verify_admin_jwt(request: Request) -> Optional[AdminActor]:
    token = bearer_token(request)
    if not token:
        return None
    try:
        claims = verify_jwt_token(token)
    except jwt.PyJWTError:
        return None
    if not claims.get("sub") or not is_admin_user(claims):
        return None
    return AdminActor(actor_id=claims["sub"], auth_mechanism="clerk_jwt", actor_email=claims.get("email"))


def require_admin(request: Request) -> AdminActor:
    """
    FastAPI dependency: require admin authentication.

    Usage:
        @router.put("/admin/endpoint")
        async def admin_endpoint(actor: AdminActor = Depends(require_admin)):
            ...
    """
    actor = verify_admin_jwt(request) or verify_admin_key(request)
    if actor is None:
        log_event("warning", "admin.unauthorized", event_type="admin.unauthorized", error_code="unauthorized")
        raise AuthenticationError("Invalid or missing admin credentials")
    return actor
