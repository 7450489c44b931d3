"""Current-user endpoint."""

from fastapi import APIRouter, Depends

from sitewright.core.auth import get_current_user_id
from sitewright.core.errors import NotFoundError
from sitewright.features.users.service import get_user
from sitewright.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/user", response_model=User)
async def get_auth_user(user_id: str = Depends(get_current_user_id)):
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
