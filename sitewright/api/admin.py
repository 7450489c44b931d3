"""Operator endpoints."""

from fastapi import APIRouter, Depends

from sitewright.core.admin_auth import AdminActor, require_admin
from sitewright.core.logging import log_event
from sitewright.features.users.service import update_user_plan
from sitewright.models.user import PlanUpdateRequest, User

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.put("/users/{user_id}/plan", response_model=User)
async def set_user_plan(
    user_id: str,
    body: PlanUpdateRequest,
    actor: AdminActor = Depends(require_admin),
):
    user = update_user_plan(user_id, body.plan)
    log_event(
        "info",
        "admin.plan_updated",
        user_id=user_id,
        event_type="admin.plan_updated",
        extra={"plan": body.plan.value, "actor_id": actor.actor_id, "auth_mechanism": actor.auth_mechanism},
    )
    return user
