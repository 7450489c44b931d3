"""AI generation quota for the free plan."""

from typing import Optional

from sitewright.core.config import settings
from sitewright.core.errors import QuotaExceededError
from sitewright.core.logging import log_event
from sitewright.features.users.service import decrement_ai_generations, increment_ai_generations
from sitewright.models.user import Plan, User

QUOTA_EXCEEDED_MESSAGE = "AI generation limit reached. Upgrade to Pro for unlimited generations."


def _free_limit(free_limit: Optional[int]) -> int:
    return settings.FREE_PLAN_AI_GENERATIONS if free_limit is None else free_limit


def has_generation_quota(user: User, free_limit: Optional[int] = None) -> bool:
    return user.plan != Plan.FREE or user.ai_generations_used < _free_limit(free_limit)


def _blocked(user: User) -> QuotaExceededError:
    log_event(
        "info",
        "quota.blocked",
        user_id=user.id,
        event_type="quota.blocked",
        error_code=QuotaExceededError.code,
        extra={"plan": user.plan.value, "used": user.ai_generations_used},
    )
    return QuotaExceededError(QUOTA_EXCEEDED_MESSAGE)


def reserve_generation(user: User, free_limit: Optional[int] = None) -> User:
    """
    Claim one generation for `user` before calling the model.

    The claim is the counter UPDATE itself, guarded by the free-plan limit, so
    concurrent requests can never push a free user past it. Paid plans are
    unlimited. Call release_generation if the generation then fails.

    Raises:
        QuotaExceededError: free-plan user has used up their generations
    """
    limit = _free_limit(free_limit)
    if not has_generation_quota(user, limit):
        raise _blocked(user)

    reserved = increment_ai_generations(user.id, free_limit=limit)
    if reserved is None:
        raise _blocked(user)
    return reserved


def release_generation(user_id: str) -> None:
    decrement_ai_generations(user_id)
    log_event("info", "quota.released", user_id=user_id, event_type="quota.released")
