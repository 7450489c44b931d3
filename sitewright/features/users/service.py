"""
User gateway.
- get_user(user_id)
- upsert_user(user_id, ...) on authentication
- update_user_plan(user_id, plan)
- increment_ai_generations(user_id, free_limit): server-side atomic counter, optionally capped
- decrement_ai_generations(user_id): release a claimed generation
"""

from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import insert, or_, select, update
from sqlalchemy.exc import IntegrityError

from sitewright.core.database import storage_session, users
from sitewright.core.errors import NotFoundError
from sitewright.core.logging import log_event
from sitewright.models.user import Plan, User


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        profile_image_url=row.profile_image_url,
        plan=row.plan,
        ai_generations_used=row.ai_generations_used,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def get_user(user_id: str) -> Optional[User]:
    with storage_session("users.get") as session:
        row = session.execute(select(users).where(users.c.id == user_id)).first()
        return _to_user(row) if row else None


def upsert_user(
    user_id: str,
    *,
    email: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    profile_image_url: Optional[str] = None,
) -> User:
    """Create the user on first authentication, refresh profile fields afterwards.

    Plan and generation counter are never touched here. Profile values that are
    None are left as stored.
    """
    profile = {
        key: value
        for key, value in {
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "profile_image_url": profile_image_url,
        }.items()
        if value is not None
    }
    now = _now()

    try:
        with storage_session("users.upsert") as session:
            row = session.execute(select(users).where(users.c.id == user_id)).first()
            if row is None:
                session.execute(
                    insert(users).values(
                        id=user_id,
                        plan=Plan.FREE.value,
                        ai_generations_used=0,
                        created_at=now,
                        updated_at=now,
                        **profile,
                    )
                )
                log_event("info", "user.created", user_id=user_id, event_type="user.created")
            else:
                changed = {k: v for k, v in profile.items() if getattr(row, k) != v}
                if changed:
                    session.execute(
                        update(users).where(users.c.id == user_id).values(updated_at=now, **changed)
                    )
    except IntegrityError:
        # Lost a first-login race, or the email belongs to another account.
        # In the second case the user is created without the email.
        log_event("warning", "user.upsert_conflict", user_id=user_id, event_type="user.upsert_conflict")
        if email is not None and get_user(user_id) is None:
            return upsert_user(
                user_id,
                first_name=first_name,
                last_name=last_name,
                profile_image_url=profile_image_url,
            )

    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def update_user_plan(user_id: str, plan: Union[Plan, str]) -> User:
    plan_value = Plan(plan).value
    with storage_session("users.update_plan") as session:
        result = session.execute(
            update(users).where(users.c.id == user_id).values(plan=plan_value, updated_at=_now())
        )
        if result.rowcount == 0:
            raise NotFoundError("User not found")
    log_event("info", "user.plan_changed", user_id=user_id, event_type="user.plan_changed", extra={"plan": plan_value})
    return get_user(user_id)


def increment_ai_generations(user_id: str, *, free_limit: Optional[int] = None) -> Optional[User]:
    """
    Add one to the user's generation counter as a single UPDATE.

    With `free_limit`, a free-plan user already at the limit is not matched, so
    the cap holds however many requests race. Returns None in that case.
    """
    stmt = update(users).where(users.c.id == user_id)
    if free_limit is not None:
        stmt = stmt.where(
            or_(users.c.plan != Plan.FREE.value, users.c.ai_generations_used < free_limit)
        )

    with storage_session("users.increment_ai_generations") as session:
        result = session.execute(
            stmt.values(
                ai_generations_used=users.c.ai_generations_used + 1,
                updated_at=_now(),
            )
        )
        matched = result.rowcount

    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user if matched else None


def decrement_ai_generations(user_id: str) -> None:
    """Give back a generation claimed for a request that then failed. Never goes below zero."""
    with storage_session("users.decrement_ai_generations") as session:
        session.execute(
            update(users)
            .where(users.c.id == user_id, users.c.ai_generations_used > 0)
            .values(
                ai_generations_used=users.c.ai_generations_used - 1,
                updated_at=_now(),
            )
        )
