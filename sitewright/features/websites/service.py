"""
Website gateway.

Handles:
- Listing a user's websites (most recently updated first)
- Lookup by id and by subdomain (case-sensitive exact match on the canonical form)
- Create with a storage-enforced unique subdomain
- Partial update (top-level fields replaced, content replaced wholesale)
- Hard delete
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError

from sitewright.core.database import storage_session, websites
from sitewright.core.errors import AppError, ConflictError, NotFoundError, StorageError
from sitewright.core.logging import log_event
from sitewright.models.website import MUTABLE_FIELDS, Website, normalize_subdomain

SUBDOMAIN_TAKEN = "Subdomain already taken"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _integrity_failure(exc: IntegrityError, subdomain: Optional[str], website_id: Optional[str] = None) -> AppError:
    """Map a constraint violation: a subdomain held by another website is a conflict, anything else a storage failure."""
    if subdomain is not None:
        holder = get_website_by_subdomain(subdomain)
        if holder is not None and holder.id != website_id:
            return ConflictError(SUBDOMAIN_TAKEN)
    log_event(
        "error",
        "websites.integrity_error",
        website_id=website_id,
        event_type="storage.integrity_error",
        error_code=StorageError.code,
        extra={"detail": str(exc.orig)},
    )
    return StorageError()


def _to_website(row) -> Website:
    return Website(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        subdomain=row.subdomain,
        custom_domain=row.custom_domain,
        template_id=row.template_id,
        content=row.content,
        is_published=row.is_published,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def list_user_websites(user_id: str) -> List[Website]:
    with storage_session("websites.list") as session:
        rows = session.execute(
            select(websites)
            .where(websites.c.user_id == user_id)
            .order_by(websites.c.updated_at.desc())
        ).all()
        return [_to_website(row) for row in rows]


def get_website(website_id: str) -> Optional[Website]:
    with storage_session("websites.get") as session:
        row = session.execute(select(websites).where(websites.c.id == website_id)).first()
        return _to_website(row) if row else None


def get_website_by_subdomain(subdomain: str) -> Optional[Website]:
    """Exact, case-sensitive match against the stored canonical subdomain."""
    with storage_session("websites.get_by_subdomain") as session:
        row = session.execute(select(websites).where(websites.c.subdomain == subdomain)).first()
        return _to_website(row) if row else None


def create_website(
    *,
    user_id: str,
    name: str,
    subdomain: str,
    content: Dict[str, Any],
    template_id: Optional[str] = None,
    custom_domain: Optional[str] = None,
    is_published: bool = False,
) -> Website:
    """
    Insert a website.

    Raises:
        ValidationError: subdomain is not valid in canonical form
        ConflictError: subdomain already in use (unique constraint)
        StorageError: any other constraint failure (unknown user or template)
    """
    canonical = normalize_subdomain(subdomain)
    website_id = str(uuid.uuid4())
    now = _now()

    try:
        with storage_session("websites.create") as session:
            session.execute(
                insert(websites).values(
                    id=website_id,
                    user_id=user_id,
                    name=name,
                    subdomain=canonical,
                    custom_domain=custom_domain,
                    template_id=template_id,
                    content=content,
                    is_published=is_published,
                    created_at=now,
                    updated_at=now,
                )
            )
    except IntegrityError as exc:
        raise _integrity_failure(exc, canonical) from exc

    log_event(
        "info",
        "website.created",
        user_id=user_id,
        website_id=website_id,
        event_type="website.created",
        extra={"subdomain": canonical},
    )
    return get_website(website_id)


def update_website(website_id: str, changes: Dict[str, Any]) -> Website:
    """
    Replace the provided top-level fields; `content` is replaced as a whole.

    Raises:
        NotFoundError: website does not exist
        ValidationError: new subdomain is not valid
        ConflictError: new subdomain already in use
        StorageError: any other constraint failure
    """
    values = {key: value for key, value in changes.items() if key in MUTABLE_FIELDS}
    if "subdomain" in values:
        values["subdomain"] = normalize_subdomain(values["subdomain"])
    values["updated_at"] = _now()

    try:
        with storage_session("websites.update") as session:
            result = session.execute(
                update(websites).where(websites.c.id == website_id).values(**values)
            )
            if result.rowcount == 0:
                raise NotFoundError("Website not found")
    except IntegrityError as exc:
        raise _integrity_failure(exc, values.get("subdomain"), website_id) from exc

    return get_website(website_id)


def delete_website(website_id: str) -> bool:
    with storage_session("websites.delete") as session:
        result = session.execute(delete(websites).where(websites.c.id == website_id))
        return result.rowcount > 0
