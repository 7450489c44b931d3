"""Ownership guard shared by every website handler."""

from typing import Callable, Optional, TypeVar

from sitewright.core.errors import AuthorizationError, NotFoundError
from sitewright.core.logging import log_event
from sitewright.features.websites.service import get_website
from sitewright.models.website import Website

T = TypeVar("T")


def require_owner(
    loader: Callable[[str], Optional[T]],
    resource_id: str,
    actor_id: str,
    *,
    owner_attr: str = "user_id",
    label: str = "Resource",
) -> T:
    """Load a resource and ensure `actor_id` owns it.

    Raises:
        NotFoundError: loader returned nothing
        AuthorizationError: resource belongs to someone else
    """
    resource = loader(resource_id)
    if resource is None:
        raise NotFoundError(f"{label} not found")
    if getattr(resource, owner_attr) != actor_id:
        log_event(
            "warning",
            "access.denied",
            user_id=actor_id,
            event_type="access.denied",
            extra={"resource": label.lower(), "resource_id": resource_id},
        )
        raise AuthorizationError()
    return resource


def load_owned_website(website_id: str, user_id: str) -> Website:
    return require_owner(get_website, website_id, user_id, label="Website")
