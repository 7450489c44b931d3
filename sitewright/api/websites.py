"""
Website management API.

Every handler runs in the same order: authentication, body validation,
existence, ownership, business policy, then the action itself.
"""

import copy
from typing import List

from fastapi import APIRouter, Depends, Response

from sitewright.core.auth import get_current_user_id
from sitewright.core.errors import ConflictError, NotFoundError
from sitewright.core.logging import log_event
from sitewright.features.templates.service import get_template
from sitewright.features.websites.access import load_owned_website
from sitewright.features.websites.service import (
    SUBDOMAIN_TAKEN,
    create_website,
    delete_website,
    get_website_by_subdomain,
    list_user_websites,
    update_website,
)
from sitewright.models.content import empty_site_content, validate_site_content
from sitewright.models.website import Website, WebsiteCreate, WebsiteUpdate, normalize_subdomain

router = APIRouter(prefix="/api/websites", tags=["websites"])


def _require_template(template_id: str):
    template = get_template(template_id)
    if template is None:
        raise NotFoundError("Template not found")
    return template


@router.get("", response_model=List[Website])
async def list_websites(user_id: str = Depends(get_current_user_id)):
    """The caller's websites, most recently updated first."""
    return list_user_websites(user_id)


@router.get("/{website_id}", response_model=Website)
async def get_website_endpoint(website_id: str, user_id: str = Depends(get_current_user_id)):
    return load_owned_website(website_id, user_id)


@router.post("", response_model=Website, status_code=201)
async def create_website_endpoint(body: WebsiteCreate, user_id: str = Depends(get_current_user_id)):
    subdomain = normalize_subdomain(body.subdomain)

    content = body.content
    if content is not None:
        validate_site_content(content)
    if body.template_id is not None:
        template = _require_template(body.template_id)
        if content is None:
            content = copy.deepcopy(template.content)
    if content is None:
        content = empty_site_content()

    # Fast path for a friendly error; the unique constraint still decides races
    if get_website_by_subdomain(subdomain) is not None:
        raise ConflictError(SUBDOMAIN_TAKEN)

    return create_website(
        user_id=user_id,
        name=body.name,
        subdomain=subdomain,
        content=content,
        template_id=body.template_id,
        custom_domain=body.custom_domain,
        is_published=body.is_published,
    )


@router.patch("/{website_id}", response_model=Website)
async def update_website_endpoint(
    website_id: str,
    body: WebsiteUpdate,
    user_id: str = Depends(get_current_user_id),
):
    website = load_owned_website(website_id, user_id)
    changes = body.changes()

    if "content" in changes:
        validate_site_content(changes["content"])
    if changes.get("template_id") is not None:
        _require_template(changes["template_id"])
    if "subdomain" in changes:
        changes["subdomain"] = normalize_subdomain(changes["subdomain"])
        holder = get_website_by_subdomain(changes["subdomain"])
        if holder is not None and holder.id != website.id:
            raise ConflictError(SUBDOMAIN_TAKEN)

    updated = update_website(website.id, changes)
    log_event(
        "info",
        "website.updated",
        user_id=user_id,
        website_id=website.id,
        event_type="website.updated",
        extra={"fields": ",".join(sorted(changes))},
    )
    return updated


@router.delete("/{website_id}", status_code=204)
async def delete_website_endpoint(website_id: str, user_id: str = Depends(get_current_user_id)):
    website = load_owned_website(website_id, user_id)
    if not delete_website(website.id):
        raise NotFoundError("Website not found")
    log_event("info", "website.deleted", user_id=user_id, website_id=website.id, event_type="website.deleted")
    return Response(status_code=204)
