"""Public lookup of published websites by subdomain."""

from fastapi import APIRouter

from sitewright.core.errors import NotFoundError
from sitewright.features.websites.service import get_website_by_subdomain
from sitewright.models.website import Website

router = APIRouter(prefix="/api/sites", tags=["sites"])


@router.get("/{subdomain}", response_model=Website)
async def get_published_site(subdomain: str):
    # Missing and unpublished sites are indistinguishable to the caller
    website = get_website_by_subdomain(subdomain)
    if website is None or not website.is_published:
        raise NotFoundError("Website not found")
    return website
