"""AI generation API.

Generation claims one unit of the free-plan quota up front and gives it back
if the model call fails, so only successful generations stay counted;
modification rewrites an owned website's content in place.
"""

from fastapi import APIRouter, Depends

from sitewright.core.auth import get_current_user_id
from sitewright.core.errors import NotFoundError
from sitewright.core.logging import log_event
from sitewright.features.generation import service as generation
from sitewright.features.users.quota import release_generation, reserve_generation
from sitewright.features.users.service import get_user
from sitewright.features.websites.access import load_owned_website
from sitewright.features.websites.service import update_website
from sitewright.models.ai import (
    GenerateContentRequest,
    GeneratedContentResponse,
    GenerateWebsiteRequest,
    ModifyWebsiteRequest,
    ModifyWebsiteResponse,
)
from sitewright.models.user import User

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _reserve_generation(user_id: str) -> User:
    user = get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return reserve_generation(user)


@router.post("/generate-website")
async def generate_website_endpoint(
    body: GenerateWebsiteRequest,
    user_id: str = Depends(get_current_user_id),
):
    """Generate a website document. Returned as produced; nothing is persisted but the counter."""
    user = _reserve_generation(user_id)
    try:
        result = await generation.generate_website(body.prompt, body.business_type, body.style)
    except Exception:
        release_generation(user_id)
        raise

    log_event(
        "info",
        "ai.generate.succeeded",
        user_id=user_id,
        event_type="ai.generate.succeeded",
        extra={"ai_generations_used": user.ai_generations_used},
    )
    return result


@router.post("/modify-website", response_model=ModifyWebsiteResponse)
async def modify_website_endpoint(
    body: ModifyWebsiteRequest,
    user_id: str = Depends(get_current_user_id),
):
    website = load_owned_website(body.website_id, user_id)

    # A failure here propagates before anything is written
    content = await generation.modify_website(website.content, body.instruction)

    updated = update_website(website.id, {"content": content})
    log_event("info", "ai.modify.succeeded", user_id=user_id, website_id=website.id, event_type="ai.modify.succeeded")
    return ModifyWebsiteResponse(message="Website modified successfully", content=content, website=updated)


@router.post("/generate-content", response_model=GeneratedContentResponse)
async def generate_content_endpoint(
    body: GenerateContentRequest,
    user_id: str = Depends(get_current_user_id),
):
    _reserve_generation(user_id)
    try:
        content = await generation.generate_content(body.business_type, body.prompt)
    except Exception:
        release_generation(user_id)
        raise

    log_event("info", "ai.content.succeeded", user_id=user_id, event_type="ai.content.succeeded")
    return GeneratedContentResponse(business_type=body.business_type, content=content)
