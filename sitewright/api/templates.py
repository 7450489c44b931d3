"""Public template gallery."""

from typing import List, Optional

from fastapi import APIRouter, Query

from sitewright.core.errors import NotFoundError
from sitewright.features.templates.service import (
    get_template,
    increment_template_view_count,
    list_templates,
)
from sitewright.models.template import Template

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", response_model=List[Template])
async def list_templates_endpoint(category: Optional[str] = Query(None)):
    """Active templates, most viewed first, optionally filtered by category."""
    return list_templates(category=category or None)


@router.get("/{template_id}", response_model=Template)
async def get_template_endpoint(template_id: str):
    """Return a template and count the view. Inactive templates are not served."""
    template = get_template(template_id)
    if template is None or not template.is_active:
        raise NotFoundError("Template not found")

    viewed = increment_template_view_count(template_id)
    if viewed is None:
        raise NotFoundError("Template not found")
    return viewed
