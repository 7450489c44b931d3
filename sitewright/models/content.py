"""
Content document schema.

A website's content is an opaque JSON document. Only the parts the
application itself reads are validated (pages with name/slug/content,
styling colors and font); every other key is passed through untouched.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from sitewright.core.errors import ValidationError

DEFAULT_STYLING = {
    "primaryColor": "#3B82F6",
    "secondaryColor": "#6366F1",
    "fontFamily": "Inter",
}


class Page(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    slug: str
    content: Dict[str, Any] = Field(default_factory=dict)


class Styling(BaseModel):
    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)

    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    font_family: Optional[str] = None


class SiteContent(BaseModel):
    """Persisted document shape for templates and websites."""
    model_config = ConfigDict(extra="allow")

    pages: List[Page] = Field(default_factory=list)
    styling: Optional[Styling] = None


class GeneratedStyling(Styling):
    primary_color: str
    secondary_color: str
    font_family: str


class GeneratedWebsite(BaseModel):
    """What the generator must return: a title, at least one page and full styling."""
    model_config = ConfigDict(extra="allow")

    title: str = Field(min_length=1)
    pages: List[Page] = Field(min_length=1)
    styling: GeneratedStyling


def empty_site_content() -> Dict[str, Any]:
    return {"pages": [], "styling": dict(DEFAULT_STYLING)}


def pydantic_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def duplicate_slugs(document: Dict[str, Any]) -> List[str]:
    seen = set()
    duplicates = []
    for page in document.get("pages") or []:
        slug = page.get("slug")
        if slug in seen and slug not in duplicates:
            duplicates.append(slug)
        seen.add(slug)
    return duplicates


def validate_site_content(document: Any, *, unique_slugs: bool = True) -> Dict[str, Any]:
    """Check the readable parts of a content document and return it unchanged.

    Raises:
        ValidationError: document is not an object, pages/styling are malformed,
            or (when ``unique_slugs``) two pages share a slug.
    """
    if not isinstance(document, dict):
        raise ValidationError(
            "Content must be a JSON object",
            errors=[{"loc": ["content"], "msg": "expected an object", "type": "dict_type"}],
        )
    try:
        SiteContent.model_validate(document)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid website content", errors=pydantic_errors(exc)) from exc

    if unique_slugs:
        duplicates = duplicate_slugs(document)
        if duplicates:
            raise ValidationError(
                "Page slugs must be unique within a website",
                errors=[
                    {"loc": ["content", "pages"], "msg": f"duplicate slug '{slug}'", "type": "value_error"}
                    for slug in duplicates
                ],
            )
    return document
