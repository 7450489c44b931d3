"""Website entity, request bodies and subdomain canonicalization."""

import re
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from sitewright.core.errors import ValidationError

_SUBDOMAIN_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

# Fields a client may change through PATCH
MUTABLE_FIELDS = ("name", "subdomain", "custom_domain", "template_id", "content", "is_published")


def normalize_subdomain(value: str) -> str:
    """Return the canonical (trimmed, lowercase) subdomain or raise ValidationError."""
    canonical = (value or "").strip().lower()
    if not _SUBDOMAIN_RE.match(canonical):
        raise ValidationError(
            "Invalid subdomain",
            errors=[{
                "loc": ["body", "subdomain"],
                "msg": "use 1-63 lowercase letters, digits or hyphens, not starting or ending with a hyphen",
                "type": "value_error",
            }],
        )
    return canonical


class Website(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    name: str
    subdomain: str
    custom_domain: Optional[str] = None
    template_id: Optional[str] = None
    content: Dict[str, Any]
    is_published: bool = False
    created_at: datetime
    updated_at: datetime


class WebsiteCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1, max_length=255)
    subdomain: str = Field(min_length=1, max_length=255)
    content: Optional[Dict[str, Any]] = None
    template_id: Optional[str] = None
    custom_domain: Optional[str] = Field(default=None, max_length=255)
    is_published: bool = False

    @field_validator("name", "subdomain")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("template_id", mode="before")
    @classmethod
    def blank_template_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class WebsiteUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    subdomain: Optional[str] = Field(default=None, min_length=1, max_length=255)
    custom_domain: Optional[str] = Field(default=None, max_length=255)
    template_id: Optional[str] = None
    content: Optional[Dict[str, Any]] = None
    is_published: Optional[bool] = None

    # An empty templateId detaches the template
    @field_validator("template_id", mode="before")
    @classmethod
    def blank_template_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for field in ("name", "subdomain", "content", "is_published"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        if "name" in self.model_fields_set and not self.name.strip():
            raise ValueError("name must not be empty")
        return self

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        if "name" in data:
            data["name"] = data["name"].strip()
        return {key: value for key, value in data.items() if key in MUTABLE_FIELDS}
