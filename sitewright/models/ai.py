from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sitewright.models.website import Website


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateWebsiteRequest(_CamelModel):
    prompt: str = Field(min_length=10, max_length=5000)
    business_type: str = Field(max_length=200)
    style: str = Field(max_length=200)


class ModifyWebsiteRequest(_CamelModel):
    website_id: str = Field(min_length=1)
    instruction: str = Field(min_length=5, max_length=5000)


class GenerateContentRequest(_CamelModel):
    business_type: str = Field(min_length=1, max_length=200)
    prompt: Optional[str] = Field(default=None, max_length=5000)


class ModifyWebsiteResponse(_CamelModel):
    message: str
    content: Dict[str, Any]
    website: Website


class GeneratedContentResponse(_CamelModel):
    business_type: str
    content: Dict[str, Any]
