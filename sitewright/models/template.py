from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TemplateCategory(str, Enum):
    RESTAURANT = "restaurant"
    PERSONAL = "personal"
    SERVICE = "service"
    PORTFOLIO = "portfolio"
    CREATIVE = "creative"
    HEALTH = "health"
    AUTOMOTIVE = "automotive"
    PHOTOGRAPHY = "photography"
    OTHER = "other"


class Template(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: Optional[str] = None
    category: str
    preview_image: Optional[str] = None
    content: Dict[str, Any]
    is_active: bool = True
    view_count: int = 0
    created_at: datetime
