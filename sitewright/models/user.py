from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Plan(str, Enum):
    FREE = "free"
    PRO = "pro"
    DONE_FOR_YOU = "done-for-you"


class User(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    plan: Plan = Plan.FREE
    ai_generations_used: int = 0
    created_at: datetime
    updated_at: datetime


class PlanUpdateRequest(BaseModel):
    plan: Plan
