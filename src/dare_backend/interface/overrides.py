from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional


class OverrideRuleCreate(BaseModel):
    pattern: str = Field(min_length=1, max_length=100, description="Role name or glob, matched ignoring case")
    resource: str
    action: str
    effect: Literal["deny"] = "deny"
    description: Optional[str] = Field(None, max_length=4096)


class OverrideRuleGet(BaseModel):
    id: int
    role_name_pattern: str
    resource: str
    action: str
    effect: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
