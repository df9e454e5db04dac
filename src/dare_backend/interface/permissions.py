from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional


class PermissionPair(BaseModel):
    resource: str = Field(description="Guarded resource, e.g. youth_profiles")
    action: str = Field(description="Action on the resource, e.g. view")

    model_config = ConfigDict(frozen=True, from_attributes=True)


class PermissionCreate(PermissionPair):
    description: Optional[str] = Field(None, max_length=4096)


class PermissionGet(BaseModel):
    id: int
    resource: str
    action: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PermissionGenerate(BaseModel):
    resources: List[str] = Field(min_length=1)
    actions: List[str] = Field(min_length=1)


class CatalogGrouped(BaseModel):
    resources: Dict[str, List[str]]


class CheckResult(BaseModel):
    resource: str
    action: str
    allowed: bool
