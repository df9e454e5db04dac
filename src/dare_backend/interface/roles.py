from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50, description="Role name, unique ignoring case")
    description: Optional[str] = Field(None, max_length=4096)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Role name must not be empty")
        return value


class RoleUpdate(RoleCreate):
    name: Optional[str] = Field(None, min_length=1, max_length=50)


class RoleGet(BaseModel):
    id: int = Field(description="Role identifier")
    name: str = Field(description="Role name")
    description: Optional[str] = Field(None, description="Role description")
    is_system: bool = Field(description="Whether this is a system role")
    is_editable: bool = Field(description="Whether the role can be edited or deleted")
    state: str = Field(description="draft until the role has grants or assignments, then active")

    model_config = ConfigDict(from_attributes=True)


class RoleList(BaseModel):
    id: int
    name: str
    is_system: bool
    is_editable: bool

    model_config = ConfigDict(from_attributes=True)


class GrantGet(BaseModel):
    role_id: int
    resource: str
    action: str

    model_config = ConfigDict(from_attributes=True)


class GrantChange(BaseModel):
    resource: str
    action: str
    granted: bool


class GrantBatch(BaseModel):
    changes: List[GrantChange]


class GrantBatchResult(BaseModel):
    added: int = 0
    removed: int = 0


class AssignmentGet(BaseModel):
    principal_id: str
    role_id: int

    model_config = ConfigDict(from_attributes=True)


class PrincipalCreate(BaseModel):
    id: str = Field(min_length=1, max_length=255)
    legacy_role: Optional[str] = Field(None, max_length=50)


class PrincipalUpdate(BaseModel):
    legacy_role: Optional[str] = Field(None, max_length=50)


class PrincipalGet(BaseModel):
    id: str
    legacy_role: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
