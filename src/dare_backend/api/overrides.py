from typing import Annotated
from fastapi import APIRouter, Depends, status

from dare_backend.api.auth import get_admin, require_admin
from dare_backend.interface.overrides import OverrideRuleCreate, OverrideRuleGet
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.principal import Principal

overrides_router = APIRouter()

@overrides_router.get("", response_model=list[OverrideRuleGet])
def list_override_rules(
    _: Annotated[Principal, Depends(require_admin)],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
):
    return admin.list_override_rules()

@overrides_router.post("", response_model=OverrideRuleGet, status_code=status.HTTP_201_CREATED)
def add_override_rule(
    _: Annotated[Principal, Depends(require_admin)],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    entity: OverrideRuleCreate,
):
    return admin.add_override_rule(
        entity.pattern, entity.resource, entity.action, entity.effect, entity.description
    )

@overrides_router.delete("")
def remove_override_rule(
    _: Annotated[Principal, Depends(require_admin)],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    pattern: str,
    resource: str,
    action: str,
):
    removed = admin.remove_override_rule(pattern, resource, action)
    return {"ok": True, "removed": removed}
