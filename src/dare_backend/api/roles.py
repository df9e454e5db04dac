from typing import Annotated
from fastapi import APIRouter, Depends, status

from dare_backend.api.auth import get_admin, require_permission
from dare_backend.interface.permissions import PermissionPair
from dare_backend.interface.roles import (
    GrantBatch,
    GrantBatchResult,
    GrantGet,
    RoleCreate,
    RoleGet,
    RoleList,
    RoleUpdate,
)
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.principal import Principal

roles_router = APIRouter()

@roles_router.get("", response_model=list[RoleList])
def list_roles(
    _: Annotated[Principal, Depends(require_permission("roles", "view"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
):
    return admin.list_roles()

@roles_router.get("/{role_id}", response_model=RoleGet)
def get_role(
    _: Annotated[Principal, Depends(require_permission("roles", "view"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    role_id: int,
):
    return admin.get_role(role_id)

@roles_router.post("", response_model=RoleGet, status_code=status.HTTP_201_CREATED)
def create_role(
    _: Annotated[Principal, Depends(require_permission("roles", "create"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    entity: RoleCreate,
):
    return admin.create_role(entity.name, entity.description)

@roles_router.patch("/{role_id}", response_model=RoleGet)
def update_role(
    _: Annotated[Principal, Depends(require_permission("roles", "edit"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    role_id: int,
    entity: RoleUpdate,
):
    return admin.update_role(role_id, entity.name, entity.description)

@roles_router.delete("/{role_id}")
def delete_role(
    _: Annotated[Principal, Depends(require_permission("roles", "delete"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    role_id: int,
):
    """Delete a custom role together with its grants and assignments"""
    grants, assignments = admin.delete_role(role_id)
    return {"ok": True, "grants": grants, "assignments": assignments}

@roles_router.get("/{role_id}/grants", response_model=list[GrantGet])
def list_role_grants(
    _: Annotated[Principal, Depends(require_permission("roles", "view"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    role_id: int,
):
    return admin.list_grants(role_id)

@roles_router.post("/{role_id}/grants", response_model=GrantGet)
def grant_permission(
    _: Annotated[Principal, Depends(require_permission("roles", "manage"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    role_id: int,
    entity: PermissionPair,
):
    return admin.grant_permission(role_id, entity.resource, entity.action)

@roles_router.put("/{role_id}/grants", response_model=GrantBatchResult)
def set_role_permissions(
    _: Annotated[Principal, Depends(require_permission("roles", "manage"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    role_id: int,
    entity: GrantBatch,
):
    """Apply grant and revoke changes in one transaction; any unknown pair rejects the batch"""
    return admin.set_role_permissions(role_id, entity.changes)

@roles_router.delete("/{role_id}/grants/{resource}/{action}")
def revoke_permission(
    _: Annotated[Principal, Depends(require_permission("roles", "manage"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    role_id: int,
    resource: str,
    action: str,
):
    removed = admin.revoke_permission(role_id, resource, action)
    return {"ok": True, "removed": removed}
