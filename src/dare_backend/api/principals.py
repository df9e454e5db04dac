from typing import Annotated
from fastapi import APIRouter, Depends, status

from dare_backend.api.auth import get_admin, get_resolver, require_permission
from dare_backend.interface.permissions import PermissionPair
from dare_backend.interface.roles import AssignmentGet, PrincipalCreate, PrincipalGet, PrincipalUpdate, RoleList
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.principal import Principal
from dare_backend.permissions.resolver import AuthorizationResolver

principals_router = APIRouter()

@principals_router.post("", response_model=PrincipalGet, status_code=status.HTTP_201_CREATED)
def register_principal(
    _: Annotated[Principal, Depends(require_permission("users", "create"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    entity: PrincipalCreate,
):
    return admin.register_principal(entity.id, entity.legacy_role)

@principals_router.get("/{principal_id}", response_model=PrincipalGet)
def get_principal(
    _: Annotated[Principal, Depends(require_permission("users", "view"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    principal_id: str,
):
    return admin.get_principal(principal_id)

@principals_router.patch("/{principal_id}", response_model=PrincipalGet)
def set_legacy_role(
    _: Annotated[Principal, Depends(require_permission("users", "edit"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    principal_id: str,
    entity: PrincipalUpdate,
):
    return admin.set_legacy_role(principal_id, entity.legacy_role)

@principals_router.get("/{principal_id}/permissions", response_model=list[PermissionPair])
def list_principal_permissions(
    _: Annotated[Principal, Depends(require_permission("users", "view"))],
    resolver: Annotated[AuthorizationResolver, Depends(get_resolver)],
    principal_id: str,
):
    return resolver.list_permissions_by_id(principal_id)

@principals_router.get("/{principal_id}/roles", response_model=list[RoleList])
def list_principal_roles(
    _: Annotated[Principal, Depends(require_permission("users", "view"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    principal_id: str,
):
    return admin.roles_for_principal(principal_id)

@principals_router.put("/{principal_id}/roles/{role_id}", response_model=AssignmentGet)
def assign_role(
    _: Annotated[Principal, Depends(require_permission("users", "manage"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    principal_id: str,
    role_id: int,
):
    return admin.assign_role(principal_id, role_id)

@principals_router.delete("/{principal_id}/roles/{role_id}")
def unassign_role(
    _: Annotated[Principal, Depends(require_permission("users", "manage"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    principal_id: str,
    role_id: int,
):
    removed = admin.unassign_role(principal_id, role_id)
    return {"ok": True, "removed": removed}
