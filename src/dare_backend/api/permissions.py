from typing import Annotated
from fastapi import APIRouter, Depends

from dare_backend.api.auth import get_current_principal, get_resolver
from dare_backend.interface.permissions import CheckResult, PermissionPair
from dare_backend.permissions.principal import Principal
from dare_backend.permissions.resolver import AuthorizationResolver

permissions_router = APIRouter()

@permissions_router.get("", response_model=list[PermissionPair])
def list_permissions(
    principal: Annotated[Principal, Depends(get_current_principal)],
    resolver: Annotated[AuthorizationResolver, Depends(get_resolver)],
):
    """Effective permissions of the calling principal, ordered by resource and action"""
    return resolver.list_permissions(principal)

@permissions_router.get("/check", response_model=CheckResult)
def check_permission(
    principal: Annotated[Principal, Depends(get_current_principal)],
    resolver: Annotated[AuthorizationResolver, Depends(get_resolver)],
    resource: str,
    action: str,
):
    return CheckResult(
        resource=resource,
        action=action,
        allowed=resolver.check(principal, resource, action),
    )
