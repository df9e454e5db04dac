from typing import Annotated
from fastapi import APIRouter, Depends, status

from dare_backend.api.auth import get_admin, require_permission
from dare_backend.interface.permissions import CatalogGrouped, PermissionCreate, PermissionGenerate, PermissionGet
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.principal import Principal

catalog_router = APIRouter()

@catalog_router.get("", response_model=list[PermissionGet])
def list_catalog(
    _: Annotated[Principal, Depends(require_permission("permissions", "view"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
):
    return admin.catalog.list()

@catalog_router.get("/grouped", response_model=CatalogGrouped)
def list_catalog_grouped(
    _: Annotated[Principal, Depends(require_permission("permissions", "view"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
):
    return CatalogGrouped(resources=admin.catalog.grouped())

@catalog_router.post("", response_model=PermissionGet, status_code=status.HTTP_201_CREATED)
def register_permission(
    _: Annotated[Principal, Depends(require_permission("permissions", "create"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    entity: PermissionCreate,
):
    return admin.catalog.register(entity.resource, entity.action, entity.description)

@catalog_router.post("/generate")
def generate_permissions(
    _: Annotated[Principal, Depends(require_permission("permissions", "create"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    entity: PermissionGenerate,
):
    """Register every missing combination of the given resources and actions"""
    created = admin.catalog.generate_missing(entity.resources, entity.actions)
    return {"ok": True, "created": created}

@catalog_router.delete("/{resource}/{action}")
def remove_permission(
    _: Annotated[Principal, Depends(require_permission("permissions", "delete"))],
    admin: Annotated[AccessAdministration, Depends(get_admin)],
    resource: str,
    action: str,
):
    admin.catalog.remove(resource, action)
    return {"ok": True}
