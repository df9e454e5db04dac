"""
Authorization engine for the DARE backend.

Main components:
- catalog: closed set of valid (resource, action) pairs
- principal: authenticated actor with its legacy single-role label
- overrides: data-driven deny rules matched by role name pattern
- cache: per-principal cache with explicit, keyed invalidation
- resolver: effective permission set and gate checks, fail-closed
- admin: the only writer of roles, grants, assignments and override rules
- defaults: YAML access profile applied at initialization
"""

from .errors import (
    AccessControlError,
    UnknownPrincipal,
    UnknownRole,
    UnknownPermission,
    DuplicatePermission,
    DuplicateRoleName,
    ProtectedRole,
    PermissionInUse,
    StoreUnavailable,
)

from .principal import Principal, normalize_role_name

from .cache import (
    PermissionCache,
    permission_cache,
)

from .catalog import PermissionCatalog
from .resolver import AuthorizationResolver
from .admin import AccessAdministration
from .defaults import AccessProfile, load_profile, apply_defaults

__all__ = [
    # Errors
    "AccessControlError",
    "UnknownPrincipal",
    "UnknownRole",
    "UnknownPermission",
    "DuplicatePermission",
    "DuplicateRoleName",
    "ProtectedRole",
    "PermissionInUse",
    "StoreUnavailable",

    # Principal
    "Principal",
    "normalize_role_name",

    # Caching
    "PermissionCache",
    "permission_cache",

    # Engine
    "PermissionCatalog",
    "AuthorizationResolver",
    "AccessAdministration",

    # Initialization
    "AccessProfile",
    "load_profile",
    "apply_defaults",
]
