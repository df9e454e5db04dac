"""
Default access profile: catalog, starter roles and override rules read from
YAML and applied idempotently at initialization.
"""

import logging
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.cache import PermissionCache
from dare_backend.permissions.errors import UnknownPermission
from dare_backend.settings import settings

logger = logging.getLogger(__name__)


class RoleDefaults(BaseModel):
    name: str
    description: Optional[str] = None
    # action -> resources
    grants: Dict[str, List[str]] = Field(default_factory=dict)

    def pairs(self) -> List[tuple]:
        return [
            (resource, action)
            for action, resources in self.grants.items()
            for resource in resources
        ]


class OverrideDefaults(BaseModel):
    pattern: str
    resource: str
    action: str
    effect: str = "deny"
    description: Optional[str] = None


class AccessProfile(BaseModel):
    actions: List[str] = Field(default_factory=list)
    # module -> resources
    resources: Dict[str, List[str]] = Field(default_factory=dict)
    roles: List[RoleDefaults] = Field(default_factory=list)
    overrides: List[OverrideDefaults] = Field(default_factory=list)

    def all_resources(self) -> List[str]:
        return [resource for resources in self.resources.values() for resource in resources]


class ApplySummary(BaseModel):
    permissions_created: int = 0
    roles_created: int = 0
    grants_applied: int = 0
    overrides_applied: int = 0
    skipped: List[str] = Field(default_factory=list)


def load_profile(path: Optional[str] = None) -> AccessProfile:
    path = path or settings.ACCESS_DEFAULTS_FILE

    with open(path, "r") as file:
        data = yaml.safe_load(file) or {}

    return AccessProfile(**data)


def apply_defaults(db: Session, profile: AccessProfile, cache: Optional[PermissionCache] = None) -> ApplySummary:
    """
    Bring the store up to the profile without removing anything.

    Roles that already exist are not re-granted, so administrator edits to a
    seeded role survive re-seeding.
    """
    admin = AccessAdministration(db, cache)
    summary = ApplySummary()

    summary.permissions_created = admin.catalog.generate_missing(
        profile.all_resources(), profile.actions
    )
    admin.ensure_admin_role()

    for role_defaults in profile.roles:
        if admin.roles.get_by_name(role_defaults.name) is not None:
            logger.debug(f"Role '{role_defaults.name}' exists, leaving its grants untouched")
            continue

        role = admin.create_role(role_defaults.name, role_defaults.description)
        summary.roles_created += 1

        for resource, action in role_defaults.pairs():
            try:
                admin.grant_permission(role.id, resource, action)
                summary.grants_applied += 1
            except UnknownPermission:
                logger.warning(f"Default role '{role.name}' references unknown permission {resource}:{action}")
                summary.skipped.append(f"{role.name}:{resource}:{action}")

    for rule in profile.overrides:
        try:
            admin.add_override_rule(rule.pattern, rule.resource, rule.action, rule.effect, rule.description)
            summary.overrides_applied += 1
        except UnknownPermission:
            logger.warning(f"Override for '{rule.pattern}' references unknown permission {rule.resource}:{rule.action}")
            summary.skipped.append(f"override:{rule.pattern}:{rule.resource}:{rule.action}")

    logger.info(
        f"Applied access defaults: {summary.permissions_created} permission(s), "
        f"{summary.roles_created} role(s), {summary.grants_applied} grant(s), "
        f"{summary.overrides_applied} override rule(s)"
    )
    return summary
