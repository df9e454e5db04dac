"""
Permission catalog: the closed set of (resource, action) pairs that grants
and override rules may reference.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dare_backend.model.permission import Permission
from dare_backend.model.role import RoleGrant
from dare_backend.permissions.cache import PermissionCache, permission_cache
from dare_backend.permissions.errors import DuplicatePermission, PermissionInUse, UnknownPermission
from dare_backend.repositories.catalog import OverrideRuleRepository, PermissionRepository
from dare_backend.repositories.roles import GrantRepository

logger = logging.getLogger(__name__)


def _clean(value: str, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"Permission {field} must not be empty")
    return value


class PermissionCatalog:

    def __init__(self, db: Session, cache: Optional[PermissionCache] = None):
        self.db = db
        self.cache = cache if cache is not None else permission_cache
        self.permissions = PermissionRepository(db)

    def exists(self, resource: str, action: str) -> bool:
        return self.permissions.get(resource, action) is not None

    def require(self, resource: str, action: str):
        """Raise UnknownPermission unless the pair is in the catalog"""
        if not self.exists(resource, action):
            raise UnknownPermission(resource, action)

    def list(self) -> List[Permission]:
        return self.permissions.list_all()

    def grouped(self) -> Dict[str, List[str]]:
        """Catalog actions grouped by resource"""
        result: Dict[str, List[str]] = defaultdict(list)
        for permission in self.list():
            result[permission.resource].append(permission.action)
        return dict(result)

    def register(self, resource: str, action: str, description: Optional[str] = None) -> Permission:
        resource = _clean(resource, "resource")
        action = _clean(action, "action")

        if self.exists(resource, action):
            raise DuplicatePermission(resource, action)

        try:
            permission = self.permissions.add(
                Permission(resource=resource, action=action, description=description)
            )
            self.db.commit()
        except IntegrityError:
            # a concurrent register won the unique constraint
            self.db.rollback()
            raise DuplicatePermission(resource, action)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Registered permission {resource}:{action}")
        self._invalidate_for(resource, action)
        return permission

    def generate_missing(self, resources: Iterable[str], actions: Iterable[str]) -> int:
        """
        Register every (resource, action) combination not yet in the catalog.

        Returns:
            Number of permissions created
        """
        actions = list(actions)
        created = 0

        for resource in resources:
            for action in actions:
                if self.exists(resource, action):
                    continue
                try:
                    self.register(resource, action, f"{action.capitalize()} {resource.replace('_', ' ')}")
                    created += 1
                except DuplicatePermission:
                    continue

        if created:
            logger.info(f"Generated {created} missing permission(s)")
        return created

    def remove(self, resource: str, action: str):
        permission = self.permissions.get(resource, action)
        if permission is None:
            raise UnknownPermission(resource, action)

        grants = GrantRepository(self.db).count(resource=resource, action=action)
        rules = OverrideRuleRepository(self.db).count(resource=resource, action=action)
        if grants or rules:
            raise PermissionInUse(resource, action, grants=grants, rules=rules)

        try:
            self.db.delete(permission)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Removed permission {resource}:{action}")
        self.cache.invalidate_bypass()

    def _invalidate_for(self, resource: str, action: str):
        # grants recorded before the pair existed become effective now
        role_ids = {
            row[0] for row in
            self.db.query(RoleGrant.role_id)
            .filter(RoleGrant.resource == resource, RoleGrant.action == action)
            .all()
        }
        if role_ids:
            self.cache.invalidate_roles(role_ids)
        self.cache.invalidate_bypass()
