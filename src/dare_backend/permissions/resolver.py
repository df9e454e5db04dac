"""
Authorization resolver.

Computes a principal's effective permission set:

1. administrative bypass: a legacy label equal to the admin role name yields
   the whole catalog without any grant lookup
2. grant union over every assigned role plus the role named by the legacy
   label, restricted to catalog pairs
3. deny override rules matching the legacy label or any held role name
   remove pairs from the union

Resolution never raises for store failures: the error is logged at critical
severity and the principal is denied.
"""

import logging
from typing import FrozenSet, List, Optional, Set, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dare_backend.interface.permissions import PermissionPair
from dare_backend.model.permission import OverrideRule, Permission
from dare_backend.model.role import Role, RoleAssignment, RoleGrant
from dare_backend.permissions.cache import CacheEntry, PermissionCache, permission_cache
from dare_backend.permissions.errors import StoreUnavailable, UnknownPrincipal
from dare_backend.permissions.overrides import OverrideSpec, apply_overrides
from dare_backend.permissions.principal import Principal
from dare_backend.repositories.principals import PrincipalRepository

logger = logging.getLogger(__name__)

DENY_ALL: FrozenSet[Tuple[str, str]] = frozenset()


class AuthorizationResolver:
    """Read-only view over roles, grants, assignments and override rules"""

    def __init__(self, db: Session, cache: Optional[PermissionCache] = None):
        self.db = db
        self.cache = cache if cache is not None else permission_cache

    def resolve(self, principal: Principal) -> FrozenSet[Tuple[str, str]]:
        """Effective (resource, action) set; empty on store failure"""
        key = principal.cache_key()

        cached = self.cache.get(key)
        if cached is not None:
            return cached.permissions

        version = self.cache.version
        try:
            entry = self._compute(principal)
        except StoreUnavailable as e:
            self._report_outage(principal, e)
            return DENY_ALL

        self.cache.set(key, entry, version)
        return entry.permissions

    def check(self, principal: Principal, resource: str, action: str) -> bool:
        cached = self.cache.get(principal.cache_key())
        if cached is not None:
            return (resource, action) in cached.permissions

        if principal.is_admin:
            # bypass needs only a catalog lookup
            try:
                return self._catalog_has(resource, action)
            except StoreUnavailable as e:
                self._report_outage(principal, e)
                return False

        return (resource, action) in self.resolve(principal)

    def list_permissions(self, principal: Principal) -> List[PermissionPair]:
        """Snapshot of the effective set ordered by resource, then action"""
        return [
            PermissionPair(resource=resource, action=action)
            for resource, action in sorted(self.resolve(principal))
        ]

    def load_principal(self, principal_id: str) -> Principal:
        """Principal for a stored record, raising UnknownPrincipal if absent"""
        try:
            record = PrincipalRepository(self.db).get(principal_id)
        except SQLAlchemyError as e:
            self._rollback()
            error = StoreUnavailable(str(e))
            self._report_outage(principal_id, error)
            raise error

        if record is None:
            raise UnknownPrincipal(principal_id)
        return Principal(user_id=record.id, legacy_role=record.legacy_role)

    def resolve_by_id(self, principal_id: str) -> FrozenSet[Tuple[str, str]]:
        """Resolve a stored principal; unknown principals are denied everything"""
        try:
            principal = self.load_principal(principal_id)
        except UnknownPrincipal:
            logger.warning(f"Resolution requested for unknown principal {principal_id}")
            return DENY_ALL
        except StoreUnavailable:
            return DENY_ALL
        return self.resolve(principal)

    def check_by_id(self, principal_id: str, resource: str, action: str) -> bool:
        return (resource, action) in self.resolve_by_id(principal_id)

    def list_permissions_by_id(self, principal_id: str) -> List[PermissionPair]:
        """Snapshot for a stored principal; unknown principals list nothing"""
        return [
            PermissionPair(resource=resource, action=action)
            for resource, action in sorted(self.resolve_by_id(principal_id))
        ]

    def _compute(self, principal: Principal) -> CacheEntry:
        try:
            if principal.is_admin:
                rows = self.db.query(Permission.resource, Permission.action).all()
                return CacheEntry(
                    permissions=frozenset((r, a) for r, a in rows),
                    role_names=frozenset({principal.legacy_role_key}),
                    bypass=True,
                )

            roles = self._held_roles(principal)
            role_ids = {role_id for role_id, _ in roles}
            role_names: Set[str] = {name for _, name in roles}
            if principal.legacy_role_key:
                role_names.add(principal.legacy_role_key)

            candidates = self._granted_pairs(principal, role_ids)
            rules = [
                OverrideSpec(rule.role_name_pattern, rule.resource, rule.action, rule.effect)
                for rule in self.db.query(OverrideRule).all()
            ]
        except SQLAlchemyError as e:
            self._rollback()
            raise StoreUnavailable(str(e))

        return CacheEntry(
            permissions=frozenset(apply_overrides(candidates, rules, role_names)),
            role_ids=frozenset(role_ids),
            role_names=frozenset(role_names),
        )

    def _held_roles(self, principal: Principal) -> List[Tuple[int, str]]:
        assigned = (
            select(RoleAssignment.role_id)
            .where(RoleAssignment.principal_id == principal.user_id)
        )

        criteria = [Role.id.in_(assigned)]
        if principal.legacy_role_key:
            criteria.append(Role.name_key == principal.legacy_role_key)

        return [
            (role_id, name_key) for role_id, name_key in
            self.db.query(Role.id, Role.name_key).filter(or_(*criteria)).all()
        ]

    def _granted_pairs(self, principal: Principal, role_ids: Set[int]) -> Set[Tuple[str, str]]:
        if not role_ids:
            return set()

        rows = (
            self.db.query(RoleGrant.role_id, RoleGrant.resource, RoleGrant.action, Permission.id)
            .outerjoin(
                Permission,
                (Permission.resource == RoleGrant.resource) & (Permission.action == RoleGrant.action),
            )
            .filter(RoleGrant.role_id.in_(role_ids))
            .all()
        )

        pairs = set()
        for role_id, resource, action, permission_id in rows:
            if permission_id is None:
                logger.warning(
                    f"Ignoring grant {resource}:{action} of role {role_id} for principal "
                    f"{principal.user_id}: not in the permission catalog"
                )
                continue
            pairs.add((resource, action))
        return pairs

    def _catalog_has(self, resource: str, action: str) -> bool:
        try:
            return (
                self.db.query(Permission.id)
                .filter(Permission.resource == resource, Permission.action == action)
                .first()
            ) is not None
        except SQLAlchemyError as e:
            self._rollback()
            raise StoreUnavailable(str(e))

    def _rollback(self):
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after store failure failed")

    @staticmethod
    def _report_outage(principal, error: StoreUnavailable):
        principal_id = principal.user_id if isinstance(principal, Principal) else principal
        logger.critical(
            f"Permission store unavailable while resolving principal {principal_id}; "
            f"denying access: {error.message}"
        )
