"""
Administration API for roles, grants, assignments, override rules and
principal records.

This is the only writer of those tables. Every public mutation runs in one
transaction and is idempotent where the operation is set-like (grant, revoke,
assign, unassign, add/remove override). Writes to a role lock its row first,
so concurrent edits of the same role serialize. Cache invalidation happens
after commit and only touches the principals the change can affect.
"""

import logging
from contextlib import contextmanager
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dare_backend.interface.roles import GrantBatchResult, GrantChange
from dare_backend.model.permission import OverrideRule
from dare_backend.model.principal import PrincipalRecord
from dare_backend.model.role import Role, RoleAssignment, RoleGrant
from dare_backend.permissions.cache import PermissionCache, permission_cache
from dare_backend.permissions.catalog import PermissionCatalog
from dare_backend.permissions.errors import (
    DuplicateRoleName,
    ProtectedRole,
    UnknownPermission,
    UnknownPrincipal,
    UnknownRole,
)
from dare_backend.permissions.overrides import EFFECT_DENY, SUPPORTED_EFFECTS, normalize_pattern
from dare_backend.utils import normalize_role_name
from dare_backend.repositories import (
    AssignmentRepository,
    GrantRepository,
    OverrideRuleRepository,
    PrincipalRepository,
    RoleRepository,
)
from dare_backend.settings import settings

logger = logging.getLogger(__name__)

ADMIN_ROLE_DESCRIPTION = "Full system access"


class AccessAdministration:

    def __init__(self, db: Session, cache: Optional[PermissionCache] = None):
        self.db = db
        self.cache = cache if cache is not None else permission_cache
        self.catalog = PermissionCatalog(db, self.cache)
        self.roles = RoleRepository(db)
        self.grants = GrantRepository(db)
        self.assignments = AssignmentRepository(db)
        self.overrides = OverrideRuleRepository(db)
        self.principals = PrincipalRepository(db)

    @contextmanager
    def _transaction(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # Roles

    def ensure_admin_role(self) -> Role:
        """Create the single administrative role, or repair its protection flags"""
        name = settings.ADMIN_ROLE_NAME
        with self._transaction():
            role = self.roles.get_by_name(name)
            if role is None:
                role = self.roles.add(Role(
                    name=name,
                    name_key=normalize_role_name(name),
                    description=ADMIN_ROLE_DESCRIPTION,
                    is_system=True,
                    is_editable=False,
                ))
                logger.info(f"Created administrative role '{name}'")
            elif not role.is_system or role.is_editable:
                role.is_system = True
                role.is_editable = False
                logger.warning(f"Restored protection flags of administrative role '{name}'")

        self.cache.invalidate_role_name(role.name_key)
        return role

    def get_role(self, role_id: int) -> Role:
        role = self.roles.get_by_id_optional(role_id)
        if role is None:
            raise UnknownRole(role_id)
        return role

    def get_role_by_name(self, name: str) -> Role:
        role = self.roles.get_by_name(name)
        if role is None:
            raise UnknownRole(name)
        return role

    def list_roles(self) -> List[Role]:
        return self.roles.list_roles()

    def create_role(self, name: str, description: Optional[str] = None) -> Role:
        """New roles are always custom: not system, editable"""
        name_key = self._name_key(name)

        if self.roles.get_by_name(name) is not None:
            raise DuplicateRoleName(name)
        if name_key == normalize_role_name(settings.ADMIN_ROLE_NAME):
            raise ProtectedRole(None, name=name, operation="create")

        try:
            with self._transaction():
                role = self.roles.add(Role(
                    name=name.strip(),
                    name_key=name_key,
                    description=description,
                    is_system=False,
                    is_editable=True,
                ))
        except IntegrityError:
            raise DuplicateRoleName(name)

        logger.info(f"Created role '{role.name}' ({role.id})")
        # principals whose legacy label names this role now hold it
        self.cache.invalidate_role_name(name_key)
        return role

    def update_role(self, role_id: int, name: Optional[str] = None, description: Optional[str] = None) -> Role:
        old_key = None
        new_key = None

        try:
            with self._transaction():
                role = self._lock_role(role_id, "update")

                if name is not None and self._name_key(name) != role.name_key:
                    new_key = self._name_key(name)
                    if self.roles.get_by_name(name) is not None:
                        raise DuplicateRoleName(name)
                    if new_key == normalize_role_name(settings.ADMIN_ROLE_NAME):
                        raise ProtectedRole(role_id, name=name, operation="update")
                    old_key = role.name_key
                    role.name = name.strip()
                    role.name_key = new_key
                elif name is not None:
                    role.name = name.strip()

                if description is not None:
                    role.description = description
        except IntegrityError:
            raise DuplicateRoleName(name)

        logger.info(f"Updated role {role_id}")
        if old_key is not None:
            self.cache.invalidate_roles([role_id])
            self.cache.invalidate_role_name(new_key)
        return role

    def delete_role(self, role_id: int) -> Tuple[int, int]:
        """
        Delete an editable role with its grants and assignments in one transaction.

        Returns:
            Number of (grants, assignments) removed
        """
        with self._transaction():
            role = self._lock_role(role_id, "delete")
            name = role.name
            grants = len(role.grants)
            assignments = len(role.assignments)
            # grants and assignments go with the role through the ORM cascade
            self.db.delete(role)
            self.db.flush()

        logger.info(f"Deleted role '{name}' ({role_id}) with {grants} grant(s) and {assignments} assignment(s)")
        self.cache.invalidate_roles([role_id])
        return grants, assignments

    # Grants

    def list_grants(self, role_id: int) -> List[RoleGrant]:
        self.get_role(role_id)
        return self.grants.for_role(role_id)

    def grant_permission(self, role_id: int, resource: str, action: str) -> RoleGrant:
        try:
            with self._transaction():
                self._lock_role(role_id, "grant")
                self.catalog.require(resource, action)
                grant = self.grants.get(role_id, resource, action)
                created = grant is None
                if created:
                    grant = self.grants.add(RoleGrant(role_id=role_id, resource=resource, action=action))
        except IntegrityError:
            # concurrent identical grant; the set already holds the pair
            grant = self.grants.get(role_id, resource, action)
            if grant is None:
                raise
            created = False

        if created:
            logger.info(f"Granted {resource}:{action} to role {role_id}")
            self.cache.invalidate_roles([role_id])
        return grant

    def revoke_permission(self, role_id: int, resource: str, action: str) -> bool:
        """Returns whether a grant was removed; absence is not an error"""
        with self._transaction():
            self._lock_role(role_id, "revoke")
            removed = self.grants.delete_by(role_id=role_id, resource=resource, action=action)

        if removed:
            logger.info(f"Revoked {resource}:{action} from role {role_id}")
            self.cache.invalidate_roles([role_id])
        return bool(removed)

    def set_role_permissions(self, role_id: int, changes: Iterable[GrantChange]) -> GrantBatchResult:
        """
        Apply a batch of grant/revoke changes atomically.

        Every granted pair is validated against the catalog before any row is
        written; one unknown pair rejects the whole batch.
        """
        changes = list(changes)
        result = GrantBatchResult()

        with self._transaction():
            self._lock_role(role_id, "grant")

            for change in changes:
                if change.granted and not self.catalog.exists(change.resource, change.action):
                    raise UnknownPermission(change.resource, change.action)

            for change in changes:
                existing = self.grants.get(role_id, change.resource, change.action)
                if change.granted and existing is None:
                    self.grants.add(RoleGrant(role_id=role_id, resource=change.resource, action=change.action))
                    result.added += 1
                elif not change.granted and existing is not None:
                    self.db.delete(existing)
                    self.db.flush()
                    result.removed += 1

        if result.added or result.removed:
            logger.info(f"Updated grants of role {role_id}: +{result.added} -{result.removed}")
            self.cache.invalidate_roles([role_id])
        return result

    # Assignments

    def roles_for_principal(self, principal_id: str) -> List[Role]:
        return self.roles.get_many(self.assignments.role_ids_for(principal_id))

    def assign_role(self, principal_id: str, role_id: int) -> RoleAssignment:
        try:
            with self._transaction():
                self._lock_role(role_id, "assign")
                assignment = self.assignments.get(principal_id, role_id)
                created = assignment is None
                if created:
                    assignment = self.assignments.add(RoleAssignment(principal_id=principal_id, role_id=role_id))
        except IntegrityError:
            assignment = self.assignments.get(principal_id, role_id)
            if assignment is None:
                raise
            created = False

        if created:
            logger.info(f"Assigned role {role_id} to principal {principal_id}")
            self.cache.invalidate_principal(principal_id)
        return assignment

    def unassign_role(self, principal_id: str, role_id: int) -> bool:
        with self._transaction():
            self._lock_role(role_id, "unassign")
            removed = self.assignments.delete_by(principal_id=principal_id, role_id=role_id)

        if removed:
            logger.info(f"Unassigned role {role_id} from principal {principal_id}")
            self.cache.invalidate_principal(principal_id)
        return bool(removed)

    # Override rules

    def list_override_rules(self) -> List[OverrideRule]:
        return self.overrides.list_all()

    def add_override_rule(
        self,
        pattern: str,
        resource: str,
        action: str,
        effect: str = EFFECT_DENY,
        description: Optional[str] = None,
    ) -> OverrideRule:
        pattern = normalize_pattern(pattern)
        if effect not in SUPPORTED_EFFECTS:
            raise ValueError(f"Unsupported override effect '{effect}'")

        try:
            with self._transaction():
                self.catalog.require(resource, action)
                rule = self.overrides.get(pattern, resource, action, effect)
                created = rule is None
                if created:
                    rule = self.overrides.add(OverrideRule(
                        role_name_pattern=pattern,
                        resource=resource,
                        action=action,
                        effect=effect,
                        description=description,
                    ))
        except IntegrityError:
            rule = self.overrides.get(pattern, resource, action, effect)
            if rule is None:
                raise
            created = False

        if created:
            logger.info(f"Added override rule {effect} {resource}:{action} for '{pattern}'")
            self.cache.invalidate_pattern(pattern)
        return rule

    def remove_override_rule(self, pattern: str, resource: str, action: str, effect: str = EFFECT_DENY) -> bool:
        pattern = normalize_pattern(pattern)

        with self._transaction():
            removed = self.overrides.delete_by(
                role_name_pattern=pattern, resource=resource, action=action, effect=effect
            )

        if removed:
            logger.info(f"Removed override rule {effect} {resource}:{action} for '{pattern}'")
            self.cache.invalidate_pattern(pattern)
        return bool(removed)

    # Principals

    def get_principal(self, principal_id: str) -> PrincipalRecord:
        record = self.principals.get(principal_id)
        if record is None:
            raise UnknownPrincipal(principal_id)
        return record

    def register_principal(self, principal_id: str, legacy_role: Optional[str] = None) -> PrincipalRecord:
        """Create or update the record of a principal"""
        with self._transaction():
            record = self.principals.get(principal_id)
            if record is None:
                record = self.principals.add(PrincipalRecord(id=principal_id))
            record.legacy_role = normalize_role_name(legacy_role)

        self.cache.invalidate_principal(principal_id)
        return record

    def set_legacy_role(self, principal_id: str, legacy_role: Optional[str]) -> PrincipalRecord:
        with self._transaction():
            record = self.principals.get(principal_id)
            if record is None:
                raise UnknownPrincipal(principal_id)
            record.legacy_role = normalize_role_name(legacy_role)

        logger.info(f"Set legacy role of principal {principal_id} to {record.legacy_role!r}")
        self.cache.invalidate_principal(principal_id)
        return record

    # Helpers

    def _lock_role(self, role_id: int, operation: str) -> Role:
        role = self.roles.get_for_update(role_id)
        if role is None:
            raise UnknownRole(role_id)
        if role.is_protected:
            raise ProtectedRole(role_id, name=role.name, operation=operation)
        return role

    @staticmethod
    def _name_key(name: str) -> str:
        key = normalize_role_name(name)
        if key is None:
            raise ValueError("Role name must not be empty")
        return key
