"""
Error kinds raised by the authorization engine.

Every error carries a stable ``code`` and a ``detail`` mapping so callers
(the HTTP layer, the CLI) can report it without parsing messages.
"""

from typing import Any, Dict, Optional


class AccessControlError(Exception):
    """Base exception for the authorization engine."""

    code: str = "AccessControlError"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "detail": self.detail}


class UnknownPrincipal(AccessControlError):
    code = "UnknownPrincipal"

    def __init__(self, principal_id: str):
        super().__init__(f"Principal {principal_id} not found", {"principal_id": principal_id})
        self.principal_id = principal_id


class UnknownRole(AccessControlError):
    code = "UnknownRole"

    def __init__(self, role: Any):
        super().__init__(f"Role {role} not found", {"role": role})
        self.role = role


class UnknownPermission(AccessControlError):
    code = "UnknownPermission"

    def __init__(self, resource: str, action: str):
        super().__init__(
            f"Permission {resource}:{action} is not in the catalog",
            {"resource": resource, "action": action},
        )
        self.resource = resource
        self.action = action


class DuplicatePermission(AccessControlError):
    code = "DuplicatePermission"

    def __init__(self, resource: str, action: str):
        super().__init__(
            f"Permission {resource}:{action} already exists",
            {"resource": resource, "action": action},
        )
        self.resource = resource
        self.action = action


class DuplicateRoleName(AccessControlError):
    code = "DuplicateRoleName"

    def __init__(self, name: str):
        super().__init__(f"Role with name '{name}' already exists", {"name": name})
        self.name = name


class ProtectedRole(AccessControlError):
    code = "ProtectedRole"

    def __init__(self, role_id: Any, name: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(
            f"Role '{name or role_id}' is protected",
            {"role_id": role_id, "name": name, "operation": operation},
        )
        self.role_id = role_id
        self.operation = operation


class PermissionInUse(AccessControlError):
    code = "PermissionInUse"

    def __init__(self, resource: str, action: str, grants: int = 0, rules: int = 0):
        super().__init__(
            f"Permission {resource}:{action} is referenced by {grants} grant(s) and {rules} override rule(s)",
            {"resource": resource, "action": action, "grants": grants, "override_rules": rules},
        )
        self.resource = resource
        self.action = action


class StoreUnavailable(AccessControlError):
    code = "StoreUnavailable"

    def __init__(self, reason: str = "backing store unavailable"):
        super().__init__(reason, {})
