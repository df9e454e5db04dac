from .base import Base, metadata
from .permission import Permission, OverrideRule
from .role import Role, RoleGrant, RoleAssignment
from .principal import PrincipalRecord

__all__ = [
    'Base',
    'metadata',
    'Permission',
    'OverrideRule',
    'Role',
    'RoleGrant',
    'RoleAssignment',
    'PrincipalRecord',
]
