"""
Repository pattern implementation for the access-control tables.
"""

from .base import BaseRepository
from .catalog import PermissionRepository, OverrideRuleRepository
from .roles import RoleRepository, GrantRepository, AssignmentRepository
from .principals import PrincipalRepository

__all__ = [
    "BaseRepository",
    "PermissionRepository",
    "OverrideRuleRepository",
    "RoleRepository",
    "GrantRepository",
    "AssignmentRepository",
    "PrincipalRepository",
]
