"""Role-manager contract for PMEC."""

from .role_manager import PolicyOp, RoleManager

__all__ = [
    'PolicyOp',
    'RoleManager',
]
