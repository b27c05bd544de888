"""
Role manager interface.

The role hierarchy lives outside the model. The model only pushes
grouping rules into an object with this shape.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List


class PolicyOp(Enum):
    """Kind of change applied to a set of rules."""

    ADD = "add"
    REMOVE = "remove"


class RoleManager(ABC):
    """
    Minimal role-graph contract consumed by grouping assertions.
    """

    @abstractmethod
    def clear(self):
        """Drop every stored link."""

    @abstractmethod
    def add_link(self, name1: str, name2: str, *domain: str):
        """Record that name1 inherits role name2 (optionally within a domain)."""

    @abstractmethod
    def delete_link(self, name1: str, name2: str, *domain: str):
        """Remove the inheritance link between name1 and name2."""

    @abstractmethod
    def has_link(self, name1: str, name2: str, *domain: str) -> bool:
        """Check whether name1 inherits role name2."""

    @abstractmethod
    def get_roles(self, name: str, *domain: str) -> List[str]:
        """Roles directly held by name."""

    @abstractmethod
    def get_users(self, name: str, *domain: str) -> List[str]:
        """Users directly holding role name."""

    def print_roles(self) -> str:
        """Human-readable dump of the role graph, empty if unsupported."""
        return ""
