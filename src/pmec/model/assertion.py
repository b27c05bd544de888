"""
Assertion: one named definition of a model section.
"""

from typing import Iterable, List, Optional, Sequence

from ..config import ROLE_PLACEHOLDER
from ..errors import PolicyArityError
from ..log import get_logger
from ..rbac import PolicyOp, RoleManager
from .policy_store import PolicyStore

logger = get_logger(__name__)


class Assertion:
    """
    A request, policy, role, effect or matcher definition.

    Policy and role assertions also own the rules written against them.
    """

    def __init__(
        self,
        key: str,
        value: str,
        tokens: Optional[List[str]] = None,
        policy: Optional[PolicyStore] = None,
    ):
        """
        Initialize assertion.

        Args:
            key: Section-local identifier (p, p2, g, ...)
            value: Definition text
            tokens: Namespaced field names for r/p definitions
            policy: Row store for p/g definitions
        """
        self.key = key
        self.value = value
        self.tokens = list(tokens) if tokens else []
        self.policy = policy

    @property
    def uses_hashed_storage(self) -> bool:
        """Whether the row store is the hash-backed variant."""
        return self.policy is not None and self.policy.hashed

    def role_arity(self) -> int:
        """Number of `_` placeholders in a role definition."""
        return self.value.count(ROLE_PLACEHOLDER)

    def _link_args(self, rule: Sequence[str]) -> List[str]:
        count = self.role_arity()
        if count < 2:
            raise PolicyArityError(
                f'the number of "{ROLE_PLACEHOLDER}" in role definition '
                f'{self.key} should be at least 2'
            )
        if len(rule) < count:
            raise PolicyArityError(
                f"grouping policy {list(rule)} has {len(rule)} fields, "
                f"role definition {self.key} needs {count}"
            )
        return list(rule[:count])

    def build_role_links(self, rm: RoleManager):
        """
        Push every rule of this assertion into a role manager.

        Args:
            rm: Role manager receiving the links

        Raises:
            PolicyArityError: If a rule is shorter than the definition
        """
        if self.policy is None:
            return

        for rule in self.policy:
            rm.add_link(*self._link_args(rule))

        logger.debug("role_links_built", key=self.key, rules=len(self.policy))
        roles = rm.print_roles()
        if roles:
            logger.debug("role_graph", key=self.key, roles=roles)

    def build_incremental_role_links(
        self,
        rm: RoleManager,
        op: PolicyOp,
        rules: Iterable[Sequence[str]],
    ):
        """
        Apply an add/remove delta to a role manager.

        Args:
            rm: Role manager receiving the change
            op: PolicyOp.ADD or PolicyOp.REMOVE
            rules: Rules that were added or removed

        Raises:
            PolicyArityError: If a rule is shorter than the definition
            ValueError: If op is not a PolicyOp
        """
        if op is PolicyOp.ADD:
            apply = rm.add_link
        elif op is PolicyOp.REMOVE:
            apply = rm.delete_link
        else:
            raise ValueError(f"Invalid policy operation: {op}")

        count = 0
        for rule in rules:
            apply(*self._link_args(rule))
            count += 1

        logger.debug("role_links_updated", key=self.key, op=op.value, rules=count)

    def __repr__(self) -> str:
        return f"Assertion(key={self.key!r}, value={self.value!r})"
