"""
Policy row storage.

A row store holds the rules of one assertion. Two physical layouts share
one contract: rows are unique, membership is queryable, iteration follows
insertion order.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Sequence, Tuple

Rule = Tuple[str, ...]


def as_rule(values: Sequence[str]) -> Rule:
    """Normalize a rule to its stored (hashable) form."""
    return tuple(values)


class PolicyStore(ABC):
    """
    Interface shared by every row store variant.
    """

    hashed = False

    @abstractmethod
    def add(self, rule: Sequence[str]) -> bool:
        """Insert a rule unless an equal one is stored. Returns whether it was inserted."""

    @abstractmethod
    def contains(self, rule: Sequence[str]) -> bool:
        """Check for an element-wise equal rule."""

    @abstractmethod
    def remove(self, rule: Sequence[str]) -> bool:
        """Remove the first equal rule. Returns whether one was removed."""

    @abstractmethod
    def remove_all(self, rule: Sequence[str]) -> int:
        """Remove every equal rule. Returns how many were removed."""

    @abstractmethod
    def clear(self):
        """Drop all rules."""

    @abstractmethod
    def __iter__(self) -> Iterator[Rule]:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def __contains__(self, rule) -> bool:
        return self.contains(rule)

    def __bool__(self) -> bool:
        return len(self) > 0

    def rows(self) -> List[List[str]]:
        """Return a copy of all rules as lists, in store order."""
        return [list(rule) for rule in self]

    def replace(self, rules: Iterable[Sequence[str]]):
        """Replace the whole content with the given rules."""
        self.clear()
        for rule in rules:
            self.add(rule)

    def new_empty(self) -> 'PolicyStore':
        """Create an empty store of the same variant."""
        return new_policy_store(self.hashed)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rows()!r})"


class OrderedPolicyStore(PolicyStore):
    """
    List-backed store. Membership is a linear scan.
    """

    def __init__(self, rules: Iterable[Sequence[str]] = ()):
        self._rules: List[Rule] = []
        for rule in rules:
            self.add(rule)

    def add(self, rule: Sequence[str]) -> bool:
        rule = as_rule(rule)
        if rule in self._rules:
            return False
        self._rules.append(rule)
        return True

    def contains(self, rule: Sequence[str]) -> bool:
        return as_rule(rule) in self._rules

    def remove(self, rule: Sequence[str]) -> bool:
        try:
            self._rules.remove(as_rule(rule))
        except ValueError:
            return False
        return True

    def remove_all(self, rule: Sequence[str]) -> int:
        rule = as_rule(rule)
        before = len(self._rules)
        self._rules = [r for r in self._rules if r != rule]
        return before - len(self._rules)

    def clear(self):
        self._rules = []

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)


class HashedPolicyStore(PolicyStore):
    """
    Hash-backed store. A dict keeps insertion order and O(1) membership.
    """

    hashed = True

    def __init__(self, rules: Iterable[Sequence[str]] = ()):
        self._rules = {}
        for rule in rules:
            self.add(rule)

    def add(self, rule: Sequence[str]) -> bool:
        rule = as_rule(rule)
        if rule in self._rules:
            return False
        self._rules[rule] = None
        return True

    def contains(self, rule: Sequence[str]) -> bool:
        return as_rule(rule) in self._rules

    def remove(self, rule: Sequence[str]) -> bool:
        rule = as_rule(rule)
        if rule not in self._rules:
            return False
        del self._rules[rule]
        return True

    def remove_all(self, rule: Sequence[str]) -> int:
        return 1 if self.remove(rule) else 0

    def clear(self):
        self._rules = {}

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)


def new_policy_store(hashed: bool) -> PolicyStore:
    """
    Create an empty row store.

    Args:
        hashed: Use the hash-backed variant

    Returns:
        Empty PolicyStore
    """
    if hashed:
        return HashedPolicyStore()
    return OrderedPolicyStore()
