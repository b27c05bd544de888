"""Model definitions and rule storage for PMEC."""

from .assertion import Assertion
from .model import AssertionMap, Model
from .policy_store import (
    HashedPolicyStore,
    OrderedPolicyStore,
    PolicyStore,
    new_policy_store,
)

__all__ = [
    'Assertion',
    'AssertionMap',
    'Model',
    'PolicyStore',
    'OrderedPolicyStore',
    'HashedPolicyStore',
    'new_policy_store',
]
