"""
PMEC - Policy Model Engine Core

The in-memory model behind an RBAC/ABAC authorization library: model
definitions loaded from CONF text plus the live rule set, with the
query and mutation API a decision engine consults.

Main exports:
- Model: Model definitions and rules
- Assertion: One section definition
- Config: CONF file reader
- RoleManager, PolicyOp: Role-graph contract
"""

from .model import Model, Assertion, AssertionMap
from .conf import Config
from .rbac import PolicyOp, RoleManager
from .errors import *
from .config import *

__version__ = "0.1.0"

__all__ = [
    'Model',
    'Assertion',
    'AssertionMap',
    'Config',
    'PolicyOp',
    'RoleManager',
]
