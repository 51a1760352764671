"""Core of Quarry: the dependency graph and its per-request resolution engine.

Formal Definition
-----------------
A Quarry graph is a pair G = (F, E) where:

- **F**: Name -> Factory, the registered factories (names are unique)
- **E** ⊆ Name x Name x Condition*, the dependency edges (at most one per
  ordered pair, acyclic at all times)

Resolving a name n for request params p evaluates every factory reachable
from n through edges whose conditions hold for p, each exactly once, with a
factory never running before its fulfilled dependencies.
"""

from quarry.core.conditions import Condition, ConditionMap, check_conditions
from quarry.core.context import Context
from quarry.core.factory import Dependencies, Factory, provider, singleton
from quarry.core.graph import Quarry
from quarry.core.session import OnceDelegate, Session

__all__ = [
    "Condition",
    "ConditionMap",
    "Context",
    "Dependencies",
    "Factory",
    "OnceDelegate",
    "Quarry",
    "Session",
    "check_conditions",
    "provider",
    "singleton",
]
