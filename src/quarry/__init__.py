"""Quarry: a named dependency graph that resolves values on demand.

Factories are registered under unique names, linked by (optionally
conditional) dependency edges, and resolved per request with concurrent,
once-per-request execution of every factory in the requested subtree.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from quarry.core.conditions import Condition, check_conditions
from quarry.core.context import Context
from quarry.core.factory import Dependencies, Factory, provider, singleton
from quarry.core.graph import Quarry
from quarry.exceptions import (
    ConfigError,
    ContextCancelledError,
    ContextError,
    CycleDetectedError,
    DeadlineExceededError,
    DuplicateDependencyError,
    DuplicateFactoryError,
    FactoryNotFoundError,
    QuarryError,
    RegistrationError,
    ResolutionError,
    TypeMismatchError,
)

__all__ = [
    "Condition",
    "ConfigError",
    "Context",
    "ContextCancelledError",
    "ContextError",
    "CycleDetectedError",
    "DeadlineExceededError",
    "Dependencies",
    "DuplicateDependencyError",
    "DuplicateFactoryError",
    "Factory",
    "FactoryNotFoundError",
    "Quarry",
    "QuarryError",
    "RegistrationError",
    "ResolutionError",
    "TypeMismatchError",
    "check_conditions",
    "provider",
    "singleton",
]
