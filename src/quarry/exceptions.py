"""Quarry exception hierarchy.

All public exceptions inherit from QuarryError, giving callers a single
base class to catch when they want to handle any Quarry-specific failure
without swallowing unrelated errors. Exceptions raised by user factories
are never wrapped: they propagate out of ``Quarry.get`` unchanged.
"""

from __future__ import annotations

from typing import Sequence


class QuarryError(Exception):
    """Base exception for all Quarry errors."""


class ConfigError(QuarryError):
    """Raised when settings cannot be loaded or contain invalid values."""


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class RegistrationError(QuarryError):
    """Raised when the graph cannot accept a factory or dependency.

    Registration errors are fatal to the setup sequence that produced them.
    """


class DuplicateFactoryError(RegistrationError):
    """Raised when a factory name is registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"duplicate add of factory {name}")


class DuplicateDependencyError(RegistrationError):
    """Raised when the same (parent, child) edge is declared twice."""

    def __init__(self, parent: str, child: str) -> None:
        self.parent = parent
        self.child = child
        super().__init__(f"duplicate add of dependency on {child} to {parent}")


class CycleDetectedError(RegistrationError):
    """Raised when a new dependency edge would close a cycle.

    Attributes:
        parent: The dependent side of the rejected edge.
        child: The dependency side of the rejected edge.
        cycle: Factory names along the detected cycle, first name repeated
            at the end (e.g. ``["a", "b", "c", "a"]``).
    """

    def __init__(self, parent: str, child: str, cycle: Sequence[str] = ()) -> None:
        self.parent = parent
        self.child = child
        self.cycle = list(cycle)
        message = f"depending {parent} on {child} creates a cycle"
        if self.cycle:
            message += f": {' -> '.join(self.cycle)}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolutionError(QuarryError):
    """Raised when a requested value cannot be resolved from the graph."""


class FactoryNotFoundError(ResolutionError):
    """Raised when a requested or depended-upon factory is not registered."""

    def __init__(self, name: str, parent: str | None = None) -> None:
        self.name = name
        self.parent = parent
        if parent is None:
            message = f"factory {name} does not exist"
        else:
            message = f"factory {name}, depended upon by {parent}, does not exist"
        super().__init__(message)


class TypeMismatchError(ResolutionError):
    """Raised when a resolved value is not of the type the caller expects."""

    def __init__(self, name: str, expected: type, actual: object) -> None:
        self.name = name
        self.expected = expected
        self.actual = type(actual)
        super().__init__(
            f"value {name} is {self.actual.__name__}, expected {expected.__name__}"
        )


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class ContextError(QuarryError):
    """Raised when a resolution context is done before work completes."""


class ContextCancelledError(ContextError):
    """Raised when a context, or one of its ancestors, was cancelled."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceededError(ContextError, TimeoutError):
    """Raised when a context's deadline passed.

    Inherits from built-in TimeoutError for broad exception handling.
    """

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)
