"""Factories, resolved dependency mappings, and factory combinators.

A factory is any callable ``factory(ctx, params, deps) -> value``. It
signals failure by raising; the exception escapes ``Quarry.get``
unchanged. ``params`` is the opaque request object passed to the top-level
``get`` call, identical for every factory in the resolution tree. ``deps``
holds exactly the factory's declared dependencies, each mapped to its
resolved value, or to ``None`` when the edge's conditions were not met.

Two combinators cover the common cases:

- ``provider(value)`` always returns a fixed value.
- ``singleton(fn)`` runs ``fn`` once for the life of the returned factory,
  across every request, and replays its value or exception afterwards.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, TypeVar

from quarry.core.context import Context
from quarry.exceptions import TypeMismatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Dependencies(dict[str, Any]):
    """Resolved dependency values for one factory invocation, keyed by name."""

    def contains(self, name: str) -> bool:
        """Return True when ``name`` was declared and its edge was visited."""
        return name in self

    def typed(self, name: str, expected: type[T], *, optional: bool = False) -> T:
        """Return the value for ``name``, checked against ``expected``.

        Args:
            name: Dependency name.
            expected: Required runtime type of the value.
            optional: Accept a missing or ``None`` value (conditional edges).

        Raises:
            KeyError: ``name`` is absent and ``optional`` is False.
            TypeMismatchError: The value is not an instance of ``expected``.
        """
        if name not in self:
            if optional:
                return None  # type: ignore[return-value]
            raise KeyError(name)
        value = self[name]
        if value is None and optional:
            return None  # type: ignore[return-value]
        if not isinstance(value, expected):
            raise TypeMismatchError(name, expected, value)
        return value


Factory = Callable[[Context, Any, Dependencies], Any]
"""``factory(ctx, params, deps) -> value``; raises on failure."""

SingletonFunction = Callable[[Context, Dependencies], Any]


def provider(value: Any) -> Factory:
    """Create a factory that ignores its inputs and always returns ``value``."""

    def _provide(ctx: Context, params: Any, deps: Dependencies) -> Any:
        return value

    return _provide


def singleton(fn: SingletonFunction) -> Factory:
    """Wrap ``fn(ctx, deps)`` so it executes at most once, ever.

    The first caller runs ``fn``; concurrent callers block until it finishes.
    Every later call, from this request or any other, gets the same value
    or has the same exception re-raised without running ``fn`` again. The
    outcome is kept for the lifetime of the returned factory, independently
    of the once-per-request memo of a resolution session.

    Unlike a factory, ``fn`` does not receive request params.
    """
    lock = threading.Lock()
    state: dict[str, Any] = {}

    def _singleton(ctx: Context, params: Any, deps: Dependencies) -> Any:
        if "done" not in state:
            with lock:
                if "done" not in state:
                    logger.debug("Running singleton %s", getattr(fn, "__name__", fn))
                    try:
                        state["value"] = fn(ctx, deps)
                    except Exception as exc:
                        state["error"] = exc
                    state["done"] = True
        if "error" in state:
            raise state["error"]
        return state["value"]

    return _singleton
