"""The Quarry graph: named factories linked by dependency edges.

Implements registration (unique names, unique edges), cycle detection via
DFS colouring on every edge insertion, read-only introspection, and the
``get`` entry point that resolves a name through a fresh
``Session``.

Lifecycle: populate the graph during setup, then resolve from as many
threads as needed. Registration is not synchronised and must not overlap
with ``get`` calls.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, TypeVar

from quarry.core.conditions import Condition, ConditionMap
from quarry.core.context import Context
from quarry.core.factory import Factory
from quarry.core.session import Session
from quarry.exceptions import (
    CycleDetectedError,
    DuplicateDependencyError,
    DuplicateFactoryError,
    TypeMismatchError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WHITE, _GRAY, _BLACK = 0, 1, 2


class Quarry:
    """A dependency graph fulfilling named values from registered factories.

    The graph supports:
    - Registering factories under unique names
    - Declaring dependency edges, optionally gated by conditions
    - Rejecting edges that would create a cycle
    - Resolving a name, with its whole dependency subtree, per request

    Thread safety: ``get`` and the read-only queries are safe to call
    concurrently once registration has finished. ``add_factory`` and
    ``add_dependency`` are NOT thread-safe.
    """

    def __init__(self) -> None:
        self._factories: dict[str, Factory] = {}
        self._adjacency: dict[str, ConditionMap] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_factory(self, name: str, factory: Factory) -> None:
        """Register ``factory`` under ``name``.

        Raises:
            ValueError: ``name`` is empty or not a string.
            DuplicateFactoryError: ``name`` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("factory name must be a non-empty string")
        if name in self._factories:
            raise DuplicateFactoryError(name)
        self._factories[name] = factory
        logger.debug("Registered factory %s", name)

    def add_dependency(self, parent: str, child: str, *conditions: Condition) -> None:
        """Make ``parent`` depend on ``child``.

        Dependencies are always fulfilled unless ``conditions`` are given, in
        which case all of them must hold for the request params. Unfulfilled
        dependencies are passed to ``parent`` as ``None``. Neither side needs
        to be registered yet; a missing factory fails at resolution time.

        Raises:
            DuplicateDependencyError: The edge was already declared.
            CycleDetectedError: The edge would close a cycle. The edge is
                removed again before raising, so the graph stays acyclic.
        """
        edges = self._adjacency.get(parent)
        if edges is None:
            edges = ConditionMap()
            self._adjacency[parent] = edges
        elif edges.contains(child):
            raise DuplicateDependencyError(parent, child)

        edges.add(child, *conditions)
        cycle = self._find_cycle()
        if cycle:
            edges.remove(child)
            if not edges:
                del self._adjacency[parent]
            raise CycleDetectedError(parent, child, cycle)
        logger.debug(
            "Registered dependency %s -> %s (%d conditions)",
            parent, child, len(conditions),
        )

    def _find_cycle(self) -> list[str]:
        """Search the whole graph for a cycle using DFS colouring.

        Every node not yet visited starts a new DFS. Reaching a GRAY node
        (one still on the recursion stack) is a back edge.

        Returns:
            The cycle path with its first name repeated at the end, or an
            empty list when the graph is acyclic.
        """
        color: dict[str, int] = {}
        stack: list[str] = []

        def _dfs(name: str) -> list[str]:
            color[name] = _GRAY
            stack.append(name)
            edges = self._adjacency.get(name)
            for neighbor in edges or ():
                state = color.get(neighbor, _WHITE)
                if state == _GRAY:
                    return stack[stack.index(neighbor):] + [neighbor]
                if state == _WHITE:
                    found = _dfs(neighbor)
                    if found:
                        return found
            stack.pop()
            color[name] = _BLACK
            return []

        for name in list(self._adjacency):
            if color.get(name, _WHITE) == _WHITE:
                found = _dfs(name)
                if found:
                    return found
        return []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def names(self) -> set[str]:
        """Return the set of registered factory names."""
        return set(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def factory(self, name: str) -> Factory | None:
        """Return the factory registered under ``name``, or None."""
        return self._factories.get(name)

    def edges_of(self, name: str) -> ConditionMap | None:
        """Return the outgoing edges of ``name``, or None if it has none."""
        return self._adjacency.get(name)

    def dependencies_of(self, name: str) -> list[str]:
        """Return the declared direct dependencies of ``name``, sorted."""
        return sorted(self._adjacency.get(name) or ())

    def conditions_for(self, parent: str, child: str) -> tuple[Condition, ...]:
        """Return the conditions on the ``parent -> child`` edge.

        Raises:
            KeyError: No such edge was declared.
        """
        edges = self._adjacency.get(parent)
        if edges is None or not edges.contains(child):
            raise KeyError(f"{parent} -> {child}")
        return edges.get(child)

    def edges(self) -> list[tuple[str, str, int]]:
        """Return every edge as ``(parent, child, condition_count)``, sorted."""
        return sorted(
            (parent, child, len(conditions))
            for parent, edges in self._adjacency.items()
            for child, conditions in edges.items()
        )

    def transitive_dependencies(self, name: str) -> set[str]:
        """Compute every name reachable from ``name``, conditions ignored.

        Uses BFS over the declared edges. Does NOT include ``name`` itself.
        """
        visited: set[str] = set()
        queue: deque[str] = deque([name])
        while queue:
            current = queue.popleft()
            for child in self._adjacency.get(current) or ():
                if child not in visited:
                    visited.add(child)
                    queue.append(child)
        visited.discard(name)
        return visited

    def missing_factories(self) -> dict[str, list[str]]:
        """Map each edge endpoint without a factory to the names needing it.

        A registered factory may have dependents declared before it, so an
        entry here only means resolution of those dependents would fail
        if the graph were used as-is.
        """
        missing: dict[str, list[str]] = {}
        for parent, edges in self._adjacency.items():
            if parent not in self._factories:
                missing.setdefault(parent, [])
            for child in edges:
                if child not in self._factories:
                    missing.setdefault(child, []).append(parent)
        return {name: sorted(parents) for name, parents in sorted(missing.items())}

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def get(self, ctx: Context, params: Any, name: str) -> Any:
        """Resolve ``name`` with its dependencies for a single request.

        Every factory in the subtree runs at most once for this call.
        Independent dependencies run concurrently on worker threads.

        Args:
            ctx: Caller context. Give it a deadline to bound latency.
            params: Opaque request object passed to every factory and
                condition in the tree.
            name: The factory to resolve.

        Returns:
            The value produced by the factory registered under ``name``.

        Raises:
            ContextCancelledError: ``ctx`` was cancelled, or the request
                was aborted by a failure in another branch.
            DeadlineExceededError: ``ctx`` expired.
            FactoryNotFoundError: ``name`` or one of its dependencies is
                not registered.
            Exception: Whatever a factory raised, unchanged.
        """
        return Session(self, ctx, params).get(name)

    def get_typed(self, ctx: Context, params: Any, name: str, expected: type[T]) -> T:
        """Resolve ``name`` like ``get`` and check the result's type.

        Raises:
            TypeMismatchError: The value is not an instance of ``expected``.
        """
        value = self.get(ctx, params, name)
        if not isinstance(value, expected):
            raise TypeMismatchError(name, expected, value)
        return value
