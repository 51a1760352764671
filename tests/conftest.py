"""Shared fixtures for quarry tests."""

from __future__ import annotations

import threading
from typing import Any, Callable

import pytest

from quarry import Context, Dependencies, Quarry


class CallCounter:
    """Thread-safe factory that counts calls and records who was called."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.count = 0
        self.calls: list[str] = []

    def factory(self, name: str = "") -> Callable[[Context, Any, Dependencies], int]:
        def _count(ctx: Context, params: Any, deps: Dependencies) -> int:
            with self._lock:
                self.count += 1
                self.calls.append(name)
                return self.count

        return _count


@pytest.fixture
def counter() -> CallCounter:
    """A fresh call counter."""
    return CallCounter()


@pytest.fixture
def ctx() -> Context:
    """A background context that is never cancelled."""
    return Context.background()


def _expect_deps(base: Callable, names: tuple[str, ...]) -> Callable:
    def _factory(ctx: Context, params: Any, deps: Dependencies) -> Any:
        if set(deps) != set(names):
            raise AssertionError(f"deps mismatch: want {sorted(names)}, got {sorted(deps)}")
        return base(ctx, params, deps)

    return _factory


DIAMOND_EDGES = (
    ("root", "a"),
    ("a", "c"),
    ("c", "d"),
    ("c", "f"),
    ("d", "e"),
    ("root", "b"),
    ("b", "g"),
    ("g", "h"),
    ("h", "i"),
    # j is not reachable from root.
    ("j", "h"),
)


@pytest.fixture
def simple_graph(counter: CallCounter) -> Quarry:
    """Ten factories reachable from ``root`` plus ``j``, which shares ``h``.

    Every factory checks it received exactly its declared dependencies and
    counts its call on ``counter``.
    """
    graph = Quarry()
    names = sorted({n for edge in DIAMOND_EDGES for n in edge})
    for name in names:
        children = tuple(child for parent, child in DIAMOND_EDGES if parent == name)
        graph.add_factory(name, _expect_deps(counter.factory(name), children))
    for parent, child in DIAMOND_EDGES:
        graph.add_dependency(parent, child)
    return graph
