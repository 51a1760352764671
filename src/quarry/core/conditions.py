"""Conditions gating dependency edges.

By default a dependency is always fulfilled. When an edge carries
conditions, all of them must hold for the request params before the
dependency is resolved; otherwise the dependency is filled with ``None``
and its subtree never runs.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Sequence

Condition = Callable[[Any], bool]
"""A predicate over the request params of a single ``Quarry.get`` call."""


def check_conditions(params: Any, conditions: Sequence[Condition]) -> bool:
    """Return True when every condition holds for ``params``.

    An empty sequence is always satisfied. Evaluation stops at the first
    condition that fails.
    """
    if not conditions:
        return True
    return all(condition(params) for condition in conditions)


class ConditionMap:
    """The outgoing edges of one parent: child name -> conditions."""

    def __init__(self) -> None:
        self._edges: dict[str, tuple[Condition, ...]] = {}

    def add(self, child: str, *conditions: Condition) -> None:
        self._edges[child] = tuple(conditions)

    def remove(self, child: str) -> None:
        self._edges.pop(child, None)

    def contains(self, child: str) -> bool:
        return child in self._edges

    def get(self, child: str) -> tuple[Condition, ...]:
        return self._edges[child]

    def size(self) -> int:
        return len(self._edges)

    def items(self) -> list[tuple[str, tuple[Condition, ...]]]:
        return list(self._edges.items())

    def __contains__(self, child: object) -> bool:
        return child in self._edges

    def __iter__(self) -> Iterator[str]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)
