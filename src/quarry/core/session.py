"""Per-request resolution of a name through the Quarry graph.

A ``Session`` lives for exactly one ``Quarry.get`` call. It owns:

- a cancellable context derived from the caller's context, shared by every
  branch of the resolution tree, and
- a table of ``OnceDelegate`` objects, one per name, so that a name reached
  through several paths (diamond dependencies) executes once per request.

Resolution Algorithm
--------------------
1. Fail immediately if the caller's context is already done.
2. For the requested name, resolve all declared dependencies concurrently,
   one worker thread per edge. Edges whose conditions fail are filled with
   ``None`` and their subtree is skipped entirely.
3. Invoke the factory with the session context, the request params and the
   resolved dependencies.
4. Any failure cancels the session context. Branches still in flight then
   fail with the cancellation error instead of their own outcome; factories
   already running are not interrupted, their results are discarded.

When several branches fail at the same time, which error is raised is not
deterministic. Only one error ever escapes ``get``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable

from quarry.core.conditions import ConditionMap, check_conditions
from quarry.core.context import Context
from quarry.core.factory import Dependencies
from quarry.exceptions import FactoryNotFoundError

if TYPE_CHECKING:
    from quarry.core.graph import Quarry

logger = logging.getLogger(__name__)


class OnceDelegate:
    """Runs a zero-argument computation once and shares its outcome.

    Concurrent callers block until the single execution finishes, then all
    observe the same value, or the same exception re-raised.
    """

    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn
        self._lock = threading.Lock()
        self._done = False
        self._value: Any = None
        self._error: BaseException | None = None

    def __call__(self) -> Any:
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = self._fn()
                    except BaseException as exc:
                        self._error = exc
                    self._done = True
        if self._error is not None:
            raise self._error
        return self._value


class Session:
    """Resolves names from a graph for a single request.

    Sessions are cheap and single-use; ``Quarry.get`` creates one per call.
    They must never be shared across requests.
    """

    def __init__(self, graph: Quarry, ctx: Context, params: Any) -> None:
        self._graph = graph
        self._parent_ctx = ctx
        self._params = params
        self._ctx: Context | None = None
        self._lock = threading.Lock()
        self._delegates: dict[str, OnceDelegate] = {}

    @property
    def context(self) -> Context | None:
        """The context shared by every branch, once ``get`` has started."""
        return self._ctx

    def get(self, name: str) -> Any:
        """Resolve ``name`` and return its value.

        Raises:
            ContextError: The caller's context was done, or the request was
                aborted by a failure elsewhere in the tree.
            FactoryNotFoundError: A required factory is not registered.
            Exception: Whatever a factory raised, unchanged.
        """
        self._parent_ctx.raise_if_done()
        self._ctx = self._parent_ctx.with_cancel()
        logger.debug("Resolving %s", name)
        try:
            value = self._get_once(name, None)
        except BaseException as exc:
            logger.debug("Resolution of %s failed: %s", name, exc)
            raise
        finally:
            # Releases the derived context from its parent.
            self._ctx.cancel()
        logger.debug("Resolved %s (%d factories)", name, len(self._delegates))
        return value

    def _get_once(self, name: str, parent: str | None) -> Any:
        with self._lock:
            delegate = self._delegates.get(name)
            if delegate is None:
                delegate = OnceDelegate(lambda: self._resolve(name, parent))
                self._delegates[name] = delegate
        return delegate()

    def _abort(self, exc: BaseException) -> BaseException:
        self._ctx.cancel()
        return exc

    def _resolve(self, name: str, parent: str | None) -> Any:
        factory = self._graph.factory(name)
        if factory is None:
            raise self._abort(FactoryNotFoundError(name, parent))

        edges = self._graph.edges_of(name)
        deps = self._resolve_dependencies(name, edges) if edges else Dependencies()

        try:
            value = factory(self._ctx, self._params, deps)
        except BaseException as exc:
            raise self._abort(exc)

        # A successful factory does not win over a concurrent abort.
        self._ctx.raise_if_done()
        return value

    def _resolve_dependencies(self, name: str, edges: ConditionMap) -> Dependencies:
        deps = Dependencies()
        errors: list[BaseException] = []
        lock = threading.Lock()

        def _resolve_edge(child: str, conditions: tuple) -> None:
            try:
                self._ctx.raise_if_done()
                if not check_conditions(self._params, conditions):
                    logger.debug("Skipping %s -> %s: conditions not met", name, child)
                    value = None
                else:
                    value = self._get_once(child, name)
            except BaseException as exc:
                with lock:
                    errors.append(exc)
                self._ctx.cancel()
                return
            with lock:
                deps[child] = value

        items = edges.items()
        with ThreadPoolExecutor(
            max_workers=len(items), thread_name_prefix=f"quarry-{name}"
        ) as pool:
            futures = [
                pool.submit(_resolve_edge, child, conditions)
                for child, conditions in items
            ]

        for future in futures:
            exc = future.exception()
            if exc is not None:
                errors.append(exc)

        if errors:
            raise self._abort(errors[0])
        return deps
