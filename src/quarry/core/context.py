"""Cancellable execution contexts with optional deadlines.

A ``Context`` is a thread-safe cancellation token. Contexts form a tree:
cancelling a context cancels every context derived from it, and a derived
context never outlives its parent's deadline.

Usage::

    ctx = Context.background().with_timeout(2.0)
    value = graph.get(ctx, request, "response")

Factories receive the session context and may poll ``ctx.done()`` or call
``ctx.raise_if_done()`` around long-running work. Cancellation is
cooperative: nothing is interrupted, it only becomes observable.
"""

from __future__ import annotations

import threading
import time

from quarry.exceptions import (
    ContextCancelledError,
    ContextError,
    DeadlineExceededError,
)


class Context:
    """A cancellation token with an optional monotonic deadline.

    Use ``Context.background()`` for a root that is never done, then derive
    children with ``with_cancel()``, ``with_timeout()`` or ``with_deadline()``.

    Thread safety: all methods may be called from any thread.
    """

    def __init__(
        self,
        parent: Context | None = None,
        deadline: float | None = None,
    ) -> None:
        self._parent = parent
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._err: ContextError | None = None
        self._children: set[Context] = set()
        self._timer: threading.Timer | None = None

        # Only a deadline earlier than the parent's needs a timer of its own;
        # the parent's expiry already reaches every child.
        own_deadline = deadline
        if parent is not None and parent.deadline is not None:
            if deadline is None or parent.deadline <= deadline:
                deadline = parent.deadline
                own_deadline = None
        self._deadline = deadline

        if parent is not None:
            parent._attach(self)
        if own_deadline is not None and not self._done.is_set():
            self._arm_timer()

    @classmethod
    def background(cls) -> Context:
        """Return a new root context that is never cancelled on its own."""
        return cls()

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def with_cancel(self) -> Context:
        """Derive a child that can be cancelled independently of this one."""
        return Context(parent=self)

    def with_deadline(self, deadline: float) -> Context:
        """Derive a child that expires at ``deadline`` (``time.monotonic()`` clock)."""
        return Context(parent=self, deadline=deadline)

    def with_timeout(self, seconds: float) -> Context:
        """Derive a child that expires ``seconds`` from now."""
        return self.with_deadline(time.monotonic() + seconds)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def deadline(self) -> float | None:
        """Monotonic deadline, or None when this context never expires."""
        return self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def done(self) -> bool:
        """Return True once this context has been cancelled or has expired."""
        return self._done.is_set()

    def err(self) -> ContextError | None:
        """Return why this context is done, or None while it is still live."""
        with self._lock:
            return self._err

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the context is done or ``timeout`` elapses.

        Returns:
            True if the context is done.
        """
        return self._done.wait(timeout)

    def raise_if_done(self) -> None:
        """Raise a fresh copy of the context error if the context is done."""
        err = self.err()
        if err is not None:
            raise type(err)(*err.args)

    def cancel(self) -> None:
        """Cancel this context and every context derived from it.

        Cancelling an already-done context has no effect.
        """
        self._finish(ContextCancelledError())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _arm_timer(self) -> None:
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            self._finish(DeadlineExceededError())
            return
        timer = threading.Timer(remaining, self._finish, args=(DeadlineExceededError(),))
        timer.daemon = True
        with self._lock:
            if self._err is not None:
                return
            self._timer = timer
        timer.start()

    def _attach(self, child: Context) -> None:
        with self._lock:
            err = self._err
            if err is None:
                self._children.add(child)
                return
        child._finish(type(err)(*err.args))

    def _detach(self, child: Context) -> None:
        with self._lock:
            self._children.discard(child)

    def _finish(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            self._done.set()
            children = list(self._children)
            self._children.clear()
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.cancel()
        if self._parent is not None:
            self._parent._detach(self)
        for child in children:
            child._finish(type(err)(*err.args))

    def __repr__(self) -> str:
        state = "done" if self.done() else "live"
        return f"Context(state={state}, deadline={self._deadline})"
