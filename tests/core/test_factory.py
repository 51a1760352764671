"""Tests for factory combinators and the dependency mapping."""

from __future__ import annotations

import threading
import time

import pytest

from quarry import Context, Dependencies, Quarry, TypeMismatchError, provider, singleton


class TestProvider:
    """Tests for provider()."""

    def test_returns_value(self) -> None:
        """A provider returns its value and ignores every input."""
        factory = provider("hello-world")
        assert factory(None, None, None) == "hello-world"  # type: ignore[arg-type]

    def test_ignores_params_and_deps(self, ctx: Context) -> None:
        """Params and dependencies have no effect on the value."""
        value = object()
        factory = provider(value)
        assert factory(ctx, {"x": 1}, Dependencies(a=2)) is value
        assert factory(ctx, "other", Dependencies()) is value

    def test_provides_none(self, ctx: Context) -> None:
        """None is a legitimate provided value."""
        assert provider(None)(ctx, None, Dependencies()) is None


class TestSingleton:
    """Tests for singleton()."""

    def test_only_calls_function_once(self) -> None:
        """Repeated calls run the wrapped function once."""
        calls: list[int] = []

        def fn(ctx, deps):
            calls.append(1)

        factory = singleton(fn)
        factory(None, None, None)  # type: ignore[arg-type]
        factory(None, None, None)  # type: ignore[arg-type]
        assert len(calls) == 1

    def test_returns_same_value(self) -> None:
        """Every call observes the identical value."""
        factory = singleton(lambda ctx, deps: object())
        assert factory(None, None, None) is factory(None, None, None)  # type: ignore[arg-type]

    def test_returns_same_error(self) -> None:
        """A failure is cached and re-raised without re-running."""
        calls: list[int] = []

        def fn(ctx, deps):
            calls.append(1)
            raise RuntimeError("some error")

        factory = singleton(fn)
        with pytest.raises(RuntimeError) as first:
            factory(None, None, None)  # type: ignore[arg-type]
        with pytest.raises(RuntimeError) as second:
            factory(None, None, None)  # type: ignore[arg-type]
        assert first.value is second.value
        assert len(calls) == 1

    def test_concurrent_first_use(self) -> None:
        """Racing first callers still run the function exactly once."""
        calls: list[int] = []
        lock = threading.Lock()

        def fn(ctx, deps):
            with lock:
                calls.append(1)
            time.sleep(0.05)
            return "ready"

        factory = singleton(fn)
        results: list[str] = []
        barrier = threading.Barrier(8)

        def call() -> None:
            barrier.wait()
            results.append(factory(None, None, None))  # type: ignore[arg-type]

        threads = [threading.Thread(target=call) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(calls) == 1
        assert results == ["ready"] * 8

    def test_once_across_independent_gets(self, ctx: Context) -> None:
        """Two separate resolutions share one singleton execution."""
        calls: list[int] = []

        def fn(ctx, deps):
            calls.append(1)
            return len(calls)

        graph = Quarry()
        graph.add_factory("service", singleton(fn))
        assert graph.get(ctx, None, "service") == 1
        assert graph.get(ctx, "other params", "service") == 1
        assert len(calls) == 1

    def test_cached_error_across_independent_gets(self, ctx: Context) -> None:
        """A cached failure is replayed to later resolutions."""
        calls: list[int] = []

        def fn(ctx, deps):
            calls.append(1)
            raise ValueError("boom")

        graph = Quarry()
        graph.add_factory("service", singleton(fn))
        for _ in range(2):
            with pytest.raises(ValueError, match="boom"):
                graph.get(ctx, None, "service")
        assert len(calls) == 1

    def test_receives_dependencies(self, ctx: Context) -> None:
        """The wrapped function gets the resolved dependencies of its node."""
        graph = Quarry()
        graph.add_factory("config", provider({"url": "db://"}))
        graph.add_factory("db", singleton(lambda ctx, deps: f"conn:{deps['config']['url']}"))
        graph.add_dependency("db", "config")
        assert graph.get(ctx, None, "db") == "conn:db://"


class TestDependencies:
    """Tests for the Dependencies mapping."""

    def test_contains(self) -> None:
        deps = Dependencies(a=1, b=None)
        assert deps.contains("a")
        assert deps.contains("b")
        assert not deps.contains("c")

    def test_typed_returns_value(self) -> None:
        """typed() returns values of the expected type."""
        assert Dependencies(n=3).typed("n", int) == 3

    def test_typed_mismatch(self) -> None:
        """typed() raises TypeMismatchError for values of another type."""
        with pytest.raises(TypeMismatchError) as excinfo:
            Dependencies(n="3").typed("n", int)
        err = excinfo.value
        assert err.name == "n"
        assert err.expected is int
        assert err.actual is str

    def test_typed_missing(self) -> None:
        """typed() raises KeyError for undeclared names."""
        with pytest.raises(KeyError):
            Dependencies().typed("n", int)

    def test_typed_none_is_mismatch_unless_optional(self) -> None:
        """A None value from an unmet condition needs optional=True."""
        deps = Dependencies(n=None)
        with pytest.raises(TypeMismatchError):
            deps.typed("n", int)
        assert deps.typed("n", int, optional=True) is None
        assert Dependencies().typed("n", int, optional=True) is None
