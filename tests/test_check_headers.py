"""Tests for header checking and the per-check cache."""

from __future__ import annotations

import threading

import pytest
from conftest import CountingConstraint, accept, reject

from learnertypes import (
    CheckHeadersCache,
    RecursiveCheckError,
    TypeRegistry,
    intersection_of,
    union_of,
)

INPUTS = ("x1", "x2")
OUTPUTS = ("y",)


class TestCheckHeaders:
    """Test the result of checking each form."""

    def test_any_accepts_everything(self, registry: TypeRegistry) -> None:
        assert registry.any.check_headers(INPUTS, OUTPUTS) is None
        assert registry.any.check_headers(None, None) is None

    def test_extended_passes_headers_to_constraint(self, registry: TypeRegistry) -> None:
        constraint = CountingConstraint()
        extended = registry.any.extend("Recording", constraint)
        assert extended.check_headers(INPUTS, OUTPUTS) is None
        assert constraint.calls == [(INPUTS, OUTPUTS)]

    def test_extended_reports_failure(self, registry: TypeRegistry) -> None:
        failing = registry.any.extend("Failing", reject("no good"))
        assert failing.check_headers(INPUTS, OUTPUTS) == "no good"

    def test_extended_short_circuits_on_base_failure(self, registry: TypeRegistry) -> None:
        base = registry.any.extend("Base", reject("base failed"))
        constraint = CountingConstraint()
        child = base.extend("Child", constraint)
        assert child.check_headers(INPUTS, OUTPUTS) == "base failed"
        assert constraint.calls == []

    def test_intersection_requires_all(self, registry: TypeRegistry) -> None:
        good = registry.any.extend("Good", accept)
        bad = registry.any.extend("Bad", reject("bad"))
        also_good = registry.any.extend("AlsoGood", accept)
        assert intersection_of(good, also_good).check_headers(INPUTS, OUTPUTS) is None
        assert intersection_of(good, bad).check_headers(INPUTS, OUTPUTS) == "bad"

    def test_intersection_reports_a_failure(self, registry: TypeRegistry) -> None:
        x = registry.any.extend("X", reject("x"))
        y = registry.any.extend("Y", reject("y"))
        assert intersection_of(x, y).check_headers(INPUTS, OUTPUTS) in {"x", "y"}

    def test_union_requires_any(self, registry: TypeRegistry) -> None:
        good = registry.any.extend("Good", accept)
        bad = registry.any.extend("Bad", reject("bad"))
        assert union_of(good, bad).check_headers(INPUTS, OUTPUTS) is None

    def test_union_aggregates_failures(self, registry: TypeRegistry) -> None:
        x = registry.any.extend("X", reject("x"))
        y = registry.any.extend("Y", reject("y"))
        error = union_of(x, y).check_headers(INPUTS, OUTPUTS)
        assert error is not None
        assert set(error.split("\n")) == {"x", "y"}

    def test_union_deduplicates_failures(self, registry: TypeRegistry) -> None:
        base = registry.any.extend("Base", reject("shared"))
        left = base.extend("Left", accept)
        right = base.extend("Right", accept)
        other = registry.any.extend("Other", reject("other"))
        error = union_of(left, right, other).check_headers(INPUTS, OUTPUTS)
        assert error is not None
        assert sorted(error.split("\n")) == ["other", "shared"]

    def test_union_of_intersection(self, registry: TypeRegistry) -> None:
        good = registry.any.extend("Good", accept)
        bad = registry.any.extend("Bad", reject("bad"))
        worse = registry.any.extend("Worse", reject("worse"))
        either = union_of(intersection_of(good, bad), worse)
        error = either.check_headers(INPUTS, OUTPUTS)
        assert error is not None
        assert set(error.split("\n")) == {"bad", "worse"}

    def test_checks_are_repeatable(self, registry: TypeRegistry) -> None:
        x = registry.any.extend("X", reject("x"))
        y = registry.any.extend("Y", reject("y"))
        either = union_of(x, y)
        assert either.check_headers(INPUTS, OUTPUTS) == either.check_headers(INPUTS, OUTPUTS)


class TestCacheSharing:
    """Test that shared types are evaluated once per check."""

    def test_shared_base_in_extension_chain(self, registry: TypeRegistry) -> None:
        c_constraint = CountingConstraint()
        d_constraint = CountingConstraint()
        g_constraint = CountingConstraint()
        c = registry.any.extend("C", c_constraint)
        d = c.extend("D", d_constraint)
        combined = intersection_of(d, d.extend("E", g_constraint))

        assert combined.check_headers(INPUTS, OUTPUTS) is None
        assert len(c_constraint.calls) == 1
        assert len(d_constraint.calls) == 1
        assert len(g_constraint.calls) == 1

    def test_shared_base_across_union_branches(self, registry: TypeRegistry) -> None:
        shared = CountingConstraint()
        d = registry.any.extend("D", shared)
        either = union_of(d.extend("E1", reject("e1")), d.extend("E2", reject("e2")))

        assert either.check_headers(INPUTS, OUTPUTS) == "e1\ne2"
        assert len(shared.calls) == 1

    def test_shared_base_across_intersection_parts(self, registry: TypeRegistry) -> None:
        shared = CountingConstraint()
        d = registry.any.extend("D", shared)
        both = intersection_of(d.extend("E1", accept), d.extend("E2", accept))

        assert both.check_headers(INPUTS, OUTPUTS) is None
        assert len(shared.calls) == 1

    def test_each_check_starts_fresh(self, registry: TypeRegistry) -> None:
        constraint = CountingConstraint()
        extended = registry.any.extend("Counted", constraint)
        extended.check_headers(INPUTS, OUTPUTS)
        extended.check_headers(INPUTS, OUTPUTS)
        assert len(constraint.calls) == 2

    def test_nested_check_joins_active_cache(self, registry: TypeRegistry) -> None:
        counted = CountingConstraint()
        inner = registry.any.extend("Inner", counted)
        outer = registry.any.extend("Outer", lambda i, o: inner.check_headers(i, o))
        both = intersection_of(inner, outer)

        assert both.check_headers(INPUTS, OUTPUTS) is None
        assert len(counted.calls) == 1

    def test_nested_check_on_other_headers_is_separate(self, registry: TypeRegistry) -> None:
        counted = CountingConstraint()
        inner = registry.any.extend("Inner", counted)
        outer = registry.any.extend(
            "Outer", lambda i, o: inner.check_headers(("other",), o)
        )
        both = intersection_of(inner, outer)

        assert both.check_headers(INPUTS, OUTPUTS) is None
        assert len(counted.calls) == 2


class TestCacheObject:
    """Test the cache directly."""

    def test_results_are_cached_per_type(self, registry: TypeRegistry) -> None:
        constraint = CountingConstraint(result="nope")
        extended = registry.any.extend("Cached", constraint)
        cache = CheckHeadersCache(INPUTS, OUTPUTS)

        assert cache.check(extended) == "nope"
        assert cache[extended] == "nope"
        assert len(constraint.calls) == 1
        assert extended in cache
        assert registry.any in cache
        assert len(cache) == 2

    def test_call_is_not_cached(self) -> None:
        constraint = CountingConstraint()
        cache = CheckHeadersCache(INPUTS, OUTPUTS)
        cache.call(constraint)
        cache.call(constraint)
        assert constraint.calls == [(INPUTS, OUTPUTS), (INPUTS, OUTPUTS)]

    def test_for_headers_outside_check_is_fresh(self) -> None:
        first = CheckHeadersCache.for_headers(INPUTS, OUTPUTS)
        second = CheckHeadersCache.for_headers(INPUTS, OUTPUTS)
        assert first is not second


class TestRecursion:
    """Test that self-referential constraints are detected."""

    def test_self_reference_raises(self, registry: TypeRegistry) -> None:
        holder = {}
        looping = registry.any.extend(
            "Looping", lambda i, o: holder["type"].check_headers(i, o)
        )
        holder["type"] = looping

        with pytest.raises(RecursiveCheckError, match="Looping") as excinfo:
            looping.check_headers(INPUTS, OUTPUTS)
        assert excinfo.value.chain == (looping, looping)

    def test_indirect_reference_raises(self, registry: TypeRegistry) -> None:
        holder = {}
        base = registry.any.extend("Base", lambda i, o: holder["child"].check_headers(i, o))
        holder["child"] = base.extend("Child", accept)

        with pytest.raises(RecursiveCheckError) as excinfo:
            holder["child"].check_headers(INPUTS, OUTPUTS)
        assert [t.name for t in excinfo.value.chain] == ["Child", "Base", "Child"]

    def test_recursion_error_is_recursion_error(self, registry: TypeRegistry) -> None:
        holder = {}
        looping = registry.any.extend(
            "Looping", lambda i, o: holder["type"].check_headers(i, o)
        )
        holder["type"] = looping
        with pytest.raises(RecursionError):
            looping.check_headers(INPUTS, OUTPUTS)

    def test_cache_usable_after_recursion(self, registry: TypeRegistry) -> None:
        holder = {}
        looping = registry.any.extend(
            "Looping", lambda i, o: holder["type"].check_headers(i, o)
        )
        holder["type"] = looping
        with pytest.raises(RecursiveCheckError):
            looping.check_headers(INPUTS, OUTPUTS)

        plain = registry.any.extend("Plain", accept)
        assert plain.check_headers(INPUTS, OUTPUTS) is None


class TestConcurrency:
    """Test that concurrent checks don't share caches."""

    def test_checks_from_threads(self, registry: TypeRegistry) -> None:
        barrier = threading.Barrier(4)
        seen: list[str | None] = []
        lock = threading.Lock()

        def waiting(_: object, outputs: tuple[str, ...]) -> str | None:
            barrier.wait(timeout=5)
            return None if outputs == ("ok",) else "not ok"

        checked = registry.any.extend("Waiting", waiting)

        def worker(outputs: tuple[str, ...]) -> None:
            result = checked.check_headers(INPUTS, outputs)
            with lock:
                seen.append(result)

        threads = [
            threading.Thread(target=worker, args=(outputs,))
            for outputs in [("ok",), ("bad",), ("ok",), ("bad",)]
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(seen, key=str) == sorted([None, None, "not ok", "not ok"], key=str)
