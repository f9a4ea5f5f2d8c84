from __future__ import annotations

import math

import pytest

from integral_plotter import CacheAction, Viewport, ViewportSampler, compile_expression


class _CountingFunction:
    """Spy that records every evaluation."""

    def __init__(self, fn) -> None:
        self.fn = fn
        self.calls: list[float] = []

    def evaluate(self, x: float) -> float:
        self.calls.append(x)
        return float(self.fn(x))


def test_full_sample_spans_viewport_with_pixel_width_plus_one_points() -> None:
    sampler = ViewportSampler(_CountingFunction(lambda x: x * x))
    series = sampler.run(Viewport(-2.0, 3.0, 50), CacheAction.RECOMPUTE)

    assert len(series) == 51
    xs = list(series.x_values)
    assert xs[0] == -2.0
    assert xs[-1] == pytest.approx(3.0)
    steps = [b - a for a, b in zip(xs, xs[1:])]
    assert all(step == pytest.approx(0.1) for step in steps)
    assert all(y == pytest.approx(x * x) for x, y in series)


def test_reuse_returns_cached_series_without_evaluating() -> None:
    spy = _CountingFunction(math.sin)
    sampler = ViewportSampler(spy)
    viewport = Viewport(0.0, 1.0, 20)

    first = sampler.run(viewport, CacheAction.RECOMPUTE)
    calls_after_first = len(spy.calls)
    second = sampler.run(viewport, CacheAction.REUSE)

    assert second is first
    assert len(spy.calls) == calls_after_first == 21


def test_reuse_with_empty_cache_is_a_programming_error() -> None:
    sampler = ViewportSampler(_CountingFunction(math.sin))
    with pytest.raises(RuntimeError, match="Back cache is empty"):
        sampler.run(Viewport(0.0, 1.0, 10), CacheAction.REUSE)


def test_partial_reuse_after_pan_evaluates_only_new_points() -> None:
    spy = _CountingFunction(lambda x: math.sin(x) * 1e3)
    sampler = ViewportSampler(spy)
    before = sampler.run(Viewport(0.0, 10.0, 10), CacheAction.RECOMPUTE)
    old = dict(before.points)
    spy.calls.clear()

    after = sampler.run(Viewport(1.0, 11.0, 10), CacheAction.PARTIAL)

    assert spy.calls == [11.0]
    for x, y in after:
        if x in old:
            assert y == old[x]


def test_partial_reuse_after_zoom_keeps_exact_matches_bit_identical() -> None:
    spy = _CountingFunction(lambda x: x ** 3 - 2 * x)
    sampler = ViewportSampler(spy)
    before = sampler.run(Viewport(0.0, 10.0, 10), CacheAction.RECOMPUTE)
    old = dict(before.points)
    spy.calls.clear()

    after = sampler.run(Viewport(2.0, 10.0, 10), CacheAction.PARTIAL)

    assert len(after) == 11
    matched = [x for x, _ in after if x in old]
    assert matched == [2.0, 6.0, 10.0]
    for x in matched:
        assert dict(after.points)[x] == old[x]
        assert x not in spy.calls
    assert len(spy.calls) == 8
    assert len(spy.calls) < len(after)


def test_partial_without_previous_series_recomputes_everything() -> None:
    spy = _CountingFunction(lambda x: x)
    sampler = ViewportSampler(spy)

    series = sampler.run(Viewport(0.0, 4.0, 4), CacheAction.PARTIAL)

    assert len(series) == 5
    assert len(spy.calls) == 5


def test_partial_with_changed_pixel_width_recomputes_everything() -> None:
    spy = _CountingFunction(lambda x: x)
    sampler = ViewportSampler(spy)
    sampler.run(Viewport(0.0, 4.0, 4), CacheAction.RECOMPUTE)
    spy.calls.clear()

    series = sampler.run(Viewport(0.0, 4.0, 8), CacheAction.PARTIAL)

    assert len(series) == 9
    assert len(spy.calls) == 9


def test_division_by_zero_samples_as_infinity() -> None:
    series = ViewportSampler(compile_expression("1/x")).run(Viewport(-1.0, 1.0, 2), CacheAction.RECOMPUTE)

    ys = [y for _, y in series]
    assert ys == [-1.0, math.inf, 1.0]


def test_undefined_samples_pass_through_as_nan() -> None:
    series = ViewportSampler(compile_expression("sqrt(x)")).run(Viewport(-1.0, 1.0, 2), CacheAction.RECOMPUTE)

    ys = [y for _, y in series]
    assert math.isnan(ys[0])
    assert ys[1:] == [0.0, 1.0]


def test_invalidate_drops_back_cache() -> None:
    sampler = ViewportSampler(_CountingFunction(lambda x: x))
    sampler.run(Viewport(0.0, 1.0, 4), CacheAction.RECOMPUTE)
    assert sampler.cache is not None

    sampler.invalidate()

    assert sampler.cache is None


def test_sampler_without_function_refuses_to_run() -> None:
    with pytest.raises(RuntimeError, match="no function"):
        ViewportSampler().run(Viewport(0.0, 1.0, 4), CacheAction.RECOMPUTE)


def test_series_columns_are_read_only() -> None:
    series = ViewportSampler(_CountingFunction(lambda x: x)).run(Viewport(0.0, 1.0, 4))
    with pytest.raises(ValueError):
        series.y_values[0] = 5.0


def test_partial_reuse_without_back_cache_raises() -> None:
    sampler = ViewportSampler(_CountingFunction(lambda x: x))
    with pytest.raises(RuntimeError, match="Back cache is empty"):
        sampler._partial(Viewport(0.0, 1.0, 4))
