from __future__ import annotations

import pytest

from integral_plotter import (
    CacheAction,
    CallableExpression,
    ExpressionParseError,
    FunctionSlot,
    PreconditionViolation,
    QuadratureRule,
    RefreshRequest,
    compile_expression,
)


class _CountingCompiler:
    """Compiler wrapper that counts evaluations of every compiled function."""

    def __init__(self) -> None:
        self.compiled: list[str] = []
        self.calls = 0

    def __call__(self, text: str) -> CallableExpression:
        inner = compile_expression(text)
        self.compiled.append(text)

        def fn(x: float) -> float:
            self.calls += 1
            return inner.evaluate(x)

        return CallableExpression(fn, text=text)


def _request(expression: str = "x^2", **kw) -> RefreshRequest:
    kw.setdefault("integration_enabled", True)
    if kw["integration_enabled"]:
        kw.setdefault("integral_min_x", -1.0)
        kw.setdefault("integral_max_x", 1.0)
        kw.setdefault("rectangle_count", 10)
        kw.setdefault("rule", QuadratureRule.LEFT)
    return RefreshRequest.build(
        expression,
        kw.pop("min_x", -1.0),
        kw.pop("max_x", 1.0),
        kw.pop("pixel_width", 100),
        **kw,
    )


def test_first_refresh_produces_series_and_integral() -> None:
    output = FunctionSlot().refresh(_request())

    assert len(output.series) == 101
    assert output.integral is not None
    assert len(output.integral) == 10
    assert output.area == pytest.approx(output.integral.area)


def test_rectangle_count_change_recomputes_integrator_only() -> None:
    compiler = _CountingCompiler()
    slot = FunctionSlot(compiler=compiler)
    first = slot.refresh(_request())
    compiler.calls = 0

    second = slot.refresh(_request(rectangle_count=20))

    assert second.series is first.series
    assert second.plan.sampler is CacheAction.REUSE
    assert second.plan.integrator is CacheAction.RECOMPUTE
    assert len(second.integral) == 20
    assert compiler.calls == 20


def test_identical_refresh_evaluates_nothing() -> None:
    compiler = _CountingCompiler()
    slot = FunctionSlot(compiler=compiler)
    first = slot.refresh(_request())
    compiler.calls = 0

    second = slot.refresh(_request())

    assert compiler.calls == 0
    assert second.series is first.series
    assert second.integral is first.integral
    assert compiler.compiled == ["x^2"]


def test_integration_disabled_has_no_integral() -> None:
    output = FunctionSlot().refresh(_request(integration_enabled=False))

    assert output.integral is None
    assert output.area is None
    assert output.plan.integrator is CacheAction.SKIP


def test_rejected_request_leaves_slot_untouched() -> None:
    slot = FunctionSlot()
    good = slot.refresh(_request())
    bad = RefreshRequest(
        expression="x^3",
        min_x=1.0,
        max_x=1.0,
        pixel_width=100,
    )

    with pytest.raises(PreconditionViolation):
        slot.refresh(bad)

    assert slot.expression == "x^2"
    assert slot.last_output is good
    assert slot.refresh(_request()).series is good.series


def test_missing_integral_settings_are_reported() -> None:
    request = RefreshRequest(
        expression="x",
        min_x=0.0,
        max_x=1.0,
        pixel_width=10,
        integration_enabled=True,
        integral_min_x=0.0,
    )
    with pytest.raises(PreconditionViolation, match="integral_max_x, rectangle_count, rule"):
        FunctionSlot().refresh(request)


def test_parse_error_keeps_previous_function_and_caches() -> None:
    slot = FunctionSlot()
    good = slot.refresh(_request("sin(x)"))
    function = slot.function

    with pytest.raises(ExpressionParseError):
        slot.refresh(_request("sin(x"))

    assert slot.function is function
    assert slot.expression == "sin(x)"
    again = slot.refresh(_request("sin(x)"))
    assert again.series is good.series
    assert again.integral is good.integral


def test_expression_change_invalidates_both_caches() -> None:
    slot = FunctionSlot()
    first = slot.refresh(_request("x"))

    second = slot.refresh(_request("2*x"))

    assert second.plan.expression_changed
    assert second.series is not first.series
    assert second.series.y_values[-1] == pytest.approx(2.0)
    assert second.area == pytest.approx(2 * first.area)


def test_pan_reuses_matching_samples() -> None:
    compiler = _CountingCompiler()
    slot = FunctionSlot(compiler=compiler)
    slot.refresh(_request(min_x=0.0, max_x=10.0, pixel_width=10, integration_enabled=False))
    compiler.calls = 0

    output = slot.refresh(_request(min_x=1.0, max_x=11.0, pixel_width=10, integration_enabled=False))

    assert output.plan.sampler is CacheAction.PARTIAL
    assert compiler.calls == 1
    assert slot.coordinator.sampler_state.valid


def test_invalidate_forces_recompute() -> None:
    slot = FunctionSlot()
    first = slot.refresh(_request())

    slot.invalidate()
    second = slot.refresh(_request())

    assert second.plan.sampler is CacheAction.RECOMPUTE
    assert second.plan.integrator is CacheAction.RECOMPUTE
    assert second.series is not first.series
    assert list(second.series.y_values) == list(first.series.y_values)


def test_reference_area_follows_last_integral_request() -> None:
    slot = FunctionSlot()
    assert slot.reference_area() is None

    slot.refresh(_request("x^2", integral_min_x=0.0, integral_max_x=3.0))

    assert slot.reference_area() == pytest.approx(9.0)


def test_build_coerces_loose_inputs() -> None:
    request = RefreshRequest.build(
        "x",
        "-pi",
        "pi",
        "300",
        integration_enabled=True,
        integral_min_x="0",
        integral_max_x=2,
        rectangle_count="4",
        rule="Right",
    )

    assert request.min_x == pytest.approx(-3.141592653589793)
    assert request.pixel_width == 300
    assert request.rectangle_count == 4
    assert request.rule is QuadratureRule.RIGHT


def test_build_rejects_unconvertible_values() -> None:
    with pytest.raises(PreconditionViolation):
        RefreshRequest.build("x", "abc(", 1, 10)
    with pytest.raises(PreconditionViolation):
        RefreshRequest.build("x", 0, 1, 10.5)
    with pytest.raises(PreconditionViolation):
        RefreshRequest.build("x", 0, 1, 10, integration_enabled=True, integral_min_x=0,
                             integral_max_x=1, rectangle_count=4, rule="trapezoid")


def test_rule_given_as_text_is_rejected_before_any_work() -> None:
    slot = FunctionSlot()
    request = RefreshRequest(
        expression="x",
        min_x=0.0,
        max_x=2.0,
        pixel_width=10,
        integration_enabled=True,
        integral_min_x=0.0,
        integral_max_x=2.0,
        rectangle_count=2,
        rule="left",  # type: ignore[arg-type]
    )

    with pytest.raises(PreconditionViolation, match="QuadratureRule"):
        slot.refresh(request)

    assert slot.last_output is None
    assert slot.expression is None
    output = slot.refresh(_request("x", integral_min_x=0.0, integral_max_x=2.0, rectangle_count=2, rule="left"))
    assert output.area == pytest.approx(1.0)


def test_non_integer_counts_are_rejected() -> None:
    with pytest.raises(PreconditionViolation, match="rectangle_count must be an int"):
        FunctionSlot().refresh(
            RefreshRequest(
                expression="x",
                min_x=0.0,
                max_x=1.0,
                pixel_width=10,
                integration_enabled=True,
                integral_min_x=0.0,
                integral_max_x=1.0,
                rectangle_count=2.0,  # type: ignore[arg-type]
                rule=QuadratureRule.LEFT,
            )
        )
    with pytest.raises(PreconditionViolation, match="pixel_width must be an int"):
        FunctionSlot().refresh(RefreshRequest(expression="x", min_x=0.0, max_x=1.0, pixel_width=10.0))  # type: ignore[arg-type]


def test_missing_integral_bounds_leave_previous_caches_untouched() -> None:
    compiler = _CountingCompiler()
    slot = FunctionSlot(compiler=compiler)
    good = slot.refresh(_request("x^2"))
    compiler.calls = 0
    bad = RefreshRequest(
        expression="x^2",
        min_x=-1.0,
        max_x=1.0,
        pixel_width=100,
        integration_enabled=True,
        rectangle_count=10,
        rule=QuadratureRule.LEFT,
    )

    with pytest.raises(PreconditionViolation, match="integral_min_x, integral_max_x"):
        slot.refresh(bad)

    assert slot.last_output is good
    assert slot.expression == "x^2"
    again = slot.refresh(_request("x^2"))
    assert again.series is good.series
    assert again.integral is good.integral
    assert again.plan.sampler is CacheAction.REUSE
    assert again.plan.integrator is CacheAction.REUSE
    assert compiler.calls == 0
