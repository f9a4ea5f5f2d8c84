from __future__ import annotations

import math

import pytest

from integral_plotter import (
    CallableExpression,
    IntegralSettings,
    PreconditionViolation,
    QuadratureRule,
    RiemannIntegrator,
    compile_expression,
    reference_integral,
)


def test_reference_integral_of_polynomial() -> None:
    assert reference_integral(compile_expression("3x^2"), 0.0, 2.0) == pytest.approx(8.0)


def test_reference_integral_rejects_nan_bounds() -> None:
    with pytest.raises(PreconditionViolation):
        reference_integral(CallableExpression(lambda x: x), math.nan, 1.0)


@pytest.mark.parametrize("rule", list(QuadratureRule))
def test_riemann_sum_converges_to_reference(rule: QuadratureRule) -> None:
    f = compile_expression("exp(x)")
    exact = reference_integral(f, 0.5, 2.0)

    estimate = RiemannIntegrator(f).run(IntegralSettings(0.5, 2.0, 20_000, rule))

    assert estimate.area == pytest.approx(exact, rel=1e-3)
