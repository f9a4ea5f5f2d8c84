"""Common numeric operations on compiled functions.

Includes an adaptive-quadrature reference value to compare a Riemann estimate
against.
"""

from __future__ import annotations

import math

from .NumericExpression import Evaluable
from .errors import PreconditionViolation


def reference_integral(function: Evaluable, min_x: float, max_x: float) -> float:
    """Integrate ``function`` over ``[min_x, max_x]`` with ``scipy.integrate.quad``.

    Returns ``nan`` when the integrand is undefined somewhere the quadrature
    samples it.
    """
    if math.isnan(min_x) or math.isnan(max_x):
        raise PreconditionViolation("reference_integral bounds must not be NaN")

    from scipy.integrate import quad

    value, _error = quad(function.evaluate, float(min_x), float(max_x), limit=200)
    return float(value)


__all__ = ["reference_integral"]
