"""Evaluable function wrappers consumed by the sampler and the integrator.

Both wrappers expose one capability, ``evaluate(x) -> float``:

- ``CompiledExpression`` holds a function compiled from user text.
- ``CallableExpression`` adapts any Python callable (handy for tests and for
  hosts that already own a numeric function).

Evaluation never raises for numeric reasons. The argument is passed as a
``numpy.float64`` with floating-point warnings silenced, so division by zero
and overflow follow IEEE rules and come back as ``inf``/``-inf``. Errors raised
by plain Python math (``math.log(-1)``), as well as complex results, mean
"undefined here" and come back as ``nan``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import numpy as np
import sympy as sp

from .ParseExpression import X, parse_expression
from .numpify import NumpifiedFunction, numpify_cached

__all__ = [
    "Evaluable",
    "CompiledExpression",
    "CallableExpression",
    "compile_expression",
]

_UNDEFINED_ERRORS = (ZeroDivisionError, OverflowError, FloatingPointError, ValueError)


class Evaluable(Protocol):
    """Anything the engine can sample: one float in, one float out."""

    def evaluate(self, x: float) -> float: ...


def _to_real(value: Any) -> float:
    """Coerce one evaluation result to a Python float, ``nan`` when not real."""
    if isinstance(value, complex):
        return float(value.real) if value.imag == 0 else math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _safe_call(fn: Callable[[float], Any], x: float) -> float:
    with np.errstate(all="ignore"):
        try:
            value = fn(np.float64(x))
        except _UNDEFINED_ERRORS:
            return math.nan
    return _to_real(value)


@dataclass(frozen=True)
class CompiledExpression:
    """Function compiled from an expression string."""

    text: str
    symbolic: sp.Expr
    core: NumpifiedFunction

    def evaluate(self, x: float) -> float:
        """Evaluate at ``x``; undefined points return ``nan``."""
        return _safe_call(self.core, x)

    def __call__(self, x: float) -> float:
        return self.evaluate(x)


@dataclass(frozen=True)
class CallableExpression:
    """Adapter giving a plain Python callable the ``evaluate`` API."""

    fn: Callable[[float], Any]
    text: str = ""

    def evaluate(self, x: float) -> float:
        """Evaluate the wrapped callable at ``x``; undefined points return ``nan``."""
        return _safe_call(self.fn, x)

    def __call__(self, x: float) -> float:
        return self.evaluate(x)


def compile_expression(text: str) -> CompiledExpression:
    """Parse and compile ``text`` into a :class:`CompiledExpression`.

    Raises
    ------
    ExpressionParseError
        If the text cannot be parsed (see :func:`parse_expression`).
    """
    symbolic = parse_expression(text)
    return CompiledExpression(text=text, symbolic=symbolic, core=numpify_cached(symbolic, var=X))
