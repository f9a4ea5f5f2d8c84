"""Text parsing helpers with a relaxed fallback for typed-in expressions.

Users type expressions the way they write them on paper: ``2x^2``, ``sin x``,
``e^(-x)``. The default behavior tries SymPy's strict grammar first and
falls back to a relaxed pass with implicit multiplication and ``^`` as power.
Only the independent variable ``x`` may remain free in the result.
"""

from __future__ import annotations

import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from .errors import ExpressionParseError

__all__ = ["X", "parse_expression"]

X = sp.Symbol("x", real=True)

_LOCALS = {"x": X, "e": sp.E, "pi": sp.pi}
_STRICT = standard_transformations + (convert_xor,)
_RELAXED = standard_transformations + (convert_xor, implicit_multiplication_application)


def parse_expression(text: str) -> sp.Expr:
    """Parse a single-variable expression string into a SymPy expression.

    Parameters
    ----------
    text : str
        Expression in ``x``. ``^`` and ``**`` both mean power; ``e`` and ``pi``
        are the usual constants.

    Returns
    -------
    sympy.Expr
        Parsed expression whose only free symbol (if any) is :data:`X`.

    Raises
    ------
    ExpressionParseError
        If the text is blank, fails both the strict and the relaxed grammar,
        is not a scalar expression, or uses symbols other than ``x``.

    Examples
    --------
    >>> parse_expression("x^2 + 1")
    x**2 + 1
    >>> parse_expression("2x")
    2*x

    Notes
    -----
    SymPy's parser evaluates Python code. Do not feed it untrusted input.
    """
    if not isinstance(text, str):
        raise TypeError(f"parse_expression expects a str, got {type(text).__name__}")
    source = text.strip()
    if source == "":
        raise ExpressionParseError(text, "Expression is empty")

    strict_err = None
    try:
        expr = parse_expr(source, local_dict=dict(_LOCALS), transformations=_STRICT)
    except Exception as e:
        strict_err = e
        try:
            expr = parse_expr(source, local_dict=dict(_LOCALS), transformations=_RELAXED)
        except Exception as relaxed_err:
            raise ExpressionParseError(
                text,
                "Failed to parse expression.\n"
                f"Strict error: {type(strict_err).__name__}: {strict_err}\n"
                f"Relaxed error: {type(relaxed_err).__name__}: {relaxed_err}",
            ) from relaxed_err

    if not isinstance(expr, sp.Expr):
        raise ExpressionParseError(text, f"Not a scalar expression ({type(expr).__name__})")

    unknown = sorted(s.name for s in expr.free_symbols if s != X)
    if unknown:
        raise ExpressionParseError(text, f"Unknown symbol(s): {', '.join(unknown)}")
    return expr
