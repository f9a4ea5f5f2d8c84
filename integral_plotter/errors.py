"""Exception types raised by the sampling and integration engine.

Two failure families exist:

- ``ExpressionParseError`` for user text that cannot be compiled. It carries
  the offending text so the caller can display it next to the input box.
- ``PreconditionViolation`` for requests the engine refuses to evaluate
  (empty viewport, missing integral bounds, non-positive counts).

Both are raised before any cached state is touched, so a caller may keep
showing the last valid output of the failing slot.

Undefined numeric values (``nan``/``inf``) are data, not errors.
"""

from __future__ import annotations

__all__ = ["IntegralPlotterError", "ExpressionParseError", "PreconditionViolation"]


class IntegralPlotterError(Exception):
    """Base class for recoverable engine failures."""


class ExpressionParseError(IntegralPlotterError, ValueError):
    """Raised when an expression string cannot be compiled into a function.

    Parameters
    ----------
    expression : str
        The text that failed to parse.
    message : str
        Human-readable reason.
    """

    def __init__(self, expression: str, message: str) -> None:
        super().__init__(message)
        self.expression = expression

    def __str__(self) -> str:
        return f"{self.args[0]} (input: {self.expression!r})"


class PreconditionViolation(IntegralPlotterError, ValueError):
    """Raised when a refresh request breaks an engine precondition."""
