"""Per-refresh configuration accepted by a function slot.

A ``RefreshRequest`` bundles everything one UI refresh decides: the
expression text, the visible range, the pixel width, and the integral
configuration. Requests are validated as a whole before any slot state is
touched, so a rejected request leaves every cache exactly as it was.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from .IntegrationResult import QuadratureRule
from .InputConvert import InputConvert
from .errors import PreconditionViolation
from .riemann_integrator import IntegralSettings
from .viewport_sampler import Viewport


@dataclass(frozen=True)
class RefreshRequest:
    """Immutable set of parameters for one refresh of one slot.

    Parameters
    ----------
    expression : str
        Function text in ``x``.
    min_x, max_x : float
        Visible range; ``min_x < max_x``.
    pixel_width : int
        Sample resolution driver (``>= 1``).
    integration_enabled : bool
        Whether to compute the Riemann sum.
    integral_min_x, integral_max_x : float or None
        Integration bounds; required when integration is enabled.
    rectangle_count : int or None
        Number of rectangles; required (``> 0``) when enabled.
    rule : QuadratureRule or None
        Quadrature rule; required when enabled.
    """

    expression: str
    min_x: float
    max_x: float
    pixel_width: int
    integration_enabled: bool = False
    integral_min_x: Optional[float] = None
    integral_max_x: Optional[float] = None
    rectangle_count: Optional[int] = None
    rule: Optional[QuadratureRule] = None

    @classmethod
    def build(
        cls,
        expression: str,
        min_x: Any,
        max_x: Any,
        pixel_width: Any,
        *,
        integration_enabled: bool = False,
        integral_min_x: Any = None,
        integral_max_x: Any = None,
        rectangle_count: Any = None,
        rule: Union[QuadratureRule, str, None] = None,
    ) -> "RefreshRequest":
        """Create a validated request from loosely typed values.

        Numbers may be given as strings (``"pi/2"``); the rule may be a name
        (``"left"``). Conversion failures surface as
        :class:`PreconditionViolation`.
        """
        try:
            request = cls(
                expression=expression,
                min_x=InputConvert(min_x, float),
                max_x=InputConvert(max_x, float),
                pixel_width=InputConvert(pixel_width, int, truncate=False),
                integration_enabled=bool(integration_enabled),
                integral_min_x=None if integral_min_x is None else InputConvert(integral_min_x, float),
                integral_max_x=None if integral_max_x is None else InputConvert(integral_max_x, float),
                rectangle_count=None if rectangle_count is None else InputConvert(rectangle_count, int, truncate=False),
                rule=None if rule is None else QuadratureRule.parse(rule),
            )
        except ValueError as e:
            raise PreconditionViolation(str(e)) from e
        request.validate()
        return request

    def validate(self) -> None:
        """Raise :class:`PreconditionViolation` unless the request is usable."""
        if not isinstance(self.expression, str):
            raise PreconditionViolation(f"expression must be a str, got {type(self.expression).__name__}")
        if not (math.isfinite(self.min_x) and math.isfinite(self.max_x)):
            raise PreconditionViolation("min_x and max_x must be finite")
        if self.min_x >= self.max_x:
            raise PreconditionViolation(
                f"min_x ({self.min_x}) must be less than max_x ({self.max_x})"
            )
        if isinstance(self.pixel_width, bool) or not isinstance(self.pixel_width, int):
            raise PreconditionViolation(f"pixel_width must be an int, got {type(self.pixel_width).__name__}")
        if self.pixel_width < 1:
            raise PreconditionViolation("pixel_width must be >= 1")

        if not self.integration_enabled:
            return
        missing = [
            name
            for name in ("integral_min_x", "integral_max_x", "rectangle_count", "rule")
            if getattr(self, name) is None
        ]
        if missing:
            raise PreconditionViolation(
                "Integration is enabled but these settings are missing: " + ", ".join(missing)
            )
        if math.isnan(self.integral_min_x) or math.isnan(self.integral_max_x):
            raise PreconditionViolation("integral bounds must not be NaN")
        if not (math.isfinite(self.integral_min_x) and math.isfinite(self.integral_max_x)):
            raise PreconditionViolation("integral bounds must be finite")
        if self.integral_min_x >= self.integral_max_x:
            raise PreconditionViolation(
                f"integral_min_x ({self.integral_min_x}) must be less than integral_max_x ({self.integral_max_x})"
            )
        if isinstance(self.rectangle_count, bool) or not isinstance(self.rectangle_count, int):
            raise PreconditionViolation(
                f"rectangle_count must be an int, got {type(self.rectangle_count).__name__}"
            )
        if self.rectangle_count <= 0:
            raise PreconditionViolation("rectangle_count must be > 0")
        if not isinstance(self.rule, QuadratureRule):
            raise PreconditionViolation(
                f"rule must be a QuadratureRule, got {self.rule!r}; use RefreshRequest.build for names"
            )

    @property
    def viewport(self) -> Viewport:
        return Viewport(min_x=self.min_x, max_x=self.max_x, pixel_width=self.pixel_width)

    @property
    def integral_settings(self) -> Optional[IntegralSettings]:
        """Integral settings, or ``None`` when integration is disabled."""
        if not self.integration_enabled:
            return None
        return IntegralSettings(
            min_x=self.integral_min_x,
            max_x=self.integral_max_x,
            rectangle_count=self.rectangle_count,
            rule=self.rule,
        )
