"""Signed Riemann sums with a front-cache of drawable rectangles.

Rectangles are laid out from ``min_x`` in steps of
``|max_x - min_x| / rectangle_count``. A rectangle whose anchor ``x`` is
non-negative extends right (``[x, x + step]``); one whose anchor is negative
extends left (``[x - step, x]``), so rectangles grow away from the y-axis on
both sides of it. Heights come from the chosen :class:`QuadratureRule`;
rectangles whose height is not finite (``nan`` or ``inf``) are dropped from
both the drawn set and the area.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, replace
from typing import Optional, Union

from .IntegrationResult import IntegrationResult, QuadratureRule, Rectangle
from .NumericExpression import Evaluable
from .cache_coordinator import CacheAction
from .defaults import INTEGRAL_NUM_RANGE, INTEGRAL_X_RANGE
from .errors import PreconditionViolation
from .parallel import evaluate_points

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class IntegralSettings:
    """Integration range, rectangle count and rule for one integral.

    Parameters
    ----------
    min_x : float
        Left integration bound.
    max_x : float
        Right integration bound.
    rectangle_count : int
        Number of rectangles (``> 0``).
    rule : QuadratureRule
        Height-selection rule.
    """

    min_x: float
    max_x: float
    rectangle_count: int
    rule: QuadratureRule = QuadratureRule.LEFT

    def with_bounds(self, min_x: Optional[float] = None, max_x: Optional[float] = None) -> "IntegralSettings":
        """Return settings with moved bounds, reverting a move that empties the range.

        Moved bounds are clamped into ``INTEGRAL_X_RANGE``. When the new
        bounds would give ``min_x >= max_x`` the bound that was changed is
        restored (``max_x`` first when both changed). If that still leaves an
        empty range, both keep their previous values.
        """
        low, high = INTEGRAL_X_RANGE
        new_min = self.min_x if min_x is None else max(low, min(high, float(min_x)))
        new_max = self.max_x if max_x is None else max(low, min(high, float(max_x)))
        if new_min >= new_max:
            if max_x is not None:
                new_max = self.max_x
            elif min_x is not None:
                new_min = self.min_x
            if new_min >= new_max:
                new_min, new_max = self.min_x, self.max_x
        return replace(self, min_x=new_min, max_x=new_max)

    def with_rectangle_count(self, rectangle_count: int) -> "IntegralSettings":
        """Return settings with ``rectangle_count`` clamped into ``INTEGRAL_NUM_RANGE``."""
        low, high = INTEGRAL_NUM_RANGE
        return replace(self, rectangle_count=max(low, min(high, int(rectangle_count))))

    def with_rule(self, rule: Union[QuadratureRule, str]) -> "IntegralSettings":
        """Return settings using ``rule``."""
        return replace(self, rule=QuadratureRule.parse(rule))


class RiemannIntegrator:
    """Integral estimator for one function slot.

    Parameters
    ----------
    function : Evaluable or None
        Function to integrate. May be assigned later through :attr:`function`.
    workers : int
        Thread count for evaluation (see :func:`evaluate_points`).
    """

    def __init__(self, function: Optional[Evaluable] = None, *, workers: int = 1) -> None:
        self.function = function
        self.workers = workers
        self._cache: Optional[IntegrationResult] = None

    @property
    def cache(self) -> Optional[IntegrationResult]:
        """Return the last computed result, or ``None`` when dropped."""
        return self._cache

    def invalidate(self) -> None:
        """Drop the front-cache so the next run must recompute."""
        self._cache = None

    def run(
        self,
        settings: Optional[IntegralSettings],
        action: CacheAction = CacheAction.RECOMPUTE,
    ) -> Optional[IntegrationResult]:
        """Return the integral for ``settings`` according to ``action``.

        ``SKIP`` (integration disabled) returns ``None`` and leaves the cache
        alone. ``REUSE`` returns the cached result object. ``RECOMPUTE``
        rebuilds every rectangle; there is no partial path.

        Raises
        ------
        PreconditionViolation
            If a bound is ``nan``/infinite or ``rectangle_count`` is not positive.
        RuntimeError
            If ``REUSE`` is requested with an empty cache or no function is set.
        """
        if action is CacheAction.SKIP:
            return None
        if action is CacheAction.REUSE:
            if self._cache is None:
                raise RuntimeError("Front cache is empty; it must be recomputed before it is read.")
            logger.debug("using front cache")
            return self._cache
        if action is not CacheAction.RECOMPUTE:
            raise ValueError(f"RiemannIntegrator cannot handle {action!r}")
        if settings is None:
            raise PreconditionViolation("Integration requested without integral settings.")

        t0 = time.perf_counter()
        result = self.integral_rectangles(settings)
        self._cache = result
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "updated front cache (%d rectangles, area=%g) in %.2f ms",
                len(result),
                result.area,
                1000.0 * (time.perf_counter() - t0),
            )
        return result

    def integral_rectangles(self, settings: IntegralSettings) -> IntegrationResult:
        """Build every rectangle for ``settings`` and sum the signed area."""
        if self.function is None:
            raise RuntimeError("RiemannIntegrator has no function to integrate.")
        if math.isnan(settings.min_x):
            raise PreconditionViolation("integral min_x is NaN")
        if math.isnan(settings.max_x):
            raise PreconditionViolation("integral max_x is NaN")
        if math.isinf(settings.min_x) or math.isinf(settings.max_x):
            raise PreconditionViolation("integral bounds must be finite")
        if not isinstance(settings.rule, QuadratureRule):
            raise PreconditionViolation(f"rule must be a QuadratureRule, got {settings.rule!r}")
        if isinstance(settings.rectangle_count, bool) or not isinstance(settings.rectangle_count, int):
            raise PreconditionViolation(f"rectangle_count must be an int, got {settings.rectangle_count!r}")
        if settings.rectangle_count <= 0:
            raise PreconditionViolation("rectangle_count must be > 0")

        step = abs(settings.min_x - settings.max_x) / settings.rectangle_count
        half_step = step / 2.0

        placed: list[tuple[float, float, float]] = []
        for i in range(settings.rectangle_count):
            x = (i * step) + settings.min_x
            if x >= 0.0:
                placed.append((x + half_step, x, x + step))
            else:
                placed.append((x - half_step, x - step, x))

        heights = self._heights(placed, settings.rule)
        rectangles = tuple(
            Rectangle(x=center, left_x=left_x, right_x=right_x, height=height)
            for (center, left_x, right_x), height in zip(placed, heights)
            if math.isfinite(height)
        )
        area = sum(rect.height * step for rect in rectangles)
        return IntegrationResult(rectangles=rectangles, area=float(area), step=step, rule=settings.rule)

    def _heights(self, placed: list[tuple[float, float, float]], rule: QuadratureRule) -> list[float]:
        if rule is QuadratureRule.LEFT:
            return evaluate_points(self.function, [left for _, left, _ in placed], workers=self.workers)
        if rule is QuadratureRule.RIGHT:
            return evaluate_points(self.function, [right for _, _, right in placed], workers=self.workers)
        if rule is QuadratureRule.MIDDLE:
            lefts = evaluate_points(self.function, [left for _, left, _ in placed], workers=self.workers)
            rights = evaluate_points(self.function, [right for _, _, right in placed], workers=self.workers)
            return [(a + b) / 2.0 for a, b in zip(lefts, rights)]
        raise ValueError(f"Unknown quadrature rule {rule!r}")
