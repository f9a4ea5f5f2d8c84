"""Cache-invalidation policy for one function slot.

Purpose
-------
``CacheCoordinator`` is the single place that answers "did anything change
that the sampler or the integrator cares about?". It remembers the
parameters of the previous refresh, compares them field by field with the
incoming request, and produces a :class:`RefreshPlan` with one
:class:`CacheAction` per cache.

Rules
-----
Sampler (back-cache):

- expression changed, pixel width changed, or cache invalid -> ``RECOMPUTE``
- only ``min_x``/``max_x`` changed -> ``PARTIAL``
- nothing changed -> ``REUSE``

Integrator (front-cache):

- integration disabled -> ``SKIP`` (tracked bounds/count/rule are kept)
- expression changed, integration just switched on, any of bounds/count/rule
  changed, or cache invalid -> ``RECOMPUTE``
- otherwise -> ``REUSE``

The coordinator is the only writer of the validity flags and the only
component that tells the sampler/integrator to drop cached data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .refresh_request import RefreshRequest
    from .riemann_integrator import RiemannIntegrator
    from .viewport_sampler import ViewportSampler

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class CacheAction(Enum):
    """What a cache owner should do on this refresh."""

    REUSE = "reuse"
    PARTIAL = "partial"
    RECOMPUTE = "recompute"
    SKIP = "skip"


@dataclass(frozen=True)
class SamplerParams:
    expression: str
    min_x: float
    max_x: float
    pixel_width: int


@dataclass(frozen=True)
class IntegratorParams:
    expression: str
    enabled: bool
    min_x: Optional[float]
    max_x: Optional[float]
    rectangle_count: Optional[int]
    rule: Any


@dataclass
class CacheState:
    """Validity flag plus the parameters that produced the cached value."""

    valid: bool = False
    params: Any = None

    def invalidate(self) -> None:
        self.valid = False
        self.params = None


@dataclass(frozen=True)
class RefreshPlan:
    """Decision for one refresh cycle."""

    expression_changed: bool
    sampler: "CacheAction"
    integrator: "CacheAction"


@dataclass
class CacheCoordinator:
    """Tracks last-seen parameters and drives invalidation of both caches.

    Parameters
    ----------
    sampler : ViewportSampler or None
        Back-cache owner to invalidate when its data goes stale.
    integrator : RiemannIntegrator or None
        Front-cache owner to invalidate when its data goes stale.
    """

    sampler: Optional["ViewportSampler"] = None
    integrator: Optional["RiemannIntegrator"] = None
    sampler_state: CacheState = field(default_factory=CacheState)
    integrator_state: CacheState = field(default_factory=CacheState)
    _last_sampler: Optional[SamplerParams] = field(default=None, repr=False)
    _last_integrator: Optional[IntegratorParams] = field(default=None, repr=False)

    @property
    def expression(self) -> Optional[str]:
        """Expression text of the previous refresh, or ``None`` before the first."""
        return None if self._last_sampler is None else self._last_sampler.expression

    def update(self, request: "RefreshRequest") -> RefreshPlan:
        """Compare ``request`` with the previous refresh and plan both caches.

        The incoming values become the new reference before this returns.
        ``request`` must already be validated.
        """
        prev_s = self._last_sampler
        prev_i = self._last_integrator

        expression_changed = prev_s is None or request.expression != prev_s.expression
        if expression_changed:
            self._invalidate_sampler("expression changed")
            self._invalidate_integrator("expression changed")

        # Sampler
        if prev_s is not None and request.pixel_width != prev_s.pixel_width:
            self._invalidate_sampler("pixel width changed")

        bounds_changed = prev_s is not None and (
            request.min_x != prev_s.min_x or request.max_x != prev_s.max_x
        )
        if not self.sampler_state.valid:
            sampler_action = CacheAction.RECOMPUTE
        elif bounds_changed:
            sampler_action = CacheAction.PARTIAL
            # Data is kept for the lookup, but no longer matches the tracked bounds.
            self.sampler_state.valid = False
        else:
            sampler_action = CacheAction.REUSE

        self._last_sampler = SamplerParams(
            expression=request.expression,
            min_x=request.min_x,
            max_x=request.max_x,
            pixel_width=request.pixel_width,
        )

        # Integrator
        if request.integration_enabled:
            incoming = IntegratorParams(
                expression=request.expression,
                enabled=True,
                min_x=request.integral_min_x,
                max_x=request.integral_max_x,
                rectangle_count=request.rectangle_count,
                rule=request.rule,
            )
            if prev_i is None or not prev_i.enabled:
                self._invalidate_integrator("integration enabled")
            elif incoming != prev_i:
                self._invalidate_integrator("integral settings changed")
            integrator_action = CacheAction.REUSE if self.integrator_state.valid else CacheAction.RECOMPUTE
        else:
            incoming = IntegratorParams(
                expression=request.expression,
                enabled=False,
                min_x=None if prev_i is None else prev_i.min_x,
                max_x=None if prev_i is None else prev_i.max_x,
                rectangle_count=None if prev_i is None else prev_i.rectangle_count,
                rule=None if prev_i is None else prev_i.rule,
            )
            integrator_action = CacheAction.SKIP
        self._last_integrator = incoming

        plan = RefreshPlan(
            expression_changed=expression_changed,
            sampler=sampler_action,
            integrator=integrator_action,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("refresh plan: sampler=%s integrator=%s", plan.sampler.name, plan.integrator.name)
        return plan

    def mark_sampler_valid(self) -> None:
        """Record that the back-cache now holds data for the tracked parameters."""
        self.sampler_state.valid = True
        self.sampler_state.params = self._last_sampler

    def mark_integrator_valid(self) -> None:
        """Record that the front-cache now holds data for the tracked parameters."""
        self.integrator_state.valid = True
        self.integrator_state.params = self._last_integrator

    def reset(self) -> None:
        """Forget every tracked parameter and invalidate both caches."""
        self._invalidate_sampler("reset")
        self._invalidate_integrator("reset")
        self._last_sampler = None
        self._last_integrator = None

    def _invalidate_sampler(self, reason: str) -> None:
        if self.sampler_state.valid:
            logger.debug("invalidating back cache: %s", reason)
        self.sampler_state.invalidate()
        if self.sampler is not None:
            self.sampler.invalidate()

    def _invalidate_integrator(self, reason: str) -> None:
        if self.integrator_state.valid:
            logger.debug("invalidating front cache: %s", reason)
        self.integrator_state.invalidate()
        if self.integrator is not None:
            self.integrator.invalidate()
