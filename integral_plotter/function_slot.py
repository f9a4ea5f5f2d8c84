"""One plotted function: compiler output, sampler, integrator and their caches.

Purpose
-------
Defines ``FunctionSlot``, the unit a UI holds per plotted function. A slot
runs one refresh cycle at a time:

1. validate the :class:`RefreshRequest` (nothing is mutated on failure),
2. recompile the expression if its text changed (a parse failure leaves the
   slot as it was),
3. let the :class:`CacheCoordinator` plan both caches,
4. run the sampler and, when enabled, the integrator.

Slots share no mutable state, so a UI may keep any number of them.

Examples
--------
>>> slot = FunctionSlot()
>>> out = slot.refresh(RefreshRequest.build("x^2", -1, 1, 100))  # doctest: +SKIP
>>> len(out.series)  # doctest: +SKIP
101
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .IntegrationResult import IntegrationResult
from .NumericExpression import CompiledExpression, Evaluable, compile_expression
from .SampleSeries import SampleSeries
from .cache_coordinator import CacheAction, CacheCoordinator, RefreshPlan
from .numeric_operations import reference_integral
from .refresh_request import RefreshRequest
from .riemann_integrator import RiemannIntegrator
from .viewport_sampler import ViewportSampler

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class SlotOutput:
    """Data handed to the renderer after one refresh.

    Parameters
    ----------
    series : SampleSeries
        Sampled curve.
    integral : IntegrationResult or None
        Rectangles and signed area, ``None`` when integration is disabled.
    plan : RefreshPlan
        Cache decisions taken for this refresh.
    """

    series: SampleSeries
    integral: Optional[IntegrationResult]
    plan: RefreshPlan

    @property
    def area(self) -> Optional[float]:
        return None if self.integral is None else self.integral.area


class FunctionSlot:
    """
    A single function managed by a :class:`Workspace` (or used on its own).

    Parameters
    ----------
    compiler : callable, optional
        ``str -> Evaluable``; raises :class:`ExpressionParseError` on bad
        input. Defaults to :func:`compile_expression`.
    workers : int, optional
        Thread count for point evaluation. ``1`` keeps everything in the
        calling thread.
    """

    def __init__(
        self,
        *,
        compiler: Callable[[str], Evaluable] = compile_expression,
        workers: int = 1,
    ) -> None:
        self._compiler = compiler
        self._sampler = ViewportSampler(workers=workers)
        self._integrator = RiemannIntegrator(workers=workers)
        self._coordinator = CacheCoordinator(sampler=self._sampler, integrator=self._integrator)
        self._function: Optional[Evaluable] = None
        self._last_output: Optional[SlotOutput] = None
        self._last_request: Optional[RefreshRequest] = None

    @property
    def function(self) -> Optional[Evaluable]:
        """Return the compiled function of the last successful refresh."""
        return self._function

    @property
    def expression(self) -> Optional[str]:
        return self._coordinator.expression

    @property
    def coordinator(self) -> CacheCoordinator:
        return self._coordinator

    @property
    def last_output(self) -> Optional[SlotOutput]:
        """Return the output of the last successful refresh, if any."""
        return self._last_output

    def refresh(self, request: RefreshRequest) -> SlotOutput:
        """
        Run one refresh cycle and return its output.

        Raises
        ------
        PreconditionViolation
            If ``request`` is invalid. No state changes.
        ExpressionParseError
            If the expression text changed and does not compile. No state changes.
        """
        request.validate()
        if request.expression != self._coordinator.expression or self._function is None:
            self._install(self._compiler(request.expression))

        plan = self._coordinator.update(request)

        series = self._sampler.run(request.viewport, plan.sampler)
        if plan.sampler is not CacheAction.REUSE:
            self._coordinator.mark_sampler_valid()

        integral = self._integrator.run(request.integral_settings, plan.integrator)
        if plan.integrator is CacheAction.RECOMPUTE:
            self._coordinator.mark_integrator_valid()

        output = SlotOutput(series=series, integral=integral, plan=plan)
        self._last_output = output
        self._last_request = request
        return output

    def reference_area(self) -> Optional[float]:
        """Adaptive-quadrature value of the current integral, for comparison.

        Returns ``None`` until a refresh with integration enabled succeeded.
        """
        request = self._last_request
        if request is None or not request.integration_enabled or self._function is None:
            return None
        return reference_integral(self._function, request.integral_min_x, request.integral_max_x)

    def invalidate(self) -> None:
        """Forget the previous refresh; the next one recomputes everything."""
        self._coordinator.reset()

    def _install(self, function: Evaluable) -> None:
        self._function = function
        self._sampler.function = function
        self._integrator.function = function
        if isinstance(function, CompiledExpression):
            logger.debug("compiled %r -> %s", function.text, function.symbolic)
