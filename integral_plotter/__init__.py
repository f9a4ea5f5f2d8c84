"""Top-level public API for the ``integral_plotter`` package.

This module re-exports the host-facing surface so callers can import from a
single namespace, for example:

>>> from integral_plotter import Workspace, build_figure  # doctest: +SKIP

It exposes both the multi-function ``Workspace`` and the lower-level engine
pieces (sampler, integrator, cache coordinator, compiled expressions) for
hosts that manage their own refresh loop.
"""

from .IntegrationResult import IntegrationResult, QuadratureRule, Rectangle
from .InputConvert import InputConvert
from .NumericExpression import CallableExpression, CompiledExpression, compile_expression
from .ParseExpression import parse_expression
from .SampleSeries import SampleSeries
from .cache_coordinator import CacheAction, CacheCoordinator, CacheState, RefreshPlan
from .errors import ExpressionParseError, IntegralPlotterError, PreconditionViolation
from .function_slot import FunctionSlot, SlotOutput
from .numeric_operations import reference_integral
from .numpify import numpify, numpify_cached
from .plotly_render import build_figure, rectangle_trace, series_trace
from .refresh_request import RefreshRequest
from .riemann_integrator import IntegralSettings, RiemannIntegrator
from .viewport_sampler import Viewport, ViewportSampler
from .workspace import RefreshReport, Workspace

__all__ = [
    "CacheAction",
    "CacheCoordinator",
    "CacheState",
    "CallableExpression",
    "CompiledExpression",
    "ExpressionParseError",
    "FunctionSlot",
    "InputConvert",
    "IntegralPlotterError",
    "IntegralSettings",
    "IntegrationResult",
    "PreconditionViolation",
    "QuadratureRule",
    "Rectangle",
    "RefreshPlan",
    "RefreshReport",
    "RefreshRequest",
    "RiemannIntegrator",
    "SampleSeries",
    "SlotOutput",
    "Viewport",
    "ViewportSampler",
    "Workspace",
    "build_figure",
    "compile_expression",
    "numpify",
    "numpify_cached",
    "parse_expression",
    "rectangle_trace",
    "reference_integral",
    "series_trace",
]
