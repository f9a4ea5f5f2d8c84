"""Plotly rendering back-end for sampled curves and Riemann rectangles.

The engine emits data-space values only; this module maps them onto Plotly
traces. Non-finite samples become gaps in the line (Plotly skips ``None``/NaN
points), and each rectangle becomes one bar of width ``step`` centered on the
rectangle's display x.

Examples
--------
>>> from integral_plotter import Workspace
>>> ws = Workspace()
>>> ws.set_expression(0, "sin(x)")
>>> fig = build_figure(ws.refresh(-3, 3, 300))  # doctest: +SKIP
>>> fig.show()  # doctest: +SKIP
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import plotly.graph_objects as go

from .IntegrationResult import IntegrationResult
from .SampleSeries import SampleSeries

__all__ = ["series_trace", "rectangle_trace", "build_figure"]


def series_trace(series: SampleSeries, *, name: str = "", color: Optional[str] = None) -> go.Scatter:
    """Return a line trace for ``series``; ``nan``/``inf`` samples are drawn as gaps."""
    y_values = series.y_values
    y_values = np.where(np.isfinite(y_values), y_values, np.nan)
    trace = go.Scatter(
        x=series.x_values,
        y=y_values,
        mode="lines",
        name=name,
        connectgaps=False,
    )
    if color is not None:
        trace.line = {"color": color}
    return trace


def rectangle_trace(
    result: IntegrationResult,
    *,
    name: str = "",
    color: Optional[str] = None,
    opacity: float = 0.5,
) -> go.Bar:
    """Return a bar trace with one bar per rectangle and the area in its legend name."""
    label = f"{name} area = {result.area:.6g}".strip()
    trace = go.Bar(
        x=[rect.x for rect in result.rectangles],
        y=[rect.height for rect in result.rectangles],
        width=[result.step] * len(result.rectangles),
        name=label,
        opacity=opacity,
    )
    if color is not None:
        trace.marker = {"color": color}
    return trace


def build_figure(report, labels: Optional[Sequence[str]] = None) -> go.Figure:
    """Build a figure from a :class:`RefreshReport` (or any object with ``outputs``).

    Slots without output are skipped. Labels default to ``f"f{i}"``.
    """
    fig = go.Figure()
    fig.update_layout(barmode="overlay", bargap=0)
    for index, output in enumerate(report.outputs):
        if output is None:
            continue
        label = labels[index] if labels is not None else f"f{index}"
        fig.add_trace(series_trace(output.series, name=label))
        if output.integral is not None:
            fig.add_trace(rectangle_trace(output.integral, name=label))
    return fig
