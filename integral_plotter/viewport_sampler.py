"""Viewport sampling with a reusable back-cache.

Purpose
-------
Defines ``ViewportSampler``, the unit that turns one compiled function into
one ``SampleSeries`` spanning the visible x-range at one sample per pixel
column (plus the closing edge).

Concepts and structure
----------------------
The sampler owns its back-cache (the last published series) but does not
decide when it is stale. The caller passes a :class:`CacheAction`:

- ``RECOMPUTE`` evaluates every grid point,
- ``PARTIAL`` reuses previous samples whose x matches exactly (pan/zoom at a
  fixed pixel width) and evaluates the rest,
- ``REUSE`` hands back the cached series object untouched.

Important gotchas
-----------------
- The x grid is ``i / resolution + min_x`` with
  ``resolution = pixel_width / |max_x - min_x|``; only points computed with
  the same formula can match exactly, which is what makes panning cheap.
- ``nan``/``inf`` samples are kept; drawing gaps is the renderer's job.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from .NumericExpression import Evaluable
from .SampleSeries import SampleSeries
from .cache_coordinator import CacheAction
from .parallel import evaluate_points

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class Viewport:
    """Visible x-range and the pixel width it is drawn at."""

    min_x: float
    max_x: float
    pixel_width: int

    @property
    def resolution(self) -> float:
        """Samples per data unit."""
        return self.pixel_width / abs(self.max_x - self.min_x)

    def grid(self) -> list[float]:
        """Return the ``pixel_width + 1`` sample positions in ascending order."""
        resolution = self.resolution
        return [(i / resolution) + self.min_x for i in range(self.pixel_width + 1)]


class ViewportSampler:
    """
    Sampler for one function slot.

    Conceptually, a ``ViewportSampler`` is "one curve at one resolution". It
    knows how to:

    - evaluate the function across a viewport grid,
    - reuse exact-x matches from its previous series after a pan or zoom,
    - return its cached series when nothing relevant changed.

    Parameters
    ----------
    function : Evaluable or None
        Function to sample. May be assigned later through :attr:`function`.
    workers : int
        Thread count for evaluation (see :func:`evaluate_points`).
    """

    def __init__(self, function: Optional[Evaluable] = None, *, workers: int = 1) -> None:
        self.function = function
        self.workers = workers
        self._cache: Optional[SampleSeries] = None

    @property
    def cache(self) -> Optional[SampleSeries]:
        """Return the last published series, or ``None`` when dropped."""
        return self._cache

    def invalidate(self) -> None:
        """Drop the back-cache so the next run must recompute."""
        self._cache = None

    def run(self, viewport: Viewport, action: CacheAction = CacheAction.RECOMPUTE) -> SampleSeries:
        """
        Return the series for ``viewport`` according to ``action``.

        Parameters
        ----------
        viewport : Viewport
            Range and pixel width to sample.
        action : CacheAction
            ``REUSE``, ``PARTIAL`` or ``RECOMPUTE``.

        Returns
        -------
        SampleSeries
            The cached object on ``REUSE``; a new series otherwise.

        Raises
        ------
        RuntimeError
            If no function is set, or ``REUSE`` is requested while the cache
            is empty.
        """
        if action is CacheAction.REUSE:
            if self._cache is None:
                raise RuntimeError("Back cache is empty; it must be recomputed before it is read.")
            logger.debug("using back cache")
            return self._cache

        if self.function is None:
            raise RuntimeError("ViewportSampler has no function to sample.")

        t0 = time.perf_counter()
        if action is CacheAction.PARTIAL and self._can_reuse(viewport):
            series = self._partial(viewport)
        elif action in (CacheAction.PARTIAL, CacheAction.RECOMPUTE):
            series = self._full(viewport)
        else:
            raise ValueError(f"ViewportSampler cannot handle {action!r}")
        self._cache = series

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "updated back cache (%s, %d points) in %.2f ms",
                action.name,
                len(series),
                1000.0 * (time.perf_counter() - t0),
            )
        return series

    def _can_reuse(self, viewport: Viewport) -> bool:
        return (
            self._cache is not None
            and len(self._cache) > 0
            and self._cache.pixel_width == viewport.pixel_width
        )

    def _full(self, viewport: Viewport) -> SampleSeries:
        xs = viewport.grid()
        ys = evaluate_points(self.function, xs, workers=self.workers)
        return SampleSeries(
            points=tuple(zip(xs, ys)),
            min_x=viewport.min_x,
            max_x=viewport.max_x,
            pixel_width=viewport.pixel_width,
        )

    def _partial(self, viewport: Viewport) -> SampleSeries:
        previous = self._cache
        if previous is None:
            raise RuntimeError("Back cache is empty; partial reuse needs a previous series.")
        lo = previous.points[0][0]
        hi = previous.points[-1][0]
        index = dict(previous.points)

        xs = viewport.grid()
        ys: list[Optional[float]] = [None] * len(xs)
        fresh: list[int] = []
        for i, x in enumerate(xs):
            # Outside the previous range nothing can match.
            if lo <= x <= hi and x in index:
                ys[i] = index[x]
            else:
                fresh.append(i)

        values = evaluate_points(self.function, [xs[i] for i in fresh], workers=self.workers)
        for i, y in zip(fresh, values):
            ys[i] = y

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("partial reuse: %d of %d points reused", len(xs) - len(fresh), len(xs))
        return SampleSeries(
            points=tuple(zip(xs, ys)),  # type: ignore[arg-type]
            min_x=viewport.min_x,
            max_x=viewport.max_x,
            pixel_width=viewport.pixel_width,
        )
