"""Order-preserving evaluation of a function over many points.

The sampler and the integrator evaluate independent points. With
``workers > 1`` the evaluations are spread over a thread pool; results are
always returned in input order, so the parallel path yields exactly the same
list as the sequential one.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from .NumericExpression import Evaluable
from .defaults import PARALLEL_MIN_POINTS

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def evaluate_points(
    function: Evaluable,
    xs: Sequence[float],
    *,
    workers: int = 1,
    min_points: int = PARALLEL_MIN_POINTS,
) -> list[float]:
    """Evaluate ``function`` at every x in ``xs``.

    Parameters
    ----------
    function:
        Object with an ``evaluate(x)`` method. Must be safe to call from
        several threads when ``workers > 1``.
    xs:
        Points to evaluate.
    workers:
        Thread count. ``1`` (default) evaluates in the calling thread.
    min_points:
        Inputs shorter than this are evaluated sequentially regardless of
        ``workers``.

    Returns
    -------
    list[float]
        ``[function.evaluate(x) for x in xs]``, in the same order.
    """
    if workers < 1:
        raise ValueError("workers must be >= 1")
    if workers == 1 or len(xs) < min_points:
        return [function.evaluate(x) for x in xs]

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("evaluating %d points on %d threads", len(xs), workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(function.evaluate, xs))
