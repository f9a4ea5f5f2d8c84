"""Immutable sampled curve handed to rendering back-ends.

A ``SampleSeries`` is the sampler's back-cache value: ``pixel_width + 1``
``(x, y)`` points in ascending x, evenly spaced across ``[min_x, max_x]``.
It is replaced, never mutated, when the sampler recomputes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

Point = Tuple[float, float]


@dataclass(frozen=True)
class SampleSeries:
    """Immutable record of one sampled curve.

    Parameters
    ----------
    points : tuple[tuple[float, float], ...]
        Sample points ordered by ascending x. ``y`` may be ``nan`` or ``inf``.
    min_x : float
        Left edge of the sampled viewport.
    max_x : float
        Right edge of the sampled viewport.
    pixel_width : int
        Sampling resolution driver; ``len(points) == pixel_width + 1``.
    """

    points: tuple[Point, ...]
    min_x: float
    max_x: float
    pixel_width: int

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __getitem__(self, index: int) -> Point:
        return self.points[index]

    @property
    def x_values(self) -> np.ndarray:
        """Return the x column as a read-only NumPy array."""
        values = np.fromiter((p[0] for p in self.points), dtype=float, count=len(self.points))
        values.flags.writeable = False
        return values

    @property
    def y_values(self) -> np.ndarray:
        """Return the y column as a read-only NumPy array."""
        values = np.fromiter((p[1] for p in self.points), dtype=float, count=len(self.points))
        values.flags.writeable = False
        return values

    def __repr__(self) -> str:
        return (
            f"SampleSeries(n={len(self.points)}, min_x={self.min_x!r}, "
            f"max_x={self.max_x!r}, pixel_width={self.pixel_width!r})"
        )
