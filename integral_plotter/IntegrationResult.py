"""Value types produced by the Riemann integrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Union


class QuadratureRule(Enum):
    """Which sample sets a rectangle's height."""

    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"

    @classmethod
    def parse(cls, value: Union["QuadratureRule", str]) -> "QuadratureRule":
        """Return the rule named by ``value`` (case-insensitive, ``"mid"`` allowed).

        Raises
        ------
        ValueError
            If ``value`` names no rule.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "mid":
                key = "middle"
            for rule in cls:
                if rule.value == key:
                    return rule
        options = ", ".join(rule.value for rule in cls)
        raise ValueError(f"Unknown quadrature rule {value!r}; expected one of: {options}")

    def __str__(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class Rectangle:
    """One Riemann rectangle in data space.

    ``x`` is the display center; ``left_x``/``right_x`` are the edges the
    height was sampled from (``left_x < right_x`` always).
    """

    x: float
    left_x: float
    right_x: float
    height: float

    @property
    def width(self) -> float:
        return self.right_x - self.left_x


@dataclass(frozen=True)
class IntegrationResult:
    """Immutable front-cache value: drawable rectangles plus the signed area.

    Parameters
    ----------
    rectangles : tuple[Rectangle, ...]
        Rectangles with a finite height, in placement order.
    area : float
        ``sum(height * step)`` over ``rectangles``; negative below the axis.
    step : float
        Width of every rectangle.
    rule : QuadratureRule
        Rule used to pick heights.
    """

    rectangles: tuple[Rectangle, ...]
    area: float
    step: float
    rule: QuadratureRule

    def __len__(self) -> int:
        return len(self.rectangles)

    def __iter__(self) -> Iterator[Rectangle]:
        return iter(self.rectangles)

    def __repr__(self) -> str:
        return (
            f"IntegrationResult(n={len(self.rectangles)}, area={self.area!r}, "
            f"rule={self.rule.name})"
        )
