from __future__ import annotations

import math

import numpy as np
import pytest

from integral_plotter import InputConvert


@pytest.mark.parametrize(
    "raw, expected",
    [
        (2, 2.0),
        (-1.5, -1.5),
        (" 3.25 ", 3.25),
        ("pi/2", math.pi / 2),
        ("-2*pi", -2 * math.pi),
        (np.float64(0.5), 0.5),
    ],
)
def test_float_conversion(raw, expected: float) -> None:
    assert InputConvert(raw, float) == pytest.approx(expected)


def test_int_conversion_truncates_by_default() -> None:
    assert InputConvert(3.9, int) == 3
    assert InputConvert("7", int) == 7
    assert InputConvert("8.0", int, truncate=False) == 8


def test_int_conversion_can_require_exact_integers() -> None:
    with pytest.raises(ValueError, match="not an exact integer"):
        InputConvert(3.5, int, truncate=False)


@pytest.mark.parametrize("raw", [True, "", "   ", "sqrt(-1)", "x +", None])
def test_rejected_inputs(raw) -> None:
    with pytest.raises(ValueError):
        InputConvert(raw, float)


def test_non_finite_values_cannot_become_int() -> None:
    assert math.isinf(InputConvert("inf", float))
    with pytest.raises(ValueError, match="not finite"):
        InputConvert(math.nan, int)


def test_unsupported_destination_type() -> None:
    with pytest.raises(NotImplementedError):
        InputConvert("1", complex)  # type: ignore[arg-type]
