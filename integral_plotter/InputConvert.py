# === SECTION: InputConvert [id: InputConvert]===
from __future__ import annotations

from typing import Any, Type, TypeVar
import sympy as sp

T = TypeVar("T", int, float)


def InputConvert(obj: Any, dest_type: Type[T] = float, truncate: bool = True) -> T:
    """
    Convert a refresh-request field to `dest_type`.

    Supported destination types:
    - float (bounds of the viewport and of the integral)
    - int (pixel width, rectangle count)

    Rules:
    - If `obj` is a real number: cast via dest_type(obj).
    - If `obj` is a string:
        1) try float(s)
        2) else parse as a SymPy expression ("pi/2", "-3*pi"), then evaluate.
    - Booleans are rejected; `True` is never a bound.

    Truncation Rules (`truncate`):
    - When converting Float -> Int:
        - If `truncate=True`: Truncate decimal part (e.g., 3.9 -> 3).
        - If `truncate=False`: Require exact integer (e.g., 3.0 -> 3, 3.1 -> Error).
    - NaN and infinities are returned unchanged for float and rejected for int;
      range checks belong to request validation, not here.

    Raises
    ------
    NotImplementedError
        If dest_type is unsupported.
    ValueError
        If conversion fails or violates truncation rules.
    """
    if dest_type not in (float, int):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float and int are supported."
        )

    def _coerce_real(value: float) -> T:
        if dest_type is float:
            return float(value)  # type: ignore[return-value]

        if value != value or value in (float("inf"), float("-inf")):
            raise ValueError(f"Could not convert {obj!r} to int: value is not finite.")
        if not float(value).is_integer() and not truncate:
            raise ValueError(
                f"Could not convert {obj!r} to int: value is not an exact integer."
            )
        return int(value)  # type: ignore[return-value]

    if isinstance(obj, bool):
        raise ValueError(f"Could not convert boolean {obj!r} to {dest_type.__name__}.")

    # Fast path: plain numbers
    if isinstance(obj, int):
        return _coerce_real(float(obj)) if dest_type is float else obj  # type: ignore[return-value]
    if isinstance(obj, float):
        return _coerce_real(obj)

    if isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ValueError(f"Cannot convert empty string to {dest_type.__name__}.")

        try:
            return _coerce_real(float(s))
        except ValueError:
            pass

        try:
            value = complex(sp.sympify(s).evalf())
        except Exception as e:
            raise ValueError(
                f"Could not convert {obj!r} to {dest_type.__name__} (neither directly nor via SymPy)."
            ) from e
        if value.imag != 0:
            raise ValueError(
                f"Could not convert non-real {obj!r} to {dest_type.__name__}: imaginary part is non-zero."
            )
        return _coerce_real(value.real)

    # Fallback: NumPy scalars, SymPy numbers, Fractions...
    try:
        return _coerce_real(float(obj))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Could not convert {obj!r} to {dest_type.__name__}.") from e

# === END OF SECTION: InputConvert [id: InputConvert]===
