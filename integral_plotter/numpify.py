"""
numpify: Compile SymPy expressions in ``x`` to fast Python callables
===================================================================

Purpose
-------
Turn a parsed single-variable SymPy expression into a plain Python function of
one float, generated through SymPy's NumPy code printer.

The engine evaluates functions one point at a time (it needs to know exactly
which points were recomputed), so the generated function is *scalar*: it does
not wrap its argument in ``numpy.asarray``. Elementary functions still resolve
to NumPy (``numpy.sin``, ``numpy.sqrt``...), which return ``nan``/``inf``
instead of raising on domain errors.

Public API
----------
- :func:`numpify`
- :func:`numpify_cached`

Examples
--------
>>> import sympy as sp
>>> x = sp.Symbol("x")
>>> f = numpify(x**2 + 1, var=x)
>>> f(3.0)
10.0
>>> print(f.source)
def _generated(x):
    return x**2 + 1

Logging
-------
This module uses Python's standard :mod:`logging` library and is silent by default.
To enable debug logging:

>>> import logging
>>> logging.basicConfig(level=logging.DEBUG)
>>> logging.getLogger("integral_plotter.numpify").setLevel(logging.DEBUG)
"""

from __future__ import annotations

from functools import lru_cache
import builtins
import keyword

import logging
import time
import textwrap
from typing import Any, Callable, Dict, cast

import numpy as np
import sympy as sp
from sympy.printing.numpy import NumPyPrinter


__all__ = [
    "numpify",
    "numpify_cached",
    "NumpifiedFunction",
]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class NumpifiedFunction:
    """Compiled SymPy->Python callable of one variable."""

    __slots__ = ("_fn", "symbolic", "var", "arg_name", "source")

    def __init__(
        self,
        fn: Callable[[Any], Any],
        symbolic: sp.Basic,
        var: sp.Symbol,
        arg_name: str,
        source: str,
    ) -> None:
        self._fn = fn
        self.symbolic = symbolic
        self.var = var
        self.arg_name = arg_name
        self.source = source

    def __call__(self, x: Any) -> Any:
        return self._fn(x)

    def __repr__(self) -> str:
        return f"NumpifiedFunction({self.symbolic!r}, var={self.arg_name})"


def numpify(expr: Any, *, var: sp.Symbol, cache: bool = True) -> NumpifiedFunction:
    """Compile a SymPy expression into a callable of ``var``.

    By default this uses the same LRU-backed cache as :func:`numpify_cached`.
    Pass ``cache=False`` to force a fresh compile.
    """
    if cache:
        return numpify_cached(expr, var=var)
    return _numpify_uncached(expr, var=var)


def _is_valid_parameter_name(name: str) -> bool:
    return bool(name) and name.isidentifier() and not keyword.iskeyword(name)


def _mangle_arg_name(name: str, reserved_names: set[str]) -> str:
    cleaned = "".join(ch if (ch == "_" or ch.isalnum()) else "_" for ch in name)
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    candidate = cleaned
    suffix = 0
    while candidate in reserved_names or not _is_valid_parameter_name(candidate):
        candidate = f"{cleaned}__{suffix}"
        suffix += 1
    return candidate


def _numpify_uncached(expr: Any, *, var: sp.Symbol) -> NumpifiedFunction:
    """Compile a SymPy expression into a Python function of one argument (uncached).

    Parameters
    ----------
    expr:
        A SymPy expression or anything convertible via :func:`sympy.sympify`.
    var:
        The independent variable; becomes the single positional argument.

    Returns
    -------
    NumpifiedFunction
        A generated callable wrapper with expression metadata and source text.

    Raises
    ------
    TypeError
        If ``expr`` is not SymPy-compatible or ``var`` is not a Symbol.
    ValueError
        If ``expr`` contains free symbols other than ``var``.

    Notes
    -----
    This function uses ``exec`` to define the generated function. Avoid calling it on
    untrusted expressions.
    """
    # 1) Normalize expr to SymPy.
    try:
        expr_sym = sp.sympify(expr)
    except Exception as e:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr)}") from e
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(expr_sym)}")
    if not isinstance(var, sp.Symbol):
        raise TypeError(f"var must be a SymPy Symbol, got {type(var)}")
    expr = cast(sp.Basic, expr_sym)

    log_debug = logger.isEnabledFor(logging.DEBUG)
    t_total0: float | None = time.perf_counter() if log_debug else None

    # 2) Only the independent variable may remain free.
    extra = expr.free_symbols - {var}
    if extra:
        missing_str = ", ".join(sorted(s.name for s in extra))
        raise ValueError(f"Expression contains unbound symbols: {missing_str}. Only {var.name} is allowed.")

    # 3) Generate source.
    printer = NumPyPrinter(settings={"user_functions": {}})
    reserved_names = set(keyword.kwlist) | set(dir(builtins)) | {"numpy", "np"}
    arg_name = _mangle_arg_name(var.name, reserved_names)
    expr_code = printer.doprint(expr.xreplace({var: sp.Symbol(arg_name)}))

    src = "\n".join([f"def _generated({arg_name}):", f"    return {expr_code}"])

    glb: Dict[str, Any] = {"numpy": np}
    loc: Dict[str, Any] = {}
    t_exec0: float | None = time.perf_counter() if log_debug else None
    exec(src, glb, loc)
    t_exec_s = (time.perf_counter() - t_exec0) if t_exec0 is not None else None
    fn = cast(Callable[[Any], Any], loc["_generated"])

    fn.__doc__ = textwrap.dedent(
        f"""
        Auto-generated function from SymPy expression.

        expr: {repr(expr)}

        Source:
        {src}
        """
    ).strip()

    if log_debug:
        t_total_s = (time.perf_counter() - t_total0) if t_total0 is not None else None
        logger.debug(
            "numpify timings (ms): exec=%.2f total=%.2f",
            1000.0 * (t_exec_s or 0.0),
            1000.0 * (t_total_s or 0.0),
        )

    return NumpifiedFunction(fn=fn, symbolic=expr, var=var, arg_name=arg_name, source=src)


# ---------------------------------------------------------------------------
# Cached compilation
# ---------------------------------------------------------------------------

_NUMPIFY_CACHE_MAXSIZE = 256


@lru_cache(maxsize=_NUMPIFY_CACHE_MAXSIZE)
def _numpify_cached_impl(expr: sp.Basic, var: sp.Symbol) -> NumpifiedFunction:
    """Compile an expression on cache misses for :func:`numpify_cached`."""
    # NOTE: This function body only runs on cache *misses*.
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("numpify_cached: cache MISS (expr=%s)", expr)
    return _numpify_uncached(expr, var=var)


def numpify_cached(expr: Any, *, var: sp.Symbol) -> NumpifiedFunction:
    """Cached version of :func:`numpify`.

    Re-typing an expression that was plotted before (or switching a slot back
    and forth between two expressions) reuses the compiled callable. The cache
    key is the sympified expression and the variable.

    If you need a fresh compile, call :func:`numpify` with ``cache=False`` or clear the
    cache via ``numpify_cached.cache_clear()``.
    """
    expr_sym = cast(sp.Basic, sp.sympify(expr))
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify_cached expects a SymPy expression, got {type(expr_sym)}")
    return _numpify_cached_impl(expr_sym, var)


# Expose cache controls on the public wrapper.
numpify_cached.cache_info = _numpify_cached_impl.cache_info  # type: ignore[attr-defined]
numpify_cached.cache_clear = _numpify_cached_impl.cache_clear  # type: ignore[attr-defined]
