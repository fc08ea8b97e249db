"""
numpify: Compile parsed label expressions to NumPy-callable functions
====================================================================

Purpose
-------
Turn the SymPy expression of a function label into a vectorized Python
function so the graph sampler evaluates every sample in one NumPy call.

The generated source is kept on the returned :class:`NumpifiedFunction` for
inspection, and compilation is cached per ``(expr, vars)`` so the refresh loop
does not recompile unchanged label text every tick.

Examples
--------
>>> import numpy as np
>>> import sympy as sp
>>> x = sp.Symbol("x")
>>> f = numpify(x**2, vars=x)
>>> f(np.array([1.0, 2.0, 3.0]))
array([1., 4., 9.])

Constants broadcast to the argument shape:

>>> numpify(sp.pi, vars=x)(np.zeros(3)).shape
(3,)

Logging
-------
This module uses Python's standard :mod:`logging` library and is silent by
default. Enable ``logging.getLogger("canvas_graph.numpify")`` at DEBUG level to
see generated sources and compile timings.
"""

from __future__ import annotations

import builtins
import importlib
import keyword
import logging
import textwrap
import time
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union, cast

import numpy as np
import sympy as sp
from sympy.printing.numpy import NumPyPrinter

__all__ = ["NumpifiedFunction", "numpify", "numpify_cached"]


logger = logging.getLogger(__name__)


class NumpifiedFunction:
    """Compiled SymPy->NumPy callable with its symbolic source attached."""

    __slots__ = ("_fn", "symbolic", "vars", "source")

    def __init__(
        self,
        fn: Callable[..., Any],
        symbolic: sp.Basic,
        vars: tuple[sp.Symbol, ...],
        source: str,
    ) -> None:
        self._fn = fn
        self.symbolic = symbolic
        self.vars = vars
        self.source = source

    def __call__(self, *args: Any) -> Any:
        if len(args) != len(self.vars):
            raise TypeError(
                f"Expected {len(self.vars)} positional argument(s), got {len(args)}"
            )
        return self._fn(*args)

    def __repr__(self) -> str:
        vars_str = ", ".join(sym.name for sym in self.vars)
        return f"NumpifiedFunction({self.symbolic!r}, vars=({vars_str}))"


def numpify(
    expr: Any,
    *,
    vars: Optional[Union[sp.Symbol, Iterable[sp.Symbol]]] = None,
    cache: bool = True,
) -> NumpifiedFunction:
    """Compile a SymPy expression into a NumPy-evaluable function.

    By default this uses the same LRU-backed cache as :func:`numpify_cached`.
    Pass ``cache=False`` to force a fresh compile.
    """
    if cache:
        return numpify_cached(expr, vars=vars)
    return _numpify_uncached(expr, vars=vars)


def _mangle_name(name: str, used: set[str]) -> str:
    cleaned = "".join(ch if (ch == "_" or ch.isalnum()) else "_" for ch in name)
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    candidate = cleaned
    suffix = 0
    while candidate in used or keyword.iskeyword(candidate):
        candidate = f"{cleaned}__{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def _normalize_vars(
    expr: sp.Basic, vars: Optional[Union[sp.Symbol, Iterable[sp.Symbol]]]
) -> Tuple[sp.Symbol, ...]:
    """Normalize vars into a tuple of SymPy Symbols."""
    if vars is None:
        return tuple(sorted(expr.free_symbols, key=sp.default_sort_key))
    if isinstance(vars, sp.Symbol):
        return (vars,)
    try:
        vars_tuple = tuple(vars)
    except TypeError as e:
        raise TypeError("vars must be a SymPy Symbol or an iterable of SymPy Symbols") from e
    for a in vars_tuple:
        if not isinstance(a, sp.Symbol):
            raise TypeError(f"vars must contain only SymPy Symbols, got {type(a)}")
    return vars_tuple


def _require_printable_functions(expr: sp.Basic, printer: NumPyPrinter) -> None:
    """Ensure every function call prints as a NumPy call, not a bare name."""
    missing: set[str] = set()
    for app in expr.atoms(sp.Function):
        name = app.func.__name__
        try:
            code = printer.doprint(app).strip()
        except Exception:
            missing.add(name)
            continue
        if code.startswith(f"{name}("):
            missing.add(name)
    if missing:
        raise ValueError(
            "Expression uses function(s) without a NumPy implementation: "
            + ", ".join(sorted(missing))
        )


def _numpify_uncached(
    expr: Any,
    *,
    vars: Optional[Union[sp.Symbol, Iterable[sp.Symbol]]] = None,
) -> NumpifiedFunction:
    """Compile a SymPy expression into a NumPy-evaluable Python function (uncached).

    Parameters
    ----------
    expr:
        A SymPy expression or anything convertible via :func:`sympy.sympify`.
    vars:
        Symbols treated as positional arguments of the compiled function. If
        None, all free symbols sorted by ``sympy.default_sort_key``.

    Raises
    ------
    TypeError
        If ``expr`` is not SymPy-compatible or ``vars`` is malformed.
    ValueError
        If ``expr`` has free symbols outside ``vars`` or functions NumPy
        cannot evaluate.

    Notes
    -----
    This function uses ``exec`` to define the generated function.
    """
    try:
        expr_sym = sp.sympify(expr)
    except Exception as e:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr)}") from e
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(expr_sym)}")
    expr = cast(sp.Basic, expr_sym)

    vars_tuple = _normalize_vars(expr, vars)

    log_debug = logger.isEnabledFor(logging.DEBUG)
    t0: float | None = time.perf_counter() if log_debug else None

    missing = expr.free_symbols - set(vars_tuple)
    if missing:
        missing_str = ", ".join(sorted(s.name for s in missing))
        raise ValueError(f"Expression contains unbound symbols: {missing_str}")

    printer = NumPyPrinter(settings={"user_functions": {}, "allow_unknown_functions": True})
    _require_printable_functions(expr, printer)

    used = set(keyword.kwlist) | set(dir(builtins)) | {"numpy", "np", "functools"}
    arg_names = [_mangle_name(sym.name, used) for sym in vars_tuple]
    replacement = {sym: sp.Symbol(name) for sym, name in zip(vars_tuple, arg_names)}
    expr_code = printer.doprint(expr.xreplace(replacement))

    lines: list[str] = ["def _generated(" + ", ".join(arg_names) + "):"]
    for nm in arg_names:
        lines.append(f"    {nm} = numpy.asarray({nm}, dtype=float)")
    if not expr.free_symbols and arg_names:
        lines.append(f"    _shape = numpy.broadcast({', '.join(arg_names)}).shape")
        lines.append(f"    return ({expr_code}) + numpy.zeros(_shape)")
    else:
        lines.append(f"    return {expr_code}")
    src = "\n".join(lines)

    glb: Dict[str, Any] = {"numpy": np}
    for module in printer.module_imports:
        root = module.split(".")[0]
        importlib.import_module(module)
        glb.setdefault(root, importlib.import_module(root))
    loc: Dict[str, Any] = {}
    exec(src, glb, loc)
    fn = cast(Callable[..., Any], loc["_generated"])
    fn.__doc__ = textwrap.dedent(
        f"""
        Auto-generated NumPy function from SymPy expression.

        expr: {expr!r}
        vars: {arg_names}
        """
    ).strip()

    if t0 is not None:
        logger.debug("numpify source:\n%s", src)
        logger.debug("numpify compile took %.2f ms", 1000.0 * (time.perf_counter() - t0))

    return NumpifiedFunction(fn=fn, symbolic=expr, vars=vars_tuple, source=src)


_NUMPIFY_CACHE_MAXSIZE = 256


@lru_cache(maxsize=_NUMPIFY_CACHE_MAXSIZE)
def _numpify_cached_impl(expr: sp.Basic, vars_tuple: Tuple[sp.Symbol, ...]) -> NumpifiedFunction:
    """Compile an expression on cache misses for :func:`numpify_cached`."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("numpify_cached: cache MISS (vars=%s)", [a.name for a in vars_tuple])
    return _numpify_uncached(expr, vars=vars_tuple)


def numpify_cached(
    expr: Any,
    *,
    vars: Optional[Union[sp.Symbol, Iterable[sp.Symbol]]] = None,
) -> NumpifiedFunction:
    """Cached version of :func:`numpify`.

    The cache key is the sympified expression plus the normalized ``vars``
    tuple. Clear it with ``numpify_cached.cache_clear()``.
    """
    expr_sym = sp.sympify(expr)
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify_cached expects a SymPy expression, got {type(expr_sym)}")
    vars_tuple = _normalize_vars(expr_sym, vars)
    return _numpify_cached_impl(expr_sym, vars_tuple)


numpify_cached.cache_info = _numpify_cached_impl.cache_info  # type: ignore[attr-defined]
numpify_cached.cache_clear = _numpify_cached_impl.cache_clear  # type: ignore[attr-defined]
