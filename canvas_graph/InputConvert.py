# === SECTION: InputConvert [id: InputConvert]===
from __future__ import annotations

import math
from typing import Any, Optional, Type, TypeVar

from .errors import ExpressionEvalError, ExpressionParseError
from .ParseExpression import DEFAULT_PARSER, ExpressionParser

T = TypeVar("T", int, float)


def InputConvert(
    obj: Any,
    dest_type: Type[T] = float,
    truncate: bool = True,
    parser: Optional[ExpressionParser] = None,
) -> T:
    """
    Convert label text (or a number) `obj` to `dest_type`.

    Supported destination types:
    - float
    - int

    Rules:
    - If `obj` is a number: cast via dest_type(obj).
    - If `obj` is a string:
        1) try float(s)
        2) else evaluate it as a constant expression with `parser`, so
           "pi/2", "2*e" or "π" are accepted.

    Truncation Rules (`truncate`):
    - Complex results: if `truncate=True` the imaginary part is discarded,
      otherwise a non-zero imaginary part is an error.
    - Float -> Int: if `truncate=True` the decimal part is dropped, otherwise
      the value must be an exact integer.

    Non-finite results (inf, nan) are always rejected: a bound must be a
    usable coordinate.

    Raises
    ------
    NotImplementedError
        If dest_type is unsupported.
    ExpressionEvalError
        If conversion fails or violates truncation rules.
    """
    if dest_type not in (float, int):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float and int are supported."
        )

    def _coerce_numeric_value(x: complex) -> T:
        if x.imag != 0 and not truncate:
            raise ExpressionEvalError(
                f"Could not convert non-real {x!r} to {dest_type.__name__}: imaginary part is non-zero."
            )
        r_val = float(x.real)
        if not math.isfinite(r_val):
            raise ExpressionEvalError(f"Could not convert {obj!r}: value {r_val!r} is not finite.")

        if dest_type is float:
            return float(r_val)  # type: ignore[return-value]

        if not r_val.is_integer() and not truncate:
            raise ExpressionEvalError(
                f"Could not convert {x!r} to int: value is not an exact integer."
            )
        return int(r_val)  # type: ignore[return-value]

    # Fast path: numeric types (exclude bool)
    if isinstance(obj, (int, float, complex)) and not isinstance(obj, bool):
        return _coerce_numeric_value(complex(obj))

    if isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ExpressionEvalError(f"Cannot convert empty string to {dest_type.__name__}.")

        try:
            return _coerce_numeric_value(complex(float(s)))
        except ValueError:
            pass

        try:
            value = (parser or DEFAULT_PARSER).evaluate(s)
        except ExpressionParseError as e:
            raise ExpressionEvalError(
                f"Could not convert {obj!r} to {dest_type.__name__}: {e}"
            ) from e
        return _coerce_numeric_value(value)

    raise ExpressionEvalError(f"Could not convert {obj!r} to {dest_type.__name__}.")

# === END OF SECTION: InputConvert [id: InputConvert]===
