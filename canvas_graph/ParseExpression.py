"""Plain-text expression parsing for function and bound labels.

Label text is parsed with SymPy's ``parse_expr`` using the ``convert_xor`` and
implicit-multiplication transformations, so canvas-friendly spellings such as
``x^2`` or ``2 pi`` work. Constants are supplied per parser instance through
``local_dict`` instead of mutating shared parser state; the default table maps
``pi`` (any capitalization), ``π`` and ``e``/``E`` to SymPy's exact constants.
Text copied out of mis-decoded UTF-8 sometimes carries ``Ï€`` for ``π``; it
is normalized before parsing.

Label text is untrusted. Before SymPy sees it, the text is tokenized and only
numbers, the arithmetic operators, parentheses, commas and known names are let
through: the free variable, the constant table, and SymPy's math functions and
numeric constants. Evaluation runs with an empty ``__builtins__``.
"""

from __future__ import annotations

import io
import keyword
import tokenize
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication,
    parse_expr,
    standard_transformations,
)

from .errors import ExpressionEvalError, ExpressionParseError
from .numpify import numpify

__all__ = ["DEFAULT_CONSTANTS", "MATH_NAMES", "ExpressionParser", "ParsedExpression", "parse_expression"]

X = sp.Symbol("x", real=True)

DEFAULT_CONSTANTS: Mapping[str, sp.Expr] = MappingProxyType(
    {
        "pi": sp.pi,
        "Pi": sp.pi,
        "PI": sp.pi,
        "pI": sp.pi,
        "π": sp.pi,
        "e": sp.E,
        "E": sp.E,
    }
)

_TEXT_ALIASES = (
    ("Ï€", "π"),
    ("−", "-"),
    ("×", "*"),
    ("·", "*"),
)

_TRANSFORMATIONS = standard_transformations + (implicit_multiplication, convert_xor)

_ALLOWED_OPS = frozenset({"+", "-", "*", "/", "**", "^", "(", ")", ","})
_IGNORED_TOKENS = frozenset({tokenize.NEWLINE, tokenize.NL, tokenize.ENDMARKER})

# Names the transformations emit into generated code must resolve here too.
_EVAL_GLOBALS: dict[str, Any] = {name: getattr(sp, name) for name in sp.__all__}
_EVAL_GLOBALS["__builtins__"] = {}


def _is_math_name(obj: Any) -> bool:
    if isinstance(obj, sp.Expr):
        return bool(obj.is_number)
    module = getattr(obj, "__module__", None) or ""
    return callable(obj) and module.startswith("sympy.functions.")


MATH_NAMES = frozenset(
    name for name in sp.__all__ if not name.startswith("_") and _is_math_name(getattr(sp, name))
)


@dataclass(frozen=True)
class ParsedExpression:
    """A parsed label expression in the free variable ``variable``.

    Equality compares the source text and the symbolic expression, so two
    parses of unchanged label text compare equal.
    """

    source: str
    expr: sp.Expr
    variable: sp.Symbol = X
    _compiled: dict = field(default_factory=dict, compare=False, repr=False)

    def evaluate(self, x: Any) -> Any:
        """Evaluate the expression at ``x`` (scalar or NumPy array)."""
        fn = self._compiled.get("fn")
        if fn is None:
            fn = numpify(self.expr, vars=self.variable)
            self._compiled["fn"] = fn
        return fn(x)

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True)
class ExpressionParser:
    """Expression parser bound to one immutable constant table.

    Parameters
    ----------
    constants : mapping of str to sympy.Expr, optional
        Names resolved as constants while parsing.
    variable : sympy.Symbol, optional
        The single free variable allowed in function expressions.
    """

    constants: Mapping[str, sp.Expr] = field(default_factory=lambda: DEFAULT_CONSTANTS)
    variable: sp.Symbol = X

    def _local_dict(self, *, with_variable: bool) -> dict[str, Any]:
        local: dict[str, Any] = dict(self.constants)
        if with_variable:
            local[self.variable.name] = self.variable
        return local

    def _check_tokens(self, text: str, source: str, local: Mapping[str, Any]) -> None:
        try:
            tokens = list(tokenize.generate_tokens(io.StringIO(source).readline))
        except (tokenize.TokenError, SyntaxError) as e:
            raise ExpressionParseError(f"Could not parse {text!r}: {e}") from e
        for tok in tokens:
            if tok.type in _IGNORED_TOKENS or tok.type == tokenize.NUMBER:
                continue
            if tok.type == tokenize.OP and tok.string in _ALLOWED_OPS:
                continue
            if tok.type == tokenize.NAME:
                name = tok.string
                if name.startswith("_") or keyword.iskeyword(name):
                    raise ExpressionParseError(f"Name {name!r} is not allowed in {text!r}.")
                if name in local or name in MATH_NAMES:
                    continue
                raise ExpressionParseError(f"Unknown symbol(s) in {text!r}: {name}")
            raise ExpressionParseError(f"Unexpected {tok.string!r} in {text!r}.")

    def _parse(self, text: str, *, with_variable: bool) -> sp.Expr:
        if not isinstance(text, str):
            raise ExpressionParseError(f"Expected label text, got {type(text).__name__}.")
        source = text.strip()
        for old, new in _TEXT_ALIASES:
            source = source.replace(old, new)
        if source == "":
            raise ExpressionParseError("Cannot parse an empty expression.")
        local = self._local_dict(with_variable=with_variable)
        self._check_tokens(text, source, local)
        try:
            expr = parse_expr(
                source,
                local_dict=local,
                global_dict=dict(_EVAL_GLOBALS),
                transformations=_TRANSFORMATIONS,
                evaluate=True,
            )
        except Exception as e:
            raise ExpressionParseError(f"Could not parse {text!r}: {e}") from e
        if not isinstance(expr, sp.Expr):
            raise ExpressionParseError(
                f"Could not parse {text!r}: result is {type(expr).__name__}, not an expression."
            )
        allowed = {self.variable} if with_variable else set()
        unknown = expr.free_symbols - allowed
        if unknown:
            names = ", ".join(sorted(str(s) for s in unknown))
            raise ExpressionParseError(f"Unknown symbol(s) in {text!r}: {names}")
        return expr

    def parse(self, text: str) -> ParsedExpression:
        """Parse function text in the free variable.

        Raises
        ------
        ExpressionParseError
            If the text is not a valid expression or uses unknown symbols.
        """
        expr = self._parse(text, with_variable=True)
        return ParsedExpression(source=text, expr=expr, variable=self.variable)

    def evaluate(self, text: str) -> complex:
        """Evaluate constant expression text to a Python complex number.

        Raises
        ------
        ExpressionParseError
            If the text is not a valid constant expression.
        ExpressionEvalError
            If the expression has no numeric value.
        """
        expr = self._parse(text, with_variable=False)
        try:
            return complex(expr.evalf())
        except (TypeError, ValueError) as e:
            raise ExpressionEvalError(f"{text!r} has no numeric value.") from e


DEFAULT_PARSER = ExpressionParser()


def parse_expression(text: str, parser: Optional[ExpressionParser] = None) -> ParsedExpression:
    """Parse ``text`` with ``parser`` (default constants when omitted)."""
    return (parser or DEFAULT_PARSER).parse(text)


