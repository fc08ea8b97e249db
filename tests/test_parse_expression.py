from __future__ import annotations

import math

import numpy as np
import pytest
import sympy as sp

from canvas_graph.errors import ExpressionEvalError, ExpressionParseError
from canvas_graph.InputConvert import InputConvert
from canvas_graph.ParseExpression import ExpressionParser, parse_expression


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("pi", math.pi),
        ("PI", math.pi),
        ("π", math.pi),
        ("Ï€", math.pi),
        ("e", math.e),
        ("E", math.e),
        ("pi/2", math.pi / 2),
        ("2*e", 2 * math.e),
        ("2^3", 8.0),
        ("-1.5", -1.5),
    ],
)
def test_constant_labels_evaluate_to_double_precision(text: str, expected: float) -> None:
    assert InputConvert(text, float) == pytest.approx(expected, rel=1e-15, abs=1e-15)


def test_function_text_uses_caret_for_power() -> None:
    parsed = parse_expression("x^2")
    assert parsed.expr == parsed.variable**2
    assert parsed.source == "x^2"
    np.testing.assert_allclose(parsed.evaluate(np.array([1.0, 2.0, 3.0])), [1.0, 4.0, 9.0])


def test_implicit_multiplication_with_constants() -> None:
    parsed = parse_expression("2 pi x")
    assert float(parsed.evaluate(1.0)) == pytest.approx(2 * math.pi)


def test_parses_of_same_text_compare_equal() -> None:
    assert parse_expression("sin(x)") == parse_expression("sin(x)")
    assert parse_expression("sin(x)") != parse_expression("cos(x)")


@pytest.mark.parametrize("text", ["", "   ", "x +", "sin(", "y + x", "x == 1"])
def test_malformed_function_text_raises_parse_error(text: str) -> None:
    with pytest.raises(ExpressionParseError):
        parse_expression(text)


def test_numeric_label_rejects_free_variable() -> None:
    with pytest.raises(ExpressionEvalError):
        InputConvert("x + 1", float)


def test_non_finite_labels_are_rejected() -> None:
    with pytest.raises(ExpressionEvalError, match="not finite"):
        InputConvert("inf", float)


def test_complex_labels_follow_truncate_flag() -> None:
    assert InputConvert(complex(2, 3), float) == 2.0
    with pytest.raises(ExpressionEvalError, match="imaginary part is non-zero"):
        InputConvert(complex(2, 3), float, truncate=False)


def test_int_conversion() -> None:
    assert InputConvert("7", int) == 7
    assert InputConvert(3.9, int) == 3
    with pytest.raises(ExpressionEvalError, match="exact integer"):
        InputConvert(3.9, int, truncate=False)


def test_unsupported_destination_type() -> None:
    with pytest.raises(NotImplementedError):
        InputConvert("1", complex)  # type: ignore[arg-type]


def test_constant_table_is_injected_per_parser() -> None:
    tau_parser = ExpressionParser(constants={"tau": 2 * sp.pi})
    assert InputConvert("tau", float, parser=tau_parser) == pytest.approx(2 * math.pi)
    # The default parser is unaffected.
    with pytest.raises(ExpressionEvalError):
        InputConvert("tau", float)


@pytest.mark.parametrize(
    "text",
    [
        "N.__globals__['__builtins__']['__import__']('os').system('true')",
        "x.__class__",
        "__import__('os')",
        "(lambda: 1)()",
        "open('labels.txt')",
        "exec(x)",
        "sin[0]",
        "x # comment",
    ],
)
def test_label_text_is_not_run_as_python(text: str) -> None:
    with pytest.raises(ExpressionParseError):
        parse_expression(text)
    with pytest.raises(ExpressionEvalError):
        InputConvert(text, float)


def test_math_functions_and_sympy_constants_are_accepted() -> None:
    parsed = parse_expression("Max(x, 1) + sqrt(Abs(x)) * exp(0)")
    np.testing.assert_allclose(parsed.evaluate(np.array([0.0, 4.0])), [1.0, 6.0])
    assert InputConvert("log(E^2)", float) == pytest.approx(2.0)
