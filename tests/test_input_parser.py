from __future__ import annotations

import logging
import math

import pytest

from canvas_graph.config import GraphConfig
from canvas_graph.errors import ExpressionEvalError, ExpressionParseError
from canvas_graph.geometry import BoundingBox, CanvasElement
from canvas_graph.input_finder import InputNodes
from canvas_graph.input_parser import InputValues, parse_inputs, target_rect


def _nodes(**labels: str) -> InputNodes:
    elements = {
        "placeholder": CanvasElement("RECTANGLE", 0, 0, 200, 100),
        "function": CanvasElement("TEXT", 80, 100, 40, 10, characters=labels.pop("function", "x^2")),
    }
    positions = {
        "min_domain_label": (0, 100),
        "max_domain_label": (170, 100),
        "min_range_label": (200, 0),
        "max_range_label": (200, 90),
    }
    for role, text in labels.items():
        x, y = positions[role]
        elements[role] = CanvasElement("TEXT", x, y, 10, 10, characters=text)
    return InputNodes(**elements)


def test_placeholder_box_is_used_verbatim() -> None:
    values = parse_inputs(_nodes())
    assert values.rect == BoundingBox(0, 0, 200, 100)
    assert values.function.source == "x^2"


def test_bounds_default_to_unspecified() -> None:
    values = parse_inputs(_nodes())
    assert values.min_domain is None
    assert values.max_domain is None
    assert values.min_range is None
    assert values.max_range is None


def test_bounds_are_evaluated_with_constants() -> None:
    values = parse_inputs(
        _nodes(
            min_domain_label="-pi",
            max_domain_label="2*π",
            min_range_label="0",
            max_range_label="e",
        )
    )
    assert values.min_domain == pytest.approx(-math.pi)
    assert values.max_domain == pytest.approx(2 * math.pi)
    assert values.min_range == 0.0
    assert values.max_range == pytest.approx(math.e)


def test_explicit_zero_bound_is_not_unspecified() -> None:
    values = parse_inputs(_nodes(min_range_label="0"))
    assert values.min_range == 0.0
    assert values.min_range is not None


def test_malformed_bound_degrades_to_unspecified(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="canvas_graph.input_parser"):
        values = parse_inputs(_nodes(max_domain_label="ten"))
    assert values.max_domain is None
    assert "Ignoring maxDomainLabel" in caplog.text


def test_malformed_bound_fails_in_strict_mode() -> None:
    with pytest.raises(ExpressionEvalError):
        parse_inputs(_nodes(max_domain_label="ten"), config=GraphConfig(strict_bounds=True))


def test_malformed_function_fails() -> None:
    with pytest.raises(ExpressionParseError):
        parse_inputs(_nodes(function="x^^2"))


def test_missing_text_is_a_parse_failure() -> None:
    nodes = InputNodes(function=CanvasElement("TEXT", 0, 0, 10, 10))
    with pytest.raises(ExpressionParseError):
        parse_inputs(nodes)


def test_rect_without_placeholder_is_inset_from_classified_roles() -> None:
    function = CanvasElement("TEXT", 40, 90, 20, 10, characters="x")
    min_domain = CanvasElement("TEXT", 0, 90, 10, 10, characters="0")
    min_range = CanvasElement("TEXT", 90, 0, 10, 10, characters="0")
    nodes = InputNodes(function=function, min_domain_label=min_domain, min_range_label=min_range)
    assert target_rect(nodes) == BoundingBox(0, 0, 90.0, 90.0)
    assert target_rect(nodes, config=GraphConfig(inset=0.5)) == BoundingBox(0, 0, 50.0, 50.0)


def test_unchanged_labels_parse_to_equal_values() -> None:
    nodes = _nodes(min_domain_label="0", max_domain_label="pi")
    first = parse_inputs(nodes)
    second = parse_inputs(nodes)
    assert first == second
    assert isinstance(first, InputValues)

    nodes.function.characters = "x^3"
    assert parse_inputs(nodes) != first
