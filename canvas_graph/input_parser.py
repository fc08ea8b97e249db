"""Turn classified input elements into typed graph inputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .config import DEFAULT_CONFIG, GraphConfig
from .errors import ExpressionEvalError
from .geometry import BoundingBox, bounding_box_of
from .input_finder import ROLE_NAMES, InputNodes
from .InputConvert import InputConvert
from .ParseExpression import DEFAULT_PARSER, ExpressionParser, ParsedExpression

__all__ = ["InputValues", "parse_inputs"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputValues:
    """Parsed graph inputs.

    Bounds are ``None`` when unspecified; the sampler then uses its defaults
    (domain) or the sampled extremes (range). Equality is structural, which is
    what the refresh loop relies on to detect edits.
    """

    function: ParsedExpression
    rect: BoundingBox
    min_domain: Optional[float] = None
    max_domain: Optional[float] = None
    min_range: Optional[float] = None
    max_range: Optional[float] = None


def _text_of(node: Any) -> str:
    text = getattr(node, "characters", None)
    return "" if text is None else str(text)


def _parse_bound(
    node: Any,
    role: str,
    *,
    parser: ExpressionParser,
    config: GraphConfig,
) -> Optional[float]:
    if node is None:
        return None
    try:
        return InputConvert(_text_of(node), float, parser=parser)
    except ExpressionEvalError as e:
        if config.strict_bounds:
            raise
        logger.warning("Ignoring %s: %s", ROLE_NAMES[role], e)
        return None


def target_rect(nodes: InputNodes, *, config: GraphConfig = DEFAULT_CONFIG) -> BoundingBox:
    """Return the rectangle the graph is fitted into.

    The placeholder's box when one was classified; otherwise the box of all
    classified elements, shrunk by ``config.inset`` toward its origin.
    """
    if nodes.placeholder is not None:
        return bounding_box_of(nodes.placeholder)
    return bounding_box_of(nodes.elements()).scaled(1 - config.inset)


def parse_inputs(
    nodes: InputNodes,
    *,
    parser: Optional[ExpressionParser] = None,
    config: GraphConfig = DEFAULT_CONFIG,
) -> InputValues:
    """Parse the text of classified elements into :class:`InputValues`.

    Raises
    ------
    ExpressionParseError
        If the function label is not a valid expression in ``x``.
    ExpressionEvalError
        If ``config.strict_bounds`` is set and a bound label is malformed.
        Otherwise malformed bounds are logged and left unspecified.
    """
    parser = parser or DEFAULT_PARSER
    function = parser.parse(_text_of(nodes.function))

    bounds = {
        role: _parse_bound(getattr(nodes, role), role, parser=parser, config=config)
        for role in ("min_domain_label", "max_domain_label", "min_range_label", "max_range_label")
    }

    return InputValues(
        function=function,
        rect=target_rect(nodes, config=config),
        min_domain=bounds["min_domain_label"],
        max_domain=bounds["max_domain_label"],
        min_range=bounds["min_range_label"],
        max_range=bounds["max_range_label"],
    )
