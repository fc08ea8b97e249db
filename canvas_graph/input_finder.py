"""Classify selected canvas elements into graph input roles.

Purpose
-------
A graph is described on the canvas by loosely placed elements: a text label
holding the function under the plot area, an optional rectangle marking the
plot area, and optional text labels for the axis bounds. This module maps an
unordered selection onto those roles.

Concepts and structure
----------------------
- ``ROLE_ANCHORS`` lists, per role, the expected node type and the expected
  center of the element in the unit square spanned by the selection's bounding
  box (``(0, 0)`` top-left, ``(1, 1)`` bottom-right).
- An element qualifies for a role when its type matches and its normalized
  center is closer than ``GraphConfig.match_threshold`` to the anchor.
- When several elements qualify for the same role the nearest one wins; exact
  ties go to the element that comes first in the selection.

Examples
--------
>>> from canvas_graph.geometry import CanvasElement
>>> selection = [
...     CanvasElement("RECTANGLE", 0, 0, 100, 100),
...     CanvasElement("TEXT", 40, 95, 20, 10, characters="sin(x)"),
... ]
>>> nodes = find_inputs(selection)
>>> nodes.function.characters
'sin(x)'
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Iterator, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, GraphConfig
from .errors import ClassificationError
from .geometry import (
    RECTANGLE,
    TEXT,
    NodeType,
    bounding_box_of,
    is_degenerate,
    normalized_position,
)

__all__ = ["InputNodes", "ROLE_ANCHORS", "ROLE_NAMES", "RoleAnchor", "find_inputs", "role_anchors"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleAnchor:
    """Expected type and normalized center for one input role."""

    role: str
    node_type: NodeType
    position: Tuple[float, float]


def role_anchors(inset: float) -> Tuple[RoleAnchor, ...]:
    """Return the anchor table for a given ``inset``."""
    return (
        RoleAnchor("function", TEXT, (0.5, 1.0)),
        RoleAnchor("placeholder", RECTANGLE, (0.5, 0.5)),
        RoleAnchor("min_domain_label", TEXT, (0.0, 1.0)),
        RoleAnchor("max_domain_label", TEXT, (1.0 - inset, 1.0)),
        RoleAnchor("min_range_label", TEXT, (1.0, 0.0)),
        RoleAnchor("max_range_label", TEXT, (1.0, 1.0 - inset)),
    )


ROLE_ANCHORS: Tuple[RoleAnchor, ...] = role_anchors(DEFAULT_CONFIG.inset)

# Host-facing role names, used in messages.
ROLE_NAMES = {
    "function": "function",
    "placeholder": "placeholder",
    "min_domain_label": "minDomainLabel",
    "max_domain_label": "maxDomainLabel",
    "min_range_label": "minRangeLabel",
    "max_range_label": "maxRangeLabel",
}


@dataclass(frozen=True)
class InputNodes:
    """Selected elements assigned to graph roles.

    ``function`` is always set; every other role is ``None`` when no element
    matched it, which downstream means "use the default".
    """

    function: Any
    placeholder: Optional[Any] = None
    min_domain_label: Optional[Any] = None
    max_domain_label: Optional[Any] = None
    min_range_label: Optional[Any] = None
    max_range_label: Optional[Any] = None

    def classified(self) -> Iterator[Tuple[str, Any]]:
        """Yield ``(role, element)`` for every role that is set, in anchor order."""
        for f in fields(self):
            node = getattr(self, f.name)
            if node is not None:
                yield f.name, node

    def elements(self) -> list[Any]:
        """Return the distinct classified elements in anchor order."""
        out: list[Any] = []
        for _, node in self.classified():
            if not any(node is seen for seen in out):
                out.append(node)
        return out


def find_inputs(elements: Sequence[Any], *, config: GraphConfig = DEFAULT_CONFIG) -> InputNodes:
    """Assign selected ``elements`` to graph roles.

    Parameters
    ----------
    elements : sequence
        Element-like objects with ``type``, ``x``, ``y``, ``width`` and
        ``height`` attributes.
    config : GraphConfig, optional
        Supplies ``inset`` (anchor table) and ``match_threshold``.

    Returns
    -------
    InputNodes

    Raises
    ------
    ClassificationError
        If the selection is empty, its bounding box has zero area, or no
        element matches the function role.
    """
    elements = list(elements)
    if not elements:
        raise ClassificationError("Selection is empty.")

    bb = bounding_box_of(elements)
    logger.debug("selection bounding box: %s", bb)
    if is_degenerate(bb):
        raise ClassificationError(f"Selection bounding box {bb} has no area.")

    anchors = ROLE_ANCHORS if config.inset == DEFAULT_CONFIG.inset else role_anchors(config.inset)
    positions = [normalized_position(n, bb) for n in elements]

    matches: dict[str, Any] = {}
    for anchor in anchors:
        best: Optional[Tuple[float, Any]] = None
        tx, ty = anchor.position
        for node, (px, py) in zip(elements, positions):
            if getattr(node, "type", None) != anchor.node_type:
                continue
            dist = math.hypot(px - tx, py - ty)
            if dist >= config.match_threshold:
                continue
            if best is None or dist < best[0]:
                best = (dist, node)
        if best is not None:
            matches[anchor.role] = best[1]
            logger.debug(
                "matched %s to %r (distance %.4f)",
                ROLE_NAMES[anchor.role],
                getattr(best[1], "name", "") or best[1],
                best[0],
            )

    if "function" not in matches:
        raise ClassificationError("No function label found at the bottom center of the selection.")

    return InputNodes(**matches)
