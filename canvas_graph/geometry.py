"""Axis-aligned bounding boxes and canvas element records.

Purpose
-------
Small geometry layer shared by the role classifier and the input parser. All
coordinates are host canvas coordinates (x grows right, y grows down).

Concepts
--------
- ``BoundingBox`` is immutable. A box whose ``x`` is ``+inf`` or whose
  ``width`` is ``-inf`` is *empty* and acts as the identity element of
  :func:`bounding_box_union`.
- ``CanvasElement`` mirrors the subset of a host node the package reads:
  ``type``, position/size and, for text nodes, ``characters``. Host objects
  exposing the same attributes can be passed directly.

Examples
--------
>>> a = BoundingBox(0, 0, 10, 10)
>>> b = BoundingBox(5, 5, 10, 10)
>>> bounding_box_union(a, b)
BoundingBox(x=0, y=0, width=15, height=15)
>>> bounding_box_union(EMPTY_BOX, a) == a
True
>>> center(a)
(5.0, 5.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import reduce
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

__all__ = [
    "BoundingBox",
    "CanvasElement",
    "EMPTY_BOX",
    "NodeType",
    "bounding_box_of",
    "bounding_box_union",
    "center",
]

NodeType = str
TEXT: NodeType = "TEXT"
RECTANGLE: NodeType = "RECTANGLE"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle ``(x, y, width, height)``."""

    x: float
    y: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        """Return True for the union identity sentinel."""
        return self.x == math.inf or self.width == -math.inf

    def scaled(self, factor: float) -> "BoundingBox":
        """Return a box with the same origin and size multiplied by ``factor``."""
        return BoundingBox(self.x, self.y, self.width * factor, self.height * factor)


EMPTY_BOX = BoundingBox(math.inf, math.inf, 0, 0)


@dataclass
class CanvasElement:
    """Positioned canvas node as read from the host selection.

    Parameters
    ----------
    type : str
        Host node type tag, e.g. ``"TEXT"`` or ``"RECTANGLE"``.
    x, y, width, height : float
        Geometry in canvas coordinates.
    characters : str or None, optional
        Text content for ``TEXT`` nodes.
    name : str, optional
        Host layer name, only used in log messages.
    """

    type: NodeType
    x: float
    y: float
    width: float
    height: float
    characters: Optional[str] = None
    name: str = ""


BoxLike = Union[BoundingBox, CanvasElement, Any]


def _as_box(item: BoxLike) -> BoundingBox:
    if isinstance(item, BoundingBox):
        return item
    return BoundingBox(item.x, item.y, item.width, item.height)


def bounding_box_union(a: BoundingBox, b: BoundingBox) -> BoundingBox:
    """Return the smallest box containing ``a`` and ``b``.

    An empty operand (see :attr:`BoundingBox.is_empty`) is ignored and the
    other operand is returned unchanged.
    """
    if a.is_empty:
        return b
    if b.is_empty:
        return a
    x = min(a.x, b.x)
    y = min(a.y, b.y)
    width = max(a.x + a.width, b.x + b.width) - x
    height = max(a.y + a.height, b.y + b.height) - y
    return BoundingBox(x, y, width, height)


def bounding_box_of(nodes: Union[BoxLike, Iterable[BoxLike]]) -> BoundingBox:
    """Return the bounding box of one element or of a sequence of elements.

    A single element (anything with ``x``/``y``/``width``/``height``) yields
    its own box. A sequence is reduced with :func:`bounding_box_union` seeded
    by :data:`EMPTY_BOX`, so an empty sequence yields ``EMPTY_BOX``.
    """
    if isinstance(nodes, BoundingBox) or hasattr(nodes, "width"):
        return _as_box(nodes)
    return reduce(bounding_box_union, (_as_box(n) for n in nodes), EMPTY_BOX)


def center(box: BoxLike) -> Tuple[float, float]:
    """Return the center point of ``box``."""
    b = _as_box(box)
    return (b.x + 0.5 * b.width, b.y + 0.5 * b.height)


def normalized_position(box: BoxLike, frame: BoundingBox) -> Tuple[float, float]:
    """Express the center of ``box`` in ``frame``'s unit square.

    The caller must ensure ``frame`` has a non-zero width and height.
    """
    cx, cy = center(box)
    return ((cx - frame.x) / frame.width, (cy - frame.y) / frame.height)


def is_degenerate(frame: BoundingBox) -> bool:
    """Return True when ``frame`` cannot be used as a normalization frame."""
    if frame.is_empty:
        return True
    dims: Sequence[float] = (frame.x, frame.y, frame.width, frame.height)
    if not all(math.isfinite(v) for v in dims):
        return True
    return frame.width <= 0 or frame.height <= 0
