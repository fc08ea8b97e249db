"""Sample a parsed function into a polyline fitted to the target rectangle.

Purpose
-------
Defines ``VectorNetwork`` (vertices plus index-linked segments, the geometry
handed to the canvas) and ``generate_graph``, which evaluates the function on
a sample grid, auto-ranges the output axis, and scales the samples into
rectangle-local coordinates.

Important gotchas
-----------------
- Horizontal placement is by sample index: vertex ``i`` sits at
  ``i / resolution`` regardless of the domain values.
- With ``domain_sampling="legacy"`` (the default) sample ``i`` is evaluated at
  ``min_domain + i / (max_domain - min_domain)``. This only spans
  ``[min_domain, max_domain]`` when that interval has length 1; it is kept for
  compatibility with previously generated graphs. Use
  ``domain_sampling="span"`` for samples spread evenly over the domain.
- Vertical placement grows downward like canvas coordinates:
  ``min_range`` maps to ``y = 0``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from .config import DEFAULT_CONFIG, GraphConfig
from .errors import (
    DegenerateDomainError,
    DegenerateRangeError,
    ExpressionEvalError,
    InsufficientResolutionError,
)
from .input_parser import InputValues

__all__ = ["Segment", "Vertex", "VectorNetwork", "generate_graph", "sample_count"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vertex:
    x: float
    y: float


@dataclass(frozen=True)
class Segment:
    start: int
    end: int


@dataclass(frozen=True)
class VectorNetwork:
    """Open polyline: ``segments[i]`` joins ``vertices[i]`` and ``vertices[i + 1]``."""

    vertices: Tuple[Vertex, ...]
    segments: Tuple[Segment, ...]

    @classmethod
    def polyline(cls, xs: Any, ys: Any) -> "VectorNetwork":
        """Build an open chain through the points ``zip(xs, ys)``."""
        vertices = tuple(Vertex(float(x), float(y)) for x, y in zip(xs, ys))
        segments = tuple(Segment(i, i + 1) for i in range(len(vertices) - 1))
        return cls(vertices=vertices, segments=segments)

    def to_dict(self) -> Dict[str, List[Dict[str, float]]]:
        """Return the host wire shape ``{"vertices": [...], "segments": [...]}``."""
        return {
            "vertices": [{"x": v.x, "y": v.y} for v in self.vertices],
            "segments": [{"start": s.start, "end": s.end} for s in self.segments],
        }

    @property
    def xs(self) -> Tuple[float, ...]:
        return tuple(v.x for v in self.vertices)

    @property
    def ys(self) -> Tuple[float, ...]:
        return tuple(v.y for v in self.vertices)


def sample_count(width: float, resolution: float) -> int:
    """Return the number of samples for a rectangle ``width`` canvas units wide."""
    return math.ceil(width * resolution + 1)


def _domain_samples(values: InputValues, n: int, config: GraphConfig) -> np.ndarray:
    min_domain = 0.0 if values.min_domain is None else values.min_domain
    max_domain = 1.0 if values.max_domain is None else values.max_domain
    index = np.arange(n, dtype=float)
    if config.domain_sampling == "span":
        return min_domain + index * (max_domain - min_domain) / (n - 1)
    if max_domain == min_domain:
        raise DegenerateDomainError(f"Domain [{min_domain}, {max_domain}] has zero width.")
    return min_domain + index / (max_domain - min_domain)


def _evaluate(values: InputValues, domain: np.ndarray) -> np.ndarray:
    try:
        with np.errstate(all="ignore"):
            raw = np.asarray(values.function.evaluate(domain))
            if np.iscomplexobj(raw):
                if np.any(raw.imag != 0):
                    raise ExpressionEvalError(
                        f"{values.function.source!r} is not real on the sampled domain."
                    )
                raw = raw.real
            samples = np.broadcast_to(np.asarray(raw, dtype=float), domain.shape)
    except (ArithmeticError, NameError, TypeError, ValueError) as e:
        raise ExpressionEvalError(f"Could not evaluate {values.function.source!r}: {e}") from e
    if not np.all(np.isfinite(samples)):
        bad = int(np.count_nonzero(~np.isfinite(samples)))
        raise ExpressionEvalError(
            f"{values.function.source!r} is not finite at {bad} of {samples.size} samples."
        )
    return samples


def generate_graph(values: InputValues, *, config: GraphConfig = DEFAULT_CONFIG) -> VectorNetwork:
    """Sample ``values.function`` into a :class:`VectorNetwork`.

    Parameters
    ----------
    values : InputValues
        Parsed inputs; ``rect`` sets the size of the output.
    config : GraphConfig, optional
        Supplies ``resolution``, ``min_samples`` and ``domain_sampling``.

    Returns
    -------
    VectorNetwork
        Vertices in rectangle-local coordinates.

    Raises
    ------
    InsufficientResolutionError
        If the rectangle is too narrow for ``config.min_samples`` samples.
    DegenerateRangeError
        If the output range (explicit or sampled) has zero extent.
    DegenerateDomainError
        If the domain has zero extent under legacy sampling.
    ExpressionEvalError
        If the function cannot be evaluated or yields non-finite or non-real values.
    """
    rect = values.rect
    n = sample_count(rect.width, config.resolution)
    if n < config.min_samples:
        raise InsufficientResolutionError(
            f"Rectangle width {rect.width} gives {n} samples; need at least {config.min_samples}."
        )

    domain = _domain_samples(values, n, config)
    samples = _evaluate(values, domain)

    min_range = float(samples.min()) if values.min_range is None else values.min_range
    max_range = float(samples.max()) if values.max_range is None else values.max_range
    if max_range == min_range:
        raise DegenerateRangeError(f"Range [{min_range}, {max_range}] has zero height.")
    logger.debug(
        "sampling %r: n=%d domain=[%g, %g] range=[%g, %g]",
        values.function.source,
        n,
        domain[0],
        domain[-1],
        min_range,
        max_range,
    )

    xs = np.arange(n, dtype=float) / config.resolution
    ys = rect.height * ((samples - min_range) / (max_range - min_range))
    return VectorNetwork.polyline(xs, ys)
