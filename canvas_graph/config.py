"""Tunable constants for classification, sampling, and refresh."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal

__all__ = ["DEFAULT_CONFIG", "DomainSampling", "GraphConfig"]

DomainSampling = Literal["legacy", "span"]


@dataclass(frozen=True)
class GraphConfig:
    """Configuration knobs shared by the pipeline stages.

    Parameters
    ----------
    inset : float, optional
        Fraction trimmed from the synthesized target rectangle when no
        placeholder is selected. Also offsets the max-bound anchors.
    match_threshold : float, optional
        Maximum normalized distance between an element center and a role
        anchor for the element to qualify for that role (strict ``<``).
    resolution : float, optional
        Samples per horizontal canvas unit.
    min_samples : int, optional
        Smallest accepted number of samples.
    stroke_weight : float, optional
        Stroke weight of the generated vector node.
    refresh_interval_ms : int, optional
        Period of the auto-update timer.
    autoupdate : bool, optional
        Whether :func:`build_graph` starts the auto-update timer by default.
    domain_sampling : {"legacy", "span"}, optional
        ``"legacy"`` steps the domain by ``1 / (max - min)`` per sample, which
        matches previously generated graphs. ``"span"`` spreads the samples
        evenly over ``[min, max]``.
    strict_bounds : bool, optional
        If True, a malformed bound label fails the parse instead of falling
        back to the default bound.
    """

    inset: float = 0.1
    match_threshold: float = 0.1
    resolution: float = 0.5
    min_samples: int = 3
    stroke_weight: float = 3
    refresh_interval_ms: int = 1000
    autoupdate: bool = True
    domain_sampling: DomainSampling = "legacy"
    strict_bounds: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.inset < 1:
            raise ValueError("inset must be in [0, 1)")
        if self.match_threshold <= 0:
            raise ValueError("match_threshold must be > 0")
        if self.resolution <= 0:
            raise ValueError("resolution must be > 0")
        if self.min_samples < 2:
            raise ValueError("min_samples must be >= 2")
        if self.refresh_interval_ms <= 0:
            raise ValueError("refresh_interval_ms must be > 0")
        if self.domain_sampling not in {"legacy", "span"}:
            raise ValueError("domain_sampling must be one of {'legacy', 'span'}")

    def replace(self, **changes: Any) -> "GraphConfig":
        """Return a validated copy with ``changes`` applied."""
        return replace(self, **changes)


DEFAULT_CONFIG = GraphConfig()
