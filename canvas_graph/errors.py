"""Exception hierarchy for graph generation.

Every failure that aborts a single invocation derives from :class:`GraphError`.
Pipeline boundaries (:func:`canvas_graph.graph_builder.build_graph` and
:meth:`canvas_graph.refresh.GraphRefresher.tick`) catch ``GraphError`` and end
quietly; anything else is a programming error and propagates.
"""

from __future__ import annotations

__all__ = [
    "ClassificationError",
    "DegenerateDomainError",
    "DegenerateRangeError",
    "ExpressionEvalError",
    "ExpressionParseError",
    "GraphError",
    "InsufficientResolutionError",
]


class GraphError(RuntimeError):
    """Base class for recoverable graph-generation failures."""


class ClassificationError(GraphError):
    """Raised when the selection does not contain a usable function label."""


class ExpressionParseError(GraphError):
    """Raised when expression text cannot be parsed."""


class ExpressionEvalError(GraphError):
    """Raised when an expression cannot be evaluated to finite numbers."""


class InsufficientResolutionError(GraphError):
    """Raised when the target rectangle is too narrow for a usable curve."""


class DegenerateRangeError(GraphError):
    """Raised when the output range has zero extent."""


class DegenerateDomainError(DegenerateRangeError):
    """Raised when the input domain has zero extent."""
