"""Top-level public API for the ``canvas_graph`` package.

This module re-exports the pipeline entry point and its building blocks so
hosts can import from a single namespace, for example:

>>> from canvas_graph import InMemoryCanvas, build_graph  # doctest: +SKIP

The package logger is silent until the host configures logging.
"""

import logging

from .canvas import Canvas, InMemoryCanvas, PlotlyCanvas, VectorArtifact
from .config import DEFAULT_CONFIG, GraphConfig
from .errors import (
    ClassificationError,
    DegenerateDomainError,
    DegenerateRangeError,
    ExpressionEvalError,
    ExpressionParseError,
    GraphError,
    InsufficientResolutionError,
)
from .geometry import (
    EMPTY_BOX,
    BoundingBox,
    CanvasElement,
    bounding_box_of,
    bounding_box_union,
    center,
)
from .graph_builder import GraphSession, build_graph
from .graph_sampler import Segment, VectorNetwork, Vertex, generate_graph
from .input_finder import ROLE_ANCHORS, InputNodes, RoleAnchor, find_inputs
from .input_parser import InputValues, parse_inputs
from .InputConvert import InputConvert
from .ParseExpression import ExpressionParser, ParsedExpression, parse_expression
from .refresh import GraphRefresher, RefreshTimer

logging.getLogger(__name__).addHandler(logging.NullHandler())
