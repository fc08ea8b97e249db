"""Selection-to-graph pipeline.

``build_graph`` runs the whole transformation once::

    selection -> find_inputs -> parse_inputs -> generate_graph -> canvas.create_vector

and, when auto-update is on, keeps a :class:`~canvas_graph.refresh.RefreshTimer`
re-rendering the node while the user edits the labels. Any
:class:`~canvas_graph.errors.GraphError` ends the invocation quietly: nothing
is created and ``None`` is returned.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from .canvas import Canvas, VectorArtifact
from .config import DEFAULT_CONFIG, GraphConfig
from .errors import GraphError
from .graph_sampler import generate_graph
from .input_finder import InputNodes, find_inputs
from .input_parser import InputValues, parse_inputs
from .ParseExpression import ExpressionParser
from .refresh import GraphRefresher, RefreshTimer

__all__ = ["GraphSession", "build_graph", "graph_name"]

logger = logging.getLogger(__name__)


def graph_name(values: InputValues) -> str:
    """Return the layer name of the node generated for ``values``."""
    return f"Graph of {values.function.source}"


class GraphSession:
    """Handle on one generated graph node and its auto-update timer.

    Closing the session (or leaving its ``with`` block) cancels the timer; the
    node itself stays on the canvas.
    """

    def __init__(
        self,
        nodes: InputNodes,
        artifact: VectorArtifact,
        refresher: GraphRefresher,
        timer: Optional[RefreshTimer] = None,
    ) -> None:
        self.nodes = nodes
        self.artifact = artifact
        self.refresher = refresher
        self.timer = timer

    @property
    def values(self) -> InputValues:
        return self.refresher.values

    @property
    def autoupdating(self) -> bool:
        return self.timer is not None and self.timer.running

    def refresh(self) -> bool:
        """Run one refresh tick now. Return True when the node was rewritten."""
        return self.refresher.tick()

    def close(self) -> None:
        if self.timer is not None:
            self.timer.cancel()

    def __enter__(self) -> "GraphSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def build_graph(
    selection: Sequence[Any],
    canvas: Canvas,
    *,
    config: GraphConfig = DEFAULT_CONFIG,
    parser: Optional[ExpressionParser] = None,
    autoupdate: Optional[bool] = None,
) -> Optional[GraphSession]:
    """Create a graph node from the labels in ``selection``.

    Parameters
    ----------
    selection : sequence
        Selected element-like objects.
    canvas : Canvas
        Receives the generated vector node.
    config : GraphConfig, optional
        Pipeline tunables.
    parser : ExpressionParser, optional
        Expression parser; defaults to the standard constant table.
    autoupdate : bool or None, optional
        Start the refresh timer. ``None`` uses ``config.autoupdate``.

    Returns
    -------
    GraphSession or None
        ``None`` when no graph could be produced.
    """
    try:
        nodes = find_inputs(selection, config=config)
        values = parse_inputs(nodes, parser=parser, config=config)
        network = generate_graph(values, config=config)
    except GraphError as e:
        logger.info("No graph created: %s", e)
        return None

    artifact = canvas.create_vector(
        x=values.rect.x,
        y=values.rect.y,
        name=graph_name(values),
        vector_network=network,
        stroke_weight=config.stroke_weight,
    )
    logger.debug("created %r at (%g, %g)", artifact.name, values.rect.x, values.rect.y)

    refresher = GraphRefresher(nodes, artifact, values, parser=parser, config=config)
    if autoupdate is None:
        autoupdate = config.autoupdate
    timer: Optional[RefreshTimer] = None
    if autoupdate:
        timer = RefreshTimer(refresher.tick, interval_ms=config.refresh_interval_ms).start()
    return GraphSession(nodes, artifact, refresher, timer)
