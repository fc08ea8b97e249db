"""Output canvases that receive generated graph geometry.

Purpose
-------
The pipeline never talks to a host application directly. It asks a
:class:`Canvas` to create one vector node and later rewrites that node's
``vector_network``. Hosts adapt their own node API to these two protocols.

Two implementations ship with the package:

- ``InMemoryCanvas`` keeps plain records and counts geometry writes. It backs
  headless use and tests.
- ``PlotlyCanvas`` draws every vector node as one line trace of a
  ``plotly.graph_objects.Figure`` for previewing graphs outside the host.

Examples
--------
>>> from canvas_graph.graph_sampler import VectorNetwork
>>> canvas = InMemoryCanvas()
>>> node = canvas.create_vector(
...     x=10, y=20, name="Graph of x", stroke_weight=3,
...     vector_network=VectorNetwork.polyline([0, 2, 4], [0, 1, 2]),
... )
>>> node.write_count
1
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

import plotly.graph_objects as go

from .graph_sampler import VectorNetwork

__all__ = [
    "Canvas",
    "InMemoryCanvas",
    "PlotlyCanvas",
    "PlotlyVectorNode",
    "VectorArtifact",
    "VectorNode",
]


@runtime_checkable
class VectorArtifact(Protocol):
    """A host vector node whose geometry can be replaced in place."""

    x: float
    y: float
    name: str
    stroke_weight: float
    vector_network: VectorNetwork


@runtime_checkable
class Canvas(Protocol):
    """Factory for vector nodes on the host canvas."""

    def create_vector(
        self,
        *,
        x: float,
        y: float,
        name: str,
        vector_network: VectorNetwork,
        stroke_weight: float,
    ) -> VectorArtifact:
        ...


class VectorNode:
    """In-memory vector node; counts every geometry write."""

    def __init__(
        self,
        *,
        x: float,
        y: float,
        name: str,
        vector_network: VectorNetwork,
        stroke_weight: float,
    ) -> None:
        self.x = x
        self.y = y
        self.name = name
        self.stroke_weight = stroke_weight
        self.write_count = 0
        self.history: List[VectorNetwork] = []
        self.vector_network = vector_network

    @property
    def vector_network(self) -> VectorNetwork:
        return self._vector_network

    @vector_network.setter
    def vector_network(self, value: VectorNetwork) -> None:
        self._vector_network = value
        self.history.append(value)
        self.write_count += 1

    def __repr__(self) -> str:
        return (
            f"VectorNode(name={self.name!r}, x={self.x!r}, y={self.y!r}, "
            f"vertices={len(self._vector_network.vertices)})"
        )


class InMemoryCanvas:
    """Canvas that keeps created nodes in :attr:`nodes`."""

    def __init__(self) -> None:
        self.nodes: List[VectorNode] = []

    def create_vector(
        self,
        *,
        x: float,
        y: float,
        name: str,
        vector_network: VectorNetwork,
        stroke_weight: float,
    ) -> VectorNode:
        node = VectorNode(
            x=x, y=y, name=name, vector_network=vector_network, stroke_weight=stroke_weight
        )
        self.nodes.append(node)
        return node


class PlotlyVectorNode:
    """Vector node backed by one Plotly line trace.

    Vertices are drawn relative to the node origin ``(x, y)``; assigning
    :attr:`vector_network` updates the trace data in place.
    """

    def __init__(
        self,
        figure: go.Figure,
        *,
        x: float,
        y: float,
        name: str,
        vector_network: VectorNetwork,
        stroke_weight: float,
    ) -> None:
        self._figure = figure
        self.x = x
        self.y = y
        figure.add_scatter(x=[], y=[], mode="lines", name=name, line={"width": stroke_weight})
        self.trace_handle: go.Scatter = figure.data[-1]
        self.vector_network = vector_network

    @property
    def name(self) -> str:
        return self.trace_handle.name

    @name.setter
    def name(self, value: str) -> None:
        self.trace_handle.name = value

    @property
    def stroke_weight(self) -> Optional[float]:
        return self.trace_handle.line.width

    @stroke_weight.setter
    def stroke_weight(self, value: float) -> None:
        self.trace_handle.line.width = value

    @property
    def vector_network(self) -> VectorNetwork:
        return self._vector_network

    @vector_network.setter
    def vector_network(self, value: VectorNetwork) -> None:
        self._vector_network = value
        with self._figure.batch_update():
            self.trace_handle.x = [self.x + vx for vx in value.xs]
            self.trace_handle.y = [self.y + vy for vy in value.ys]


class PlotlyCanvas:
    """Canvas that previews vector nodes in a Plotly figure.

    The y axis is reversed so the figure reads like the host canvas (y grows
    downward) and axes are locked to equal scale.
    """

    def __init__(self, figure: Optional[go.Figure] = None) -> None:
        self.figure = figure if figure is not None else go.Figure()
        self.figure.update_yaxes(autorange="reversed", scaleanchor="x", scaleratio=1)
        self.nodes: List[PlotlyVectorNode] = []

    def create_vector(
        self,
        *,
        x: float,
        y: float,
        name: str,
        vector_network: VectorNetwork,
        stroke_weight: float,
    ) -> PlotlyVectorNode:
        node = PlotlyVectorNode(
            self.figure,
            x=x,
            y=y,
            name=name,
            vector_network=vector_network,
            stroke_weight=stroke_weight,
        )
        self.nodes.append(node)
        return node
