"""Recurring refresh of a generated graph.

``RefreshTimer`` is a cancellable fixed-period task. It schedules itself with
``loop.call_later`` when an asyncio loop is running (notebooks, async hosts)
and with a daemon ``threading.Timer`` otherwise.

``GraphRefresher`` is the tick body: it re-parses the classified labels,
resamples, and writes the new geometry to the output node only when the
parsed inputs changed.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

from .config import DEFAULT_CONFIG, GraphConfig
from .errors import GraphError
from .graph_sampler import generate_graph
from .input_finder import InputNodes
from .input_parser import InputValues, parse_inputs
from .ParseExpression import ExpressionParser

__all__ = ["GraphRefresher", "RefreshTimer"]

logger = logging.getLogger(__name__)


class RefreshTimer:
    """Call ``callback`` every ``interval_ms`` milliseconds until cancelled.

    Parameters
    ----------
    callback:
        Zero-argument callable run on each tick.
    interval_ms:
        Tick period in milliseconds.

    Notes
    -----
    Ticks never overlap: if a tick fires while the previous one is still
    running, it is skipped. Exceptions raised by ``callback`` are logged and
    do not stop the schedule. Use as a context manager to guarantee
    cancellation::

        with RefreshTimer(refresher.tick, interval_ms=1000):
            ...
    """

    def __init__(self, callback: Callable[[], Any], *, interval_ms: int) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._callback = callback
        self._interval_s = interval_ms / 1000.0
        self._lock = threading.Lock()
        self._busy = threading.Lock()
        self._timer: Optional[Any] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> "RefreshTimer":
        with self._lock:
            if not self._running:
                self._running = True
                self._schedule_next_locked()
        return self

    def cancel(self) -> None:
        """Stop the schedule. Safe to call more than once."""
        with self._lock:
            self._running = False
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def __enter__(self) -> "RefreshTimer":
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()

    def _schedule_next_locked(self) -> None:
        delay_s = self._interval_s
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(delay_s, self._on_tick)
            timer.daemon = True
            self._timer = timer
            timer.start()
            return

        self._timer = loop.call_later(delay_s, self._on_tick)

    def _on_tick(self) -> None:
        with self._lock:
            self._timer = None
            if not self._running:
                return
            self._schedule_next_locked()

        if not self._busy.acquire(blocking=False):
            logger.debug("RefreshTimer tick skipped: previous tick still running")
            return
        try:
            self._callback()
        except Exception as exc:
            logger.exception("RefreshTimer callback failed: %s", exc)
        finally:
            self._busy.release()


class GraphRefresher:
    """Re-render one vector node when its input labels change.

    Parameters
    ----------
    nodes:
        Classified input elements; their text is re-read on every tick.
    artifact:
        Output node whose ``vector_network`` is replaced on change.
    values:
        The inputs the current geometry was generated from.
    parser, config:
        Same meaning as in :func:`canvas_graph.input_parser.parse_inputs`.
    """

    def __init__(
        self,
        nodes: InputNodes,
        artifact: Any,
        values: InputValues,
        *,
        parser: Optional[ExpressionParser] = None,
        config: GraphConfig = DEFAULT_CONFIG,
    ) -> None:
        self.nodes = nodes
        self.artifact = artifact
        self.values = values
        self._parser = parser
        self._config = config
        self._lock = threading.Lock()

    def tick(self) -> bool:
        """Refresh once. Return True when new geometry was written."""
        with self._lock:
            try:
                values = parse_inputs(self.nodes, parser=self._parser, config=self._config)
                if values == self.values:
                    return False
                network = generate_graph(values, config=self._config)
            except GraphError as e:
                logger.debug("refresh skipped: %s", e)
                return False

            self.artifact.vector_network = network
            self.values = values
            logger.debug("refreshed %r with %d vertices", values.function.source, len(network.vertices))
            return True
