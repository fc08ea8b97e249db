from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from canvas_graph.canvas import InMemoryCanvas
from canvas_graph.geometry import CanvasElement
from canvas_graph.graph_sampler import generate_graph
from canvas_graph.input_finder import InputNodes
from canvas_graph.input_parser import parse_inputs
from canvas_graph.refresh import GraphRefresher, RefreshTimer


class _FakeThreadTimer:
    created: list["_FakeThreadTimer"] = []

    def __init__(self, delay: float, callback):
        self.delay = delay
        self.callback = callback
        self.daemon = False
        self.started = False
        self.cancelled = False
        _FakeThreadTimer.created.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True


class _FakeLoopHandle:
    def __init__(self, callback):
        self._callback = callback
        self.cancelled = False

    def fire(self) -> None:
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True


class _FakeAsyncLoop:
    def __init__(self) -> None:
        self.handles: list[_FakeLoopHandle] = []

    def call_later(self, _delay: float, callback):
        handle = _FakeLoopHandle(callback)
        self.handles.append(handle)
        return handle


def _refresher():
    function = CanvasElement("TEXT", 80, 100, 40, 10, characters="x^2")
    placeholder = CanvasElement("RECTANGLE", 0, 0, 200, 100)
    nodes = InputNodes(function=function, placeholder=placeholder)
    values = parse_inputs(nodes)
    canvas = InMemoryCanvas()
    artifact = canvas.create_vector(
        x=0, y=0, name="Graph of x^2", vector_network=generate_graph(values), stroke_weight=3
    )
    return GraphRefresher(nodes, artifact, values), function, artifact


def test_unchanged_inputs_do_not_rewrite() -> None:
    refresher, _, artifact = _refresher()
    assert refresher.tick() is False
    assert refresher.tick() is False
    assert artifact.write_count == 1


def test_changed_function_rewrites_once() -> None:
    refresher, function, artifact = _refresher()
    before = artifact.vector_network

    function.characters = "x^3"
    assert refresher.tick() is True
    assert refresher.tick() is False

    assert artifact.write_count == 2
    assert artifact.vector_network != before
    assert refresher.values.function.source == "x^3"


def test_failed_parse_skips_the_tick() -> None:
    refresher, function, artifact = _refresher()
    function.characters = "x^"
    assert refresher.tick() is False
    assert artifact.write_count == 1

    function.characters = "x^3"
    assert refresher.tick() is True
    assert artifact.write_count == 2


def test_failed_sampling_keeps_previous_geometry() -> None:
    refresher, function, artifact = _refresher()
    before = artifact.vector_network
    function.characters = "1/x"
    assert refresher.tick() is False
    assert artifact.vector_network is before
    assert refresher.values.function.source == "x^2"


def test_timer_reschedules_and_cancels_threading() -> None:
    calls = {"n": 0}

    def _callback():
        calls["n"] += 1

    _FakeThreadTimer.created.clear()
    with patch("canvas_graph.refresh.threading.Timer", _FakeThreadTimer):
        timer = RefreshTimer(_callback, interval_ms=1000)
        with timer:
            assert timer.running
            assert len(_FakeThreadTimer.created) == 1
            assert _FakeThreadTimer.created[0].delay == 1.0
            assert _FakeThreadTimer.created[0].daemon is True

            _FakeThreadTimer.created[0].callback()
            _FakeThreadTimer.created[1].callback()
            assert len(_FakeThreadTimer.created) == 3

        assert not timer.running
        assert _FakeThreadTimer.created[-1].cancelled
        _FakeThreadTimer.created[-1].callback()

    assert calls["n"] == 2
    assert len(_FakeThreadTimer.created) == 3


def test_timer_logs_and_keeps_ticking_after_callback_error(caplog) -> None:
    state = {"n": 0}

    def _callback():
        state["n"] += 1
        if state["n"] == 1:
            raise RuntimeError("boom")

    fake_loop = _FakeAsyncLoop()

    with patch("canvas_graph.refresh.asyncio.get_running_loop", return_value=fake_loop):
        timer = RefreshTimer(_callback, interval_ms=1)
        with caplog.at_level(logging.ERROR, logger="canvas_graph.refresh"):
            timer.start()
            fake_loop.handles[0].fire()
            fake_loop.handles[1].fire()
        timer.cancel()

    assert state["n"] == 2
    assert fake_loop.handles[-1].cancelled
    assert "RefreshTimer callback failed" in caplog.text


def test_overlapping_tick_is_skipped() -> None:
    calls = {"n": 0}

    def _callback():
        calls["n"] += 1
        if calls["n"] == 1:
            # Fire the next scheduled tick while this one is still running.
            _FakeThreadTimer.created[-1].callback()

    _FakeThreadTimer.created.clear()
    with patch("canvas_graph.refresh.threading.Timer", _FakeThreadTimer):
        timer = RefreshTimer(_callback, interval_ms=10).start()
        _FakeThreadTimer.created[0].callback()
        timer.cancel()

    assert calls["n"] == 1


def test_timer_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        RefreshTimer(lambda: None, interval_ms=0)
