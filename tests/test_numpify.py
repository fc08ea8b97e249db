from __future__ import annotations

import numpy as np
import pytest
import sympy as sp

from canvas_graph.numpify import numpify, numpify_cached


def test_numpify_uses_cache_by_default() -> None:
    x = sp.Symbol("x")
    numpify_cached.cache_clear()

    f1 = numpify(x + 1, vars=x)
    f2 = numpify(x + 1, vars=x)

    assert f1 is f2


def test_numpify_cache_false_forces_recompile() -> None:
    x = sp.Symbol("x")

    f1 = numpify(x + 1, vars=x, cache=False)
    f2 = numpify(x + 1, vars=x, cache=False)

    assert f1 is not f2


def test_vectorized_evaluation_and_source() -> None:
    x = sp.Symbol("x")
    f = numpify(sp.sin(x) + x**2, vars=x)
    xs = np.linspace(0, 1, 5)
    np.testing.assert_allclose(f(xs), np.sin(xs) + xs**2)
    assert "numpy.sin" in f.source


def test_constant_expression_broadcasts() -> None:
    x = sp.Symbol("x")
    f = numpify(sp.pi, vars=x)
    out = f(np.zeros(4))
    assert out.shape == (4,)
    np.testing.assert_allclose(out, np.pi)


def test_unbound_symbols_are_rejected() -> None:
    x, y = sp.symbols("x y")
    with pytest.raises(ValueError, match="unbound symbols: y"):
        numpify(x + y, vars=x, cache=False)


def test_wrong_argument_count() -> None:
    x = sp.Symbol("x")
    f = numpify(x, vars=x)
    with pytest.raises(TypeError):
        f(1.0, 2.0)


def test_max_and_min_compile() -> None:
    x = sp.Symbol("x")
    f = numpify(sp.Max(x, 1) - sp.Min(x, 0), vars=x, cache=False)
    np.testing.assert_allclose(f(np.array([-1.0, 0.5, 2.0])), [2.0, 1.0, 2.0])
