import math

import numpy as np
import pytest

from freefall.core.errors import ConvergenceError, DomainError
from freefall.core.numerics import bisection_search, is_close, midpoint_integrate, simpsons_integrate


def test_is_close_combines_relative_and_absolute():
    assert is_close(1.0, 1.0 + 1e-9)
    assert not is_close(1.0, 1.1)
    assert is_close(0.0, 1e-9)


def test_bisection_increasing_function():
    x = bisection_search(lambda v: v ** 3, 8.0, 0.0, 10.0)
    assert x == pytest.approx(2.0, rel=1e-10)


def test_bisection_decreasing_function():
    x = bisection_search(lambda v: -v, -3.0, 0.0, 10.0)
    assert x == pytest.approx(3.0, rel=1e-10)


def test_bisection_returns_exact_endpoint():
    assert bisection_search(lambda v: v, 0.0, 0.0, 1.0) == 0.0
    assert bisection_search(lambda v: v, 1.0, 0.0, 1.0) == 1.0


def test_bisection_rejects_target_outside_bracket():
    with pytest.raises(DomainError):
        bisection_search(lambda v: v, 5.0, 0.0, 1.0)


def test_bisection_rejects_nan():
    with pytest.raises(DomainError):
        bisection_search(lambda v: float("nan"), 0.0, 0.0, 1.0)


def test_bisection_raises_when_iterations_run_out():
    with pytest.raises(ConvergenceError):
        bisection_search(lambda v: v, 0.3, 0.0, 1.0, max_iterations=3)


def test_simpson_is_exact_for_cubics():
    assert simpsons_integrate(0.0, 2.0, 3, lambda x: x ** 3) == pytest.approx(4.0)


def test_simpson_bumps_even_counts():
    assert simpsons_integrate(0.0, math.pi, 100, np.sin) == pytest.approx(2.0, rel=1e-7)


def test_midpoint_rule():
    assert midpoint_integrate(0.0, 1.0, 1000, lambda x: x ** 2) == pytest.approx(1.0 / 3.0, rel=1e-6)
