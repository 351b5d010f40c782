# freefall/core/numerics.py
"""
Root finding and quadrature shared by the solvers.

Integrands are evaluated on whole numpy arrays, so they must be written with
numpy ufuncs (plain arithmetic and np.sqrt work).
"""

import math
from typing import Callable

import numpy as np

from freefall.core.errors import ConvergenceError, DomainError

__all__ = [
    "is_close",
    "bisection_search",
    "simpsons_integrate",
    "midpoint_integrate",
]

DEFAULT_MAX_ITERATIONS = 200


def is_close(a: float, b: float, rtol: float = 1e-5, atol: float = 1e-8) -> bool:
    """numpy.isclose semantics for scalars: |a - b| <= atol + rtol*|b|."""
    return abs(a - b) <= atol + rtol * abs(b)


def _sign(v: float) -> int:
    return (v > 0) - (v < 0)


def bisection_search(
    func: Callable[[float], float],
    target: float,
    a: float,
    b: float,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rtol: float = 1e-12,
    atol: float = 1e-12,
) -> float:
    """
    Find x in [a, b] with func(x) == target, for func monotonic on [a, b].

    The direction of monotonicity is inferred from the bracket. Iteration stops
    once |b - a| <= atol + rtol*|b|.

    Raises:
        DomainError: target does not lie between func(a) and func(b).
        ConvergenceError: max_iterations exhausted before the tolerance was met.
    """
    value_a = func(a)
    value_b = func(b)
    if math.isnan(value_a) or math.isnan(value_b):
        raise DomainError(f"bisection_search: function is NaN at the bracket [{a}, {b}]")
    sign_a = _sign(target - value_a)
    sign_b = _sign(target - value_b)
    if sign_a == 0:
        return a
    if sign_b == 0:
        return b
    if sign_a == sign_b:
        raise DomainError(
            f"bisection_search needs target {target} to lie between "
            f"func(a)={value_a} and func(b)={value_b}"
        )
    for _ in range(max_iterations):
        mid = (a + b) / 2
        value_mid = func(mid)
        if _sign(target - value_mid) == sign_a:
            a = mid
        else:
            b = mid
        if is_close(a, b, rtol=rtol, atol=atol):
            return (a + b) / 2
    raise ConvergenceError(
        f"Max iterations exceeded in bisection_search. Remaining gap: {abs(b - a) / 2:.8g}"
    )


def simpsons_integrate(lower: float, upper: float, n_evaluations: int,
                       func: Callable[[np.ndarray], np.ndarray]) -> float:
    """Composite Simpson's rule; n_evaluations is bumped to the next odd number."""
    n = n_evaluations + 1 - (n_evaluations % 2)
    if n < 3:
        n = 3
    x = np.linspace(lower, upper, n)
    weights = np.ones(n)
    weights[1:-1:2] = 4.0
    weights[2:-1:2] = 2.0
    dx = (upper - lower) / (n - 1)
    return float(dx * np.dot(weights, func(x)) / 3.0)


def midpoint_integrate(lower: float, upper: float, n_evaluations: int,
                       func: Callable[[np.ndarray], np.ndarray]) -> float:
    dx = (upper - lower) / n_evaluations
    x = lower + dx * (np.arange(n_evaluations) + 0.5)
    return float(dx * np.sum(func(x)))
