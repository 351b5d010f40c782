# freefall/core/memoization.py
"""
Log-spaced lookup table with forward and inverse interpolation.

Samples sit at x_i = min - 1 + base**i for i = 0..n, where
base = (max - min + 1)**(1/n), so intervals grow geometrically away from
`min`. That suits integrands that vary fast near the lower end and slowly far
out (the embedding height grows roughly like log x).
"""

from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numba import njit

from freefall.core.errors import DomainError
from freefall.core.logging import logger

__all__ = ["LogLookupTable", "log_grid"]


def log_grid(x_min: float, x_max: float, n_intervals: int) -> np.ndarray:
    """The n_intervals + 1 sample positions covering [x_min, x_max]."""
    if x_max <= x_min:
        raise DomainError(f"Empty table domain [{x_min}, {x_max}]")
    if n_intervals < 1:
        raise DomainError("A lookup table needs at least one interval")
    grid = np.geomspace(1.0, x_max - x_min + 1.0, n_intervals + 1) + (x_min - 1.0)
    grid[0] = x_min
    grid[-1] = x_max
    return grid


@njit(cache=True)
def _bracket(sorted_values: np.ndarray, v: float) -> int:
    """Smallest i with sorted_values[i+1] >= v, so flat runs resolve to their lower end."""
    a = 0
    b = sorted_values.shape[0] - 2
    while a < b:
        mid = (a + b) // 2
        if sorted_values[mid + 1] >= v:
            b = mid
        else:
            a = mid + 1
    return a


@njit(cache=True)
def _interpolate(xs: np.ndarray, ys: np.ndarray, x: float) -> float:
    i = _bracket(xs, x)
    x_low = xs[i]
    x_high = xs[i + 1]
    if x_high == x_low:
        return ys[i]
    return ys[i] + (ys[i + 1] - ys[i]) * (x - x_low) / (x_high - x_low)


@dataclass(frozen=True, eq=False)
class LogLookupTable:
    """
    Immutable table of non-decreasing samples over a log-spaced grid.

    Build one with `tabulate` or `integrate`; rebuild it wholesale when the
    tabulated function changes.
    """
    x_min: float
    x_max: float
    grid: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)

    def __post_init__(self):
        if self.grid.shape != self.values.shape or self.grid.ndim != 1:
            raise DomainError("grid and values must be 1D arrays of equal length")
        if np.any(np.isnan(self.values)):
            raise DomainError("Lookup table contains NaN samples")
        if np.any(np.diff(self.values) < 0):
            raise DomainError("Lookup table values must be non-decreasing")
        self.grid.setflags(write=False)
        self.values.setflags(write=False)

    @property
    def n_intervals(self) -> int:
        return self.grid.shape[0] - 1

    @classmethod
    def tabulate(cls, func: Callable[[np.ndarray], np.ndarray], x_min: float, x_max: float,
                 n_intervals: int = 1000) -> "LogLookupTable":
        """Sample a vectorised monotonic function on the grid."""
        grid = log_grid(x_min, x_max, n_intervals)
        values = np.asarray(func(grid), dtype=np.float64)
        return cls(x_min, x_max, grid, values)

    @classmethod
    def integrate(cls, integrand: Callable[[np.ndarray], np.ndarray], x_min: float, x_max: float,
                  n_intervals: int = 1000, n_sub: int = 9, offset: float = 0.0) -> "LogLookupTable":
        """
        Tabulate offset + integral of a non-negative integrand from x_min.

        Each interval is integrated with Simpson's rule on `n_sub` points and
        the pieces are accumulated, so the whole table costs
        n_intervals * n_sub integrand evaluations.
        """
        n_sub = n_sub + 1 - (n_sub % 2)
        grid = log_grid(x_min, x_max, n_intervals)
        u = np.linspace(0.0, 1.0, n_sub)
        widths = np.diff(grid)
        xs = grid[:-1, None] + widths[:, None] * u[None, :]
        weights = np.ones(n_sub)
        weights[1:-1:2] = 4.0
        weights[2:-1:2] = 2.0
        pieces = (widths / (n_sub - 1) / 3.0) * (integrand(xs) @ weights)
        values = np.concatenate(([offset], offset + np.cumsum(pieces)))
        logger.debug(f"Integrated lookup table over [{x_min:.4g}, {x_max:.4g}] with {n_intervals} intervals")
        return cls(x_min, x_max, grid, values)

    def lookup(self, x: float) -> float:
        """Linear interpolation of the tabulated function at x."""
        if x < self.x_min or x > self.x_max:
            raise DomainError(f"lookup: value {x} not in range [{self.x_min} - {self.x_max}]")
        return float(_interpolate(self.grid, self.values, float(x)))

    def reverse_lookup(self, value: float) -> float:
        """Binary-search the samples for `value` and interpolate back to x."""
        if value < self.values[0] or value > self.values[-1]:
            raise DomainError(
                f"reverse_lookup: value {value} not in range [{self.values[0]} - {self.values[-1]}]"
            )
        return float(_interpolate(self.values, self.grid, float(value)))
