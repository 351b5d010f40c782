# freefall/core/errors.py
"""
Exception hierarchy for the free-fall and embedding engine.

Exports:
    - FreefallError: Base class for everything raised by this package.
    - DomainError: A precondition was violated (bad bracket, negative radius, ...).
    - ConvergenceError: An iterative method ran out of iterations.
    - UnreachableError: The requested event cannot be reached on the given orbit.
"""

__all__ = [
    "FreefallError",
    "DomainError",
    "ConvergenceError",
    "UnreachableError",
]


class FreefallError(Exception):
    """Base class for all engine errors."""


class DomainError(FreefallError, ValueError):
    """Input lies outside the region the physics model can represent."""


class ConvergenceError(FreefallError, RuntimeError):
    """Iteration cap exhausted before the tolerance was met."""


class UnreachableError(DomainError):
    """A bound orbit never reaches the requested radius."""
