# freefall/core/accelerating_frame.py
"""
Flat-spacetime picture of gravity: frames with constant proper acceleration.

Seen from a frame accelerating at b, the worldlines of a frame accelerating
at a bend by dy = -1/2 (a - b) (t - t0)^2 along the vertical axis. At t0
every frame agrees, so picking t0 at the middle of the visible window keeps
the distortion centered. Only the vertical component changes; time and the
other spatial axes pass through.
"""

from typing import List

from freefall.core.errors import DomainError
from freefall.geometry.transforms import Transform
from freefall.geometry.vector import Point, lerp, line_points

__all__ = [
    "distance_travelled_with_constant_acceleration",
    "distortion_with_constant_acceleration",
    "transform_between_accelerating_frames",
    "to_inertial_frame",
    "from_inertial_frame",
    "acceleration_transform",
    "geodesic_points",
    "arrow_head_points",
]

_AXES = ("y", "z", "w")


def distance_travelled_with_constant_acceleration(time: float, acceleration: float) -> float:
    return 0.5 * acceleration * time * time


def distortion_with_constant_acceleration(t: float, t0: float, delta_acceleration: float,
                                          axis: str = "y") -> Point:
    """Offset to add to an event at time t, as a Point with one non-zero axis."""
    if axis not in _AXES:
        raise DomainError(f"Vertical axis must be one of {_AXES}, got {axis!r}")
    dy = -distance_travelled_with_constant_acceleration(t - t0, delta_acceleration)
    return Point(0.0, **{a: (dy if a == axis else 0.0) for a in _AXES})


def transform_between_accelerating_frames(p: Point, delta_acceleration: float, t0: float,
                                          axis: str = "y") -> Point:
    """
    Re-express event p (t in p.x) in a frame whose acceleration differs by
    delta_acceleration. Applying -delta_acceleration undoes it.
    """
    return p + distortion_with_constant_acceleration(p.x, t0, delta_acceleration, axis)


def to_inertial_frame(p: Point, frame_acceleration: float, t0: float, axis: str = "y") -> Point:
    return transform_between_accelerating_frames(p, 0.0 - frame_acceleration, t0, axis)


def from_inertial_frame(p: Point, frame_acceleration: float, t0: float, axis: str = "y") -> Point:
    return transform_between_accelerating_frames(p, frame_acceleration - 0.0, t0, axis)


def acceleration_transform(frame_acceleration: float, reference_acceleration: float, t0: float,
                           axis: str = "y") -> Transform:
    """
    Transform from the reference frame (where trajectories are stored) to the
    view frame accelerating at frame_acceleration.
    """
    delta = frame_acceleration - reference_acceleration
    return Transform(
        lambda p: transform_between_accelerating_frames(p, delta, t0, axis),
        lambda p: transform_between_accelerating_frames(p, -delta, t0, axis),
    )


def geodesic_points(start: Point, end: Point, reference_acceleration: float, t0: float,
                    n_pts: int = 100, axis: str = "y") -> List[Point]:
    """
    Free-fall path between two events stored in the reference frame.

    The path is a straight line in the inertial frame; mapping it back makes
    it a parabola in the reference frame.
    """
    a = to_inertial_frame(start, reference_acceleration, t0, axis)
    b = to_inertial_frame(end, reference_acceleration, t0, axis)
    return [from_inertial_frame(p, reference_acceleration, t0, axis) for p in line_points(a, b, n_pts)]


def arrow_head_points(start: Point, end: Point, reference_acceleration: float, t0: float,
                      u: float = 0.6, du: float = 0.01, axis: str = "y") -> List[Point]:
    """Two nearby points along the geodesic at fraction u, giving the arrow direction."""
    a = to_inertial_frame(start, reference_acceleration, t0, axis)
    b = to_inertial_frame(end, reference_acceleration, t0, axis)
    return [
        from_inertial_frame(lerp(a, b, u - du), reference_acceleration, t0, axis),
        from_inertial_frame(lerp(a, b, u), reference_acceleration, t0, axis),
    ]
