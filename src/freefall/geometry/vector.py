# src/freefall/geometry/vector.py
"""
Small fixed-size vector kernel used by every coordinate pipeline.

A Point carries up to four components. Which of them are "live" depends on the
caller: spacetime diagrams use (t, up[, space2, space3]) while the embedding
uses (x, y, z). Arithmetic is always over all four; the cross product only
reads the first three.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
from numba import njit

from freefall.core.errors import DomainError


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    z: float = 0.0
    w: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y, self.z + other.z, self.w + other.w)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y, self.z - other.z, self.w - other.w)

    def __mul__(self, f: float) -> "Point":
        return Point(self.x * f, self.y * f, self.z * f, self.w * f)

    __rmul__ = __mul__

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y, -self.z, -self.w)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)

    @classmethod
    def from_array(cls, a: Sequence[float]) -> "Point":
        values = [float(v) for v in a] + [0.0] * (4 - len(a))
        return cls(*values[:4])


class Circle:
    """An N-sphere; a circle in the 2D case."""

    def __init__(self, p: Point, r: float):
        self.p = p
        self.r = r

    def invert(self, p: Point) -> Point:
        """Inversion in the sphere: maps p to the point at distance r^2/|p-c| along the same ray."""
        d2 = dist2(p, self.p)
        if d2 == 0:
            raise DomainError("Cannot invert the center of the circle")
        return self.p + (p - self.p) * (self.r * self.r / d2)


# --- Arithmetic ---

def add(a: Point, b: Point) -> Point:
    return a + b

def sub(a: Point, b: Point) -> Point:
    return a - b

def scalar_mul(a: Point, f: float) -> Point:
    return a * f

def elementwise_mul(a: Point, b: Point) -> Point:
    return Point(a.x * b.x, a.y * b.y, a.z * b.z, a.w * b.w)

def elementwise_div(a: Point, b: Point, dims: int = 4) -> Point:
    """
    Hadamard division over the first `dims` components; the rest are set to 0.

    Restricting to dims=2 lets 2D rectangles (whose z/w sizes are 0) be divided
    without producing infinities.
    """
    num = (a.x, a.y, a.z, a.w)[:dims]
    den = (b.x, b.y, b.z, b.w)[:dims]
    if any(d == 0 for d in den):
        raise DomainError(f"Division by a zero component in {b}")
    return Point.from_array([n / d for n, d in zip(num, den)])

def dot(a: Point, b: Point) -> float:
    return a.x * b.x + a.y * b.y + a.z * b.z + a.w * b.w

def dist2(a: Point, b: Point) -> float:
    d = a - b
    return dot(d, d)

def dist(a: Point, b: Point) -> float:
    return math.sqrt(dist2(a, b))

def length(a: Point) -> float:
    return math.sqrt(dot(a, a))

def normalize(a: Point) -> Point:
    n = length(a)
    if n == 0:
        raise DomainError("Cannot normalize a zero-length vector")
    return a * (1.0 / n)

def cross(a: Point, b: Point) -> Point:
    """Cross-product in xyz."""
    return Point(a.y * b.z - a.z * b.y, a.z * b.x - a.x * b.z, a.x * b.y - a.y * b.x)

def lerp(a: Point, b: Point, u: float) -> Point:
    """a + u*(b-a). u is not clamped, so values outside [0, 1] extrapolate."""
    return a + (b - a) * u

def invert_y(a: Point) -> Point:
    return Point(a.x, -a.y, a.z, a.w)

# --- Rotations and angles ---

def rotate_xy(p: Point, theta: float) -> Point:
    """Rotate about the Z axis."""
    s = math.sin(theta)
    c = math.cos(theta)
    return Point(p.x * c - p.y * s, p.x * s + p.y * c, p.z, p.w)

def rotate_around_vector(v: Point, k: Point, theta: float) -> Point:
    """Rodrigues rotation of v about the unit axis k."""
    s = math.sin(theta)
    c = math.cos(theta)
    return v * c + cross(k, v) * s + k * (dot(k, v) * (1 - c))

def rotate_around_point_and_vector(v: Point, p: Point, k: Point, theta: float) -> Point:
    """Rotate point v around the axis k passing through p."""
    return rotate_around_vector(v - p, k, theta) + p

def angle_between(a: Point, b: Point) -> float:
    cos_theta = dot(a, b) / (length(a) * length(b))
    return math.acos(min(1.0, max(-1.0, cos_theta)))

def signed_angle_xy(a: Point, b: Point) -> float:
    """Angle needed to rotate a onto b in the XY plane, in (-pi, pi]."""
    theta = math.atan2(b.y, b.x) - math.atan2(a.y, a.x)
    if theta > math.pi:
        theta -= 2 * math.pi
    elif theta <= -math.pi:
        theta += 2 * math.pi
    return theta

# --- Polylines ---

def line_points(a: Point, b: Point, n_pts: int = 100) -> List[Point]:
    return [lerp(a, b, i / n_pts) for i in range(n_pts + 1)]

def ellipse_points(c: Point, a: Point, b: Point, n_pts: int = 100,
                   repeat_first_point: bool = True) -> List[Point]:
    """Points around an ellipse with center c and radius vectors a and b."""
    last = n_pts if repeat_first_point else n_pts - 1
    pts = []
    for i in range(last + 1):
        theta = 2 * math.pi * i / n_pts
        pts.append(c + a * math.cos(theta) + b * math.sin(theta))
    return pts

# --- Camera ---

@njit(cache=True)
def _pinhole_project(points: np.ndarray, origin: np.ndarray, basis: np.ndarray,
                     f: float, pp_x: float, pp_y: float, near: float) -> np.ndarray:
    """
    Project an (n, 3) array of points through a pinhole camera.

    `basis` rows are the camera right, up and forward axes. Depth is clamped to
    `near` so points at or behind the camera stay finite.
    """
    n = points.shape[0]
    out = np.empty((n, 2))
    for i in range(n):
        rx = points[i, 0] - origin[0]
        ry = points[i, 1] - origin[1]
        rz = points[i, 2] - origin[2]
        cx = basis[0, 0] * rx + basis[0, 1] * ry + basis[0, 2] * rz
        cy = basis[1, 0] * rx + basis[1, 1] * ry + basis[1, 2] * rz
        cz = basis[2, 0] * rx + basis[2, 1] * ry + basis[2, 2] * rz
        if cz < near:
            cz = near
        scale = f / cz
        out[i, 0] = pp_x + cx * scale
        out[i, 1] = pp_y - cy * scale
    return out


class Camera:
    """
    Pinhole camera looking from `p` towards `look_at`.

    Screen Y grows downwards, so the vertical camera axis is flipped on output.
    """

    def __init__(self, p: Point, look_at: Point, up: Point, f: float, pp: Point, near: float = 1.0):
        self.p = p
        self.look_at = look_at
        self.up = up
        self.f = f
        self.pp = pp
        self.near = near
        forward = normalize(look_at - p)
        right = normalize(cross(forward, up))
        true_up = cross(right, forward)
        self.basis = np.array([
            [right.x, right.y, right.z],
            [true_up.x, true_up.y, true_up.z],
            [forward.x, forward.y, forward.z],
        ], dtype=np.float64)
        self._origin = np.array([p.x, p.y, p.z], dtype=np.float64)

    def project(self, pt: Point) -> Point:
        out = self.project_many(np.array([[pt.x, pt.y, pt.z]], dtype=np.float64))
        return Point(out[0, 0], out[0, 1])

    def project_many(self, points: np.ndarray) -> np.ndarray:
        pts = np.ascontiguousarray(points[:, :3], dtype=np.float64)
        return _pinhole_project(pts, self._origin, self.basis, float(self.f),
                                float(self.pp.x), float(self.pp.y), float(self.near))


__all__ = [
    "Point", "Circle", "Camera",
    "add", "sub", "scalar_mul", "elementwise_mul", "elementwise_div",
    "dot", "dist", "dist2", "length", "normalize", "cross", "lerp", "invert_y",
    "rotate_xy", "rotate_around_vector", "rotate_around_point_and_vector",
    "angle_between", "signed_angle_xy", "line_points", "ellipse_points",
]
