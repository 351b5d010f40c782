# src/freefall/geometry/jonsson.py
"""
Jonsson embedding of radial Schwarzschild spacetime as a surface of revolution.

Time wraps around the axis (one revolution per `delta_tau_real` seconds of
proper time) and the radial coordinate runs along it, so free-fall worldlines
become geodesics of the funnel. See R. Jonsson, "Embedding spacetime via a
geodesically equivalent metric of Euclidean signature", GRG 33 (2001),
Eqs. 46-49.

Coordinates: x = radius / schwarzschild_radius and delta_x = x - x0, where x0
is the body's surface. The funnel radius has a closed form in delta_x; its
height is the integral of dz/dx and is tabulated once per parameter change.
"""

import math
from typing import List, Optional, Tuple

import numpy as np
from numba import njit

from freefall.core.constants import EARTH, PhysicalConstants
from freefall.core.errors import DomainError
from freefall.core.logging import logger
from freefall.core.memoization import LogLookupTable, log_grid
from freefall.core.numerics import bisection_search, simpsons_integrate
from freefall.geometry.vector import (
    Point, cross, dist, dot, length, normalize, rotate_around_point_and_vector, rotate_xy,
    signed_angle_xy,
)

__all__ = ["JonssonEmbedding", "path_length"]

SLOPE_LIMITS = (0.001, 0.999)
MIN_TIME_WRAPPING = 1e-6
# the table reaches out to this many body radii
TABLE_REACH = 100.0


@njit(cache=True)
def _dz_dx(x: np.ndarray, sqr_x_0: float, delta: float, k2_over_4x04: float,
           sqrt_alpha: float) -> np.ndarray:
    """Integrand of Eq. 49, for any array of delta_x."""
    term1 = 1.0 / (x / sqr_x_0 + delta)
    return sqrt_alpha * term1 * np.sqrt(1.0 - k2_over_4x04 * term1)


def path_length(points: List[Point]) -> float:
    """Sum of segment lengths along an embedded polyline."""
    return sum(dist(a, b) for a, b in zip(points, points[1:]))


class JonssonEmbedding:
    """
    Funnel-shaped embedding for one central body.

    Args:
        sin_theta_zero: slope of the funnel at the bottom, clamped to (0, 1).
        delta_tau_real: proper time per revolution, in seconds.
        body: constants of the central body.
        use_table: tabulate the height integral (fast) or integrate per query.
        table_size: intervals in the height table.
    """

    def __init__(self, sin_theta_zero: float = 0.8, delta_tau_real: float = 1.0,
                 body: PhysicalConstants = EARTH, use_table: bool = True, table_size: int = 1000):
        self.body = body
        self.r_0 = 1.0  # radius at the bottom
        self.use_table = use_table
        self.table_size = table_size
        self.x_0 = body.radius / body.schwarzschild_radius
        self.sqr_x_0 = self.x_0 ** 2
        # exterior metric at the surface (Eq. 14)
        self.a_e0 = 1.0 - 1.0 / self.x_0
        self.sin_theta_zero = min(SLOPE_LIMITS[1], max(SLOPE_LIMITS[0], sin_theta_zero))
        self.delta_tau_real = max(MIN_TIME_WRAPPING, delta_tau_real)
        self.delta_x_max = self.delta_x_from_space(body.radius * TABLE_REACH)
        self.table: Optional[LogLookupTable] = None
        self._compute_shape_parameters()

    # --- Parameters ---

    def set_slope_angle(self, sin_theta_zero: float) -> None:
        self.sin_theta_zero = min(SLOPE_LIMITS[1], max(SLOPE_LIMITS[0], sin_theta_zero))
        self._compute_shape_parameters()

    def set_time_wrapping(self, delta_tau_real: float) -> None:
        self.delta_tau_real = max(MIN_TIME_WRAPPING, delta_tau_real)
        self._compute_shape_parameters()

    def _compute_shape_parameters(self) -> None:
        """k, delta and alpha (Eq. 47), then the height table."""
        body = self.body
        self.k = self.delta_tau_real * body.light_speed / (
            2.0 * math.pi * math.sqrt(self.a_e0) * body.schwarzschild_radius
        )
        self.delta = (self.k / (2.0 * self.sin_theta_zero * self.sqr_x_0)) ** 2
        self.alpha = self.r_0 ** 2 / (4.0 * self.x_0 ** 4 * self.sin_theta_zero ** 2 + self.k ** 2)
        self.sqrt_alpha = math.sqrt(self.alpha)
        self.k2_over_4x04 = self.k ** 2 / (4.0 * self.x_0 ** 4)
        if self.use_table:
            self.table = LogLookupTable.integrate(self.dz_dx, 0.0, self.delta_x_max, self.table_size)
        else:
            self.table = None
        logger.debug(f"Jonsson shape: sin_theta_zero={self.sin_theta_zero}, "
                     f"delta_tau_real={self.delta_tau_real}, k={self.k:.6g}, delta={self.delta:.6g}")

    # --- Radius and height ---

    def dz_dx(self, delta_x: np.ndarray) -> np.ndarray:
        return _dz_dx(np.asarray(delta_x, dtype=np.float64), self.sqr_x_0, self.delta,
                      self.k2_over_4x04, self.sqrt_alpha)

    def radius_from_delta_x(self, delta_x: float) -> float:
        """Eq. 48."""
        if delta_x < 0:
            raise DomainError(f"delta_x must be non-negative, got {delta_x}")
        return self.k * self.sqrt_alpha / math.sqrt(delta_x / self.sqr_x_0 + self.delta)

    def delta_z_from_delta_x_simpson(self, delta_x: float, delta_x_0: float = 0.0,
                                     delta_z_0: float = 0.0, n_evaluations: int = 1000) -> float:
        """Height by direct Simpson integration of Eq. 49 from delta_x_0."""
        if delta_x < 0 or delta_x_0 < 0:
            raise DomainError(f"delta_x must be non-negative, got {delta_x}")
        return delta_z_0 + simpsons_integrate(delta_x_0, delta_x, n_evaluations, self.dz_dx)

    def delta_z_from_delta_x(self, delta_x: float) -> float:
        if self.table is not None:
            return self.table.lookup(delta_x)
        return self.delta_z_from_delta_x_simpson(delta_x)

    def delta_x_from_delta_z(self, delta_z: float) -> float:
        """Inverse of delta_z_from_delta_x."""
        if self.table is not None:
            return self.table.reverse_lookup(delta_z)
        return bisection_search(self.delta_z_from_delta_x_simpson, delta_z, 0.0, self.delta_x_max,
                                max_iterations=100, rtol=1e-10, atol=1e-10)

    # --- Coordinate conversions ---

    def delta_x_from_space(self, h: float) -> float:
        return h / self.body.schwarzschild_radius - self.x_0

    def space_from_delta_x(self, delta_x: float) -> float:
        return (delta_x + self.x_0) * self.body.schwarzschild_radius

    def angle_from_time(self, t: float) -> float:
        return 2.0 * math.pi * t / self.delta_tau_real

    def time_delta_from_angle_delta(self, angle_delta: float) -> float:
        return angle_delta * self.delta_tau_real / (2.0 * math.pi)

    @staticmethod
    def angle_from_embedding_point(p: Point) -> float:
        return math.atan2(p.y, p.x)

    def embed_point(self, p: Point) -> Point:
        """Spacetime (t, h) -> point on the funnel."""
        theta = self.angle_from_time(p.x)
        delta_x = self.delta_x_from_space(p.y)
        radius = self.radius_from_delta_x(delta_x)
        delta_z = self.delta_z_from_delta_x(delta_x)
        return Point(radius * math.cos(theta), radius * math.sin(theta), delta_z)

    # --- Normals ---

    def surface_normal(self, delta_x: float, theta: float) -> Point:
        term1 = delta_x / self.sqr_x_0 + self.delta
        # derivative of Eq. 48 wrt. delta_x
        dr_dx = -self.k * self.sqrt_alpha / (2.0 * self.sqr_x_0 * term1 ** 1.5)
        dz_dx = self.sqrt_alpha * math.sqrt(1.0 - self.k2_over_4x04 / term1) / term1
        dz_dr = dz_dx / dr_dx
        return rotate_xy(normalize(Point(-dz_dr, 0.0, 1.0)), theta)

    def surface_normal_from_spacetime(self, p: Point) -> Point:
        return self.surface_normal(self.delta_x_from_space(p.y), self.angle_from_time(p.x))

    def surface_normal_from_embedding_point(self, p: Point) -> Point:
        return self.surface_normal(self.delta_x_from_delta_z(p.z), self.angle_from_embedding_point(p))

    # --- Surface samples for mesh builders ---

    def _meridian_delta_x(self, h_min: Optional[float], h_max: Optional[float],
                          n_pts: int) -> np.ndarray:
        dx_min = self.delta_x_from_space(self.body.radius if h_min is None else h_min)
        dx_max = self.delta_x_max if h_max is None else self.delta_x_from_space(h_max)
        return log_grid(dx_min, dx_max, n_pts - 1)

    def funnel_meridian(self, h_min: Optional[float] = None, h_max: Optional[float] = None,
                        n_pts: int = 100) -> np.ndarray:
        """(n_pts, 3) array of (r, 0, z) along the theta = 0 meridian."""
        out = np.zeros((n_pts, 3))
        for i, dx in enumerate(self._meridian_delta_x(h_min, h_max, n_pts)):
            out[i, 0] = self.radius_from_delta_x(dx)
            out[i, 2] = self.delta_z_from_delta_x(dx)
        return out

    def funnel_grid(self, h_min: Optional[float] = None, h_max: Optional[float] = None,
                    n_heights: int = 50, n_angles: int = 64) -> Tuple[np.ndarray, np.ndarray]:
        """
        Points and unit normals over the whole surface of revolution.

        Returns two (n_angles, n_heights, 3) arrays. Angles cover one full
        revolution without repeating the seam.
        """
        meridian = self.funnel_meridian(h_min, h_max, n_heights)
        thetas = 2.0 * math.pi * np.arange(n_angles) / n_angles
        points = np.empty((n_angles, n_heights, 3))
        normals = np.empty((n_angles, n_heights, 3))
        delta_xs = self._meridian_delta_x(h_min, h_max, n_heights)
        for i, theta in enumerate(thetas):
            c, s = math.cos(theta), math.sin(theta)
            points[i, :, 0] = meridian[:, 0] * c
            points[i, :, 1] = meridian[:, 0] * s
            points[i, :, 2] = meridian[:, 2]
            for j, dx in enumerate(delta_xs):
                n = self.surface_normal(dx, theta)
                normals[i, j] = (n.x, n.y, n.z)
        return points, normals

    # --- Geodesics ---

    def geodesic_points(self, a: Point, b: Point, max_points: int = 2000) -> List[Point]:
        """
        Walk the surface from spacetime events a, b, one segment at a time.

        Each step rotates the previous point about the axis (incoming
        direction x normal) through the current point, by the angle in
        [pi/2, 3pi/2] that lands it back on the funnel. The walk stops after
        max_points steps or at the bottom edge of the embedding.

        Returns:
            Spacetime points, starting with a and b.
        """
        ja = self.embed_point(a)
        jb = self.embed_point(b)
        pts = [a, b]
        for _ in range(max_points):
            n = self.surface_normal_from_spacetime(b)
            try:
                axis = normalize(cross(jb - ja, n))
                theta = bisection_search(lambda th: self._radius_mismatch(ja, jb, axis, th),
                                         0.0, math.pi / 2, 3 * math.pi / 2)
                jc = rotate_around_point_and_vector(ja, jb, axis, theta)
                if jc.z < 0:
                    logger.debug(f"Geodesic walk reached the bottom edge after {len(pts)} points")
                    break
                delta_x = self.delta_x_from_delta_z(jc.z)
            except DomainError as e:
                logger.debug(f"Geodesic walk left the embedding after {len(pts)} points: {e}")
                break
            delta_time = self.time_delta_from_angle_delta(signed_angle_xy(jb, jc))
            c = Point(b.x + delta_time, self.space_from_delta_x(delta_x))
            pts.append(c)
            ja, jb, b = jb, jc, c
        return pts

    def path_turning(self, pts: List[Point]) -> Tuple[float, float]:
        """
        How far a spacetime polyline bends out of the plane holding the surface
        normal, once embedded. A geodesic stays in that plane at every vertex.

        Returns:
            (sum of signed turning angles, sum of absolute turning angles)
        """
        sum_turns = 0.0
        sum_abs_turns = 0.0
        for pre, here, post in zip(pts, pts[1:], pts[2:]):
            p = self.embed_point(here)
            n = self.surface_normal_from_spacetime(here)
            incoming = p - self.embed_point(pre)
            outgoing = self.embed_point(post) - p
            axis = normalize(cross(incoming, n))
            s = max(-1.0, min(1.0, dot(outgoing, axis) / length(outgoing)))
            turn = math.asin(s)
            sum_turns += turn
            sum_abs_turns += abs(turn)
        return sum_turns, sum_abs_turns

    def _radius_mismatch(self, ja: Point, jb: Point, axis: Point, theta: float) -> float:
        """Positive when the rotated point lies inside the funnel."""
        jc = rotate_around_point_and_vector(ja, jb, axis, theta)
        actual_radius = length(Point(jc.x, jc.y))
        delta_x = self.delta_x_from_delta_z(max(0.0, jc.z))
        return self.radius_from_delta_x(delta_x) - actual_radius
