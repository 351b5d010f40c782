# freefall/core/radial.py
"""
Radial two-body problem: a test particle moving straight up or down above a
point mass.

With x the distance from the center and v the radial velocity, the quantity

    w = 1/x0 - v0^2 / (2 mu),   mu = G M

is conserved and fixes the orbit:

    w > 0   elliptic    rises to 1/w and falls back
    w == 0  parabolic   exactly escape velocity
    w < 0   hyperbolic  escapes with speed to spare

Times are first measured from the (virtual) moment the particle left x = 0
moving outwards, then shifted so the particle passes (x0, t0). A negative
launch velocity is handled by mirroring the outward solution around t0.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from freefall.core.constants import VALUES
from freefall.core.enums import OrbitType, Peakness, VelocitySign
from freefall.core.errors import ConvergenceError, DomainError, UnreachableError
from freefall.core.logging import logger
from freefall.core.numerics import bisection_search, is_close
from freefall.geometry.vector import Point, lerp

__all__ = [
    "GRAVITATIONAL_CONSTANT",
    "CollisionTimes", "OrbitClassification", "Path",
    "specific_energy", "orbit_type_from_energy",
    "elliptic_time", "parabolic_time", "hyperbolic_time", "time_from_singularity",
    "free_fall_time", "free_fall_distance", "find_initial_height",
    "escape_velocity", "minimum_speed_elliptic",
    "collision_times", "peak_times", "escape_velocity_times", "zero_velocity_times",
    "classify_orbit", "find_launch_velocity",
    "free_fall_points", "free_fall_points_from_peak",
]

GRAVITATIONAL_CONSTANT = VALUES["G"]

# |w| below this is treated as exactly parabolic
PARABOLIC_TOLERANCE = 1e-14
# |w| x below this uses the series expansion shared by both conic branches
SERIES_THRESHOLD = 1e-3
# elliptic w x may overshoot 1 by rounding when x is the apex itself
APEX_TOLERANCE = 1e-12
# bracket end for bound orbits that must still be "almost" escaping
NEAR_ESCAPE_ENERGY = 1e-12
# fastest launch tried when searching hyperbolic orbits, in units of escape velocity
MAX_SPEED_FACTOR = 1e8
# two times closer than this (seconds) count as the same boundary event
TIME_TOLERANCE = 1e-6


@dataclass(frozen=True)
class CollisionTimes:
    """Times at which a trajectory passes a given radius, in ascending order."""
    orbit: OrbitType
    t: List[float]
    peak: Optional[Point] = None

    @property
    def first(self) -> float:
        return self.t[0]

    @property
    def last(self) -> float:
        return self.t[-1]


@dataclass(frozen=True)
class OrbitClassification:
    """
    Shape of the trajectory joining two events.

    `peakness` says whether the second event is met before or after the
    apex. Open orbits have no apex: outbound ones report BEFORE_PEAK, inbound
    ones AFTER_PEAK.
    """
    orbit: OrbitType
    v0: VelocitySign
    peakness: Peakness


# --- Energy and the three time-of-flight branches ---

def specific_energy(x0: float, v0: float, mu: float) -> float:
    """The conserved w = 1/x0 - v0^2/(2 mu)."""
    if x0 <= 0:
        raise DomainError(f"Radius must be positive, got {x0}")
    return 1.0 / x0 - v0 * v0 / (2.0 * mu)


def orbit_type_from_energy(w: float) -> OrbitType:
    if abs(w) < PARABOLIC_TOLERANCE:
        return OrbitType.PARABOLIC
    return OrbitType.ELLIPTIC if w > 0 else OrbitType.HYPERBOLIC


def elliptic_time(x: float, w: float, mu: float) -> float:
    """Time to climb from 0 to x on a bound orbit (w > 0)."""
    u = w * x
    if u > 1.0:
        if u - 1.0 > APEX_TOLERANCE:
            raise UnreachableError(f"Radius {x} lies above the apex {1.0 / w} of this orbit")
        u = 1.0
    return (math.asin(math.sqrt(u)) - math.sqrt(u * (1.0 - u))) / math.sqrt(2.0 * mu * w ** 3)


def parabolic_time(x: float, mu: float) -> float:
    """Time to climb from 0 to x at exactly escape velocity."""
    return math.sqrt(2.0 * x ** 3 / (9.0 * mu))


def hyperbolic_time(x: float, w: float, mu: float) -> float:
    """Time to climb from 0 to x on an unbound orbit (w < 0)."""
    u = -w * x
    return (math.sqrt(u * u + u) - math.log(math.sqrt(u) + math.sqrt(1.0 + u))) / math.sqrt(2.0 * mu * (-w) ** 3)


def time_from_singularity(x: float, w: float, mu: float) -> float:
    """
    Time since the outward-moving particle left x = 0.

    Near w = 0 both closed forms cancel catastrophically, so small |w| x uses
    x^(3/2)/sqrt(2 mu) * (2/3 +- u/5 + 3u^2/28), which reduces to the
    parabolic formula at u = 0.
    """
    if x < 0:
        raise DomainError(f"Radius must be non-negative, got {x}")
    kind = orbit_type_from_energy(w)
    if kind is OrbitType.PARABOLIC:
        return parabolic_time(x, mu)
    u = abs(w) * x
    if u < SERIES_THRESHOLD:
        sign = 1.0 if w > 0 else -1.0
        return math.sqrt(x ** 3 / (2.0 * mu)) * (2.0 / 3.0 + sign * u / 5.0 + 3.0 * u * u / 28.0)
    if kind is OrbitType.ELLIPTIC:
        return elliptic_time(x, w, mu)
    return hyperbolic_time(x, w, mu)


def _peak_offset(w: float, mu: float) -> float:
    """Time from x = 0 to the apex of a bound orbit."""
    return (math.pi / 2.0) / math.sqrt(2.0 * mu * w ** 3)


# --- Falling from rest ---

def free_fall_time(initial_height: float, final_height: float, planet_mass: float,
                   G: float = GRAVITATIONAL_CONSTANT) -> float:
    """
    How long it takes to fall from rest at initial_height to final_height.

    Heights are measured from the center of the planet.
    """
    if initial_height <= 0:
        raise DomainError(f"initial_height must be positive, got {initial_height}")
    if not 0 <= final_height <= initial_height:
        raise DomainError(f"final_height {final_height} must lie in [0, {initial_height}]")
    mu = G * planet_mass
    r = final_height / initial_height
    return math.sqrt(initial_height ** 3 / (2.0 * mu)) * (
        math.sqrt(r * (1.0 - r)) + math.acos(math.sqrt(r))
    )


def free_fall_distance(time: float, initial_height: float, planet_mass: float,
                       G: float = GRAVITATIONAL_CONSTANT) -> float:
    """How far a particle released at rest from initial_height falls in `time`."""
    final_height = bisection_search(
        lambda h: free_fall_time(initial_height, h, planet_mass, G),
        time, initial_height, 0.0,
    )
    return initial_height - final_height


def find_initial_height(time: float, final_height: float, planet_mass: float,
                        G: float = GRAVITATIONAL_CONSTANT) -> float:
    """The height a particle was released from if it reaches final_height after `time`."""
    return bisection_search(
        lambda h: free_fall_time(h, final_height, planet_mass, G),
        time, final_height, final_height + 1e10,
    )


# --- Speeds ---

def escape_velocity(height: float, planet_mass: float, G: float = GRAVITATIONAL_CONSTANT) -> float:
    if height <= 0:
        raise DomainError(f"Escape velocity is undefined at radius {height}")
    return math.sqrt(2.0 * G * planet_mass / height)


def minimum_speed_elliptic(h0: float, h1: float, planet_mass: float,
                           G: float = GRAVITATIONAL_CONSTANT) -> float:
    """Launch speed at h0 whose apex is exactly h1."""
    if h0 <= 0 or h1 < h0:
        raise DomainError(f"Need 0 < h0 <= h1, got h0={h0}, h1={h1}")
    return math.sqrt(2.0 * G * planet_mass * (1.0 / h0 - 1.0 / h1))


def _speed_for_energy(h0: float, w: float, mu: float) -> float:
    return math.sqrt(2.0 * mu * (1.0 / h0 - w))


# --- Crossing times ---

def collision_times(h0: float, v0: float, t0: float, h1: float, planet_mass: float,
                    G: float = GRAVITATIONAL_CONSTANT) -> CollisionTimes:
    """
    When does the particle that is at h0 with velocity v0 at time t0 pass h1?

    Bound orbits pass every radius below the apex twice, mirrored about the
    peak time; open orbits pass it once.

    Raises:
        UnreachableError: h1 lies above the apex of a bound orbit.
    """
    if h1 < 0:
        raise DomainError(f"Radius must be non-negative, got {h1}")
    mu = G * planet_mass
    w = specific_energy(h0, v0, mu)
    kind = orbit_type_from_energy(w)

    t_singular = t0 - time_from_singularity(h0, w, mu)
    times = [t_singular + time_from_singularity(h1, w, mu)]
    peak = None
    if kind is OrbitType.ELLIPTIC:
        t_peak = t_singular + _peak_offset(w, mu)
        times.append(2.0 * t_peak - times[0])
        peak = Point(t_peak, 1.0 / w)

    if v0 < 0:
        times = [2.0 * t0 - t for t in reversed(times)]
        if peak is not None:
            peak = Point(2.0 * t0 - peak.x, peak.y)
    return CollisionTimes(kind, times, peak)


def peak_times(h0: float, t0: float, h1: float, planet_mass: float,
               G: float = GRAVITATIONAL_CONSTANT) -> Tuple[float, float]:
    """
    Apex times of the two bound orbits through (t0, h0) whose apex is h1.

    Returns (earlier, later): the descending orbit peaked in the past, the
    ascending one peaks in the future.
    """
    if h1 < h0:
        raise DomainError(f"An apex at {h1} cannot lie below the launch height {h0}")
    mu = G * planet_mass
    w = 1.0 / h1
    delta = _peak_offset(w, mu) - time_from_singularity(h0, w, mu)
    return t0 - delta, t0 + delta


def escape_velocity_times(h0: float, t0: float, h: float, planet_mass: float,
                          G: float = GRAVITATIONAL_CONSTANT) -> Tuple[float, float]:
    """
    Times at which the escape-velocity orbits through (t0, h0) pass h.

    Returns (t for launch at -v_escape, t for launch at +v_escape).
    """
    if h0 <= 0 or h < 0:
        raise DomainError(f"Radii must be positive, got h0={h0}, h={h}")
    mu = G * planet_mass
    delta = parabolic_time(h, mu) - parabolic_time(h0, mu)
    return t0 - delta, t0 + delta


def zero_velocity_times(h0: float, t0: float, h: float, planet_mass: float,
                        G: float = GRAVITATIONAL_CONSTANT) -> Tuple[float, float]:
    """Times at which the orbit momentarily at rest at (t0, h0) passes h <= h0."""
    delta = free_fall_time(h0, h, planet_mass, G)
    return t0 - delta, t0 + delta


# --- Inverse problem: which orbit joins two events? ---

def _same_time(a: float, b: float) -> bool:
    return is_close(a, b, rtol=1e-12, atol=TIME_TOLERANCE)


def classify_orbit(h0: float, t0: float, h1: float, t1: float, planet_mass: float,
                   G: float = GRAVITATIONAL_CONSTANT) -> OrbitClassification:
    """
    Classify the free-fall trajectory through (t0, h0) and (t1, h1).

    The boundaries are the apex time, the escape-velocity time and (for
    targets below the launch) the time of the orbit at rest at t0; comparing
    t1 against them picks the orbit type, the sign of the launch velocity and
    which crossing of h1 is meant.
    """
    if t1 == t0:
        raise DomainError("Two distinct heights at the same time would need infinite speed")
    later = t1 > t0

    if h1 >= h0:
        sign = VelocitySign.POSITIVE if later else VelocitySign.NEGATIVE
        earlier_peak, later_peak = peak_times(h0, t0, h1, planet_mass, G)
        t_peak = later_peak if later else earlier_peak
        esc_neg, esc_pos = escape_velocity_times(h0, t0, h1, planet_mass, G)
        t_esc = esc_pos if later else esc_neg
        if _same_time(t1, t_peak):
            return OrbitClassification(OrbitType.ELLIPTIC, sign, Peakness.AT_PEAK)
        if later:
            if t1 > t_peak:
                return OrbitClassification(OrbitType.ELLIPTIC, sign, Peakness.AFTER_PEAK)
            peakness = Peakness.BEFORE_PEAK
            if _same_time(t1, t_esc):
                return OrbitClassification(OrbitType.PARABOLIC, sign, peakness)
            kind = OrbitType.HYPERBOLIC if t1 < t_esc else OrbitType.ELLIPTIC
            return OrbitClassification(kind, sign, peakness)
        if t1 < t_peak:
            return OrbitClassification(OrbitType.ELLIPTIC, sign, Peakness.BEFORE_PEAK)
        peakness = Peakness.AFTER_PEAK
        if _same_time(t1, t_esc):
            return OrbitClassification(OrbitType.PARABOLIC, sign, peakness)
        kind = OrbitType.HYPERBOLIC if t1 > t_esc else OrbitType.ELLIPTIC
        return OrbitClassification(kind, sign, peakness)

    # target below the launch height
    esc_neg, esc_pos = escape_velocity_times(h0, t0, h1, planet_mass, G)
    zero_before, zero_after = zero_velocity_times(h0, t0, h1, planet_mass, G)
    if later:
        peakness = Peakness.AFTER_PEAK
        if _same_time(t1, esc_neg):
            return OrbitClassification(OrbitType.PARABOLIC, VelocitySign.NEGATIVE, peakness)
        if t1 < esc_neg:
            return OrbitClassification(OrbitType.HYPERBOLIC, VelocitySign.NEGATIVE, peakness)
        if _same_time(t1, zero_after):
            return OrbitClassification(OrbitType.ELLIPTIC, VelocitySign.ZERO, peakness)
        sign = VelocitySign.NEGATIVE if t1 < zero_after else VelocitySign.POSITIVE
        return OrbitClassification(OrbitType.ELLIPTIC, sign, peakness)

    peakness = Peakness.BEFORE_PEAK
    if _same_time(t1, esc_pos):
        return OrbitClassification(OrbitType.PARABOLIC, VelocitySign.POSITIVE, peakness)
    if t1 > esc_pos:
        return OrbitClassification(OrbitType.HYPERBOLIC, VelocitySign.POSITIVE, peakness)
    if _same_time(t1, zero_before):
        return OrbitClassification(OrbitType.ELLIPTIC, VelocitySign.ZERO, peakness)
    sign = VelocitySign.POSITIVE if t1 > zero_before else VelocitySign.NEGATIVE
    return OrbitClassification(OrbitType.ELLIPTIC, sign, peakness)


def find_launch_velocity(h0: float, t0: float, h1: float, t1: float, planet_mass: float,
                         G: float = GRAVITATIONAL_CONSTANT) -> Tuple[float, OrbitClassification]:
    """
    Launch velocity at (t0, h0) that makes the particle pass h1 at t1.

    Returns:
        (velocity, classification)

    Raises:
        DomainError: the events cannot be joined (e.g. t1 == t0).
        UnreachableError: no launch speed in the search bracket reaches h1 at t1.
        ConvergenceError: the bisection did not converge.
    """
    info = classify_orbit(h0, t0, h1, t1, planet_mass, G)
    mu = G * planet_mass
    sign = -1.0 if info.v0 is VelocitySign.NEGATIVE else 1.0
    v_esc = escape_velocity(h0, planet_mass, G)

    if info.v0 is VelocitySign.ZERO:
        return 0.0, info
    if info.peakness is Peakness.AT_PEAK:
        return sign * minimum_speed_elliptic(h0, h1, planet_mass, G), info
    if info.orbit is OrbitType.PARABOLIC:
        return sign * v_esc, info

    first = info.peakness is Peakness.BEFORE_PEAK
    if info.orbit is OrbitType.HYPERBOLIC:
        low, high = v_esc, MAX_SPEED_FACTOR * v_esc
    else:
        low = minimum_speed_elliptic(h0, h1, planet_mass, G) if h1 >= h0 else 0.0
        # the crossing that stays finite as the orbit opens up
        finite_at_escape = first == (sign > 0)
        high = v_esc if finite_at_escape else _speed_for_energy(h0, NEAR_ESCAPE_ENERGY, mu)
    logger.debug(f"Launch velocity search: {info.orbit.value}, {info.v0.value}, "
                 f"{info.peakness.value}, speeds in [{low:.6g}, {high:.6g}]")

    def crossing_time(v: float) -> float:
        times = collision_times(h0, v, t0, h1, planet_mass, G)
        return times.first if first else times.last

    try:
        v = bisection_search(crossing_time, t1, sign * low, sign * high)
    except UnreachableError:
        raise
    except DomainError as e:
        raise UnreachableError(
            f"No launch speed in [{low:.6g}, {high:.6g}] reaches h1={h1} at t1={t1}"
        ) from e
    t_check = crossing_time(v)
    if not is_close(t_check, t1, rtol=1e-1, atol=1e-1):
        raise ConvergenceError(f"Launch velocity {v} reaches h1 at {t_check}, expected {t1}")
    return v, info


# --- Polylines ---

class Path:
    """A polyline of (t, h) points that tracks its total extent in time."""

    def __init__(self):
        self.pts: List[Point] = []
        self.length_x = 0.0

    def add(self, p: Point) -> None:
        if self.pts:
            self.length_x += abs(p.x - self.pts[-1].x)
        self.pts.append(p)

    def __len__(self) -> int:
        return len(self.pts)

    def __iter__(self):
        return iter(self.pts)

    def interpolate_x(self, u: float) -> Point:
        """The point a fraction u of the way along the path, measured in time."""
        if not self.pts:
            raise DomainError("Cannot interpolate an empty path")
        target = u * self.length_x
        d = 0.0
        for a, b in zip(self.pts, self.pts[1:]):
            seg = abs(b.x - a.x)
            if target < d + seg:
                return lerp(a, b, (target - d) / seg)
            d += seg
        return self.pts[-1]


def free_fall_points(start: Point, end: Point, planet_mass: float, floor_height: float,
                     window_top: Optional[float] = None, n_pts: int = 500,
                     max_climb: float = 1e8,
                     G: float = GRAVITATIONAL_CONSTANT) -> Tuple[Path, OrbitType]:
    """
    Dense (t, h) polyline of the free-fall trajectory through two events.

    The orbit is sampled by height, from `floor_height` up to the apex (or
    `floor_height + max_climb`, whichever is lower) on the way up and back
    down for bound orbits. Open orbits are sampled up to the larger of
    `floor_height + max_climb` and `window_top`.
    """
    t0, h0 = start.x, start.y
    t1, h1 = end.x, end.y
    if t1 == t0:
        t1 += 1e-3
    v, _ = find_launch_velocity(h0, t0, h1, t1, planet_mass, G)

    orbit = collision_times(h0, v, t0, h0, planet_mass, G)
    if orbit.orbit is OrbitType.ELLIPTIC:
        h_max = min(floor_height + max_climb, orbit.peak.y)
    else:
        h_max = max(floor_height + max_climb, window_top if window_top is not None else floor_height)

    path = Path()
    heights = np.linspace(floor_height, h_max, n_pts, endpoint=False)
    for h in heights:
        path.add(Point(collision_times(h0, v, t0, h, planet_mass, G).first, h))
    if orbit.orbit is OrbitType.ELLIPTIC:
        for h in heights[::-1]:
            path.add(Point(collision_times(h0, v, t0, h, planet_mass, G).last, h))
    if len(path) == 0:
        path.add(start)
        path.add(end)
    return path, orbit.orbit


def free_fall_points_from_peak(peak: Point, planet_mass: float, floor_height: float,
                               n_pts: int = 100, G: float = GRAVITATIONAL_CONSTANT) -> List[Point]:
    """Symmetric bound trajectory around its apex event, clamped at floor_height."""
    fall_time = free_fall_time(peak.y, floor_height, planet_mass, G)
    pts = []
    for i in range(n_pts):
        t = peak.x - fall_time + i * fall_time / n_pts
        h = peak.y - free_fall_distance(peak.x - t, peak.y, planet_mass, G)
        pts.append(Point(t, max(floor_height, h)))
    for i in range(n_pts + 1):
        t = peak.x + i * fall_time / n_pts
        h = peak.y - free_fall_distance(t - peak.x, peak.y, planet_mass, G)
        pts.append(Point(t, max(floor_height, h)))
    return pts
