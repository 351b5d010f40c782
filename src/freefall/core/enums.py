# freefall/core/enums.py

from enum import Enum

class OrbitType(str, Enum):
    ELLIPTIC = "elliptic"
    PARABOLIC = "parabolic"
    HYPERBOLIC = "hyperbolic"

class VelocitySign(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    ZERO = "zero"

class Peakness(str, Enum):
    BEFORE_PEAK = "before peak"
    AT_PEAK = "at peak"
    AFTER_PEAK = "after peak"

class GraphKind(str, Enum):
    T1S1 = "time-space1"
    S2 = "space2"
    S3 = "space3"
    T1S2 = "time-space2"
    T1S3 = "time-space3"
    STANDARD = "standard"
    EMBEDDING = "embedding"

class GravityModel(str, Enum):
    """How trajectories between two events are computed."""
    CONSTANT = "constant"   # uniform field, parabolas from an accelerating frame
    VARIABLE = "variable"   # inverse-square field, radial Kepler orbits

__all__ = [
    "OrbitType",
    "VelocitySign",
    "Peakness",
    "GraphKind",
    "GravityModel",
]
