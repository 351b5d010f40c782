"""
Physical constants for the free-fall and embedding engine.

This module is the single source of truth for the numeric values used by the
radial solver, the accelerating-frame transform and the Jonsson embedding.
Every entry carries a SymPy symbol so derived relations (Schwarzschild radius,
surface gravity) can be checked symbolically against the stated values.

Exports:
    - ConstantInfo: Pydantic model for constant metadata.
    - CONSTANTS: The canonical list of all constants.
    - CONSTANTS_DICT: Dictionary mapping constant names to ConstantInfo objects.
    - SYMBOLS: Dictionary mapping names to SymPy symbols.
    - VALUES: Dictionary mapping names to numeric values.
    - PhysicalConstants / EARTH: The bundle handed to solvers.
"""

__version__ = "1.1.0"
__date__ = "2026-10-19"

import sympy as sp
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Dict, Any
from enum import Enum

from freefall.core.validators import positive_value

# --- Core Data Structures ---

class ConstantCategory(str, Enum):
    """Defines the role of a constant."""
    FUNDAMENTAL = "Fundamental"
    BODY = "Central Body"
    DERIVED = "Derived"
    REFERENCE = "Reference Distances"

class ConstantInfo(BaseModel):
    """Complete metadata and value for a single constant."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Canonical name (used as key)")
    symbol: Optional[sp.Basic] = Field(None, description="SymPy symbol for analytics")
    latex: Optional[str] = Field(None, description="LaTeX representation")

    value: Optional[float] = Field(None, description="Numeric value if known")
    units: str = Field("dimensionless", description="Physical units")

    description: str = Field("", description="Brief description")
    category: ConstantCategory = Field(..., description="Category/role")

    relation: Optional[str] = Field(None, description="Symbolic relation (LaTeX)")
    eval_expr: Optional[sp.Expr] = Field(None, description="Evaluatable SymPy expression")
    source_refs: Optional[List[str]] = Field(default_factory=list, description="DOIs/URLs")

    @field_validator("value")
    @classmethod
    def check_value(cls, v):
        return positive_value(cls, v)

_G, _M, _R, _C = sp.symbols("G earth_mass earth_radius c", real=True, positive=True)

# === Canonical Constants Registry ===
CONSTANTS: List[ConstantInfo] = [

    # ========== 1. FUNDAMENTAL ==========

    ConstantInfo(
        name="G",
        symbol=_G,
        latex=r"G",
        value=6.67430e-11,
        units="m^3 kg^-1 s^-2",
        description="Universal gravitational constant",
        category=ConstantCategory.FUNDAMENTAL,
        source_refs=["https://physics.nist.gov/cgi-bin/cuu/Value?bg"],
    ),

    ConstantInfo(
        name="c",
        symbol=_C,
        latex=r"c",
        value=299_792_458.0,
        units="m/s",
        description="Speed of light in vacuum",
        category=ConstantCategory.FUNDAMENTAL,
    ),

    # ========== 2. CENTRAL BODY ==========

    ConstantInfo(
        name="earth_mass",
        symbol=_M,
        latex=r"M_\oplus",
        value=5.972e24,
        units="kg",
        description="Mass of the Earth",
        category=ConstantCategory.BODY,
    ),

    ConstantInfo(
        name="earth_radius",
        symbol=_R,
        latex=r"R_\oplus",
        value=6371e3,
        units="m",
        description="Mean radius of the Earth; lower edge of the exterior metric",
        category=ConstantCategory.BODY,
    ),

    # ========== 3. DERIVED ==========

    ConstantInfo(
        name="earth_surface_gravity",
        symbol=sp.Symbol("g", real=True, positive=True),
        latex=r"g",
        value=9.8,
        units="m/s^2",
        description="Standard gravity at the Earth's surface, used by the constant-gravity frames",
        category=ConstantCategory.DERIVED,
        relation=r"g = G M_\oplus / R_\oplus^2",
        eval_expr=_G * _M / _R**2,
    ),

    ConstantInfo(
        name="earth_schwarzschild_radius",
        symbol=sp.Symbol("r_s", real=True, positive=True),
        latex=r"r_s",
        value=8.87e-3,
        units="m",
        description="Schwarzschild radius of the Earth",
        category=ConstantCategory.DERIVED,
        relation=r"r_s = 2 G M_\oplus / c^2",
        eval_expr=2 * _G * _M / _C**2,
    ),

    # ========== 4. REFERENCE DISTANCES ==========

    ConstantInfo(
        name="moon_distance",
        symbol=sp.Symbol("d_moon", real=True, positive=True),
        latex=r"d_{\text{moon}}",
        value=384400e3,
        units="m",
        description="Mean Earth-Moon distance, for scale annotations",
        category=ConstantCategory.REFERENCE,
    ),
]

# --- Generate Derived Exports ---

CONSTANTS_DICT: Dict[str, ConstantInfo] = {c.name: c for c in CONSTANTS}

SYMBOLS: Dict[str, sp.Basic] = {
    c.name: c.symbol for c in CONSTANTS if c.symbol is not None
}

VALUES: Dict[str, float] = {
    c.name: c.value for c in CONSTANTS if c.value is not None
}

# --- Utility Functions ---

def get_constants_by_category(category: ConstantCategory) -> List[ConstantInfo]:
    """Return all constants in a given category."""
    return [c for c in CONSTANTS if c.category == category]

def validate_relations(rel_tol: float = 2e-2) -> Dict[str, Any]:
    """
    Evaluate every eval_expr relation against the stated values.

    The stated surface gravity is the rounded textbook 9.8 m/s^2, hence the
    loose default tolerance.

    Returns:
        dict: constant name -> error message, empty when everything agrees.
    """
    errors = {}
    subs = {SYMBOLS[name]: value for name, value in VALUES.items() if name in SYMBOLS}

    for const in CONSTANTS:
        if const.eval_expr is None:
            continue
        try:
            result = float(const.eval_expr.subs(subs))
        except (TypeError, ValueError) as e:
            errors[const.name] = str(e)
            continue
        if const.value:
            rel_error = abs(result - const.value) / const.value
            if rel_error > rel_tol:
                errors[const.name] = f"Computed {result}, stated {const.value} (rel_error={rel_error:.2e})"

    return errors

# --- Solver-facing bundle ---

class PhysicalConstants(BaseModel):
    """The handful of numbers the solvers need, bundled so tests can swap bodies."""
    model_config = ConfigDict(frozen=True)

    G: float = VALUES["G"]
    mass: float = VALUES["earth_mass"]
    radius: float = VALUES["earth_radius"]
    schwarzschild_radius: float = VALUES["earth_schwarzschild_radius"]
    light_speed: float = VALUES["c"]
    surface_gravity: float = VALUES["earth_surface_gravity"]

    @field_validator("G", "mass", "radius", "schwarzschild_radius", "light_speed")
    @classmethod
    def _strictly_positive(cls, v):
        if v <= 0:
            raise ValueError("Value must be strictly positive")
        return v

    @property
    def mu(self) -> float:
        """Standard gravitational parameter G*M."""
        return self.G * self.mass

EARTH = PhysicalConstants()

__all__ = [
    "ConstantInfo", "ConstantCategory",
    "CONSTANTS", "CONSTANTS_DICT", "SYMBOLS", "VALUES",
    "get_constants_by_category", "validate_relations",
    "PhysicalConstants", "EARTH",
    "__version__", "__date__",
]
