# src/freefall/config.py
"""
YAML scene configuration.

A scene file names the gravity model, the central body, the visible spacetime
window, the embedding shape and the trajectories to compute. Everything is
validated by Pydantic before a SceneContext is built from it.
"""

from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from freefall.core.constants import PhysicalConstants
from freefall.core.enums import GravityModel
from freefall.core.utils import load_config
from freefall.core.validators import unit_interval
from freefall.geometry.jonsson import JonssonEmbedding
from freefall.geometry.transforms import Rect
from freefall.geometry.vector import Point
from freefall.scene import SceneContext, Trajectory

__all__ = [
    "WindowConfig", "EmbeddingConfig", "TrajectoryConfig", "SceneConfig",
    "load_scene_config",
]


class WindowConfig(BaseModel):
    """Visible spacetime region: time along x, up/radius along y."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    time_min: float
    time_width: float = Field(gt=0, description="Visible time span (s)")
    height_min: float
    height: float = Field(gt=0, description="Visible height span")

    def to_rect(self) -> Rect:
        return Rect(Point(self.time_min, self.height_min), Point(self.time_width, self.height))


class EmbeddingConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    sin_theta_zero: float = 0.8
    delta_tau_real: float = Field(1.0, gt=0, description="Proper time per revolution (s)")
    table_size: int = Field(1000, ge=1)

    @field_validator("sin_theta_zero")
    @classmethod
    def check_slope(cls, v):
        return unit_interval(cls, v)


class TrajectoryConfig(BaseModel):
    """Two events as [t, up] or [t, up, space2, space3] lists."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    start: List[float]
    end: List[float]
    color: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def _event_size(cls, v):
        if not 2 <= len(v) <= 4:
            raise ValueError("An event needs between 2 and 4 coordinates")
        return v


class SceneConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    gravity: GravityModel = GravityModel.VARIABLE
    body: PhysicalConstants = Field(default_factory=PhysicalConstants)
    spacetime_window: Optional[WindowConfig] = None
    window_height: float = Field(21e6, gt=0, description="Derived window height when no window is given")
    embedding: Optional[EmbeddingConfig] = None
    frame_acceleration: float = 0.0
    samples: int = Field(500, ge=2)
    trajectories: List[TrajectoryConfig] = Field(default_factory=list)

    def build_embedding(self) -> Optional[JonssonEmbedding]:
        if self.embedding is None:
            return None
        return JonssonEmbedding(self.embedding.sin_theta_zero, self.embedding.delta_tau_real,
                                body=self.body, table_size=self.embedding.table_size)

    def build_scene(self) -> SceneContext:
        """A SceneContext holding the configured trajectories (not yet computed)."""
        if self.gravity is GravityModel.VARIABLE:
            scene = SceneContext.variable_gravity_demo(body=self.body, height=self.window_height)
        else:
            scene = SceneContext.constant_gravity_demo(body=self.body)
        if self.spacetime_window is not None:
            scene.spacetime_window = self.spacetime_window.to_rect()
        scene.n_samples = self.samples
        scene.embedding = self.build_embedding()
        if self.trajectories:
            scene.trajectories = [
                Trajectory(Point.from_array(t.start), Point.from_array(t.end), *([t.color] if t.color else []))
                for t in self.trajectories
            ]
        return scene


def load_scene_config(path: Path, overrides: Optional[Iterable[str]] = None) -> SceneConfig:
    """Read a scene YAML file, apply ``key.sub=value`` overrides, validate."""
    raw, _ = load_config(path, overrides)
    return SceneConfig.model_validate(raw)
