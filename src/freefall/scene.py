# src/freefall/scene.py
"""
Scene state shared by the views: the spacetime window, the trajectories,
the camera angles and the graph pipelines that map events onto the screen.

A view owns one SceneContext and passes it to every query. Graphs are plain
records tagged with a GraphKind; `build_graph_transform` turns one into the
ComposedTransform for the current scene.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from freefall.core.accelerating_frame import acceleration_transform, arrow_head_points, geodesic_points
from freefall.core.constants import EARTH, PhysicalConstants
from freefall.core.enums import GraphKind, GravityModel, OrbitType
from freefall.core.errors import DomainError, FreefallError
from freefall.core.logging import logger
from freefall.core.radial import Path, free_fall_points, free_fall_time
from freefall.geometry.jonsson import JonssonEmbedding
from freefall.geometry.transforms import ComposedTransform, LinearTransform2D, Rect, Transform, identity
from freefall.geometry.vector import Camera, Point, dist, elementwise_mul, normalize

__all__ = [
    "Trajectory", "Graph", "SceneContext",
    "build_graph_transform",
    "ELLIPTIC_COLOR", "OPEN_ORBIT_COLOR",
]

ELLIPTIC_COLOR = "rgb(100,100,200)"
OPEN_ORBIT_COLOR = "rgb(200,100,100)"

# flat camera views
CAMERA_DISTANCE = 500.0
FOCAL_LENGTH = 1400.0
TIME_SCALE = 20.0
# embedding view
EMBEDDING_CAMERA_DISTANCE = 10.0
EMBEDDING_LOOK_AT_HEIGHT = 1.0
EMBEDDING_FIELD_OF_VIEW = 22.0  # degrees, vertical


class Trajectory:
    """Two draggable end events, their marker styling and the cached polyline."""

    def __init__(self, start: Point, end: Point, color: str = OPEN_ORBIT_COLOR,
                 hover_color: Optional[str] = None):
        self.ends = [start, end]
        self.color = color
        self.hover_color = hover_color or color
        self.end_colors = [color, color]
        self.default_end_sizes = [6, 4]
        self.end_sizes = list(self.default_end_sizes)
        self.mid_size = 2
        self.hover_size = 10
        self.points: Optional[Path] = None
        self.orbit: Optional[OrbitType] = None
        self.stale = True

    def set_end(self, index: int, p: Point) -> None:
        self.ends[index] = p
        self.stale = True

    def set_color(self, color: str) -> None:
        self.color = color
        self.hover_color = color
        self.end_colors = [color, color]

    def reset_markers(self) -> bool:
        """Restore default marker styling; True if a marker was highlighted."""
        was_hovering = self.end_sizes != self.default_end_sizes
        self.end_sizes = list(self.default_end_sizes)
        self.end_colors = [self.color, self.color]
        return was_hovering

    def highlight_end(self, index: int) -> None:
        self.end_sizes[index] = self.hover_size
        self.end_colors[index] = self.hover_color


@dataclass
class Graph:
    kind: GraphKind
    rect: Rect
    frame_acceleration: float = 0.0
    top_text: str = ""
    left_text: str = ""
    bottom_text: str = ""


class SceneContext:
    """
    Everything a view needs to draw: replaces module-level globals.

    Trajectories are stored in the reference frame, the one accelerating at
    the body's surface gravity, for the constant-gravity model, and as
    (t, radius) events for the variable-gravity model.
    """

    def __init__(self, spacetime_window: Rect, trajectories: Optional[List[Trajectory]] = None,
                 gravity: GravityModel = GravityModel.CONSTANT, body: PhysicalConstants = EARTH,
                 embedding: Optional[JonssonEmbedding] = None, n_samples: int = 100,
                 view_angle: float = 0.0, horizontal_view_angle: float = 0.0,
                 vertical_view_angle: float = 0.0, trajectory_position: float = 0.0):
        self.spacetime_window = spacetime_window
        self.trajectories = trajectories if trajectories is not None else []
        self.gravity = gravity
        self.body = body
        self.embedding = embedding
        self.n_samples = n_samples
        self.view_angle = view_angle
        self.horizontal_view_angle = horizontal_view_angle
        self.vertical_view_angle = vertical_view_angle
        self.trajectory_position = trajectory_position

    @classmethod
    def constant_gravity_demo(cls, **kwargs) -> "SceneContext":
        """Three throws near the ground in a 4D (t, up, space2, space3) window."""
        trajectories = [
            Trajectory(Point(0, 44.1, 20, 10), Point(3, 0, 20, 10), "rgb(255,100,100)", "rgb(200,100,100)"),
            Trajectory(Point(-1, 0, 5, 20), Point(2, 0, 45, 40), "rgb(0,200,0)", "rgb(0,160,0)"),
            Trajectory(Point(-3, 0, 56, 65), Point(1, 0, 9, -20), "rgb(100,100,255)", "rgb(100,100,200)"),
        ]
        return cls(Rect(Point(-4, -10), Point(8, 70)), trajectories, GravityModel.CONSTANT, **kwargs)

    @classmethod
    def variable_gravity_demo(cls, body: PhysicalConstants = EARTH, height: float = 21e6,
                              **kwargs) -> "SceneContext":
        """
        A launch from the surface that peaks thousands of km up. The window
        spans the time to fall `height` either side of t = 0.
        """
        time_width = free_fall_time(body.radius + height, body.radius, body.mass, body.G)
        window = Rect(Point(-time_width, body.radius), Point(2 * time_width, height))
        trajectories = [Trajectory(Point(0, body.radius), Point(20 * 60, body.radius + 4.3e6))]
        kwargs.setdefault("n_samples", 500)
        return cls(window, trajectories, GravityModel.VARIABLE, body, **kwargs)

    @property
    def t_zero(self) -> float:
        """Time at which every accelerating frame agrees."""
        return self.spacetime_window.center.x

    @property
    def reference_acceleration(self) -> float:
        return self.body.surface_gravity

    # --- Trajectories ---

    def update_trajectory(self, trajectory: Trajectory) -> bool:
        """
        Recompute the polyline. A trajectory that cannot be computed keeps no
        polyline, so views skip it instead of failing.
        """
        start, end = trajectory.ends
        try:
            if self.gravity is GravityModel.VARIABLE:
                path, orbit = free_fall_points(
                    start, end, self.body.mass, self.body.radius,
                    window_top=self.spacetime_window.ymax, n_pts=self.n_samples, G=self.body.G,
                )
                trajectory.orbit = orbit
                trajectory.set_color(ELLIPTIC_COLOR if orbit is OrbitType.ELLIPTIC else OPEN_ORBIT_COLOR)
            else:
                path = Path()
                for p in geodesic_points(start, end, self.reference_acceleration, self.t_zero, self.n_samples):
                    path.add(p)
        except FreefallError as e:
            logger.warning(f"Skipping trajectory {start} -> {end}: {e}")
            trajectory.points = None
            trajectory.stale = False
            return False
        trajectory.points = path
        trajectory.stale = False
        return True

    def trajectory_points(self, trajectory: Trajectory) -> Optional[Path]:
        if trajectory.stale:
            self.update_trajectory(trajectory)
        return trajectory.points

    def update_all(self) -> int:
        """Recompute every trajectory; returns how many succeeded."""
        return sum(self.update_trajectory(t) for t in self.trajectories)

    def marker_position(self, trajectory: Trajectory) -> Optional[Point]:
        """Event a fraction `trajectory_position` of the way along the trajectory's time extent."""
        path = self.trajectory_points(trajectory)
        if path is None:
            return None
        return path.interpolate_x(self.trajectory_position)

    def arrow_head(self, trajectory: Trajectory) -> List[Point]:
        return arrow_head_points(trajectory.ends[0], trajectory.ends[1],
                                 self.reference_acceleration, self.t_zero)

    # --- Interaction ---

    def reset_markers(self) -> Optional[Trajectory]:
        """Reset all markers; returns the trajectory that was highlighted, if any."""
        was = None
        for trajectory in self.trajectories:
            if trajectory.reset_markers():
                was = trajectory
        return was

    def find_closest_end(self, screen_pos: Point, graph: Graph,
                         radius: float = 20.0) -> Optional[Tuple[Trajectory, int]]:
        """The trajectory end nearest screen_pos within `radius` pixels."""
        transform = build_graph_transform(graph, self)
        best = None
        d_min = radius
        for trajectory in self.trajectories:
            for i, end in enumerate(trajectory.ends):
                try:
                    d = dist(screen_pos, transform.forwards(end))
                except FreefallError:
                    continue
                if d < d_min:
                    d_min = d
                    best = (trajectory, i)
        return best

    def hover(self, screen_pos: Point, graph: Graph, radius: float = 20.0) -> Optional[Tuple[Trajectory, int]]:
        self.reset_markers()
        hit = self.find_closest_end(screen_pos, graph, radius)
        if hit is not None:
            hit[0].highlight_end(hit[1])
        return hit

    def drag_end(self, trajectory: Trajectory, index: int, screen_pos: Point, graph: Graph) -> bool:
        """
        Move one end to the event under screen_pos and recompute the path.

        Raises:
            DomainError: the graph's pipeline cannot be inverted exactly.
        """
        transform = build_graph_transform(graph, self)
        if not transform.exact:
            raise DomainError(f"Cannot drag in a {graph.kind.value} view: its projection is not invertible")
        trajectory.set_end(index, transform.backwards(screen_pos))
        return self.update_trajectory(trajectory)

    # --- Cameras ---

    def flat_camera(self, rect: Rect, look_at: Point) -> Camera:
        d = CAMERA_DISTANCE
        p = Point(d * math.cos(self.view_angle), d / 4, d * math.sin(self.view_angle))
        return Camera(p, look_at, Point(0, 1, 0), FOCAL_LENGTH, rect.center)

    def embedding_camera(self, rect: Rect) -> Camera:
        """Orbiting camera around the funnel axis."""
        d = EMBEDDING_CAMERA_DISTANCE
        z = EMBEDDING_LOOK_AT_HEIGHT
        theta = self.horizontal_view_angle
        phi = self.vertical_view_angle
        p = Point(d * math.sin(theta) * math.cos(phi), d * math.cos(theta) * math.cos(phi), z + d * math.sin(phi))
        f = 0.5 * abs(rect.size.y) / math.tan(math.radians(EMBEDDING_FIELD_OF_VIEW / 2))
        return Camera(p, Point(0, 0, z), Point(0, 0, 1), f, rect.center)

    def follow_camera(self, trajectory: Trajectory, rect: Rect, du: float = 1e-3) -> Camera:
        """Camera riding along the trajectory just above the funnel surface."""
        if self.embedding is None:
            raise DomainError("The scene has no embedding to follow a trajectory on")
        path = self.trajectory_points(trajectory)
        if path is None:
            raise DomainError("Trajectory has no polyline")
        u = self.trajectory_position
        sp = path.interpolate_x(u)
        p = self.embedding.embed_point(sp)
        n = self.embedding.surface_normal_from_spacetime(sp)
        if u < 1 - du:
            v = normalize(self.embedding.embed_point(path.interpolate_x(u + du)) - p)
        else:
            v = normalize(p - self.embedding.embed_point(path.interpolate_x(u - du)))
        f = 0.5 * abs(rect.size.y) / math.tan(math.radians(EMBEDDING_FIELD_OF_VIEW / 2))
        return Camera(p + n * 0.4 + v * -0.8, p, n, f, rect.center)


# --- Graph pipelines ---

def _camera_transform(camera: Camera) -> Transform:
    return Transform(camera.project, identity, exact=False)


def _swap_x_z(p: Point) -> Point:
    return Point(p.z, p.y, p.x, p.w)


def _swap_x_w(p: Point) -> Point:
    return Point(p.w, p.y, p.z, p.x)


def _frame(graph: Graph, scene: SceneContext) -> Transform:
    return acceleration_transform(graph.frame_acceleration, scene.reference_acceleration, scene.t_zero)


def _t1s1(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """Time across, up vertical."""
    return ComposedTransform(_frame(graph, scene), LinearTransform2D(scene.spacetime_window, graph.rect))


def _s2(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """Space 2 across, up vertical, both at the window's spatial scale."""
    window = scene.spacetime_window
    space_range = Rect(Point(window.ymin, window.ymin), Point(window.size.y, window.size.y))
    return ComposedTransform(
        _frame(graph, scene),
        Transform(_swap_x_z, _swap_x_z),
        LinearTransform2D(space_range, graph.rect),
    )


def _s3(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """The three space axes in perspective."""
    c = scene.spacetime_window.center.y
    camera = scene.flat_camera(graph.rect, Point(c, c, c))
    return ComposedTransform(_frame(graph, scene), Transform(_swap_x_w, _swap_x_w), _camera_transform(camera))


def _t1s2(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """Time stretched along x, with up and space 2, in perspective."""
    scale = Point(TIME_SCALE, 1, 1, 1)
    unscale = Point(1 / TIME_SCALE, 1, 1, 1)
    scale_time = Transform(lambda p: elementwise_mul(p, scale), lambda p: elementwise_mul(p, unscale))
    camera = scene.flat_camera(graph.rect, scene.spacetime_window.center)
    return ComposedTransform(_frame(graph, scene), scale_time, _camera_transform(camera))


def _t1s3(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """Time folded onto space 3, so all four axes fit one perspective view."""
    fold = Transform(lambda p: Point(p.w + TIME_SCALE * p.x, p.y, p.z), identity, exact=False)
    camera = scene.flat_camera(graph.rect, scene.spacetime_window.center)
    return ComposedTransform(_frame(graph, scene), fold, _camera_transform(camera))


def _standard(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """Time across, radius up, for screens whose y axis points down."""
    window = scene.spacetime_window

    def flip_y(p: Point) -> Point:
        return Point(p.x, window.ymax - p.y + window.ymin, p.z, p.w)

    return ComposedTransform(Transform(flip_y, flip_y), LinearTransform2D(window, graph.rect))


def _embedding(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """Spacetime event onto the Jonsson funnel, then through the orbiting camera."""
    if scene.embedding is None:
        raise DomainError("An embedding graph needs a scene with a JonssonEmbedding")
    embed = Transform(scene.embedding.embed_point, identity, exact=False)
    return ComposedTransform(embed, _camera_transform(scene.embedding_camera(graph.rect)))


_BUILDERS: Dict[GraphKind, Callable[[Graph, SceneContext], ComposedTransform]] = {
    GraphKind.T1S1: _t1s1,
    GraphKind.S2: _s2,
    GraphKind.S3: _s3,
    GraphKind.T1S2: _t1s2,
    GraphKind.T1S3: _t1s3,
    GraphKind.STANDARD: _standard,
    GraphKind.EMBEDDING: _embedding,
}


def build_graph_transform(graph: Graph, scene: SceneContext) -> ComposedTransform:
    """The full event-to-screen pipeline for a graph in the current scene."""
    return _BUILDERS[graph.kind](graph, scene)
