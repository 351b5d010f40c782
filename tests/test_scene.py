import pytest

from freefall.core.constants import EARTH
from freefall.core.enums import GraphKind, GravityModel, OrbitType
from freefall.core.errors import DomainError
from freefall.geometry.jonsson import JonssonEmbedding
from freefall.geometry.transforms import Rect
from freefall.geometry.vector import Camera, Point
from freefall.scene import (
    ELLIPTIC_COLOR, OPEN_ORBIT_COLOR, Graph, SceneContext, Trajectory, build_graph_transform,
)

R = EARTH.radius
SCREEN = Rect(Point(50, 450), Point(400, -400))


def _approx_point(a: Point, b: Point, rel=1e-9, abs_=1e-9):
    for u, v in zip((a.x, a.y, a.z, a.w), (b.x, b.y, b.z, b.w)):
        assert u == pytest.approx(v, rel=rel, abs=abs_)


@pytest.fixture
def flat_scene():
    return SceneContext.constant_gravity_demo()


@pytest.fixture
def radial_scene():
    return SceneContext.variable_gravity_demo(n_samples=50)


def test_demo_scenes(flat_scene, radial_scene):
    assert flat_scene.gravity is GravityModel.CONSTANT
    assert len(flat_scene.trajectories) == 3
    assert flat_scene.t_zero == 0.0
    assert flat_scene.reference_acceleration == EARTH.surface_gravity
    assert radial_scene.gravity is GravityModel.VARIABLE
    assert radial_scene.n_samples == 50
    assert radial_scene.spacetime_window.ymin == R
    assert radial_scene.t_zero == pytest.approx(0.0, abs=1e-9)


# --- Graph pipelines ---

@pytest.mark.parametrize("kind", [GraphKind.T1S1, GraphKind.S2])
@pytest.mark.parametrize("frame_acceleration", [0.0, 9.8, -3.0])
def test_flat_graphs_invert_exactly(flat_scene, kind, frame_acceleration):
    transform = build_graph_transform(Graph(kind, SCREEN, frame_acceleration), flat_scene)
    assert transform.exact
    p = Point(1.5, 12.0, 30.0, -4.0)
    _approx_point(transform.backwards(transform(p)), p, abs_=1e-8)


def test_time_space_graph_maps_window_onto_screen(flat_scene):
    transform = build_graph_transform(Graph(GraphKind.T1S1, SCREEN, 9.8), flat_scene)
    _approx_point(transform(Point(-4, -10)), Point(50, 450))
    _approx_point(transform(Point(4, 60)), Point(450, 50))


def test_standard_graph_puts_the_surface_at_the_bottom(radial_scene):
    canvas = Rect(Point(0, 0), Point(400, 300))
    transform = build_graph_transform(Graph(GraphKind.STANDARD, canvas), radial_scene)
    assert transform.exact
    window = radial_scene.spacetime_window
    bottom = transform(Point(window.xmin, window.ymin))
    top = transform(Point(window.xmax, window.ymax))
    _approx_point(bottom, Point(0, 300), abs_=1e-6)
    _approx_point(top, Point(400, 0), abs_=1e-6)
    p = Point(100.0, R + 1e6)
    _approx_point(transform.backwards(transform(p)), p, rel=1e-9, abs_=1e-6)


@pytest.mark.parametrize("kind", [GraphKind.S3, GraphKind.T1S2, GraphKind.T1S3])
def test_perspective_graphs_are_not_invertible(flat_scene, kind):
    transform = build_graph_transform(Graph(kind, SCREEN), flat_scene)
    assert not transform.exact
    q = transform(Point(0.0, 30.0, 30.0, 30.0))
    assert q.z == 0.0


def test_embedding_graph(radial_scene):
    with pytest.raises(DomainError):
        build_graph_transform(Graph(GraphKind.EMBEDDING, SCREEN), radial_scene)
    radial_scene.embedding = JonssonEmbedding(table_size=200)
    transform = build_graph_transform(Graph(GraphKind.EMBEDDING, SCREEN), radial_scene)
    assert not transform.exact
    q = transform(Point(0.0, R))
    assert SCREEN.xmin - 1000 < q.x < SCREEN.xmax + 1000


# --- Trajectories ---

def test_flat_trajectory_is_a_dropped_ball(flat_scene):
    traj = flat_scene.trajectories[0]
    assert flat_scene.update_trajectory(traj)
    assert not traj.stale
    assert len(traj.points) == flat_scene.n_samples + 1
    _approx_point(traj.points.pts[0], traj.ends[0], abs_=1e-9)
    _approx_point(traj.points.pts[-1], traj.ends[1], abs_=1e-9)
    flat_scene.trajectory_position = 0.5
    mid = flat_scene.marker_position(traj)
    assert mid.x == pytest.approx(1.5)
    assert mid.y == pytest.approx(44.1 - 4.9 * 1.5 ** 2, abs=1e-2)


def test_radial_trajectory_is_colored_by_orbit(radial_scene):
    traj = radial_scene.trajectories[0]
    assert radial_scene.update_trajectory(traj)
    assert traj.orbit is OrbitType.ELLIPTIC
    assert traj.color == ELLIPTIC_COLOR
    assert len(traj.points) == 100

    fast = Trajectory(Point(0.0, R), Point(600.0, R + 1e7))
    assert radial_scene.update_trajectory(fast)
    assert fast.orbit is OrbitType.HYPERBOLIC
    assert fast.color == OPEN_ORBIT_COLOR


def test_unsolvable_trajectory_is_skipped(radial_scene):
    traj = Trajectory(Point(0.0, R), Point(10.0, -5.0))
    assert not radial_scene.update_trajectory(traj)
    assert traj.points is None
    assert not traj.stale
    assert radial_scene.marker_position(traj) is None


def test_update_all_counts_successes(radial_scene):
    radial_scene.trajectories.append(Trajectory(Point(0.0, R), Point(10.0, -5.0)))
    assert radial_scene.update_all() == 1


def test_trajectory_points_are_cached(flat_scene):
    traj = flat_scene.trajectories[1]
    path = flat_scene.trajectory_points(traj)
    assert flat_scene.trajectory_points(traj) is path
    traj.set_end(1, Point(2.0, 5.0, 45.0, 40.0))
    assert traj.stale
    assert flat_scene.trajectory_points(traj) is not path


def test_arrow_head_follows_the_geodesic(flat_scene):
    a, b = flat_scene.arrow_head(flat_scene.trajectories[0])
    assert a.x < b.x
    assert b.y < a.y


# --- Interaction ---

def test_hover_highlights_the_closest_end(flat_scene):
    graph = Graph(GraphKind.T1S1, SCREEN, 9.8)
    transform = build_graph_transform(graph, flat_scene)
    target = flat_scene.trajectories[0]
    screen = transform(target.ends[1]) + Point(3, 0)

    assert flat_scene.find_closest_end(screen, graph) == (target, 1)
    assert flat_scene.find_closest_end(Point(-500, -500), graph) is None

    assert flat_scene.hover(screen, graph) == (target, 1)
    assert target.end_sizes[1] == target.hover_size
    assert target.end_colors[1] == target.hover_color
    assert flat_scene.reset_markers() is target
    assert target.end_sizes == target.default_end_sizes
    assert flat_scene.reset_markers() is None


def test_drag_end_moves_the_event(flat_scene):
    graph = Graph(GraphKind.T1S1, SCREEN, 9.8)
    transform = build_graph_transform(graph, flat_scene)
    traj = flat_scene.trajectories[1]
    assert flat_scene.drag_end(traj, 0, transform(Point(-2.0, 10.0)), graph)
    assert traj.ends[0].x == pytest.approx(-2.0)
    assert traj.ends[0].y == pytest.approx(10.0)
    assert traj.points is not None

    with pytest.raises(DomainError):
        flat_scene.drag_end(traj, 0, Point(100, 100), Graph(GraphKind.T1S3, SCREEN))


# --- Cameras ---

def test_cameras_look_at_the_screen_center(flat_scene, radial_scene):
    look_at = flat_scene.spacetime_window.center
    flat = flat_scene.flat_camera(SCREEN, look_at)
    _approx_point(flat.project(look_at), SCREEN.center, abs_=1e-6)

    radial_scene.horizontal_view_angle = 0.7
    radial_scene.vertical_view_angle = 0.3
    orbiting = radial_scene.embedding_camera(SCREEN)
    _approx_point(orbiting.project(Point(0, 0, 1)), SCREEN.center, abs_=1e-6)


def test_follow_camera(radial_scene):
    traj = radial_scene.trajectories[0]
    with pytest.raises(DomainError):
        radial_scene.follow_camera(traj, SCREEN)
    radial_scene.embedding = JonssonEmbedding(table_size=200)
    radial_scene.trajectory_position = 0.3
    assert isinstance(radial_scene.follow_camera(traj, SCREEN), Camera)
    radial_scene.trajectory_position = 1.0
    assert isinstance(radial_scene.follow_camera(traj, SCREEN), Camera)
