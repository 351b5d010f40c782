import math

import numpy as np
import pytest

from freefall.core.errors import DomainError
from freefall.geometry.vector import (
    Camera, Circle, Point,
    angle_between, cross, dist, dot, elementwise_div, ellipse_points, invert_y, length, lerp, line_points,
    normalize, rotate_around_point_and_vector, rotate_around_vector, rotate_xy, signed_angle_xy,
)


def test_point_arithmetic_covers_all_four_components():
    a = Point(1, 2, 3, 4)
    b = Point(4, 3, 2, 1)
    assert a + b == Point(5, 5, 5, 5)
    assert a - b == Point(-3, -1, 1, 3)
    assert 2 * a == Point(2, 4, 6, 8)
    assert -a == Point(-1, -2, -3, -4)
    assert dot(a, b) == 20


def test_point_defaults_missing_components_to_zero():
    assert Point(1, 2) == Point(1, 2, 0, 0)
    assert Point.from_array([1.0, 2.0, 3.0]) == Point(1, 2, 3, 0)


def test_normalize_zero_vector_is_a_domain_error():
    with pytest.raises(DomainError):
        normalize(Point(0, 0))


def test_elementwise_div_checks_the_requested_dims_only():
    q = elementwise_div(Point(4, 9, 1, 1), Point(2, 3), dims=2)
    assert q == Point(2, 3, 0, 0)
    with pytest.raises(DomainError):
        elementwise_div(Point(1, 1, 1, 1), Point(1, 1))


def test_cross_product_right_handed():
    assert cross(Point(1, 0, 0), Point(0, 1, 0)) == Point(0, 0, 1)


def test_lerp_is_unclamped():
    a, b = Point(0, 0), Point(10, 20)
    assert lerp(a, b, 0.5) == Point(5, 10)
    assert lerp(a, b, 1.5) == Point(15, 30)


def test_rotations():
    p = rotate_xy(Point(1, 0, 7), math.pi / 2)
    assert p.x == pytest.approx(0, abs=1e-12)
    assert p.y == pytest.approx(1)
    assert p.z == 7

    q = rotate_around_vector(Point(1, 0, 0), Point(0, 0, 1), math.pi)
    assert q.x == pytest.approx(-1)

    r = rotate_around_point_and_vector(Point(2, 0, 0), Point(1, 0, 0), Point(0, 0, 1), math.pi)
    assert r.x == pytest.approx(0, abs=1e-12)
    assert r.y == pytest.approx(0, abs=1e-12)


def test_angles():
    assert angle_between(Point(1, 0), Point(0, 3)) == pytest.approx(math.pi / 2)
    assert signed_angle_xy(Point(1, 0), Point(0, 1)) == pytest.approx(math.pi / 2)
    assert signed_angle_xy(Point(0, 1), Point(1, 0)) == pytest.approx(-math.pi / 2)
    # wraps into (-pi, pi]
    assert signed_angle_xy(Point(-1, 0.01), Point(-1, -0.01)) == pytest.approx(0.02, abs=1e-4)


def test_line_points_include_both_ends():
    pts = line_points(Point(0, 0), Point(1, 2), 4)
    assert len(pts) == 5
    assert pts[0] == Point(0, 0)
    assert pts[-1] == Point(1, 2)


def test_ellipse_points_close_the_loop():
    pts = ellipse_points(Point(1, 1), Point(2, 0), Point(0, 1), n_pts=8)
    assert len(pts) == 9
    assert dist(pts[0], pts[-1]) == pytest.approx(0, abs=1e-12)
    open_pts = ellipse_points(Point(1, 1), Point(2, 0), Point(0, 1), n_pts=8, repeat_first_point=False)
    assert len(open_pts) == 8


def test_circle_inversion_is_an_involution():
    c = Circle(Point(1, 1), 2.0)
    p = Point(4, 5)
    q = c.invert(p)
    assert dist(c.p, p) * dist(c.p, q) == pytest.approx(4.0)
    back = c.invert(q)
    assert back.x == pytest.approx(p.x)
    assert back.y == pytest.approx(p.y)
    with pytest.raises(DomainError):
        c.invert(c.p)


def test_camera_projects_look_at_point_to_principal_point():
    cam = Camera(Point(0, 0, -10), Point(0, 0, 0), Point(0, 1, 0), 100.0, Point(320, 240))
    p = cam.project(Point(0, 0, 0))
    assert p.x == pytest.approx(320)
    assert p.y == pytest.approx(240)


def test_camera_screen_y_points_down():
    cam = Camera(Point(0, 0, -10), Point(0, 0, 0), Point(0, 1, 0), 100.0, Point(0, 0))
    above = cam.project(Point(0, 1, 0))
    assert above.y == pytest.approx(-10.0)


def test_camera_project_many_matches_project():
    cam = Camera(Point(5, 3, -20), Point(0, 0, 0), Point(0, 1, 0), 1400.0, Point(200, 200))
    pts = np.array([[1.0, 2.0, 3.0, 0.0], [-4.0, 0.5, 2.0, 9.0]])
    many = cam.project_many(pts)
    for row, expected in zip(many, pts):
        single = cam.project(Point(*expected))
        assert row[0] == pytest.approx(single.x)
        assert row[1] == pytest.approx(single.y)


def test_camera_clamps_points_behind_it():
    cam = Camera(Point(0, 0, -10), Point(0, 0, 0), Point(0, 1, 0), 100.0, Point(0, 0))
    p = cam.project(Point(1, 0, -50))
    assert math.isfinite(p.x) and math.isfinite(p.y)


def test_invert_y_flips_only_the_vertical_axis():
    assert invert_y(Point(1, 2, 3, 4)) == Point(1, -2, 3, 4)
