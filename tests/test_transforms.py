import pytest

from freefall.core.errors import DomainError
from freefall.geometry.transforms import IDENTITY, ComposedTransform, LinearTransform2D, Rect, Transform
from freefall.geometry.vector import Point


def _approx_point(a: Point, b: Point, rel=1e-9, abs_=1e-9):
    for u, v in zip((a.x, a.y, a.z, a.w), (b.x, b.y, b.z, b.w)):
        assert u == pytest.approx(v, rel=rel, abs=abs_)


def test_rect_with_negative_size():
    r = Rect(Point(50, 450), Point(400, -400))
    assert (r.xmin, r.xmax, r.ymin, r.ymax) == (50, 450, 50, 450)
    assert r.center == Point(250, 250)
    assert r.min == Point(50, 50)
    assert r.max == Point(450, 450)


def test_rect_contains_and_clamp():
    r = Rect(Point(0, 0), Point(10, 5))
    assert r.contains(Point(10, 5))
    assert not r.contains(Point(10.1, 1))
    assert r.clamp(Point(-3, 7)) == Point(0, 5)


def test_linear_transform_maps_corners():
    src = Rect(Point(-4, -10), Point(8, 70))
    dst = Rect(Point(50, 450), Point(400, -400))
    t = LinearTransform2D(src, dst)
    _approx_point(t(Point(-4, -10)), Point(50, 450))
    _approx_point(t(Point(4, 60)), Point(450, 50))


def test_linear_transform_passes_extra_axes_through():
    t = LinearTransform2D(Rect(Point(0, 0), Point(2, 2)), Rect(Point(0, 0), Point(4, 4)))
    assert t(Point(1, 1, 7, 9)) == Point(2, 2, 7, 9)


def test_linear_transform_rejects_degenerate_rect():
    with pytest.raises(DomainError):
        LinearTransform2D(Rect(Point(0, 0), Point(0, 1)), Rect(Point(0, 0), Point(1, 1)))


def test_composed_transform_round_trip():
    """backwards(forwards(p)) == p over the declared window."""
    window = Rect(Point(-4, -10), Point(8, 70))
    screen = Rect(Point(50, 450), Point(400, -400))
    shift = Transform(lambda p: p + Point(0, 3), lambda p: p - Point(0, 3))
    t = ComposedTransform(shift, LinearTransform2D(window, screen), IDENTITY)
    assert t.exact
    for x in (-4.0, -1.5, 0.0, 2.25, 4.0):
        for y in (-10.0, 0.0, 33.3, 60.0):
            p = Point(x, y, 1.5, -2.0)
            _approx_point(t.backwards(t.forwards(p)), p)


def test_composed_transform_order():
    add_one = Transform(lambda p: p + Point(1, 0), lambda p: p - Point(1, 0))
    double = Transform(lambda p: p * 2, lambda p: p * 0.5)
    t = ComposedTransform(add_one, double)
    assert t(Point(1, 0)) == Point(4, 0)
    assert t.backwards(Point(4, 0)) == Point(1, 0)


def test_inexact_step_marks_whole_chain_inexact():
    proj = Transform(lambda p: Point(p.x, p.y), lambda p: p, exact=False)
    assert not ComposedTransform(IDENTITY, proj).exact
