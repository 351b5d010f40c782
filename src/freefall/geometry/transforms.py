# src/freefall/geometry/transforms.py
"""
Reversible coordinate transforms and their composition.

Every graph pipeline is an ordered list of Transform steps. Composing them
gives one Transform whose forward runs the steps left to right and whose
backward undoes them right to left.
"""

from typing import Callable, Sequence

from freefall.core.errors import DomainError
from freefall.geometry.vector import Point, elementwise_div, elementwise_mul

PointMap = Callable[[Point], Point]


class Rect:
    """An axis-aligned rectangle in the XY plane. `size` may be negative."""

    def __init__(self, p: Point, size: Point):
        self.p = p
        self.size = size

    @property
    def xmin(self) -> float:
        return min(self.p.x, self.p.x + self.size.x)

    @property
    def xmax(self) -> float:
        return max(self.p.x, self.p.x + self.size.x)

    @property
    def ymin(self) -> float:
        return min(self.p.y, self.p.y + self.size.y)

    @property
    def ymax(self) -> float:
        return max(self.p.y, self.p.y + self.size.y)

    @property
    def min(self) -> Point:
        return Point(self.xmin, self.ymin)

    @property
    def max(self) -> Point:
        return Point(self.xmax, self.ymax)

    @property
    def center(self) -> Point:
        return self.p + self.size * 0.5

    def contains(self, p: Point) -> bool:
        return self.xmin <= p.x <= self.xmax and self.ymin <= p.y <= self.ymax

    def clamp(self, p: Point) -> Point:
        return Point(min(max(p.x, self.xmin), self.xmax), min(max(p.y, self.ymin), self.ymax))

    def __repr__(self) -> str:
        return f"Rect(p={self.p}, size={self.size})"


class Transform:
    """A forward/backward pair of point maps."""

    def __init__(self, forwards: PointMap, backwards: PointMap, exact: bool = True):
        self.forwards = forwards
        self.backwards = backwards
        # False when backwards is only a placeholder (e.g. camera projection)
        self.exact = exact

    def __call__(self, p: Point) -> Point:
        return self.forwards(p)


def identity(p: Point) -> Point:
    return Point(p.x, p.y, p.z, p.w)


IDENTITY = Transform(identity, identity)


class LinearTransform2D(Transform):
    """A 2D scale and translation that maps `from_rect` onto `to_rect`."""

    def __init__(self, from_rect: Rect, to_rect: Rect):
        if from_rect.size.x == 0 or from_rect.size.y == 0:
            raise DomainError(f"Cannot fit a degenerate rectangle: {from_rect}")
        self.scale = elementwise_div(to_rect.size, from_rect.size, dims=2)
        self.offset = to_rect.p - elementwise_mul(from_rect.p, self.scale)
        super().__init__(self._forwards, self._backwards)

    def _forwards(self, p: Point) -> Point:
        q = self.offset + elementwise_mul(p, self.scale)
        return Point(q.x, q.y, p.z, p.w)

    def _backwards(self, p: Point) -> Point:
        q = elementwise_div(p - self.offset, self.scale, dims=2)
        return Point(q.x, q.y, p.z, p.w)


class ComposedTransform(Transform):
    """Chain of transforms: forwards left to right, backwards right to left."""

    def __init__(self, *transforms: Transform):
        self.transforms: Sequence[Transform] = transforms
        super().__init__(self._forwards, self._backwards,
                         exact=all(t.exact for t in transforms))

    def _forwards(self, p: Point) -> Point:
        for t in self.transforms:
            p = t.forwards(p)
        return p

    def _backwards(self, p: Point) -> Point:
        for t in reversed(self.transforms):
            p = t.backwards(p)
        return p


__all__ = [
    "Rect", "Transform", "LinearTransform2D", "ComposedTransform",
    "identity", "IDENTITY",
]
