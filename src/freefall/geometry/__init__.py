from freefall.geometry.transforms import ComposedTransform, LinearTransform2D, Rect, Transform
from freefall.geometry.vector import Camera, Circle, Point

__all__ = ["Point", "Circle", "Camera", "Rect", "Transform", "LinearTransform2D", "ComposedTransform"]
