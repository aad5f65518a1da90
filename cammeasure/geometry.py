"""Geometry helpers for points on the capture surface."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Union

# Below this pixel distance two taps are considered the same point.
COINCIDENT_EPSILON = 1e-9


@dataclass(frozen=True)
class Point:
    """A tap position in the pixel space of the capture surface."""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, payload: Mapping[str, float]) -> "Point":
        return cls(x=float(payload["x"]), y=float(payload["y"]))


PointLike = Union[Point, Sequence[float], Mapping[str, float]]


def as_point(point: PointLike) -> Point:
    """Return a :class:`Point` from supported *point* inputs."""

    if isinstance(point, Point):
        return point
    if isinstance(point, Mapping):
        return Point.from_dict(point)
    if isinstance(point, Sequence) and not isinstance(point, (str, bytes, bytearray)):
        if len(point) != 2:
            raise ValueError("Point sequences must contain exactly two values.")
        return Point(float(point[0]), float(point[1]))
    raise TypeError(f"Unsupported point representation: {type(point)!r}")


def distance_between_points(start: PointLike, end: PointLike) -> float:
    """Return the Euclidean distance between *start* and *end*."""

    a = as_point(start)
    b = as_point(end)
    return math.hypot(a.x - b.x, a.y - b.y)


def midpoint(start: PointLike, end: PointLike) -> Point:
    a = as_point(start)
    b = as_point(end)
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def points_coincide(start: PointLike, end: PointLike) -> bool:
    return distance_between_points(start, end) < COINCIDENT_EPSILON


__all__ = [
    "COINCIDENT_EPSILON",
    "Point",
    "PointLike",
    "as_point",
    "distance_between_points",
    "midpoint",
    "points_coincide",
]
