"""Abstract draw instructions emitted for the overlay renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Protocol, Sequence, Union

from .geometry import Point, midpoint

CALIBRATION_POINT_COLOR = "#ff6b6b"
CALIBRATION_POINT_RADIUS = 8
CALIBRATION_LINE_COLOR = "#48bb78"
CALIBRATION_LINE_WIDTH = 3
MEASUREMENT_POINT_COLOR = "#667eea"
MEASUREMENT_POINT_RADIUS = 6


@dataclass(frozen=True)
class DrawStyle:
    """User-selected appearance of measurement lines."""

    line_color: str = "#667eea"
    line_width: int = 3

    def __post_init__(self) -> None:
        if self.line_width <= 0:
            raise ValueError("Line width must be greater than zero.")

    def to_dict(self) -> Dict[str, Any]:
        return {"line_color": self.line_color, "line_width": self.line_width}


@dataclass(frozen=True)
class ClearSurface:
    kind: str = field(default="clear", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class DrawPoint:
    point: Point
    color: str
    radius: float
    kind: str = field(default="point", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "point": self.point.to_dict(),
            "color": self.color,
            "radius": self.radius,
        }


@dataclass(frozen=True)
class DrawLine:
    start: Point
    end: Point
    color: str
    width: float
    kind: str = field(default="line", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "color": self.color,
            "width": self.width,
        }


@dataclass(frozen=True)
class DrawLabeledDistance:
    """A distance label centred between *start* and *end*."""

    start: Point
    end: Point
    label: str
    kind: str = field(default="label", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "anchor": midpoint(self.start, self.end).to_dict(),
            "label": self.label,
        }


DrawCommand = Union[ClearSurface, DrawPoint, DrawLine, DrawLabeledDistance]


class Renderer(Protocol):
    def draw(self, commands: Sequence[DrawCommand]) -> None:
        ...


class CommandBuffer:
    """Renderer that keeps commands until a caller drains them."""

    def __init__(self) -> None:
        self._commands: List[DrawCommand] = []

    def draw(self, commands: Sequence[DrawCommand]) -> None:
        self._commands.extend(commands)

    def drain(self) -> List[DrawCommand]:
        commands, self._commands = self._commands, []
        return commands


def serialise_commands(commands: Iterable[DrawCommand]) -> List[Dict[str, Any]]:
    return [command.to_dict() for command in commands]


__all__ = [
    "CALIBRATION_LINE_COLOR",
    "CALIBRATION_LINE_WIDTH",
    "CALIBRATION_POINT_COLOR",
    "CALIBRATION_POINT_RADIUS",
    "ClearSurface",
    "CommandBuffer",
    "DrawCommand",
    "DrawLabeledDistance",
    "DrawLine",
    "DrawPoint",
    "DrawStyle",
    "MEASUREMENT_POINT_COLOR",
    "MEASUREMENT_POINT_RADIUS",
    "Renderer",
    "serialise_commands",
]
