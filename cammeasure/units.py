"""Length units and conversions shared by the engine and the API."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Sequence, Tuple, Union


class Unit(str, Enum):
    MILLIMETER = "mm"
    CENTIMETER = "cm"
    INCH = "in"


# Public unit definitions so front-ends and the API can stay in sync.
UNIT_CHOICES: Sequence[Tuple[str, str]] = (
    (Unit.MILLIMETER.value, "mm"),
    (Unit.CENTIMETER.value, "cm"),
    (Unit.INCH.value, "inches (in)"),
)

_UNIT_DISPLAY_LOOKUP: Dict[str, str] = {value: label for value, label in UNIT_CHOICES}

# Millimetres per unit; millimetres are the canonical unit for every conversion.
_MM_PER_UNIT: Dict[str, float] = {
    Unit.MILLIMETER.value: 1.0,
    Unit.CENTIMETER.value: 10.0,
    Unit.INCH.value: 25.4,
}

UnitLike = Union[Unit, str]


def _unit_value(unit: UnitLike) -> str:
    return unit.value if isinstance(unit, Unit) else str(unit)


def parse_unit(value: UnitLike) -> Unit:
    """Return the :class:`Unit` for *value*, raising ``ValueError`` if unknown."""

    if isinstance(value, Unit):
        return value
    try:
        return Unit(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unsupported unit: {value!r}") from None


def convert(value: float, from_unit: UnitLike, to_unit: UnitLike) -> float:
    """Convert *value* between units, composing through millimetres.

    An unknown unit on either side leaves *value* unchanged.
    """

    from_factor = _MM_PER_UNIT.get(_unit_value(from_unit))
    to_factor = _MM_PER_UNIT.get(_unit_value(to_unit))
    if from_factor is None or to_factor is None:
        return value
    if from_factor == to_factor:
        return value
    millimetres = value * from_factor
    return millimetres / to_factor


def unit_label(unit: UnitLike) -> str:
    """Return the UI label for *unit*."""

    value = _unit_value(unit)
    return _UNIT_DISPLAY_LOOKUP.get(value, value)


def format_distance(value: float, unit: UnitLike) -> str:
    """Return the overlay label for a distance, e.g. ``"4.25 cm"``."""

    return f"{value:.2f} {_unit_value(unit)}"


__all__ = [
    "UNIT_CHOICES",
    "Unit",
    "UnitLike",
    "convert",
    "format_distance",
    "parse_unit",
    "unit_label",
]
