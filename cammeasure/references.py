"""Catalog of reference objects with known physical dimensions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import InvalidReferenceError, UnknownReferenceError
from .units import Unit, UnitLike, parse_unit

logger = logging.getLogger(__name__)

CUSTOM_REFERENCE = "custom"


@dataclass(frozen=True)
class ReferenceObject:
    """Physical size of an object used to calibrate the scale."""

    width: float
    height: float
    unit: Unit

    def __post_init__(self) -> None:
        if not self.width > 0:
            raise InvalidReferenceError("Reference width must be greater than zero.")
        if not self.height > 0:
            raise InvalidReferenceError("Reference height must be greater than zero.")
        try:
            unit = parse_unit(self.unit)
        except ValueError as exc:
            raise InvalidReferenceError(str(exc)) from None
        object.__setattr__(self, "unit", unit)

    def to_dict(self) -> Dict[str, object]:
        return {"width": self.width, "height": self.height, "unit": self.unit.value}


_BUILTIN_REFERENCES: Dict[str, ReferenceObject] = {
    "credit-card": ReferenceObject(8.5, 5.4, Unit.CENTIMETER),
    "a4-paper": ReferenceObject(21.0, 29.7, Unit.CENTIMETER),
    "us-dollar": ReferenceObject(15.6, 6.6, Unit.CENTIMETER),
}

_DEFAULT_CUSTOM = ReferenceObject(8.5, 5.4, Unit.CENTIMETER)


class ReferenceCatalog:
    """Read-only built-in references plus one mutable ``custom`` entry."""

    def __init__(self, custom: Optional[ReferenceObject] = None) -> None:
        self._entries: Dict[str, ReferenceObject] = dict(_BUILTIN_REFERENCES)
        self._custom = custom or _DEFAULT_CUSTOM

    def lookup(self, name: str) -> ReferenceObject:
        if name == CUSTOM_REFERENCE:
            return self._custom
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownReferenceError(name) from None

    def set_custom(
        self, width: float, unit: UnitLike, height: Optional[float] = None
    ) -> ReferenceObject:
        """Replace the custom entry; *height* defaults to *width*."""

        reference = ReferenceObject(
            width=float(width),
            height=float(width if height is None else height),
            unit=unit,
        )
        self._custom = reference
        logger.debug("Custom reference set to %s", reference)
        return reference

    def names(self) -> List[str]:
        return [*self._entries, CUSTOM_REFERENCE]

    def items(self) -> Iterator[Tuple[str, ReferenceObject]]:
        for name in self.names():
            yield name, self.lookup(name)


__all__ = ["CUSTOM_REFERENCE", "ReferenceCatalog", "ReferenceObject"]
