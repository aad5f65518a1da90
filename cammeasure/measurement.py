"""Two-tap measurement session and the records it produces."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from .calibration import CalibrationSession
from .errors import NotCalibratedError
from .geometry import Point, distance_between_points
from .units import Unit, convert, parse_unit

logger = logging.getLogger(__name__)


class Origin(str, Enum):
    LIVE = "live"
    RECOVERED_OFFLINE = "recoveredOffline"


class MeasurementState(str, Enum):
    INACTIVE = "inactive"
    AWAITING_FIRST_POINT = "awaiting_first_point"
    AWAITING_SECOND_POINT = "awaiting_second_point"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass
class MeasurementRecord:
    """A completed measurement between two taps.

    ``physical_distance`` is expressed in ``reference_unit``; only the
    display fields change after creation.
    """

    id: str
    point_a: Point
    point_b: Point
    pixel_distance: float
    physical_distance: float
    reference_unit: Unit
    display_distance: float
    display_unit: Unit
    created_at: datetime = field(default_factory=_utcnow)
    origin: Origin = Origin.LIVE

    def redisplay(self, unit: Unit) -> None:
        self.display_distance = convert(self.physical_distance, self.reference_unit, unit)
        self.display_unit = unit

    def with_origin(self, origin: Origin) -> "MeasurementRecord":
        return replace(self, origin=origin)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation."""

        return {
            "id": self.id,
            "point_a": self.point_a.to_dict(),
            "point_b": self.point_b.to_dict(),
            "pixel_distance": self.pixel_distance,
            "physical_distance": self.physical_distance,
            "reference_unit": self.reference_unit.value,
            "display_distance": self.display_distance,
            "display_unit": self.display_unit.value,
            "created_at": self.created_at.isoformat(),
            "origin": self.origin.value,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MeasurementRecord":
        created_at = datetime.fromisoformat(payload["created_at"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(payload["id"]),
            point_a=Point.from_dict(payload["point_a"]),
            point_b=Point.from_dict(payload["point_b"]),
            pixel_distance=float(payload["pixel_distance"]),
            physical_distance=float(payload["physical_distance"]),
            reference_unit=parse_unit(payload["reference_unit"]),
            display_distance=float(payload["display_distance"]),
            display_unit=parse_unit(payload["display_unit"]),
            created_at=created_at,
            origin=Origin(payload.get("origin", Origin.LIVE.value)),
        )


class MeasurementSession:
    """Collect point pairs and turn each pair into a :class:`MeasurementRecord`.

    The scale factor is read from *calibration* when a pair completes, so a
    recalibration applies to the next measurement immediately.
    """

    def __init__(
        self,
        calibration: CalibrationSession,
        display_unit: Callable[[], Unit],
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_record_id,
    ) -> None:
        self._calibration = calibration
        self._display_unit = display_unit
        self._clock = clock
        self._id_factory = id_factory
        self._state = MeasurementState.INACTIVE
        self._first_point: Optional[Point] = None

    @property
    def state(self) -> MeasurementState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is not MeasurementState.INACTIVE

    @property
    def pending_point(self) -> Optional[Point]:
        return self._first_point

    def start(self) -> None:
        if not self._calibration.is_calibrated:
            raise NotCalibratedError("Please calibrate before measuring.")
        self._first_point = None
        self._state = MeasurementState.AWAITING_FIRST_POINT

    def cancel(self) -> None:
        self._first_point = None
        self._state = MeasurementState.INACTIVE

    def toggle(self) -> MeasurementState:
        if self.is_active:
            self.cancel()
        else:
            self.start()
        return self._state

    def submit_point(self, point: Point) -> Optional[MeasurementRecord]:
        """Add a tap; return the record once the second tap completes a pair."""

        if self._state is MeasurementState.INACTIVE:
            self.start()

        first_point = self._first_point
        if first_point is None:
            self._first_point = point
            self._state = MeasurementState.AWAITING_SECOND_POINT
            return None

        scale_factor = self._calibration.current_scale_factor()
        reference_unit = self._calibration.reference_unit
        display_unit = self._display_unit()

        pixel_distance = distance_between_points(first_point, point)
        physical_distance = pixel_distance * scale_factor
        record = MeasurementRecord(
            id=self._id_factory(),
            point_a=first_point,
            point_b=point,
            pixel_distance=pixel_distance,
            physical_distance=physical_distance,
            reference_unit=reference_unit,
            display_distance=convert(physical_distance, reference_unit, display_unit),
            display_unit=display_unit,
            created_at=self._clock(),
            origin=Origin.LIVE,
        )
        self.cancel()
        logger.debug(
            "Measurement %s: %.2f px -> %.4f %s",
            record.id,
            pixel_distance,
            physical_distance,
            reference_unit.value,
        )
        return record


__all__ = ["MeasurementRecord", "MeasurementSession", "MeasurementState", "Origin"]
