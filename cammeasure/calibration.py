"""Two-tap calibration of the pixel-to-physical scale."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Tuple

from .errors import CalibrationStateError, DegenerateCalibrationError, NotCalibratedError
from .geometry import Point, distance_between_points, points_coincide
from .references import ReferenceObject
from .units import Unit

logger = logging.getLogger(__name__)


class CalibrationState(str, Enum):
    IDLE = "idle"
    AWAITING_FIRST_POINT = "awaiting_first_point"
    AWAITING_SECOND_POINT = "awaiting_second_point"
    CALIBRATED = "calibrated"


class CalibrationSession:
    """Derive a scale factor from two taps across a reference object.

    Only the reference width is used: the two taps are assumed to span the
    object's horizontal edge. The scale factor is expressed in the reference
    unit per pixel and stays undefined until the second tap succeeds.
    """

    def __init__(self) -> None:
        self._state = CalibrationState.IDLE
        self._reference: Optional[ReferenceObject] = None
        self._first_point: Optional[Point] = None
        self._second_point: Optional[Point] = None
        self._pixel_distance: Optional[float] = None
        self._scale_factor: Optional[float] = None

    @property
    def state(self) -> CalibrationState:
        return self._state

    @property
    def reference(self) -> Optional[ReferenceObject]:
        return self._reference

    @property
    def reference_unit(self) -> Unit:
        if self._state is not CalibrationState.CALIBRATED or self._reference is None:
            raise NotCalibratedError("Calibrate against a reference object first.")
        return self._reference.unit

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(p for p in (self._first_point, self._second_point) if p is not None)

    @property
    def pixel_distance(self) -> Optional[float]:
        return self._pixel_distance

    @property
    def is_calibrated(self) -> bool:
        return self._state is CalibrationState.CALIBRATED

    @property
    def is_collecting(self) -> bool:
        return self._state in {
            CalibrationState.AWAITING_FIRST_POINT,
            CalibrationState.AWAITING_SECOND_POINT,
        }

    def begin(self, reference: ReferenceObject) -> None:
        """Start (or restart) calibration against *reference*."""

        self._clear()
        self._reference = reference
        self._state = CalibrationState.AWAITING_FIRST_POINT
        logger.info(
            "Calibration started with reference width %s %s",
            reference.width,
            reference.unit.value,
        )

    def submit_point(self, point: Point) -> CalibrationState:
        if self._state is CalibrationState.AWAITING_FIRST_POINT:
            self._first_point = point
            self._state = CalibrationState.AWAITING_SECOND_POINT
            return self._state

        first_point = self._first_point
        reference = self._reference
        if (
            self._state is not CalibrationState.AWAITING_SECOND_POINT
            or first_point is None
            or reference is None
        ):
            raise CalibrationStateError("Start calibration before selecting points.")

        if points_coincide(first_point, point):
            raise DegenerateCalibrationError(
                "Selected points are identical. Tap two distinct points."
            )

        pixel_distance = distance_between_points(first_point, point)
        self._second_point = point
        self._pixel_distance = pixel_distance
        self._scale_factor = reference.width / pixel_distance
        self._state = CalibrationState.CALIBRATED
        logger.info(
            "Calibration complete: %.6f %s per pixel over %.2f px",
            self._scale_factor,
            reference.unit.value,
            pixel_distance,
        )
        return self._state

    def current_scale_factor(self) -> float:
        if self._state is not CalibrationState.CALIBRATED or self._scale_factor is None:
            raise NotCalibratedError("Calibrate against a reference object first.")
        return self._scale_factor

    def reset(self) -> None:
        """Drop all calibration data and return to ``IDLE``."""

        self._clear()
        self._reference = None
        self._state = CalibrationState.IDLE

    def abandon(self) -> None:
        """Abort an in-progress calibration without completing it."""

        if self.is_collecting:
            self.reset()

    def _clear(self) -> None:
        self._first_point = None
        self._second_point = None
        self._pixel_distance = None
        self._scale_factor = None

    def to_dict(self) -> dict:
        return {
            "state": self._state.value,
            "reference": self._reference.to_dict() if self._reference else None,
            "points": [point.to_dict() for point in self.points],
            "pixel_distance": self._pixel_distance,
            "scale_factor": self._scale_factor,
        }


__all__ = ["CalibrationSession", "CalibrationState"]
