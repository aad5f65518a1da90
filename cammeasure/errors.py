"""Exceptions raised by the calibration and measurement engine."""

from __future__ import annotations


class CamMeasureError(Exception):
    """Base class for recoverable engine errors."""


class UnknownReferenceError(CamMeasureError, KeyError):
    """Raised when a reference object name is not in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown reference object: {self.name!r}"


class InvalidReferenceError(CamMeasureError, ValueError):
    """Raised when reference dimensions are not strictly positive."""


class NotCalibratedError(CamMeasureError):
    """Raised when a scale factor is required before calibration completed."""


class CalibrationStateError(CamMeasureError):
    """Raised when a calibration point arrives while no calibration is running."""


class DegenerateCalibrationError(CamMeasureError):
    """Raised when both calibration points coincide."""


class CaptureInactiveError(CamMeasureError):
    """Raised when calibration starts without an active capture source."""


class DuplicateRecordError(CamMeasureError):
    """Raised when a record id is already present in the ledger."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Measurement {record_id!r} is already recorded.")
        self.record_id = record_id


class StorageError(CamMeasureError):
    """Raised when the durable store cannot be read or written."""


__all__ = [
    "CalibrationStateError",
    "CamMeasureError",
    "CaptureInactiveError",
    "DegenerateCalibrationError",
    "DuplicateRecordError",
    "InvalidReferenceError",
    "NotCalibratedError",
    "StorageError",
    "UnknownReferenceError",
]
