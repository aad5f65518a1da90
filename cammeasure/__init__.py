"""Calibration and measurement engine for camera-based rulers."""

from __future__ import annotations

from .calibration import CalibrationSession, CalibrationState
from .engine import MeasureEngine, MeasurementOutcome
from .errors import (
    CalibrationStateError,
    CamMeasureError,
    CaptureInactiveError,
    DegenerateCalibrationError,
    DuplicateRecordError,
    InvalidReferenceError,
    NotCalibratedError,
    StorageError,
    UnknownReferenceError,
)
from .geometry import Point
from .ledger import MeasurementLedger
from .measurement import MeasurementRecord, MeasurementSession, MeasurementState, Origin
from .persistence import JsonStore
from .reconciler import OfflineReconciler, ReconcileResult
from .references import ReferenceCatalog, ReferenceObject
from .units import Unit, convert

__all__ = [
    "CalibrationSession",
    "CalibrationState",
    "CalibrationStateError",
    "CamMeasureError",
    "CaptureInactiveError",
    "DegenerateCalibrationError",
    "DuplicateRecordError",
    "InvalidReferenceError",
    "JsonStore",
    "MeasureEngine",
    "MeasurementLedger",
    "MeasurementOutcome",
    "MeasurementRecord",
    "MeasurementSession",
    "MeasurementState",
    "NotCalibratedError",
    "OfflineReconciler",
    "Origin",
    "Point",
    "ReconcileResult",
    "ReferenceCatalog",
    "ReferenceObject",
    "StorageError",
    "Unit",
    "UnknownReferenceError",
    "convert",
]
