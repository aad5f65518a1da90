"""
Shared pytest fixtures for the measurement engine tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from cammeasure.calibration import CalibrationSession
from cammeasure.engine import MeasureEngine
from cammeasure.geometry import Point
from cammeasure.measurement import MeasurementRecord, Origin
from cammeasure.persistence import JsonStore
from cammeasure.reconciler import OfflineReconciler
from cammeasure.references import ReferenceObject
from cammeasure.rendering import CommandBuffer
from cammeasure.units import Unit


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "offline.json"


@pytest.fixture
def store(store_path: Path) -> JsonStore:
    return JsonStore(store_path)


@pytest.fixture
def reconciler(store: JsonStore) -> OfflineReconciler:
    return OfflineReconciler(store)


@pytest.fixture
def card() -> ReferenceObject:
    return ReferenceObject(8.5, 5.4, Unit.CENTIMETER)


@pytest.fixture
def calibrated(card: ReferenceObject) -> CalibrationSession:
    """Calibration at 0.085 cm per pixel."""
    session = CalibrationSession()
    session.begin(card)
    session.submit_point(Point(0, 0))
    session.submit_point(Point(100, 0))
    return session


@pytest.fixture
def engine(reconciler: OfflineReconciler) -> MeasureEngine:
    engine = MeasureEngine(reconciler, renderer=CommandBuffer())
    engine.set_capture_active(True)
    engine.renderer.drain()
    return engine


@pytest.fixture
def calibrated_engine(engine: MeasureEngine) -> MeasureEngine:
    engine.begin_calibration("credit-card")
    engine.submit_calibration_point(Point(0, 0))
    engine.submit_calibration_point(Point(100, 0))
    engine.renderer.drain()
    return engine


@pytest.fixture
def make_record() -> Callable[..., MeasurementRecord]:
    def _make(record_id: str, physical: float = 4.25, **overrides) -> MeasurementRecord:
        fields = dict(
            id=record_id,
            point_a=Point(0, 0),
            point_b=Point(50, 0),
            pixel_distance=50.0,
            physical_distance=physical,
            reference_unit=Unit.CENTIMETER,
            display_distance=physical,
            display_unit=Unit.CENTIMETER,
            created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
            origin=Origin.LIVE,
        )
        fields.update(overrides)
        return MeasurementRecord(**fields)

    return _make
