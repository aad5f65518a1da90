"""Tests for the measurement session and records."""

from datetime import datetime, timezone

import pytest

from cammeasure.calibration import CalibrationSession
from cammeasure.errors import NotCalibratedError
from cammeasure.geometry import Point
from cammeasure.measurement import MeasurementRecord, MeasurementSession, MeasurementState, Origin
from cammeasure.references import ReferenceObject
from cammeasure.units import Unit

FIXED_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _session(calibration, unit=Unit.CENTIMETER):
    ids = iter(f"m{n}" for n in range(1, 100))
    return MeasurementSession(
        calibration,
        lambda: unit,
        clock=lambda: FIXED_TIME,
        id_factory=lambda: next(ids),
    )


def test_measures_against_calibrated_scale(calibrated):
    session = _session(calibrated)
    session.start()
    assert session.submit_point(Point(0, 0)) is None
    assert session.state is MeasurementState.AWAITING_SECOND_POINT

    record = session.submit_point(Point(50, 0))
    assert record is not None
    assert record.pixel_distance == pytest.approx(50.0)
    assert record.physical_distance == pytest.approx(4.25)
    assert record.display_distance == pytest.approx(4.25)
    assert record.display_unit is Unit.CENTIMETER
    assert record.origin is Origin.LIVE
    assert record.created_at == FIXED_TIME
    assert session.state is MeasurementState.INACTIVE


def test_converts_to_display_unit(calibrated):
    session = _session(calibrated, Unit.MILLIMETER)
    session.submit_point(Point(0, 0))
    result = session.submit_point(Point(0, 50))
    assert result.reference_unit is Unit.CENTIMETER
    assert result.display_distance == pytest.approx(42.5)
    assert result.display_unit is Unit.MILLIMETER


def test_requires_calibration():
    session = _session(CalibrationSession())
    with pytest.raises(NotCalibratedError):
        session.start()
    with pytest.raises(NotCalibratedError):
        session.submit_point(Point(1, 2))
    assert session.state is MeasurementState.INACTIVE


def test_tap_while_inactive_starts_a_pair(calibrated):
    session = _session(calibrated)
    session.submit_point(Point(0, 0))
    assert session.pending_point == Point(0, 0)
    assert session.submit_point(Point(10, 0)).id == "m1"


def test_cancel_discards_pending_point(calibrated):
    session = _session(calibrated)
    session.start()
    session.submit_point(Point(3, 4))
    session.cancel()
    assert session.state is MeasurementState.INACTIVE
    assert session.pending_point is None


def test_restart_discards_pending_point(calibrated):
    session = _session(calibrated)
    session.submit_point(Point(0, 0))
    session.start()
    assert session.submit_point(Point(5, 0)) is None
    assert session.pending_point == Point(5, 0)
    assert session.state is MeasurementState.AWAITING_SECOND_POINT


def test_toggle(calibrated):
    session = _session(calibrated)
    assert session.toggle() is MeasurementState.AWAITING_FIRST_POINT
    assert session.toggle() is MeasurementState.INACTIVE


def test_each_record_gets_a_fresh_id(calibrated):
    session = _session(calibrated)
    ids = []
    for _ in range(3):
        session.submit_point(Point(0, 0))
        ids.append(session.submit_point(Point(1, 1)).id)
    assert ids == ["m1", "m2", "m3"]


def test_recalibration_applies_to_next_measurement(calibrated):
    session = _session(calibrated)
    session.submit_point(Point(0, 0))

    calibrated.begin(ReferenceObject(2.0, 1.0, Unit.INCH))
    calibrated.submit_point(Point(0, 0))
    calibrated.submit_point(Point(0, 100))

    record = session.submit_point(Point(50, 0))
    assert record.physical_distance == pytest.approx(1.0)
    assert record.reference_unit is Unit.INCH
    assert record.display_distance == pytest.approx(2.54)


def test_second_tap_during_recalibration_keeps_pending_point(calibrated, card):
    session = _session(calibrated)
    session.submit_point(Point(0, 0))
    calibrated.begin(card)
    with pytest.raises(NotCalibratedError):
        session.submit_point(Point(5, 0))
    assert session.state is MeasurementState.AWAITING_SECOND_POINT
    assert session.pending_point == Point(0, 0)


def test_record_dict_round_trip(make_record):
    record = make_record("abc", origin=Origin.RECOVERED_OFFLINE)
    payload = record.to_dict()
    assert payload["origin"] == "recoveredOffline"
    assert payload["created_at"] == "2024-05-01T12:00:00+00:00"
    assert MeasurementRecord.from_dict(payload) == record


def test_redisplay_uses_reference_unit(make_record):
    record = make_record("abc", physical=2.0, reference_unit=Unit.INCH)
    record.redisplay(Unit.MILLIMETER)
    assert record.display_distance == pytest.approx(50.8)
    assert record.display_unit is Unit.MILLIMETER
    assert record.physical_distance == 2.0
