"""Tests for the calibration state machine."""

import pytest

from cammeasure.calibration import CalibrationSession, CalibrationState
from cammeasure.errors import CalibrationStateError, DegenerateCalibrationError, NotCalibratedError
from cammeasure.geometry import Point
from cammeasure.references import ReferenceObject
from cammeasure.units import Unit


def test_two_taps_produce_scale_factor(card):
    session = CalibrationSession()
    assert session.state is CalibrationState.IDLE

    session.begin(card)
    assert session.state is CalibrationState.AWAITING_FIRST_POINT
    assert session.submit_point(Point(0, 0)) is CalibrationState.AWAITING_SECOND_POINT
    assert session.submit_point(Point(100, 0)) is CalibrationState.CALIBRATED

    assert session.current_scale_factor() == pytest.approx(0.085)
    assert session.pixel_distance == pytest.approx(100.0)
    assert session.reference_unit is Unit.CENTIMETER


def test_scale_uses_width_only():
    session = CalibrationSession()
    session.begin(ReferenceObject(10.0, 40.0, Unit.MILLIMETER))
    session.submit_point(Point(0, 0))
    session.submit_point(Point(30, 40))
    assert session.current_scale_factor() == pytest.approx(10.0 / 50.0)


def test_identical_points_are_degenerate(card):
    session = CalibrationSession()
    session.begin(card)
    session.submit_point(Point(12, 7))
    with pytest.raises(DegenerateCalibrationError):
        session.submit_point(Point(12, 7))

    assert session.state is CalibrationState.AWAITING_SECOND_POINT
    assert session.points == (Point(12, 7),)
    with pytest.raises(NotCalibratedError):
        session.current_scale_factor()

    session.submit_point(Point(12, 27))
    assert session.current_scale_factor() == pytest.approx(8.5 / 20)


def test_scale_factor_unavailable_before_calibration():
    session = CalibrationSession()
    with pytest.raises(NotCalibratedError):
        session.current_scale_factor()


def test_points_rejected_when_not_collecting(calibrated):
    session = CalibrationSession()
    with pytest.raises(CalibrationStateError):
        session.submit_point(Point(1, 1))
    with pytest.raises(CalibrationStateError):
        calibrated.submit_point(Point(1, 1))
    assert calibrated.current_scale_factor() == pytest.approx(0.085)


def test_begin_restarts_from_any_state(calibrated, card):
    calibrated.begin(card)
    assert calibrated.state is CalibrationState.AWAITING_FIRST_POINT
    assert calibrated.points == ()
    with pytest.raises(NotCalibratedError):
        calibrated.current_scale_factor()

    calibrated.submit_point(Point(0, 0))
    calibrated.begin(card)
    assert calibrated.points == ()


def test_abandon_only_drops_in_progress_calibration(calibrated, card):
    calibrated.abandon()
    assert calibrated.is_calibrated

    calibrated.begin(card)
    calibrated.submit_point(Point(5, 5))
    calibrated.abandon()
    assert calibrated.state is CalibrationState.IDLE
    assert calibrated.reference is None


def test_to_dict(calibrated):
    payload = calibrated.to_dict()
    assert payload["state"] == "calibrated"
    assert payload["reference"] == {"width": 8.5, "height": 5.4, "unit": "cm"}
    assert payload["points"] == [{"x": 0, "y": 0}, {"x": 100, "y": 0}]


def test_points_rejected_after_abandon(card):
    session = CalibrationSession()
    session.begin(card)
    session.submit_point(Point(0, 0))
    session.abandon()
    with pytest.raises(CalibrationStateError):
        session.submit_point(Point(10, 0))
    assert session.state is CalibrationState.IDLE
