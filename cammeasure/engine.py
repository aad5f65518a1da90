"""Event-facing engine wiring calibration, measurement and offline storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from .calibration import CalibrationSession, CalibrationState
from .errors import CaptureInactiveError, StorageError
from .geometry import Point
from .ledger import MeasurementLedger
from .measurement import MeasurementRecord, MeasurementSession, MeasurementState
from .reconciler import OfflineReconciler, ReconcileResult
from .references import ReferenceCatalog, ReferenceObject
from .rendering import (
    CALIBRATION_LINE_COLOR,
    CALIBRATION_LINE_WIDTH,
    CALIBRATION_POINT_COLOR,
    CALIBRATION_POINT_RADIUS,
    MEASUREMENT_POINT_COLOR,
    MEASUREMENT_POINT_RADIUS,
    ClearSurface,
    CommandBuffer,
    DrawCommand,
    DrawLabeledDistance,
    DrawLine,
    DrawPoint,
    DrawStyle,
    Renderer,
)
from .units import Unit, UnitLike, convert, format_distance, parse_unit

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE = "credit-card"


@dataclass
class MeasurementOutcome:
    """Result of feeding one tap to the measurement session."""

    state: MeasurementState
    record: Optional[MeasurementRecord] = None
    staged: bool = False
    storage_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "record": self.record.to_dict() if self.record else None,
            "staged": self.staged,
            "storage_error": self.storage_error,
        }


class MeasureEngine:
    """Own one calibration/measurement workflow and its side effects.

    Callers feed taps, capture and connectivity changes; the engine keeps the
    ledger current, stages records while offline and sends draw commands to
    the renderer.
    """

    def __init__(
        self,
        reconciler: OfflineReconciler,
        *,
        renderer: Optional[Renderer] = None,
        catalog: Optional[ReferenceCatalog] = None,
        display_unit: UnitLike = Unit.CENTIMETER,
        style: Optional[DrawStyle] = None,
        online: bool = True,
    ) -> None:
        self.catalog = catalog or ReferenceCatalog()
        self.calibration = CalibrationSession()
        self.ledger = MeasurementLedger()
        self.reconciler = reconciler
        self.renderer: Renderer = renderer if renderer is not None else CommandBuffer()
        self._display_unit = parse_unit(display_unit)
        self.measurement = MeasurementSession(self.calibration, lambda: self._display_unit)
        self._style = style or DrawStyle()
        self._reference_name = DEFAULT_REFERENCE
        self._capture_active = False
        self._online = online
        self._sync_failed = False

    @property
    def display_unit(self) -> Unit:
        return self._display_unit

    @property
    def style(self) -> DrawStyle:
        return self._style

    @property
    def reference_name(self) -> str:
        return self._reference_name

    @property
    def capture_active(self) -> bool:
        return self._capture_active

    @property
    def online(self) -> bool:
        return self._online

    # -- reference objects -------------------------------------------------

    def select_reference(self, name: str) -> ReferenceObject:
        reference = self.catalog.lookup(name)
        self._reference_name = name
        return reference

    def set_custom_reference(
        self, width: float, unit: UnitLike, height: Optional[float] = None
    ) -> ReferenceObject:
        return self.catalog.set_custom(width, unit, height)

    # -- capture source ----------------------------------------------------

    def set_capture_active(self, active: bool) -> None:
        if active == self._capture_active:
            return
        self._capture_active = active
        if active:
            logger.info("Capture source started")
            self.redraw()
            return
        logger.info("Capture source stopped")
        self.calibration.abandon()
        self.measurement.cancel()
        self._draw([ClearSurface()])

    # -- calibration -------------------------------------------------------

    def begin_calibration(self, reference_name: Optional[str] = None) -> ReferenceObject:
        if not self._capture_active:
            raise CaptureInactiveError("Please start the camera before calibrating.")
        if reference_name is not None:
            self.select_reference(reference_name)
        reference = self.catalog.lookup(self._reference_name)
        self.measurement.cancel()
        self.calibration.begin(reference)
        return reference

    def submit_calibration_point(self, point: Point) -> CalibrationState:
        state = self.calibration.submit_point(point)
        commands: List[DrawCommand] = [
            DrawPoint(point, CALIBRATION_POINT_COLOR, CALIBRATION_POINT_RADIUS)
        ]
        if state is CalibrationState.CALIBRATED:
            commands.extend(self._calibration_overlay())
        self._draw(commands)
        return state

    def describe_scale(self) -> str:
        """Return the calibrated scale as millimetres per pixel."""

        scale = self.calibration.current_scale_factor()
        mm_per_pixel = convert(scale, self.calibration.reference_unit, Unit.MILLIMETER)
        return f"1px = {mm_per_pixel:.3f}mm"

    # -- measurement -------------------------------------------------------

    def start_measurement(self) -> MeasurementState:
        self.measurement.start()
        return self.measurement.state

    def cancel_measurement(self) -> MeasurementState:
        self.measurement.cancel()
        return self.measurement.state

    def toggle_measurement(self) -> MeasurementState:
        return self.measurement.toggle()

    async def submit_measurement_point(self, point: Point) -> MeasurementOutcome:
        record = self.measurement.submit_point(point)
        commands: List[DrawCommand] = [
            DrawPoint(point, MEASUREMENT_POINT_COLOR, MEASUREMENT_POINT_RADIUS)
        ]
        if record is None:
            self._draw(commands)
            return MeasurementOutcome(state=self.measurement.state)

        self.ledger.append(record)
        commands.extend(self._record_overlay(record))
        self._draw(commands)
        outcome = MeasurementOutcome(state=self.measurement.state, record=record)

        if not self._online:
            try:
                await self.reconciler.stage(record)
            except StorageError as exc:
                logger.warning("Could not save measurement %s offline: %s", record.id, exc)
                outcome.storage_error = str(exc)
            else:
                outcome.staged = True
        return outcome

    def clear_measurements(self) -> int:
        removed = self.ledger.clear()
        self._draw([ClearSurface()])
        return removed

    # -- connectivity ------------------------------------------------------

    async def set_online(self, online: bool) -> Optional[ReconcileResult]:
        """Record a connectivity change; going online (or retrying a failed sync) reconciles."""

        should_sync = online and (not self._online or self._sync_failed)
        self._online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        if should_sync:
            return await self.reconcile()
        return None

    async def reconcile(self) -> ReconcileResult:
        """Merge staged records; storage failures are reported on the result."""

        try:
            result = await self.reconciler.reconcile(self.ledger)
        except StorageError as exc:
            logger.warning("Could not read offline measurements: %s", exc)
            result = ReconcileResult(storage_error=str(exc))
        self._sync_failed = result.storage_error is not None
        if result.merged:
            # Recovered records may carry another unit than the current one.
            self.ledger.recompute_display(self._display_unit)
            self.redraw()
        return result

    # -- display settings --------------------------------------------------

    def set_display_unit(self, unit: UnitLike) -> Unit:
        self._display_unit = parse_unit(unit)
        self.ledger.recompute_display(self._display_unit)
        self.redraw()
        return self._display_unit

    def set_style(
        self, line_color: Optional[str] = None, line_width: Optional[int] = None
    ) -> DrawStyle:
        changes: Dict[str, Any] = {}
        if line_color is not None:
            changes["line_color"] = line_color
        if line_width is not None:
            changes["line_width"] = line_width
        self._style = replace(self._style, **changes)
        self.redraw()
        return self._style

    def redraw(self) -> None:
        commands: List[DrawCommand] = [ClearSurface()]
        if self.calibration.is_calibrated:
            commands.extend(self._calibration_overlay())
        for record in self.ledger:
            commands.extend(self._record_overlay(record))
        self._draw(commands)

    # -- helpers -----------------------------------------------------------

    def _calibration_overlay(self) -> List[DrawCommand]:
        reference = self.calibration.reference
        if reference is None:
            return []
        start, end = self.calibration.points
        return [
            DrawLine(start, end, CALIBRATION_LINE_COLOR, CALIBRATION_LINE_WIDTH),
            DrawLabeledDistance(start, end, format_distance(reference.width, reference.unit)),
        ]

    def _record_overlay(self, record: MeasurementRecord) -> List[DrawCommand]:
        return [
            DrawLine(record.point_a, record.point_b, self._style.line_color, self._style.line_width),
            DrawLabeledDistance(
                record.point_a,
                record.point_b,
                format_distance(record.display_distance, record.display_unit),
            ),
        ]

    def _draw(self, commands: List[DrawCommand]) -> None:
        self.renderer.draw(commands)

    def snapshot(self) -> Dict[str, Any]:
        scale: Optional[str] = None
        if self.calibration.is_calibrated:
            scale = self.describe_scale()
        return {
            "capture_active": self._capture_active,
            "online": self._online,
            "reference_name": self._reference_name,
            "display_unit": self._display_unit.value,
            "style": self._style.to_dict(),
            "calibration": self.calibration.to_dict(),
            "scale": scale,
            "measurement_state": self.measurement.state.value,
            "measurement_count": len(self.ledger),
        }


__all__ = ["DEFAULT_REFERENCE", "MeasureEngine", "MeasurementOutcome"]
