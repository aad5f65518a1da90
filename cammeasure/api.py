"""FastAPI application exposing the measurement engine to a front-end."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple, Type

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from .config import Settings
from .engine import MeasureEngine
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
from .persistence import JsonStore
from .reconciler import OfflineReconciler
from .rendering import CommandBuffer, serialise_commands
from .units import Unit, unit_label

logger = logging.getLogger(__name__)

_ERROR_STATUS: Tuple[Tuple[Type[CamMeasureError], int], ...] = (
    (UnknownReferenceError, status.HTTP_404_NOT_FOUND),
    (InvalidReferenceError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (DegenerateCalibrationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotCalibratedError, status.HTTP_409_CONFLICT),
    (CalibrationStateError, status.HTTP_409_CONFLICT),
    (CaptureInactiveError, status.HTTP_409_CONFLICT),
    (DuplicateRecordError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


class PointPayload(BaseModel):
    x: float
    y: float

    def to_point(self) -> Point:
        return Point(self.x, self.y)


class CapturePayload(BaseModel):
    active: bool


class CalibrationPayload(BaseModel):
    reference: Optional[str] = Field(
        None, description="Reference object name; keeps the current selection when omitted."
    )


class CustomReferencePayload(BaseModel):
    width: float = Field(..., gt=0, description="Physical width of the custom reference.")
    height: Optional[float] = Field(None, gt=0, description="Defaults to the width.")
    unit: Unit = Unit.CENTIMETER


class UnitPayload(BaseModel):
    unit: Unit


class StylePayload(BaseModel):
    line_color: Optional[str] = Field(None, description="CSS colour of measurement lines.")
    line_width: Optional[int] = Field(None, gt=0, description="Line width in pixels.")

    @model_validator(mode="after")
    def validate_style(self):
        if self.line_color is None and self.line_width is None:
            raise ValueError("Provide 'line_color' and/or 'line_width'.")
        return self


class ConnectivityPayload(BaseModel):
    online: bool


def get_engine(request: Request) -> MeasureEngine:
    return request.app.state.engine


def _drain_commands(engine: MeasureEngine) -> list:
    renderer = engine.renderer
    if isinstance(renderer, CommandBuffer):
        return serialise_commands(renderer.drain())
    return []


def _error_status(exc: CamMeasureError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def create_app(settings: Optional[Settings] = None, engine: Optional[MeasureEngine] = None) -> FastAPI:
    """Build the API around *engine*, or a new engine configured by *settings*."""

    settings = settings or Settings.from_env()
    if engine is None:
        reconciler = OfflineReconciler(JsonStore(settings.store_path))
        engine = MeasureEngine(
            reconciler,
            renderer=CommandBuffer(),
            display_unit=settings.display_unit,
        )

    app = FastAPI(title="CamMeasure Engine", version="0.1.0")
    app.state.engine = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CamMeasureError)
    async def _engine_error_handler(request: Request, exc: CamMeasureError):
        status_code = _error_status(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "error": type(exc).__name__},
        )

    @app.get("/state")
    async def get_state(engine: MeasureEngine = Depends(get_engine)) -> dict:
        return engine.snapshot()

    @app.get("/units")
    async def list_units() -> dict:
        return {"units": [{"value": unit.value, "label": unit_label(unit)} for unit in Unit]}

    @app.get("/references")
    async def list_references(engine: MeasureEngine = Depends(get_engine)) -> dict:
        references: Dict[str, dict] = {
            name: reference.to_dict() for name, reference in engine.catalog.items()
        }
        return {"selected": engine.reference_name, "references": references}

    @app.put("/references/custom")
    async def set_custom_reference(
        payload: CustomReferencePayload, engine: MeasureEngine = Depends(get_engine)
    ) -> dict:
        reference = engine.set_custom_reference(payload.width, payload.unit, payload.height)
        return {"reference": reference.to_dict()}

    @app.post("/capture")
    async def set_capture(payload: CapturePayload, engine: MeasureEngine = Depends(get_engine)) -> dict:
        engine.set_capture_active(payload.active)
        return {"capture_active": engine.capture_active, "commands": _drain_commands(engine)}

    @app.post("/calibration")
    async def begin_calibration(
        payload: CalibrationPayload, engine: MeasureEngine = Depends(get_engine)
    ) -> dict:
        reference = engine.begin_calibration(payload.reference)
        return {
            "reference_name": engine.reference_name,
            "reference": reference.to_dict(),
            "calibration": engine.calibration.to_dict(),
        }

    @app.post("/calibration/points")
    async def submit_calibration_point(
        payload: PointPayload, engine: MeasureEngine = Depends(get_engine)
    ) -> dict:
        engine.submit_calibration_point(payload.to_point())
        response = {"calibration": engine.calibration.to_dict(), "scale": None}
        if engine.calibration.is_calibrated:
            response["scale"] = engine.describe_scale()
        response["commands"] = _drain_commands(engine)
        return response

    @app.post("/measurements/start")
    async def start_measurement(engine: MeasureEngine = Depends(get_engine)) -> dict:
        return {"state": engine.start_measurement().value}

    @app.post("/measurements/cancel")
    async def cancel_measurement(engine: MeasureEngine = Depends(get_engine)) -> dict:
        return {"state": engine.cancel_measurement().value}

    @app.post("/measurements/points")
    async def submit_measurement_point(
        payload: PointPayload, engine: MeasureEngine = Depends(get_engine)
    ) -> dict:
        outcome = await engine.submit_measurement_point(payload.to_point())
        response = outcome.to_dict()
        response["commands"] = _drain_commands(engine)
        return response

    @app.get("/measurements")
    async def list_measurements(engine: MeasureEngine = Depends(get_engine)) -> dict:
        return {
            "display_unit": engine.display_unit.value,
            "measurements": [record.to_dict() for record in engine.ledger.all()],
        }

    @app.delete("/measurements")
    async def clear_measurements(engine: MeasureEngine = Depends(get_engine)) -> dict:
        removed = engine.clear_measurements()
        return {"removed": removed, "commands": _drain_commands(engine)}

    @app.put("/settings/unit")
    async def set_display_unit(payload: UnitPayload, engine: MeasureEngine = Depends(get_engine)) -> dict:
        unit = engine.set_display_unit(payload.unit)
        return {
            "display_unit": unit.value,
            "measurements": [record.to_dict() for record in engine.ledger.all()],
            "commands": _drain_commands(engine),
        }

    @app.put("/settings/style")
    async def set_style(payload: StylePayload, engine: MeasureEngine = Depends(get_engine)) -> dict:
        style = engine.set_style(payload.line_color, payload.line_width)
        return {"style": style.to_dict(), "commands": _drain_commands(engine)}

    @app.post("/connectivity")
    async def set_connectivity(
        payload: ConnectivityPayload, engine: MeasureEngine = Depends(get_engine)
    ) -> dict:
        result = await engine.set_online(payload.online)
        return {
            "online": engine.online,
            "reconciliation": result.to_dict() if result is not None else None,
            "commands": _drain_commands(engine),
        }

    @app.post("/reconcile")
    async def reconcile(engine: MeasureEngine = Depends(get_engine)) -> dict:
        result = await engine.reconcile()
        return {"reconciliation": result.to_dict(), "commands": _drain_commands(engine)}

    return app


__all__ = ["create_app", "get_engine"]
