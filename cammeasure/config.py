"""Environment-driven settings for the API server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .units import Unit, parse_unit

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_STORE_PATH = BASE_DIR / "data" / "offline.json"


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    store_path: Path = DEFAULT_STORE_PATH
    display_unit: Unit = Unit.CENTIMETER
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            store_path=Path(env.get("CAMMEASURE_STORE_PATH", str(DEFAULT_STORE_PATH))),
            display_unit=parse_unit(env.get("CAMMEASURE_DISPLAY_UNIT", Unit.CENTIMETER.value)),
            log_level=env.get("CAMMEASURE_LOG_LEVEL", "INFO").upper(),
            cors_origins=_split_origins(env.get("CAMMEASURE_CORS_ORIGINS", "*")),
            host=env.get("HOST", "127.0.0.1"),
            port=int(env.get("PORT", "8000")),
            reload=env.get("UVICORN_RELOAD", "0") == "1",
        )


__all__ = ["DEFAULT_STORE_PATH", "Settings"]
