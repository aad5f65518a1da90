"""Very small JSON-backed key-value store that survives restarts."""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from .errors import StorageError


class JsonStore:
    """Persist JSON values under string keys in a single file.

    Every mutation reads the file, applies the change and writes the whole
    payload back through a temporary file, all while holding the lock, so a
    read-modify-write never interleaves with another one.
    """

    def __init__(self, storage_path: Path) -> None:
        self._path = Path(storage_path)
        self._lock = Lock()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                self._write({})
        except OSError as exc:
            raise StorageError(f"Cannot initialise store at {self._path}: {exc}") from exc

    def _read(self) -> Dict[str, Any]:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read store at {self._path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageError(f"Store at {self._path} does not contain a JSON object.")
        return payload

    def _write(self, payload: Dict[str, Any]) -> None:
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=str(self._path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StorageError(f"Cannot write store at {self._path}: {exc}") from exc

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._read().get(key, default)

    def append(self, key: str, item: Any) -> int:
        """Append *item* to the list stored under *key*; return the new length."""

        with self._lock:
            payload = self._read()
            items = list(payload.get(key) or [])
            items.append(item)
            payload[key] = items
            self._write(payload)
            return len(items)

    def remove_where(self, key: str, predicate: Callable[[Any], bool]) -> int:
        """Drop list items under *key* matching *predicate*; return how many."""

        with self._lock:
            payload = self._read()
            items: List[Any] = list(payload.get(key) or [])
            kept = [item for item in items if not predicate(item)]
            removed = len(items) - len(kept)
            if not removed:
                return 0
            if kept:
                payload[key] = kept
            else:
                payload.pop(key, None)
            self._write(payload)
            return removed


__all__ = ["JsonStore"]
