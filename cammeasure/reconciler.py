"""Stage measurements taken offline and merge them back into the ledger."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import StorageError
from .ledger import MeasurementLedger
from .measurement import MeasurementRecord, Origin
from .persistence import JsonStore

logger = logging.getLogger(__name__)

OFFLINE_MEASUREMENTS_KEY = "offlineMeasurements"


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    merged: List[MeasurementRecord] = field(default_factory=list)
    skipped_ids: List[str] = field(default_factory=list)
    discarded: int = 0
    storage_error: Optional[str] = None

    @property
    def merged_count(self) -> int:
        return len(self.merged)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "merged": [record.to_dict() for record in self.merged],
            "merged_count": self.merged_count,
            "skipped_ids": list(self.skipped_ids),
            "discarded": self.discarded,
            "storage_error": self.storage_error,
        }


class OfflineReconciler:
    """Durable staging area for records captured while disconnected.

    ``reconcile`` only removes the entries it has read, so records staged
    while a pass is running stay in the store for the next pass. Duplicate
    ids are skipped, which makes repeated passes harmless.
    """

    def __init__(self, store: JsonStore, key: str = OFFLINE_MEASUREMENTS_KEY) -> None:
        self._store = store
        self._key = key
        self._reconcile_lock = asyncio.Lock()

    async def stage(self, record: MeasurementRecord) -> MeasurementRecord:
        staged = record.with_origin(Origin.RECOVERED_OFFLINE)
        count = await asyncio.to_thread(self._store.append, self._key, staged.to_dict())
        logger.info("Measurement %s saved offline (%d pending)", staged.id, count)
        return staged

    async def pending(self) -> List[MeasurementRecord]:
        records, _ = self._decode(await self._read_staged())
        return records

    async def reconcile(self, ledger: MeasurementLedger) -> ReconcileResult:
        async with self._reconcile_lock:
            raw_entries = await self._read_staged()
            if not raw_entries:
                return ReconcileResult()

            records, invalid = self._decode(raw_entries)
            result = ReconcileResult(discarded=len(invalid))
            for record in records:
                if record.id in ledger:
                    result.skipped_ids.append(record.id)
                    continue
                ledger.append(record)
                result.merged.append(record)

            read_ids = {record.id for record in records}
            try:
                await asyncio.to_thread(
                    self._store.remove_where,
                    self._key,
                    lambda entry: entry in invalid or _entry_id(entry) in read_ids,
                )
            except StorageError as exc:
                # Merged records stay staged; the next pass skips them by id.
                logger.warning("Could not clear synced offline measurements: %s", exc)
                result.storage_error = str(exc)
            logger.info(
                "Offline measurements synced: %d merged, %d already present, %d discarded",
                result.merged_count,
                len(result.skipped_ids),
                result.discarded,
            )
            return result

    async def _read_staged(self) -> List[Any]:
        entries = await asyncio.to_thread(self._store.get, self._key, [])
        if not isinstance(entries, list):
            raise StorageError(f"Staged measurements under {self._key!r} are not a list.")
        return entries

    @staticmethod
    def _decode(entries: List[Any]) -> Tuple[List[MeasurementRecord], List[Any]]:
        records: List[MeasurementRecord] = []
        invalid: List[Any] = []
        for entry in entries:
            try:
                records.append(MeasurementRecord.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Dropping unreadable offline measurement %r: %s", entry, exc)
                invalid.append(entry)
        return records, invalid


def _entry_id(entry: Any) -> Optional[str]:
    # Decoded records carry string ids; older stages may hold numeric ones.
    if isinstance(entry, dict) and "id" in entry:
        return str(entry["id"])
    return None


__all__ = ["OFFLINE_MEASUREMENTS_KEY", "OfflineReconciler", "ReconcileResult"]
