"""Ordered history of completed measurements."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import DuplicateRecordError
from .measurement import MeasurementRecord
from .units import UnitLike, parse_unit

logger = logging.getLogger(__name__)


class MeasurementLedger:
    """Insertion-ordered records with unique ids."""

    def __init__(self) -> None:
        self._records: List[MeasurementRecord] = []
        self._index: Dict[str, MeasurementRecord] = {}

    def append(self, record: MeasurementRecord) -> None:
        if record.id in self._index:
            raise DuplicateRecordError(record.id)
        self._records.append(record)
        self._index[record.id] = record

    def clear(self) -> int:
        removed = len(self._records)
        self._records = []
        self._index = {}
        logger.info("Cleared %d measurements", removed)
        return removed

    def recompute_display(self, unit: UnitLike) -> None:
        """Express every record in *unit*."""

        target = parse_unit(unit)
        for record in self._records:
            record.redisplay(target)

    def all(self) -> Tuple[MeasurementRecord, ...]:
        return tuple(self._records)

    def get(self, record_id: str) -> Optional[MeasurementRecord]:
        return self._index.get(record_id)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._index

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MeasurementRecord]:
        return iter(tuple(self._records))


__all__ = ["MeasurementLedger"]
