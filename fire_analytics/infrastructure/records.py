"""Infrastructure layer for record access."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from pydantic import ValidationError

from fire_analytics.core.errors import RecordSourceError, UnknownFamilyError
from fire_analytics.core.schema import (
    RECORD_FAMILIES,
    RECORD_MODELS,
    ChainCastingRecord,
    DailyOperationRecord,
    LockAssemblyRecord,
    Record,
)
from fire_analytics.domain import RecordStoreState

logger = logging.getLogger(__name__)


class RecordRepository(Protocol):
    """Read contract for the stored record families.

    Implementations return the ordered collection as stored at call time and
    raise :class:`RecordSourceError` when it cannot be read.
    """

    def list_lock_assembly(self) -> list[LockAssemblyRecord]: ...

    def list_chain_casting(self) -> list[ChainCastingRecord]: ...

    def list_daily_operations(self) -> list[DailyOperationRecord]: ...


class InMemoryRecordRepository:
    """Simple in-memory record store for fast iteration and tests."""

    def __init__(self) -> None:
        self._state = RecordStoreState()

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def list_lock_assembly(self) -> list[LockAssemblyRecord]:
        return list(self._state.lock_assembly)

    def list_chain_casting(self) -> list[ChainCastingRecord]:
        return list(self._state.chain_casting)

    def list_daily_operations(self) -> list[DailyOperationRecord]:
        return list(self._state.daily_operations)

    def list_family(self, family: str) -> list[Record]:
        if family not in RECORD_FAMILIES:
            raise UnknownFamilyError(family)
        return list(getattr(self._state, family))

    def counts(self) -> dict[str, int]:
        return {family: len(getattr(self._state, family)) for family in RECORD_FAMILIES}

    # ------------------------------------------------------------------
    # seeding
    # ------------------------------------------------------------------
    def add_lock_assembly(self, record: LockAssemblyRecord) -> None:
        self._state.lock_assembly.append(record)

    def add_chain_casting(self, record: ChainCastingRecord) -> None:
        self._state.chain_casting.append(record)

    def add_daily_operation(self, record: DailyOperationRecord) -> None:
        self._state.daily_operations.append(record)

    def add_rows(self, family: str, rows: Iterable[Mapping[str, Any]]) -> int:
        """Validate raw mappings as ``family`` records and append them.

        Rows are validated up front so a bad row leaves the store untouched.
        """

        records = self._validate(family, rows)
        getattr(self._state, family).extend(records)
        return len(records)

    def load_snapshot(self, payload: Mapping[str, Any]) -> dict[str, int]:
        validated: dict[str, list[Record]] = {}
        for family in RECORD_FAMILIES:
            rows = payload.get(family) or []
            if not isinstance(rows, list):
                raise ValueError(f"{family} must be a list of records")
            validated[family] = self._validate(family, rows)

        added: dict[str, int] = {}
        for family, records in validated.items():
            getattr(self._state, family).extend(records)
            added[family] = len(records)
        logger.info("record snapshot loaded", extra={"counts": added})
        return added

    @staticmethod
    def _validate(family: str, rows: Iterable[Mapping[str, Any]]) -> list[Record]:
        model = RECORD_MODELS.get(family)
        if model is None:
            raise UnknownFamilyError(family)
        return [model.model_validate(row) for row in rows]  # type: ignore[misc]

    def load_snapshot_file(self, path: Path) -> dict[str, int]:
        try:
            with path.open("r", encoding="utf-8") as fp:
                payload = json.load(fp)
        except (OSError, json.JSONDecodeError) as exc:
            raise RecordSourceError(f"cannot read record snapshot {path.name}: {exc}") from exc
        try:
            return self.load_snapshot(payload)
        except (ValidationError, ValueError) as exc:
            raise RecordSourceError(f"invalid record snapshot {path.name}: {exc}") from exc

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._state = RecordStoreState()
