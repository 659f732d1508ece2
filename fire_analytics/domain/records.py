"""Domain entities for the record store and export jobs."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from fire_analytics.core.schema import ChainCastingRecord, DailyOperationRecord, LockAssemblyRecord


@dataclass(slots=True)
class RecordStoreState:
    """Current stored records, one ordered list per family."""

    lock_assembly: list[LockAssemblyRecord] = field(default_factory=list)
    chain_casting: list[ChainCastingRecord] = field(default_factory=list)
    daily_operations: list[DailyOperationRecord] = field(default_factory=list)


@dataclass(slots=True)
class ExportJob:
    """Represents one export interaction: render, persist, hand over, discard."""

    job_id: str
    family: str
    export_format: str
    status: str = "pending"
    path: Path | None = None
    error: str | None = None
