"""Application service layer for loss analytics."""
from __future__ import annotations

import logging
from typing import Any, Collection

from fire_analytics.core import filters, grouping, metrics, traversal
from fire_analytics.core.errors import UnknownFamilyError
from fire_analytics.core.schema import (
    PURITY_CLASSES,
    RECORD_FAMILIES,
    STATIONS,
    ChainCastingRecord,
    DailyOperationRecord,
    FilterSpec,
    LockAssemblyRecord,
    Record,
)
from fire_analytics.exporters.delimited import render_delimited
from fire_analytics.infrastructure import InMemoryRecordRepository, RecordRepository

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "pdf")


def _groups(buckets: dict[Any, grouping.GroupStats]) -> list[dict[str, Any]]:
    return [{"key": key, **stats.as_dict()} for key, stats in buckets.items()]


def _positive(totals: dict[Any, float]) -> list[dict[str, Any]]:
    return [{"key": key, "total_loss": total} for key, total in totals.items() if total > 0]


class AnalyticsService:
    """Computes per-tab summaries and exports from the current record snapshot."""

    def __init__(self, repository: RecordRepository) -> None:
        self._repository = repository

    @property
    def repository(self) -> RecordRepository:
        return self._repository

    # ------------------------------------------------------------------
    # filtered collections
    # ------------------------------------------------------------------
    def lock_assembly_records(self, spec: FilterSpec) -> list[LockAssemblyRecord]:
        return filters.filter_lock_assembly(self._repository.list_lock_assembly(), spec)

    def chain_casting_records(self, spec: FilterSpec) -> list[ChainCastingRecord]:
        return filters.filter_chain_casting(self._repository.list_chain_casting(), spec)

    def daily_operation_records(self, spec: FilterSpec) -> list[DailyOperationRecord]:
        return filters.filter_daily_operations(self._repository.list_daily_operations(), spec)

    def filtered_records(self, family: str, spec: FilterSpec) -> list[Record]:
        if family == "lock_assembly":
            return self.lock_assembly_records(spec)  # type: ignore[return-value]
        if family == "chain_casting":
            return self.chain_casting_records(spec)  # type: ignore[return-value]
        if family == "daily_operations":
            return self.daily_operation_records(spec)  # type: ignore[return-value]
        raise UnknownFamilyError(family)

    # ------------------------------------------------------------------
    # summaries
    # ------------------------------------------------------------------
    def lock_assembly_summary(self, spec: FilterSpec) -> dict[str, Any]:
        records = self.lock_assembly_records(spec)
        summary = metrics.summarize_lock_assembly(records)
        result: dict[str, Any] = {
            "family": "lock_assembly",
            "count": summary.count,
            "total_loss": summary.total_loss,
            "average_loss": summary.average_loss,
            "efficiency": summary.efficiency,
            "average_input": summary.average_input,
            "average_duration_seconds": summary.average_duration_seconds,
            "average_duration": metrics.format_duration(summary.average_duration_seconds),
            "by_purity": _groups(grouping.group_lock_by_purity(records)),
        }
        # Grouping along a dimension is only meaningful while it is unfiltered.
        if spec.model is None:
            result["by_model"] = _groups(grouping.group_lock_by_model(records))
        if spec.company is None:
            result["by_company"] = _groups(grouping.group_lock_by_company(records))
        return result

    def chain_casting_summary(self, spec: FilterSpec) -> dict[str, Any]:
        records = self.chain_casting_records(spec)
        summary = metrics.summarize_chain_casting(records)
        return {
            "family": "chain_casting",
            "count": summary.count,
            "total_loss": summary.total_loss,
            "average_ratio": summary.average_ratio,
            "by_purity": _groups(grouping.group_chain_by_purity(records)),
        }

    def daily_operations_summary(self, spec: FilterSpec) -> dict[str, Any]:
        records = self.daily_operation_records(spec)
        summary = traversal.summarize_daily_operations(records, spec.stations)
        return {
            "family": "daily_operations",
            "count": summary.count,
            "total_loss": summary.total_loss,
            "average_loss": summary.average_loss,
            "stations": sorted(spec.stations),
            "by_station": _positive(traversal.loss_by_station(records, spec.stations)),
            "by_purity": _positive(traversal.loss_by_purity(records)),
        }

    def summary(self, family: str, spec: FilterSpec) -> dict[str, Any]:
        if family == "lock_assembly":
            return self.lock_assembly_summary(spec)
        if family == "chain_casting":
            return self.chain_casting_summary(spec)
        if family == "daily_operations":
            return self.daily_operations_summary(spec)
        raise UnknownFamilyError(family)

    def filter_options(self) -> dict[str, Any]:
        lock_records = self._repository.list_lock_assembly()
        return {
            "families": list(RECORD_FAMILIES),
            "purities": list(PURITY_CLASSES),
            "stations": list(STATIONS),
            "models": filters.unique_models(lock_records),
            "companies": filters.unique_companies(lock_records),
        }

    # ------------------------------------------------------------------
    # exports
    # ------------------------------------------------------------------
    def render_export(self, family: str, export_format: str, spec: FilterSpec) -> bytes:
        """Render the filtered ``family`` records in ``export_format`` without writing them."""

        if export_format not in EXPORT_FORMATS:
            raise ValueError(f"unsupported export format: {export_format}")
        records = self.filtered_records(family, spec)
        logger.info(
            "rendering export",
            extra={"family": family, "export_format": export_format, "counts": {family: len(records)}},
        )
        if export_format == "csv":
            return render_delimited(family, records).encode("utf-8")
        # PDF rendering pulls in weasyprint's native stack; load it on first use.
        from fire_analytics.exporters.document import render_document

        return render_document(family, records, spec.stations)

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        reset = getattr(self._repository, "reset", None)
        if reset is not None:
            reset()


_repository = InMemoryRecordRepository()
_service = AnalyticsService(_repository)


def get_record_repository() -> InMemoryRecordRepository:
    """Return the process-wide in-memory record store."""

    return _repository


def get_analytics_service() -> AnalyticsService:
    """Return the singleton analytics service for the process."""

    return _service


def reset_analytics_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
