"""Predicate chains that narrow a record family to the active filter."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Sequence, TypeVar

import pandas as pd

from fire_analytics.core.errors import UnknownFamilyError
from fire_analytics.core.schema import (
    RECORD_FAMILIES,
    STATIONS,
    ChainCastingRecord,
    DailyOperationRecord,
    FilterSpec,
    LockAssemblyRecord,
    Record,
)

R = TypeVar("R")
Predicate = Callable[[Record], bool]

_TIMEFRAME_OFFSETS: dict[str, pd.DateOffset] = {
    "weekly": pd.DateOffset(weeks=1),
    "monthly": pd.DateOffset(months=1),
    "yearly": pd.DateOffset(years=1),
}


def effective_date(record: Record) -> datetime:
    return record.effective_date


def _in_date_range(spec: FilterSpec) -> Predicate:
    def predicate(record: Record) -> bool:
        anchor = effective_date(record)
        return spec.date_start <= anchor <= spec.date_end

    return predicate


def _matches_purity(spec: FilterSpec) -> Predicate:
    return lambda record: record.purity == spec.purity  # type: ignore[union-attr]


def _matches_model(spec: FilterSpec) -> Predicate:
    return lambda record: record.model == spec.model  # type: ignore[union-attr]


def _matches_company(spec: FilterSpec) -> Predicate:
    return lambda record: record.company == spec.company  # type: ignore[union-attr]


def build_predicates(spec: FilterSpec, family: str) -> list[Predicate]:
    """Return the predicates a record of ``family`` must satisfy under ``spec``.

    Inactive filters (``None``) contribute no predicate, so a record with an
    empty model is only excluded while a model filter is actually set.
    """

    if family not in RECORD_FAMILIES:
        raise UnknownFamilyError(family)

    predicates: list[Predicate] = [_in_date_range(spec)]
    if family == "daily_operations":
        return predicates

    if spec.purity is not None:
        predicates.append(_matches_purity(spec))
    if family == "lock_assembly":
        if spec.model is not None:
            predicates.append(_matches_model(spec))
        if spec.company is not None:
            predicates.append(_matches_company(spec))
    return predicates


def _apply(records: Iterable[R], predicates: Sequence[Predicate]) -> list[R]:
    return [record for record in records if all(predicate(record) for predicate in predicates)]  # type: ignore[arg-type]


def filter_lock_assembly(records: Iterable[LockAssemblyRecord], spec: FilterSpec) -> list[LockAssemblyRecord]:
    return _apply(records, build_predicates(spec, "lock_assembly"))


def filter_chain_casting(records: Iterable[ChainCastingRecord], spec: FilterSpec) -> list[ChainCastingRecord]:
    return _apply(records, build_predicates(spec, "chain_casting"))


def filter_daily_operations(records: Iterable[DailyOperationRecord], spec: FilterSpec) -> list[DailyOperationRecord]:
    return _apply(records, build_predicates(spec, "daily_operations"))


def filter_records(family: str, records: Iterable[Record], spec: FilterSpec) -> list[Record]:
    return _apply(records, build_predicates(spec, family))


# ----------------------------------------------------------------------
# filter presets
# ----------------------------------------------------------------------
def date_range_for_timeframe(timeframe: str, now: datetime) -> tuple[datetime, datetime]:
    """Window ending at ``now`` that covers the last week, month or year."""

    offset = _TIMEFRAME_OFFSETS.get(timeframe)
    if offset is None:
        raise ValueError(f"unknown timeframe: {timeframe}")
    start = (pd.Timestamp(now) - offset).to_pydatetime()
    return start, now


def default_filter_spec(now: datetime) -> FilterSpec:
    start, end = date_range_for_timeframe("monthly", now)
    return FilterSpec(date_start=start, date_end=end, stations=frozenset(STATIONS))


def _distinct_text(values: Iterable[str | None]) -> list[str]:
    return sorted({value for value in values if value})


def unique_models(records: Iterable[LockAssemblyRecord]) -> list[str]:
    return _distinct_text(record.model for record in records)


def unique_companies(records: Iterable[LockAssemblyRecord]) -> list[str]:
    return _distinct_text(record.company for record in records)
