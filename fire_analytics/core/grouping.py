from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Hashable, Iterable, TypeVar

from fire_analytics.core.report_config import REPORT_CONFIG
from fire_analytics.core.schema import PURITY_CLASSES, ChainCastingRecord, LockAssemblyRecord

K = TypeVar("K", bound=Hashable)
R = TypeVar("R")


@dataclass
class GroupStats:
    count: int = 0
    total_loss: float = 0.0
    total_input: float = 0.0

    @property
    def average_loss(self) -> float:
        return self.total_loss / self.count if self.count else 0.0

    @property
    def average_input(self) -> float:
        return self.total_input / self.count if self.count else 0.0

    def as_dict(self) -> dict[str, float | int]:
        return {
            "count": self.count,
            "total_loss": self.total_loss,
            "average_loss": self.average_loss,
            "average_input": self.average_input,
        }


def _accumulate(
    records: Iterable[R],
    key: Callable[[R], K | None],
    loss: Callable[[R], float],
    input_mass: Callable[[R], float],
) -> dict[K, GroupStats]:
    buckets: dict[K, GroupStats] = {}
    for record in records:
        bucket_key = key(record)
        if bucket_key is None:
            continue
        stats = buckets.setdefault(bucket_key, GroupStats())
        stats.count += 1
        stats.total_loss += loss(record)
        stats.total_input += input_mass(record)
    return buckets


def _in_purity_order(buckets: dict[int, GroupStats]) -> dict[int, GroupStats]:
    return {purity: buckets[purity] for purity in PURITY_CLASSES if purity in buckets}


def _sorted_by_key(buckets: dict[str, GroupStats]) -> dict[str, GroupStats]:
    return {name: buckets[name] for name in sorted(buckets)}


def _label_or_unknown(value: str | None) -> str:
    return value if value else REPORT_CONFIG["unknown_label"]


# ----------------------------------------------------------------------
# lock assembly
# ----------------------------------------------------------------------
def _lock_loss(record: LockAssemblyRecord) -> float:
    return record.loss_mass


def _lock_input(record: LockAssemblyRecord) -> float:
    return record.total_input_mass


def group_lock_by_purity(records: Iterable[LockAssemblyRecord]) -> dict[int, GroupStats]:
    buckets = _accumulate(records, lambda record: record.purity, _lock_loss, _lock_input)
    return _in_purity_order(buckets)


def group_lock_by_model(records: Iterable[LockAssemblyRecord]) -> dict[str, GroupStats]:
    buckets = _accumulate(records, lambda record: _label_or_unknown(record.model), _lock_loss, _lock_input)
    return _sorted_by_key(buckets)


def group_lock_by_company(records: Iterable[LockAssemblyRecord]) -> dict[str, GroupStats]:
    buckets = _accumulate(records, lambda record: _label_or_unknown(record.company), _lock_loss, _lock_input)
    return _sorted_by_key(buckets)


# ----------------------------------------------------------------------
# chain casting
# ----------------------------------------------------------------------
def group_chain_by_purity(records: Iterable[ChainCastingRecord]) -> dict[int, GroupStats]:
    buckets = _accumulate(
        records,
        lambda record: record.purity,
        lambda record: record.loss or 0.0,
        lambda record: record.input_gold or 0.0,
    )
    return _in_purity_order(buckets)
