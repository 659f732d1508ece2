from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from fire_analytics.core.schema import ChainCastingRecord, LockAssemblyRecord


@dataclass
class LockAssemblyMetrics:
    count: int = 0
    total_loss: float = 0.0
    average_loss: float = 0.0
    efficiency: float = 0.0
    average_input: float = 0.0
    average_duration_seconds: float = 0.0


@dataclass
class ChainCastingMetrics:
    count: int = 0
    total_loss: float = 0.0
    average_ratio: float = 0.0


@dataclass
class DailyOperationMetrics:
    count: int = 0
    total_loss: float = 0.0
    average_loss: float = 0.0


def _mean(total: float, count: int) -> float:
    if count == 0:
        return 0.0
    return total / count


# ----------------------------------------------------------------------
# lock assembly
# ----------------------------------------------------------------------
def lock_assembly_total_loss(records: Sequence[LockAssemblyRecord]) -> float:
    return sum(record.loss_mass for record in records)


def lock_assembly_average_loss(records: Sequence[LockAssemblyRecord]) -> float:
    return _mean(lock_assembly_total_loss(records), len(records))


def lock_assembly_efficiency(records: Sequence[LockAssemblyRecord]) -> float:
    """Output as a percentage of input; 0 when nothing went in."""

    total_input = sum(record.total_input_mass for record in records)
    if total_input == 0:
        return 0.0
    total_output = sum(record.total_output_mass for record in records)
    return total_output / total_input * 100


def lock_assembly_average_input(records: Sequence[LockAssemblyRecord]) -> float:
    return _mean(sum(record.total_input_mass for record in records), len(records))


def lock_assembly_average_duration(records: Sequence[LockAssemblyRecord]) -> float:
    durations = [seconds for record in records if (seconds := record.elapsed_seconds) is not None]
    return _mean(sum(durations), len(durations))


def summarize_lock_assembly(records: Sequence[LockAssemblyRecord]) -> LockAssemblyMetrics:
    return LockAssemblyMetrics(
        count=len(records),
        total_loss=lock_assembly_total_loss(records),
        average_loss=lock_assembly_average_loss(records),
        efficiency=lock_assembly_efficiency(records),
        average_input=lock_assembly_average_input(records),
        average_duration_seconds=lock_assembly_average_duration(records),
    )


def format_duration(seconds: float) -> str:
    hours = int(seconds) // 3600
    minutes = (int(seconds) % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


# ----------------------------------------------------------------------
# chain casting
# ----------------------------------------------------------------------
def chain_casting_total_loss(records: Sequence[ChainCastingRecord]) -> float:
    return sum(record.loss or 0.0 for record in records)


def chain_casting_average_ratio(records: Sequence[ChainCastingRecord]) -> float:
    # Records without a ratio still count towards the divisor.
    ratios = [record.purity_ratio for record in records if record.purity_ratio is not None]
    return _mean(sum(ratios), len(records))


def summarize_chain_casting(records: Sequence[ChainCastingRecord]) -> ChainCastingMetrics:
    return ChainCastingMetrics(
        count=len(records),
        total_loss=chain_casting_total_loss(records),
        average_ratio=chain_casting_average_ratio(records),
    )
