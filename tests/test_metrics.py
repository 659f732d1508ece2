import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fire_analytics.core import metrics
from fire_analytics.core.schema import ChainCastingRecord, LockAssemblyRecord


def _lock(input_mass: float, output_mass: float, **kwargs) -> LockAssemblyRecord:
    return LockAssemblyRecord(
        purity=18,
        total_input_mass=input_mass,
        total_output_mass=output_mass,
        created_at=datetime(2026, 1, 10),
        **kwargs,
    )


def _chain(input_gold, extractions, ratio=None) -> ChainCastingRecord:
    return ChainCastingRecord(
        purity=21,
        input_gold=input_gold,
        extractions=[{"mass": mass} for mass in extractions],
        purity_ratio=ratio,
        created_at=datetime(2026, 1, 10),
    )


def test_lock_assembly_summary_for_three_records():
    records = [_lock(10, 9), _lock(5, 5), _lock(8, 6)]

    summary = metrics.summarize_lock_assembly(records)

    assert summary.count == 3
    assert summary.total_loss == pytest.approx(3.0)
    assert summary.average_loss == pytest.approx(1.0)
    assert summary.efficiency == pytest.approx(20 / 23 * 100)
    assert summary.average_input == pytest.approx(23 / 3)


def test_lock_assembly_summary_for_empty_set_is_zero():
    summary = metrics.summarize_lock_assembly([])

    assert summary == metrics.LockAssemblyMetrics()


def test_lock_assembly_loss_is_clamped_at_zero():
    records = [_lock(5, 7), _lock(4, 3)]

    assert metrics.lock_assembly_total_loss(records) == pytest.approx(1.0)


def test_efficiency_is_zero_without_input():
    assert metrics.lock_assembly_efficiency([_lock(0, 0)]) == 0.0


def test_average_duration_uses_finished_records_only():
    finished = _lock(
        10,
        9,
        started_at=datetime(2026, 1, 10, 10, 0),
        ended_at=datetime(2026, 1, 10, 12, 0),
    )
    running = _lock(10, 9, started_at=datetime(2026, 1, 10, 10, 0))

    assert finished.is_completed and not running.is_completed
    assert metrics.lock_assembly_average_duration([finished, running]) == pytest.approx(7200)
    assert metrics.lock_assembly_average_duration([running]) == 0.0


def test_format_duration():
    assert metrics.format_duration(7200) == "2h 0m"
    assert metrics.format_duration(5430) == "1h 30m"
    assert metrics.format_duration(300) == "5m"
    assert metrics.format_duration(0) == "0m"


def test_chain_casting_loss_is_not_clamped():
    record = _chain(5, [7])

    assert record.total_extraction == pytest.approx(7.0)
    assert record.loss == pytest.approx(-2.0)


def test_chain_casting_total_loss_treats_missing_input_as_zero():
    records = [_chain(10, [3, 4]), _chain(None, [2]), _chain(5, [7])]

    assert records[1].loss is None
    assert metrics.chain_casting_total_loss(records) == pytest.approx(1.0)


def test_chain_casting_average_ratio_divides_by_all_records():
    records = [_chain(10, [], ratio=80), _chain(10, []), _chain(10, [], ratio=70)]

    summary = metrics.summarize_chain_casting(records)

    assert summary.count == 3
    assert summary.average_ratio == pytest.approx(50.0)


def test_chain_casting_summary_for_empty_set_is_zero():
    assert metrics.summarize_chain_casting([]) == metrics.ChainCastingMetrics()


def test_total_loss_is_sum_of_record_losses_in_any_order():
    locks = [_lock(10, 9), _lock(5, 7), _lock(8, 6.5), _lock(3, 0)]
    chains = [_chain(10, [3, 4]), _chain(None, [2]), _chain(5, [7]), _chain(4, [])]

    lock_total = metrics.lock_assembly_total_loss(locks)
    chain_total = metrics.chain_casting_total_loss(chains)

    assert lock_total == pytest.approx(sum(record.loss_mass for record in locks))
    assert chain_total == pytest.approx(sum(record.loss or 0.0 for record in chains))
    assert metrics.lock_assembly_total_loss(locks[::-1]) == pytest.approx(lock_total)
    assert metrics.chain_casting_total_loss(chains[::-1]) == pytest.approx(chain_total)
    assert metrics.lock_assembly_total_loss(locks[2:] + locks[:2]) == pytest.approx(lock_total)
