import sys
from datetime import date, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fire_analytics.core import traversal
from fire_analytics.core.schema import STATIONS, DailyOperationRecord, DayEntry


def _record(days) -> DailyOperationRecord:
    return DailyOperationRecord(
        started_at=datetime(2026, 1, 5),
        created_at=datetime(2026, 1, 5),
        days=days,
    )


def _furnace_day(**extra) -> dict:
    entry = {
        "day": date(2026, 1, 5),
        "stations": {
            "Furnace": {"lines": [{"purity": 18, "fire": 2.0}, {"purity": 21, "fire": 1.5}]},
        },
    }
    entry.update(extra)
    return entry


def _busy_record() -> DailyOperationRecord:
    return _record(
        [
            _furnace_day(
                workbench=[
                    {"purity": 14, "lines": [{"input_mass": 10, "output_mass": 8}]},
                    {"purity": 22, "lines": [{"input_mass": 6, "output_mass": 5.5}]},
                ]
            ),
            {
                "day": date(2026, 1, 6),
                "stations": {
                    "Polish": {"lines": [{"purity": 14, "fire": 0.25}]},
                    "SawCut": {"lines": [{"purity": 22, "fire": 0.75}, {"fire": 1.0}]},
                },
            },
        ]
    )


def test_purity_loss_on_a_single_process_station():
    records = [_record([_furnace_day()])]

    assert traversal.daily_purity_loss(records, 18) == pytest.approx(2.0)
    assert traversal.daily_purity_loss(records, 21) == pytest.approx(1.5)
    assert traversal.daily_purity_loss(records, 22) == 0.0


def test_purity_loss_respects_station_selection():
    records = [_record([_furnace_day()])]

    assert traversal.daily_purity_loss(records, 18, {"Furnace"}) == pytest.approx(2.0)
    assert traversal.daily_purity_loss(records, 18, {"Polish", "Workbench"}) == 0.0


def test_workbench_loss_is_clamped_per_line():
    records = [
        _record(
            [
                {
                    "day": date(2026, 1, 5),
                    "workbench": [
                        {
                            "purity": 18,
                            "lines": [
                                {"input_mass": 10, "output_mass": 12},
                                {"input_mass": 5, "output_mass": 3},
                                {"output_mass": 1},
                                {"input_mass": 4},
                            ],
                        }
                    ],
                }
            ]
        )
    ]

    assert traversal.daily_station_loss(records, {"Workbench"}) == pytest.approx(6.0)
    assert traversal.daily_purity_loss(records, 18) == pytest.approx(6.0)
    assert traversal.daily_purity_loss(records, 14) == 0.0


def test_empty_station_selection_yields_zero():
    records = [_busy_record()]

    assert traversal.daily_station_loss(records, set()) == 0.0
    assert traversal.daily_average_loss(records, set()) == 0.0


def test_station_totals_add_up_to_full_total():
    records = [_busy_record(), _record([_furnace_day()])]

    by_station = traversal.loss_by_station(records)
    full = traversal.daily_total_loss(records)

    assert list(by_station) == sorted(STATIONS)
    assert sum(by_station.values()) == pytest.approx(full)
    assert traversal.daily_station_loss(records, STATIONS) == pytest.approx(full)
    for station, total in by_station.items():
        assert total == pytest.approx(traversal.daily_station_loss(records, {station}))


def test_loss_by_station_limits_keys_to_selection():
    by_station = traversal.loss_by_station([_busy_record()], {"SawCut", "Furnace"})

    assert by_station == {"Furnace": pytest.approx(3.5), "SawCut": pytest.approx(1.75)}


def test_loss_by_purity_covers_every_class():
    by_purity = traversal.loss_by_purity([_busy_record()])

    assert list(by_purity) == [14, 18, 21, 22]
    assert by_purity[14] == pytest.approx(2.25)
    assert by_purity[18] == pytest.approx(2.0)
    assert by_purity[21] == pytest.approx(1.5)
    assert by_purity[22] == pytest.approx(1.25)


def test_purity_loss_ignores_unrelated_slots():
    before = _record([_furnace_day(workbench=[{"purity": 21, "lines": [{"input_mass": 3, "output_mass": 1}]}])])
    after = _record([_furnace_day(workbench=[{"purity": 22, "lines": [{"input_mass": 3, "output_mass": 1}]}])])

    assert traversal.daily_purity_loss([before], 18) == traversal.daily_purity_loss([after], 18)


def test_average_loss_divides_by_record_count():
    records = [_busy_record(), _record([])]

    summary = traversal.summarize_daily_operations(records, {"Furnace"})

    assert summary.count == 2
    assert summary.total_loss == pytest.approx(3.5)
    assert summary.average_loss == pytest.approx(1.75)
    assert traversal.summarize_daily_operations([], STATIONS).average_loss == 0.0


def test_day_entry_exposes_eight_slots():
    entry = DayEntry.model_validate(_furnace_day(workbench=[{"purity": 18}]))

    slots = list(entry.slots())

    assert [station for station, _ in slots] == [
        "Workbench",
        "Workbench",
        "Polish",
        "Furnace",
        "Explosion",
        "Drum",
        "MachineCut",
        "SawCut",
    ]
    assert slots[1][1] is None
    assert entry.card("Furnace") is not None
    assert entry.card("Drum") is None


def test_day_entry_rejects_third_workbench_card_and_unknown_station():
    with pytest.raises(ValidationError):
        DayEntry.model_validate(_furnace_day(workbench=[{}, {}, {}]))
    with pytest.raises(ValidationError):
        DayEntry.model_validate({"day": date(2026, 1, 5), "stations": {"Laser": {"lines": []}}})


def test_station_loss_is_sum_of_record_losses_in_any_order():
    records = [_busy_record(), _record([_furnace_day()]), _record([])]
    selection = {"Workbench", "Furnace", "SawCut"}

    total = traversal.daily_station_loss(records, selection)

    assert total == pytest.approx(sum(traversal.daily_station_loss([record], selection) for record in records))
    assert traversal.daily_station_loss(records[::-1], selection) == pytest.approx(total)
    assert traversal.daily_station_loss(records[1:] + records[:1], selection) == pytest.approx(total)
