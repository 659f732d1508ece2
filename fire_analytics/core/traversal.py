"""Loss traversal over daily-operation records.

A record holds day entries, each day holds up to eight station slots (two
workbench cards and one card per process station) and each card holds
lines.  Purity is scoped differently per card family: a workbench card
carries a single purity for all of its lines, while process-station cards
carry a purity on every line.  The two strategies below keep that split.
"""
from __future__ import annotations

from typing import Callable, Collection, Iterable, Iterator, Sequence

from fire_analytics.core.metrics import DailyOperationMetrics
from fire_analytics.core.schema import (
    PURITY_CLASSES,
    STATIONS,
    Card,
    DailyOperationRecord,
    StationCard,
    WorkbenchCard,
)

CardStrategy = Callable[[Card, "int | None"], float]


def workbench_card_loss(card: WorkbenchCard, purity: int | None = None) -> float:
    if purity is not None and card.purity != purity:
        return 0.0
    return sum(line.loss_mass for line in card.lines)


def station_card_loss(card: StationCard, purity: int | None = None) -> float:
    return sum(line.fire for line in card.lines if purity is None or line.purity == purity)


_STRATEGIES: dict[type, CardStrategy] = {
    WorkbenchCard: workbench_card_loss,  # type: ignore[dict-item]
    StationCard: station_card_loss,  # type: ignore[dict-item]
}


def card_loss(card: Card | None, purity: int | None = None) -> float:
    if card is None:
        return 0.0
    return _STRATEGIES[type(card)](card, purity)


def iter_station_slots(records: Iterable[DailyOperationRecord]) -> Iterator[tuple[str, Card]]:
    """Yield every occupied ``(station, card)`` slot across all day entries."""

    for record in records:
        for entry in record.days:
            for station, card in entry.slots():
                if card is not None:
                    yield station, card


def daily_station_loss(records: Iterable[DailyOperationRecord], stations: Collection[str]) -> float:
    """Total loss contributed by the selected stations only."""

    if not stations:
        return 0.0
    return sum(card_loss(card) for station, card in iter_station_slots(records) if station in stations)


def daily_purity_loss(
    records: Iterable[DailyOperationRecord],
    purity: int,
    stations: Collection[str] | None = None,
) -> float:
    """Total loss attributable to ``purity``.

    Without a station set every slot is scanned; with one, a slot must also be
    selected to contribute.
    """

    total = 0.0
    for station, card in iter_station_slots(records):
        if stations is not None and station not in stations:
            continue
        total += card_loss(card, purity)
    return total


def daily_total_loss(records: Iterable[DailyOperationRecord]) -> float:
    return sum(card_loss(card) for _, card in iter_station_slots(records))


def daily_average_loss(records: Sequence[DailyOperationRecord], stations: Collection[str]) -> float:
    if not records:
        return 0.0
    return daily_station_loss(records, stations) / len(records)


def loss_by_station(
    records: Iterable[DailyOperationRecord],
    stations: Collection[str] = STATIONS,
) -> dict[str, float]:
    """Per-station totals from a single pass, keyed in station-name order."""

    totals = {station: 0.0 for station in sorted(stations)}
    for station, card in iter_station_slots(records):
        if station in totals:
            totals[station] += card_loss(card)
    return totals


def loss_by_purity(
    records: Iterable[DailyOperationRecord],
    stations: Collection[str] | None = None,
) -> dict[int, float]:
    totals = {purity: 0.0 for purity in PURITY_CLASSES}
    for station, card in iter_station_slots(records):
        if stations is not None and station not in stations:
            continue
        for purity in PURITY_CLASSES:
            totals[purity] += card_loss(card, purity)
    return totals


def summarize_daily_operations(
    records: Sequence[DailyOperationRecord],
    stations: Collection[str],
) -> DailyOperationMetrics:
    return DailyOperationMetrics(
        count=len(records),
        total_loss=daily_station_loss(records, stations),
        average_loss=daily_average_loss(records, stations),
    )
