from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Iterator, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from fire_analytics.core.report_config import state_label

PURITY_CLASSES: tuple[int, ...] = (14, 18, 21, 22)
Purity = Literal[14, 18, 21, 22]

WORKBENCH = "Workbench"
PROCESS_STATIONS: tuple[str, ...] = ("Polish", "Furnace", "Explosion", "Drum", "MachineCut", "SawCut")
STATIONS: tuple[str, ...] = (WORKBENCH, *PROCESS_STATIONS)
ProcessStation = Literal["Polish", "Furnace", "Explosion", "Drum", "MachineCut", "SawCut"]

MAX_WORKBENCH_CARDS = 2

WorkflowState = Literal["draft", "completed"]
RecordFamily = Literal["lock_assembly", "chain_casting", "daily_operations"]
RECORD_FAMILIES: tuple[str, ...] = ("lock_assembly", "chain_casting", "daily_operations")

ALL = "all"


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    """Current time on the same naive-UTC clock that stored timestamps use."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


Timestamp = Annotated[datetime, AfterValidator(_to_naive_utc)]


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


# ----------------------------------------------------------------------
# lock assembly
# ----------------------------------------------------------------------
class LockAssemblyRecord(_Snapshot):
    record_id: str | None = None
    purity: Purity | None = None
    model: str | None = None
    company: str | None = None
    total_input_mass: float = 0.0
    total_output_mass: float = 0.0
    created_at: Timestamp
    started_at: Timestamp | None = None
    ended_at: Timestamp | None = None

    @property
    def loss_mass(self) -> float:
        return max(0.0, self.total_input_mass - self.total_output_mass)

    @property
    def is_completed(self) -> bool:
        return self.ended_at is not None

    @property
    def effective_date(self) -> datetime:
        return self.started_at or self.created_at

    @property
    def elapsed_seconds(self) -> float | None:
        if self.started_at is None or self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()


# ----------------------------------------------------------------------
# chain casting
# ----------------------------------------------------------------------
class ExtractionLine(_Snapshot):
    mass: float = 0.0


class ChainCastingRecord(_Snapshot):
    record_id: str | None = None
    purity: Purity | None = None
    input_gold: float | None = None
    output_gold: float | None = None
    extractions: list[ExtractionLine] = Field(default_factory=list)
    purity_ratio: float | None = None
    created_at: Timestamp
    state: WorkflowState = "draft"

    @property
    def total_extraction(self) -> float:
        return sum(line.mass for line in self.extractions)

    @property
    def loss(self) -> float | None:
        # Not clamped: extraction above input yields a negative value.
        if self.input_gold is None:
            return None
        return self.input_gold - self.total_extraction

    @property
    def state_label(self) -> str:
        return state_label(self.state)

    @property
    def effective_date(self) -> datetime:
        return self.created_at


# ----------------------------------------------------------------------
# daily operations
# ----------------------------------------------------------------------
class WorkbenchLine(_Snapshot):
    input_mass: float | None = None
    output_mass: float | None = None

    @property
    def loss_mass(self) -> float:
        return max(0.0, (self.input_mass or 0.0) - (self.output_mass or 0.0))


class WorkbenchCard(_Snapshot):
    purity: Purity | None = None
    lines: list[WorkbenchLine] = Field(default_factory=list)


class ProcessLine(_Snapshot):
    purity: Purity | None = None
    fire: float = 0.0


class StationCard(_Snapshot):
    lines: list[ProcessLine] = Field(default_factory=list)


Card = Union[WorkbenchCard, StationCard]


class DayEntry(_Snapshot):
    day: date
    workbench: list[WorkbenchCard] = Field(default_factory=list, max_length=MAX_WORKBENCH_CARDS)
    stations: dict[ProcessStation, StationCard] = Field(default_factory=dict)

    def card(self, station: str, index: int = 0) -> Card | None:
        """Return the card occupying a slot, or ``None`` when the slot is empty."""

        if station == WORKBENCH:
            return self.workbench[index] if index < len(self.workbench) else None
        return self.stations.get(station)  # type: ignore[call-overload]

    def slots(self) -> Iterator[tuple[str, Card | None]]:
        """Yield the eight fixed station slots in canonical order."""

        for index in range(MAX_WORKBENCH_CARDS):
            yield WORKBENCH, self.card(WORKBENCH, index)
        for station in PROCESS_STATIONS:
            yield station, self.card(station)


class DailyOperationRecord(_Snapshot):
    record_id: str | None = None
    started_at: Timestamp
    created_at: Timestamp
    state: WorkflowState = "draft"
    days: list[DayEntry] = Field(default_factory=list)

    @property
    def state_label(self) -> str:
        return state_label(self.state)

    @property
    def effective_date(self) -> datetime:
        return self.started_at


Record = Union[LockAssemblyRecord, ChainCastingRecord, DailyOperationRecord]

RECORD_MODELS: dict[str, type[BaseModel]] = {
    "lock_assembly": LockAssemblyRecord,
    "chain_casting": ChainCastingRecord,
    "daily_operations": DailyOperationRecord,
}


# ----------------------------------------------------------------------
# filter specification
# ----------------------------------------------------------------------
class FilterSpec(_Snapshot):
    date_start: Timestamp
    date_end: Timestamp
    purity: Purity | None = None
    model: str | None = None
    company: str | None = None
    stations: frozenset[str] = frozenset(STATIONS)

    @field_validator("purity", "model", "company", mode="before")
    @classmethod
    def _normalise_all(cls, value: object, info: ValidationInfo) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or stripped.lower() == ALL:
                return None
            if info.field_name == "purity" and stripped.isdigit():
                return int(stripped)
            return stripped
        return value

    @field_validator("stations")
    @classmethod
    def _known_stations(cls, value: frozenset[str]) -> frozenset[str]:
        unknown = sorted(value - set(STATIONS))
        if unknown:
            raise ValueError(f"unknown stations: {', '.join(unknown)}")
        return value
