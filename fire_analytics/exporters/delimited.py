from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd

from fire_analytics.core.errors import UnknownFamilyError
from fire_analytics.core.report_config import REPORT_CONFIG, format_timestamp
from fire_analytics.core.schema import ChainCastingRecord, DailyOperationRecord, LockAssemblyRecord, Record

LOCK_ASSEMBLY_COLUMNS = [
    "Model",
    "Company",
    "Purity",
    "Start",
    "End",
    "TotalInputMass",
    "TotalOutputMass",
    "LossMass",
    "Status",
]
CHAIN_CASTING_COLUMNS = [
    "Created",
    "Purity",
    "InputGold",
    "OutputGold",
    "PurityRatio",
    "TotalExtraction",
    "Loss",
    "Status",
]
DAILY_OPERATION_COLUMNS = ["Created", "Status"]


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _to_csv(rows: Sequence[dict], columns: list[str]) -> str:
    df = pd.DataFrame(list(rows), columns=columns)
    return df.to_csv(index=False, lineterminator="\n")


def lock_assembly_rows(records: Iterable[LockAssemblyRecord]) -> list[dict[str, str]]:
    status = REPORT_CONFIG["lock_status"]
    rows = []
    for record in records:
        rows.append({
            "Model": _text(record.model),
            "Company": _text(record.company),
            "Purity": _text(record.purity),
            "Start": format_timestamp(record.effective_date),
            "End": format_timestamp(record.ended_at),
            "TotalInputMass": _text(record.total_input_mass),
            "TotalOutputMass": _text(record.total_output_mass),
            "LossMass": _text(record.loss_mass),
            "Status": status["completed"] if record.is_completed else status["in_progress"],
        })
    return rows


def chain_casting_rows(records: Iterable[ChainCastingRecord]) -> list[dict[str, str]]:
    rows = []
    for record in records:
        total_extraction = record.total_extraction
        rows.append({
            "Created": format_timestamp(record.created_at),
            "Purity": _text(record.purity),
            "InputGold": _text(record.input_gold),
            "OutputGold": _text(record.output_gold),
            "PurityRatio": _text(record.purity_ratio),
            "TotalExtraction": _text(total_extraction),
            "Loss": _text((record.input_gold or 0.0) - total_extraction),
            "Status": record.state_label,
        })
    return rows


def daily_operation_rows(records: Iterable[DailyOperationRecord]) -> list[dict[str, str]]:
    return [
        {"Created": format_timestamp(record.created_at), "Status": record.state_label}
        for record in records
    ]


def render_lock_assembly_csv(records: Iterable[LockAssemblyRecord]) -> str:
    return _to_csv(lock_assembly_rows(records), LOCK_ASSEMBLY_COLUMNS)


def render_chain_casting_csv(records: Iterable[ChainCastingRecord]) -> str:
    return _to_csv(chain_casting_rows(records), CHAIN_CASTING_COLUMNS)


def render_daily_operations_csv(records: Iterable[DailyOperationRecord]) -> str:
    return _to_csv(daily_operation_rows(records), DAILY_OPERATION_COLUMNS)


_RENDERERS = {
    "lock_assembly": render_lock_assembly_csv,
    "chain_casting": render_chain_casting_csv,
    "daily_operations": render_daily_operations_csv,
}


def render_delimited(family: str, records: Iterable[Record]) -> str:
    """Render the filtered rows of one family as comma-separated text."""

    renderer = _RENDERERS.get(family)
    if renderer is None:
        raise UnknownFamilyError(family)
    return renderer(records)  # type: ignore[operator]
