from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import HTTPException
from pydantic import ValidationError

from fire_analytics.core.filters import date_range_for_timeframe
from fire_analytics.core.schema import RECORD_FAMILIES, STATIONS, FilterSpec, utc_now


def require_family(family: str) -> str:
    if family not in RECORD_FAMILIES:
        raise HTTPException(status_code=404, detail=f"unknown record family: {family}")
    return family


def _split_stations(value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list):
        items: list[str] = []
        for item in value:
            items.extend(_split_stations(item) or [])
        return items
    raise HTTPException(status_code=400, detail="stations must be a list or comma separated text")


def build_filter_spec(payload: dict[str, Any], *, now: datetime | None = None) -> FilterSpec:
    """Build a :class:`FilterSpec` from request values.

    Missing dates fall back to the ``timeframe`` preset (monthly by default);
    missing stations select every station.  An explicit empty station list is
    kept as an empty selection.
    """

    now = now or utc_now()
    timeframe = str(payload.get("timeframe") or "monthly")
    try:
        default_start, default_end = date_range_for_timeframe(timeframe, now)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    stations = _split_stations(payload.get("stations"))
    data = {
        "date_start": payload.get("date_start") or default_start,
        "date_end": payload.get("date_end") or default_end,
        "purity": payload.get("purity"),
        "model": payload.get("model"),
        "company": payload.get("company"),
        "stations": frozenset(STATIONS if stations is None else stations),
    }
    try:
        return FilterSpec(**data)
    except ValidationError as exc:
        messages = [f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()]
        raise HTTPException(status_code=400, detail="; ".join(messages)) from exc
