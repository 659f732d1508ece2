from __future__ import annotations

from fastapi import APIRouter, Query

from fire_analytics.application import get_analytics_service
from fire_analytics.routes.params import build_filter_spec, require_family

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("/options")
async def get_filter_options() -> dict:
    service = get_analytics_service()
    return service.filter_options()


@router.get("/{family}")
async def get_family_analysis(
    family: str,
    date_start: str | None = Query(default=None),
    date_end: str | None = Query(default=None),
    timeframe: str | None = Query(default=None),
    purity: str | None = Query(default=None),
    model: str | None = Query(default=None),
    company: str | None = Query(default=None),
    stations: list[str] | None = Query(default=None),
) -> dict:
    require_family(family)
    spec = build_filter_spec(
        {
            "date_start": date_start,
            "date_end": date_end,
            "timeframe": timeframe,
            "purity": purity,
            "model": model,
            "company": company,
            "stations": stations,
        }
    )
    service = get_analytics_service()
    return service.summary(family, spec)
