from __future__ import annotations

import json

from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import ValidationError

from fire_analytics.application import get_record_repository
from fire_analytics.routes.params import require_family

router = APIRouter(prefix="/records", tags=["records"])


@router.post("/snapshot")
async def upload_snapshot(file: UploadFile = File(...)) -> dict:
    """Load a JSON snapshot holding records for any of the three families."""
    try:
        raw = await file.read()
    finally:
        await file.close()

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise HTTPException(status_code=400, detail=f"snapshot is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="snapshot must be a JSON object")

    repository = get_record_repository()
    try:
        added = repository.load_snapshot(payload)
    except (ValidationError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"added": added, "counts": repository.counts()}


@router.post("/{family}")
async def add_records(family: str, payload: dict) -> dict:
    require_family(family)
    rows = payload.get("items")
    if not isinstance(rows, list):
        raise HTTPException(status_code=400, detail="items must be a list")
    repository = get_record_repository()
    try:
        added = repository.add_rows(family, rows)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"family": family, "added": added, "count": repository.counts()[family]}


@router.get("/{family}")
async def list_records(family: str) -> dict:
    require_family(family)
    repository = get_record_repository()
    items = [record.model_dump(mode="json") for record in repository.list_family(family)]
    return {"family": family, "items": items}
