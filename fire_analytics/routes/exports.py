from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from fire_analytics.core.exports_dir import discard_export
from fire_analytics.routes.params import build_filter_spec, require_family
from fire_analytics.workers.exports import ExportRequest, get_export_worker

router = APIRouter(prefix="/exports", tags=["exports"])

MEDIA_TYPES = {
    "csv": "text/csv",
    "pdf": "application/pdf",
}


@router.post("/{family}/{export_format}")
async def export_analysis(family: str, export_format: str, payload: dict | None = None) -> FileResponse:
    """Render the filtered records and stream the file; it is removed once sent."""
    require_family(family)
    media_type = MEDIA_TYPES.get(export_format)
    if media_type is None:
        raise HTTPException(status_code=400, detail=f"unsupported export format: {export_format}")

    spec = build_filter_spec(payload or {})
    worker = get_export_worker()
    job = await worker.export(ExportRequest(family=family, export_format=export_format, spec=spec))
    return FileResponse(
        job.path,
        media_type=media_type,
        filename=job.path.name,
        headers={"X-Export-Job": job.job_id},
        background=BackgroundTask(discard_export, job.path),
    )
