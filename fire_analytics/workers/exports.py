from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from fire_analytics.application import AnalyticsService, get_analytics_service
from fire_analytics.core.errors import AnalyticsError, ExportError
from fire_analytics.core.exports_dir import discard_export, export_filename, job_directory
from fire_analytics.core.schema import FilterSpec
from fire_analytics.domain import ExportJob

logger = logging.getLogger(__name__)


@dataclass
class ExportRequest:
    family: str
    export_format: str
    spec: FilterSpec


class ExportWorker:
    """Renders exports off the event loop and writes them to the scratch folder.

    Each export kind (``csv`` / ``pdf``) has its own lock, so at most one
    export of a kind is being produced at a time.
    """

    def __init__(self, service: AnalyticsService | None = None) -> None:
        self._service = service
        self._locks: dict[str, asyncio.Lock] = {}
        self._counter = itertools.count(1)
        self._jobs: dict[str, ExportJob] = {}

    @property
    def service(self) -> AnalyticsService:
        return self._service or get_analytics_service()

    def _lock_for(self, export_format: str) -> asyncio.Lock:
        lock = self._locks.get(export_format)
        if lock is None:
            lock = self._locks[export_format] = asyncio.Lock()
        return lock

    def next_job_id(self) -> str:
        return f"export-{next(self._counter):05d}"

    def get_job(self, job_id: str) -> ExportJob | None:
        return self._jobs.get(job_id)

    async def export(self, request: ExportRequest, *, now: datetime | None = None) -> ExportJob:
        job = ExportJob(job_id=self.next_job_id(), family=request.family, export_format=request.export_format)
        self._jobs[job.job_id] = job
        async with self._lock_for(request.export_format):
            job.status = "processing"
            try:
                payload = await asyncio.to_thread(self._render_payload, job, request)
                writing = asyncio.ensure_future(
                    asyncio.to_thread(self._write_payload, job, payload, now or datetime.now())
                )
                job.path = await self._await_write(writing)
            except asyncio.CancelledError:
                job.status = "cancelled"
                logger.info("export cancelled", extra={"job_id": job.job_id, "family": job.family})
                raise
            except Exception as exc:
                job.status = "failed"
                job.error = job.error or str(exc)
                raise
            job.status = "completed"
        logger.info(
            "export written",
            extra={"job_id": job.job_id, "family": job.family, "export_format": job.export_format, "path": job.path},
        )
        return job

    def submit(self, request: ExportRequest) -> asyncio.Task[ExportJob]:
        """Schedule an export as a cancellable task on the running loop."""

        return asyncio.create_task(self.export(request))

    @staticmethod
    async def _await_write(writing: asyncio.Future[Path]) -> Path:
        try:
            return await asyncio.shield(writing)
        except asyncio.CancelledError:
            # A running write thread cannot be interrupted; remove its file once it lands.
            await asyncio.wait({writing})
            if not writing.cancelled() and writing.exception() is None:
                discard_export(writing.result())
            raise

    def _render_payload(self, job: ExportJob, request: ExportRequest) -> bytes:
        try:
            return self.service.render_export(request.family, request.export_format, request.spec)
        except AnalyticsError:
            raise
        except (ImportError, OSError, ValueError) as exc:
            job.error = f"Could not render the {job.export_format.upper()} export: {exc}"
            logger.error("export render failed", extra={"job_id": job.job_id, "error": job.error})
            raise ExportError(job.error) from exc

    def _write_payload(self, job: ExportJob, payload: bytes, now: datetime) -> Path:
        target: Path | None = None
        try:
            target = job_directory(job.job_id) / export_filename(job.export_format, now)
            target.write_bytes(payload)
        except OSError as exc:
            if target is not None:
                discard_export(target)
            job.status = "failed"
            job.error = f"Could not save the {job.export_format.upper()} export: {exc.strerror or exc}"
            logger.error("export write failed", extra={"job_id": job.job_id, "error": job.error})
            raise ExportError(job.error) from exc
        return target


_worker: ExportWorker | None = None


def get_export_worker() -> ExportWorker:
    global _worker
    if _worker is None:
        _worker = ExportWorker()
    return _worker
