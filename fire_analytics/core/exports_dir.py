from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path

from fire_analytics.core.report_config import format_file_stamp


def _base_root() -> Path:
    env_root = os.getenv("EXPORTS_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(tempfile.gettempdir()) / "fire_analytics_exports"


def ensure_exports_root() -> Path:
    """Ensure the export scratch folder exists and return it."""

    root = _base_root()
    root.mkdir(parents=True, exist_ok=True)
    return root


def export_filename(export_format: str, now: datetime) -> str:
    return f"analysis_{format_file_stamp(now)}.{export_format}"


def job_directory(job_id: str) -> Path:
    """Per-job folder so same-day exports never share a file name."""

    target = ensure_exports_root() / job_id
    target.mkdir(parents=True, exist_ok=True)
    return target


def discard_export(path: Path) -> None:
    """Remove an exported artifact and its job folder once the interaction is over."""

    path.unlink(missing_ok=True)
    parent = path.parent
    if parent != _base_root() and parent.exists() and not any(parent.iterdir()):
        parent.rmdir()
