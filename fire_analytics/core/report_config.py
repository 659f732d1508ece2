from __future__ import annotations

from datetime import datetime
from pathlib import Path

import yaml

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

_DEFAULTS: dict = {
    "title": "Fire Analysis Report",
    "unknown_label": "Unknown",
    "mass_unit": "g",
    "state_labels": {"draft": "Draft", "completed": "Completed"},
    "lock_status": {"completed": "Completed", "in_progress": "InProgress"},
    "sections": {
        "lock_assembly": {"heading": "Lock Assembly Analysis", "count_label": "Total operations"},
        "chain_casting": {"heading": "Chain Casting Analysis", "count_label": "Total operations"},
        "daily_operations": {"heading": "Daily Operations Analysis", "count_label": "Total weeks"},
    },
    "loss_label": "Total loss",
    "formats": {"timestamp": "%d.%m.%Y %H:%M", "file_stamp": "%d.%m.%Y"},
}


def _merge(defaults: dict, loaded: dict | None) -> dict:
    if not isinstance(loaded, dict):
        return dict(defaults)
    merged = dict(defaults)
    for key, value in loaded.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_report_config() -> dict:
    path = CONFIG_DIR / "report.yaml"
    if not path.exists():
        return dict(_DEFAULTS)
    with path.open("r", encoding="utf-8") as fp:
        return _merge(_DEFAULTS, yaml.safe_load(fp))


REPORT_CONFIG = _load_report_config()


def state_label(state: str) -> str:
    labels = REPORT_CONFIG["state_labels"]
    return str(labels.get(state, state))


def section_texts(family: str) -> dict:
    return REPORT_CONFIG["sections"][family]


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime(REPORT_CONFIG["formats"]["timestamp"])


def format_file_stamp(value: datetime) -> str:
    return value.strftime(REPORT_CONFIG["formats"]["file_stamp"])


def format_mass(value: float | None) -> str:
    """Two-decimal rendering used on the document page; blank for NaN/inf."""

    if value is None or value != value or value in (float("inf"), float("-inf")):
        return ""
    return f"{value:.2f}"
