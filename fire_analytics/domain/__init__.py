"""Domain layer definitions."""

from .records import ExportJob, RecordStoreState

__all__ = [
    "ExportJob",
    "RecordStoreState",
]
