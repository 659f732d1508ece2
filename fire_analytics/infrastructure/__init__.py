"""Infrastructure layer exports."""

from .observability import JSONFormatter, setup_logging
from .records import InMemoryRecordRepository, RecordRepository

__all__ = [
    "InMemoryRecordRepository",
    "JSONFormatter",
    "RecordRepository",
    "setup_logging",
]
