"""Business logic services for ClipBatch."""

from .backend import AnalysisBackend, HttpAnalysisBackend
from .batch import BatchProcessingService, generate_job_id
from .dispatcher import OperationDispatcher, generate_subtitles
from .history import HistoryStore, compute_statistics
from .paths import ClipPathResolver, PlaceholderPathResolver
from .registry import JobRegistry
from .scheduler import ChunkedScheduler, ProgressCallback, chunk_items

__all__ = [
    "AnalysisBackend",
    "HttpAnalysisBackend",
    "BatchProcessingService",
    "generate_job_id",
    "OperationDispatcher",
    "generate_subtitles",
    "HistoryStore",
    "compute_statistics",
    "ClipPathResolver",
    "PlaceholderPathResolver",
    "JobRegistry",
    "ChunkedScheduler",
    "ProgressCallback",
    "chunk_items",
]
