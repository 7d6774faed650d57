"""Data models for the ClipBatch API."""

from .batch import (
    TERMINAL_STATUSES,
    BatchJobStatus,
    BatchOperationResult,
    BatchOperationType,
    BatchPriority,
    BatchProcessingStats,
    BatchProgress,
    BatchReport,
    BatchReportSummary,
    BatchSummary,
    ClipResult,
    ReportFormat,
)
from .requests import (
    AnalyzeVideosRequest,
    BatchHistoryResponse,
    BatchStartRequest,
    BatchStartResponse,
    CancelResponse,
    ClearHistoryResponse,
    DetectLanguagesRequest,
    DetectScenesRequest,
    GenerateSubtitlesRequest,
    TranscribeVideosRequest,
)

__all__ = [
    "TERMINAL_STATUSES",
    "BatchJobStatus",
    "BatchOperationResult",
    "BatchOperationType",
    "BatchPriority",
    "BatchProcessingStats",
    "BatchProgress",
    "BatchReport",
    "BatchReportSummary",
    "BatchSummary",
    "ClipResult",
    "ReportFormat",
    "AnalyzeVideosRequest",
    "BatchHistoryResponse",
    "BatchStartRequest",
    "BatchStartResponse",
    "CancelResponse",
    "ClearHistoryResponse",
    "DetectLanguagesRequest",
    "DetectScenesRequest",
    "GenerateSubtitlesRequest",
    "TranscribeVideosRequest",
]
