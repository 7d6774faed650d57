"""Batch job models: live progress, archived results and statistics."""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class BatchOperationType(str, Enum):
    """Known per-clip operations."""
    VIDEO_ANALYSIS = "video_analysis"
    WHISPER_TRANSCRIPTION = "whisper_transcription"
    SUBTITLE_GENERATION = "subtitle_generation"
    QUALITY_ANALYSIS = "quality_analysis"
    SCENE_DETECTION = "scene_detection"
    MOTION_ANALYSIS = "motion_analysis"
    AUDIO_ANALYSIS = "audio_analysis"
    LANGUAGE_DETECTION = "language_detection"
    COMPREHENSIVE_ANALYSIS = "comprehensive_analysis"


class BatchJobStatus(str, Enum):
    """Status of a batch job."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset(
    {BatchJobStatus.COMPLETED, BatchJobStatus.FAILED, BatchJobStatus.CANCELLED}
)


class BatchPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BatchProgress(BaseModel):
    """Live, mutable state of one in-flight batch.

    Owned by the scheduler task driving the job. The only outside writer is
    ``cancel``, which flips ``status`` to cancelled.
    """
    job_id: str
    operation: str
    total: int
    completed: int = 0
    failed: int = 0
    current_clip: Optional[str] = None
    status: BatchJobStatus = BatchJobStatus.PENDING
    priority: BatchPriority = BatchPriority.MEDIUM
    retry_on_failure: bool = False
    start_time: datetime = Field(default_factory=datetime.utcnow)
    estimated_time_remaining: Optional[float] = None  # seconds
    errors: List[str] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.completed + self.failed


class ClipResult(BaseModel):
    """Outcome of one clip within a batch."""
    clip_id: str
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class BatchSummary(BaseModel):
    operation: str
    clip_ids: List[str]
    start_time: datetime
    end_time: datetime

    class Config:
        frozen = True


class BatchOperationResult(BaseModel):
    """Immutable summary of a finished batch, kept in history."""
    job_id: str
    status: BatchJobStatus
    results: List[ClipResult]
    errors: List[str]
    total_processed: int
    success_count: int
    failure_count: int
    execution_time: int  # milliseconds
    summary: BatchSummary

    class Config:
        frozen = True


class BatchProcessingStats(BaseModel):
    """Aggregate metrics over history and active jobs."""
    total_jobs: int = 0
    running_jobs: int = 0
    completed_jobs: int = 0
    failed_jobs: int = 0
    average_execution_time: float = 0.0
    total_clips_processed: int = 0
    success_rate: float = 0.0

    class Config:
        json_schema_extra = {
            "example": {
                "total_jobs": 4,
                "running_jobs": 1,
                "completed_jobs": 2,
                "failed_jobs": 1,
                "average_execution_time": 1532.5,
                "total_clips_processed": 17,
                "success_rate": 50.0,
            }
        }


class ReportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    HTML = "html"
    MARKDOWN = "markdown"


class BatchReportSummary(BaseModel):
    total_clips: int
    successful: int
    failed: int
    execution_time: int
    start_time: datetime
    end_time: datetime


class BatchReport(BaseModel):
    """Report built from an archived batch."""
    job_id: str
    operation: str
    status: BatchJobStatus
    summary: BatchReportSummary
    results: Optional[List[ClipResult]] = None
    errors: Optional[List[str]] = None
    format: ReportFormat = ReportFormat.JSON
