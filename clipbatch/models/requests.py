"""Batch request/response models for the HTTP API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .batch import BatchOperationResult, BatchPriority


class BatchStartRequest(BaseModel):
    """Request to start a batch operation."""
    clip_ids: List[str] = Field(min_length=1)
    operation: str = Field(description="Operation kind, e.g. video_analysis or scene_detection")
    options: Dict[str, Any] = Field(default_factory=dict)
    priority: BatchPriority = BatchPriority.MEDIUM
    max_concurrent: Optional[int] = Field(default=None, ge=1)
    retry_on_failure: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "clip_ids": ["clip-1", "clip-2", "clip-3"],
                "operation": "scene_detection",
                "options": {"threshold": 0.4},
                "priority": "medium",
                "max_concurrent": 3,
            }
        }


class BatchStartResponse(BaseModel):
    """Response after submitting a batch."""
    job_id: str
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "job_id": "batch_1760745600000_k3j9x0a1b",
                "message": "Batch operation scene_detection started for 3 clips",
            }
        }


class CancelResponse(BaseModel):
    success: bool
    message: str


class AnalyzeVideosRequest(BaseModel):
    clip_ids: List[str] = Field(min_length=1)
    analysis_types: List[str] = Field(default_factory=list)
    detailed_report: bool = True


class TranscribeVideosRequest(BaseModel):
    clip_ids: List[str] = Field(min_length=1)
    language: str = "auto"
    model: str = "whisper-1"
    generate_subtitles: bool = False
    subtitle_format: str = "srt"


class GenerateSubtitlesRequest(BaseModel):
    clip_ids: List[str] = Field(min_length=1)
    language: str = "auto"
    format: str = "srt"
    max_characters_per_line: int = Field(default=42, ge=1)
    translate_to_languages: List[str] = Field(default_factory=list)


class DetectLanguagesRequest(BaseModel):
    clip_ids: List[str] = Field(min_length=1)
    sample_duration: float = 30


class DetectScenesRequest(BaseModel):
    clip_ids: List[str] = Field(min_length=1)
    threshold: float = 0.3
    min_scene_length: float = 1.0
    export_timestamps: bool = True


class BatchHistoryResponse(BaseModel):
    """Response containing archived batches, oldest first."""
    batches: List[BatchOperationResult]
    total: int


class ClearHistoryResponse(BaseModel):
    cleared: int
    message: str
