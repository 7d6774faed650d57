"""Batch endpoints - start, follow and cancel batch operations."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import verify_api_key
from ..deps import get_batch_service
from ..models import (
    AnalyzeVideosRequest,
    BatchOperationType,
    BatchProgress,
    BatchStartRequest,
    BatchStartResponse,
    CancelResponse,
    DetectLanguagesRequest,
    DetectScenesRequest,
    GenerateSubtitlesRequest,
    TranscribeVideosRequest,
)
from ..services import BatchProcessingService

logger = logging.getLogger("clipbatch.routes.batches")

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.post("/batches", response_model=BatchStartResponse)
async def start_batch(
    request: BatchStartRequest,
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Start a batch operation over a list of clips.

    The job runs in the background; poll GET /batches/{job_id} for progress.
    Unknown operation kinds are accepted and fail clip by clip.
    """
    job_id = await service.start_batch(
        request.clip_ids,
        request.operation,
        request.options,
        max_concurrent=request.max_concurrent,
        retry_on_failure=request.retry_on_failure,
        priority=request.priority,
    )
    return BatchStartResponse(
        job_id=job_id,
        message=f"Batch operation {request.operation} started for {len(request.clip_ids)} clips",
    )


@router.get("/batches/{job_id}", response_model=BatchProgress)
async def get_batch_progress(
    job_id: str,
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Progress of an active batch. Finished batches are in /history."""
    progress = service.get_progress(job_id)
    if progress is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Batch job {job_id} not found"
        )
    return progress


@router.post("/batches/{job_id}/cancel", response_model=CancelResponse)
async def cancel_batch(
    job_id: str,
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Cancel a running batch after the chunk in flight finishes."""
    cancelled = service.cancel(job_id)
    if cancelled:
        message = f"Batch job {job_id} cancelled"
    else:
        message = f"Could not cancel batch job {job_id} (not running or already finished)"
    return CancelResponse(success=cancelled, message=message)


@router.post("/batches/analyze-videos", response_model=BatchStartResponse)
async def analyze_videos(
    request: AnalyzeVideosRequest,
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Run comprehensive analysis (video, audio and quality) on every clip."""
    job_id = await service.start_batch(
        request.clip_ids,
        BatchOperationType.COMPREHENSIVE_ANALYSIS.value,
        {
            "analysisTypes": request.analysis_types,
            "detailedReport": request.detailed_report,
        },
    )
    return BatchStartResponse(
        job_id=job_id,
        message=f"Comprehensive analysis started for {len(request.clip_ids)} videos",
    )


@router.post("/batches/transcribe-videos", response_model=BatchStartResponse)
async def transcribe_videos(
    request: TranscribeVideosRequest,
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Transcribe every clip, optionally producing subtitles as well."""
    operation = (
        BatchOperationType.SUBTITLE_GENERATION
        if request.generate_subtitles
        else BatchOperationType.WHISPER_TRANSCRIPTION
    )
    job_id = await service.start_batch(
        request.clip_ids,
        operation.value,
        {
            "language": request.language,
            "model": request.model,
            "format": request.subtitle_format,
        },
    )
    return BatchStartResponse(
        job_id=job_id,
        message=f"Transcription started for {len(request.clip_ids)} videos",
    )


@router.post("/batches/generate-subtitles", response_model=BatchStartResponse)
async def generate_subtitles(
    request: GenerateSubtitlesRequest,
    service: BatchProcessingService = Depends(get_batch_service),
):
    job_id = await service.start_batch(
        request.clip_ids,
        BatchOperationType.SUBTITLE_GENERATION.value,
        {
            "language": request.language,
            "format": request.format,
            "maxCharactersPerLine": request.max_characters_per_line,
            "translateToLanguages": request.translate_to_languages,
        },
    )
    return BatchStartResponse(
        job_id=job_id,
        message=f"Subtitle generation started for {len(request.clip_ids)} videos",
    )


@router.post("/batches/detect-languages", response_model=BatchStartResponse)
async def detect_languages(
    request: DetectLanguagesRequest,
    service: BatchProcessingService = Depends(get_batch_service),
):
    job_id = await service.start_batch(
        request.clip_ids,
        BatchOperationType.LANGUAGE_DETECTION.value,
        {"sampleDuration": request.sample_duration},
    )
    return BatchStartResponse(
        job_id=job_id,
        message=f"Language detection started for {len(request.clip_ids)} videos",
    )


@router.post("/batches/detect-scenes", response_model=BatchStartResponse)
async def detect_scenes(
    request: DetectScenesRequest,
    service: BatchProcessingService = Depends(get_batch_service),
):
    job_id = await service.start_batch(
        request.clip_ids,
        BatchOperationType.SCENE_DETECTION.value,
        {
            "threshold": request.threshold,
            "minSceneLength": request.min_scene_length,
            "exportTimestamps": request.export_timestamps,
        },
    )
    return BatchStartResponse(
        job_id=job_id,
        message=f"Scene detection started for {len(request.clip_ids)} videos",
    )
