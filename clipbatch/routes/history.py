"""History endpoints - archived batches, reports and statistics."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..auth import verify_api_key
from ..config import settings
from ..deps import get_batch_service
from ..models import (
    BatchHistoryResponse,
    BatchProcessingStats,
    BatchReport,
    ClearHistoryResponse,
    ReportFormat,
)
from ..services import BatchProcessingService

logger = logging.getLogger("clipbatch.routes.history")

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/history", response_model=BatchHistoryResponse)
async def get_batch_history(
    limit: Optional[int] = Query(default=None, ge=1, le=1000, description="Maximum number of results"),
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Most recent finished batches, oldest first."""
    batches = service.get_history(limit or settings.history_default_limit)
    return BatchHistoryResponse(batches=batches, total=len(batches))


@router.delete("/history", response_model=ClearHistoryResponse)
async def clear_batch_history(
    older_than: Optional[datetime] = Query(default=None, description="Only remove batches that ended before this time"),
    keep_successful: bool = Query(default=False, description="Keep batches that completed without failures"),
    service: BatchProcessingService = Depends(get_batch_service),
):
    cleared = service.clear_history(older_than=older_than, keep_successful=keep_successful)
    return ClearHistoryResponse(
        cleared=cleared,
        message=f"Cleared {cleared} entries from batch history",
    )


@router.get("/history/{job_id}/report", response_model=BatchReport)
async def get_batch_report(
    job_id: str,
    format: ReportFormat = Query(default=ReportFormat.JSON),
    include_details: bool = Query(default=True),
    include_errors: bool = Query(default=True),
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Detailed report for a finished batch."""
    report = service.create_report(
        job_id,
        format=format,
        include_details=include_details,
        include_errors=include_errors,
    )
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Batch job {job_id} not found in history"
        )
    return report


@router.get("/stats", response_model=BatchProcessingStats)
async def get_batch_stats(
    service: BatchProcessingService = Depends(get_batch_service),
):
    """Aggregate statistics over active and archived batches."""
    return service.get_statistics()
