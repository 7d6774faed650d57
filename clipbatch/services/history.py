"""Batch history and derived statistics."""

import logging
import threading
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..models import (
    BatchJobStatus,
    BatchOperationResult,
    BatchProcessingStats,
    BatchProgress,
)

logger = logging.getLogger("clipbatch.history")


class HistoryStore:
    """Append-only record of finished batches."""

    def __init__(self):
        self._entries: List[BatchOperationResult] = []
        self._lock = threading.Lock()

    def archive(self, result: BatchOperationResult):
        with self._lock:
            self._entries.append(result)

    def get_history(self, limit: int = 50) -> List[BatchOperationResult]:
        """Return the most recent ``limit`` entries, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            return list(self._entries[-limit:])

    def all(self) -> List[BatchOperationResult]:
        with self._lock:
            return list(self._entries)

    def find(self, job_id: str) -> Optional[BatchOperationResult]:
        with self._lock:
            for entry in reversed(self._entries):
                if entry.job_id == job_id:
                    return entry
        return None

    def clear(self, older_than: Optional[datetime] = None, keep_successful: bool = False) -> int:
        """Remove entries from history.

        Args:
            older_than: Only remove entries that ended before this time
            keep_successful: Keep completed batches without failed clips

        Returns:
            Number of removed entries
        """
        if older_than is not None and older_than.tzinfo is not None:
            # History timestamps are naive UTC
            older_than = older_than.astimezone(timezone.utc).replace(tzinfo=None)

        with self._lock:
            before = len(self._entries)
            if older_than is None and not keep_successful:
                self._entries = []
            else:
                self._entries = [e for e in self._entries if _should_keep(e, older_than, keep_successful)]
            cleared = before - len(self._entries)
        logger.info(f"Cleared {cleared} history entries")
        return cleared


def _should_keep(entry: BatchOperationResult, older_than: Optional[datetime], keep_successful: bool) -> bool:
    if older_than is not None and entry.summary.end_time >= older_than:
        return True
    if keep_successful and entry.status == BatchJobStatus.COMPLETED and entry.failure_count == 0:
        return True
    return False


def compute_statistics(
    history: List[BatchOperationResult],
    active: Iterable[BatchProgress],
) -> BatchProcessingStats:
    """Derive aggregate metrics from history and the active jobs."""
    active = list(active)
    running_jobs = sum(1 for job in active if job.status == BatchJobStatus.RUNNING)
    total_jobs = len(history) + len(active)
    completed_jobs = sum(1 for job in history if job.status == BatchJobStatus.COMPLETED)
    failed_jobs = sum(1 for job in history if job.status == BatchJobStatus.FAILED)

    average_execution_time = (
        sum(job.execution_time for job in history) / len(history) if history else 0.0
    )
    total_clips_processed = sum(job.total_processed for job in history)
    success_rate = completed_jobs / total_jobs * 100 if total_jobs > 0 else 0.0

    return BatchProcessingStats(
        total_jobs=total_jobs,
        running_jobs=running_jobs,
        completed_jobs=completed_jobs,
        failed_jobs=failed_jobs,
        average_execution_time=average_execution_time,
        total_clips_processed=total_clips_processed,
        success_rate=success_rate,
    )
