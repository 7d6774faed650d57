"""Batch processing service.

Accepts batch requests, runs each one as a background asyncio task and moves
finished batches into history.
"""

import asyncio
import logging
import random
import string
import time
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Set

from ..models import (
    TERMINAL_STATUSES,
    BatchJobStatus,
    BatchOperationResult,
    BatchPriority,
    BatchProcessingStats,
    BatchProgress,
    BatchReport,
    BatchReportSummary,
    BatchSummary,
    ClipResult,
    ReportFormat,
)
from .backend import AnalysisBackend
from .dispatcher import OperationDispatcher
from .history import HistoryStore, compute_statistics
from .paths import ClipPathResolver, PlaceholderPathResolver
from .registry import JobRegistry
from .scheduler import ChunkedScheduler, ProgressCallback

logger = logging.getLogger("clipbatch.service")

DEFAULT_MAX_CONCURRENT = 3

_BASE36 = string.digits + string.ascii_lowercase


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def generate_job_id() -> str:
    """Return ``batch_<ms timestamp>_<9 base-36 chars>``.

    Uniqueness rests on the timestamp plus the random suffix; collisions are
    negligible, not impossible.
    """
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"batch_{int(time.time() * 1000)}_{suffix}"


class BatchProcessingService:
    """Runs batch operations over lists of clips."""

    def __init__(
        self,
        backend: AnalysisBackend,
        resolver: Optional[ClipPathResolver] = None,
        *,
        default_max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        registry: Optional[JobRegistry] = None,
        history: Optional[HistoryStore] = None,
    ):
        self.registry = registry or JobRegistry()
        self.history = history or HistoryStore()
        self.dispatcher = OperationDispatcher(backend, resolver or PlaceholderPathResolver())
        self.scheduler = ChunkedScheduler(self.dispatcher, self.registry)
        self.default_max_concurrent = default_max_concurrent
        self._tasks: Set[asyncio.Task] = set()
        logger.info("BatchProcessingService initialized")

    async def start_batch(
        self,
        clip_ids: Sequence[str],
        operation: str,
        options: Optional[Dict[str, Any]] = None,
        *,
        max_concurrent: Optional[int] = None,
        retry_on_failure: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
        priority: BatchPriority = BatchPriority.MEDIUM,
    ) -> str:
        """Start a batch operation in the background.

        Returns as soon as the job is registered; use ``get_progress`` or a
        ``progress_callback`` to follow it.

        Args:
            clip_ids: Clips to process
            operation: Operation kind. Unknown kinds are accepted and fail per clip
            options: Operation options, merged over per-operation defaults
            max_concurrent: Chunk size, defaults to ``default_max_concurrent``
            retry_on_failure: Recorded on the job; failed clips are not retried
            progress_callback: Called with the live job record after every clip
            priority: Recorded on the job; has no scheduling effect

        Returns:
            The new job id
        """
        job_id = generate_job_id()
        while job_id in self.registry or self.history.find(job_id) is not None:
            job_id = generate_job_id()

        clip_ids = list(clip_ids)
        progress = BatchProgress(
            job_id=job_id,
            operation=operation,
            total=len(clip_ids),
            priority=priority,
            retry_on_failure=retry_on_failure,
        )
        self.registry.add(progress)

        if retry_on_failure:
            logger.info(f"Job {job_id}: retry_on_failure requested, clips are attempted once")

        task = asyncio.create_task(self._run_batch(
            progress,
            clip_ids,
            operation,
            dict(options or {}),
            max_concurrent or self.default_max_concurrent,
            progress_callback,
        ), name=job_id)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.info(f"Started job {job_id}: {operation} for {len(clip_ids)} clips (priority {priority.value})")
        return job_id

    def get_progress(self, job_id: str) -> Optional[BatchProgress]:
        """Live record of an active job, or None if unknown or already archived."""
        return self.registry.get(job_id)

    def cancel(self, job_id: str) -> bool:
        """Request cancellation of a running job.

        The chunk in flight still completes and is recorded.

        Returns:
            True if the job was running and is now marked cancelled
        """
        cancelled = self.registry.set_status(
            job_id, BatchJobStatus.CANCELLED, only_from=BatchJobStatus.RUNNING
        )
        if cancelled:
            logger.info(f"Cancellation requested for job {job_id}")
        return cancelled

    def get_statistics(self) -> BatchProcessingStats:
        with self.registry.lock:
            active = self.registry.snapshot()
            history = self.history.all()
        return compute_statistics(history, active)

    def get_history(self, limit: int = 50) -> List[BatchOperationResult]:
        return self.history.get_history(limit)

    def clear_history(self, older_than: Optional[datetime] = None, keep_successful: bool = False) -> int:
        return self.history.clear(older_than=older_than, keep_successful=keep_successful)

    def create_report(
        self,
        job_id: str,
        format: ReportFormat = ReportFormat.JSON,
        include_details: bool = True,
        include_errors: bool = True,
    ) -> Optional[BatchReport]:
        """Build a report for an archived job, or None if it is not in history."""
        result = self.history.find(job_id)
        if result is None:
            return None

        return BatchReport(
            job_id=result.job_id,
            operation=result.summary.operation,
            status=result.status,
            summary=BatchReportSummary(
                total_clips=result.total_processed,
                successful=result.success_count,
                failed=result.failure_count,
                execution_time=result.execution_time,
                start_time=result.summary.start_time,
                end_time=result.summary.end_time,
            ),
            results=list(result.results) if include_details else None,
            errors=list(result.errors) if include_errors else None,
            format=format,
        )

    async def wait(self, job_id: Optional[str] = None):
        """Wait for background jobs to finish (all of them if no id is given)."""
        tasks = [t for t in self._tasks if job_id is None or t.get_name() == job_id]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def shutdown(self):
        """Cancel all background jobs; interrupted jobs are archived as cancelled."""
        # Let freshly created tasks take their first step so they can archive on cancel
        await asyncio.sleep(0)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run_batch(
        self,
        progress: BatchProgress,
        clip_ids: List[str],
        operation: str,
        options: Dict[str, Any],
        max_concurrent: int,
        progress_callback: Optional[ProgressCallback],
    ):
        job_id = progress.job_id
        started = time.monotonic()
        results: List[ClipResult] = []

        self.registry.set_status(job_id, BatchJobStatus.RUNNING, only_from=BatchJobStatus.PENDING)

        try:
            await self.scheduler.run(
                progress, clip_ids, operation, options, max_concurrent, progress_callback, results=results
            )
        except asyncio.CancelledError:
            logger.warning(f"Job {job_id} interrupted by shutdown")
            with self.registry.lock:
                progress.status = BatchJobStatus.CANCELLED
                progress.errors.append("Batch interrupted by shutdown")
            self._archive(progress, clip_ids, operation, results, _elapsed_ms(started))
            raise
        except Exception as e:
            logger.error(f"Job {job_id} failed: {e}", exc_info=True)
            with self.registry.lock:
                progress.status = BatchJobStatus.FAILED
                progress.errors.append(str(e))
        else:
            with self.registry.lock:
                if progress.status not in TERMINAL_STATUSES:
                    progress.status = BatchJobStatus.COMPLETED

        self._archive(progress, clip_ids, operation, results, _elapsed_ms(started))

    def _archive(
        self,
        progress: BatchProgress,
        clip_ids: List[str],
        operation: str,
        results: List[ClipResult],
        execution_time: int,
    ):
        def move_to_history(record: BatchProgress):
            self.history.archive(BatchOperationResult(
                job_id=record.job_id,
                status=record.status,
                results=list(results),
                errors=list(record.errors),
                total_processed=len(clip_ids),
                success_count=record.completed,
                failure_count=record.failed,
                execution_time=execution_time,
                summary=BatchSummary(
                    operation=operation,
                    clip_ids=list(clip_ids),
                    start_time=record.start_time,
                    end_time=datetime.utcnow(),
                ),
            ))

        self.registry.retire(progress.job_id, move_to_history)
        logger.info(
            f"Finished job {progress.job_id} with status {progress.status.value}: "
            f"{progress.completed} succeeded, {progress.failed} failed in {execution_time}ms"
        )
