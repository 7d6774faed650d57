"""Chunked scheduler.

Clips are split into consecutive chunks of ``max_concurrent`` items. Every
clip in a chunk is dispatched at once and the scheduler waits for the whole
chunk to settle before starting the next one, so a slow clip holds back the
following chunk. Cancellation is checked between chunks only.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from ..models import BatchJobStatus, BatchProgress, ClipResult
from .dispatcher import OperationDispatcher
from .registry import JobRegistry

logger = logging.getLogger("clipbatch.scheduler")

T = TypeVar("T")

ProgressCallback = Callable[[BatchProgress], None]


def chunk_items(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into consecutive chunks of at most ``size``."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class ChunkedScheduler:
    """Drives one batch through the dispatcher, chunk by chunk."""

    def __init__(self, dispatcher: OperationDispatcher, registry: JobRegistry):
        self.dispatcher = dispatcher
        self.registry = registry

    async def run(
        self,
        progress: BatchProgress,
        clip_ids: Sequence[str],
        operation: str,
        options: Dict[str, Any],
        max_concurrent: int,
        progress_callback: Optional[ProgressCallback] = None,
        results: Optional[List[ClipResult]] = None,
    ) -> List[ClipResult]:
        """Process all clips of a job.

        Per-clip failures are recorded on ``progress`` and in the returned
        results. Anything raised from here is a scheduler-level fault; clip
        results gathered before the fault are kept in ``results`` if given.

        Returns:
            Clip results in completion order within each chunk
        """
        if results is None:
            results = []
        chunks = chunk_items(clip_ids, max_concurrent)

        for index, chunk in enumerate(chunks):
            if self.registry.status_of(progress.job_id) == BatchJobStatus.CANCELLED:
                logger.info(
                    f"Job {progress.job_id} cancelled, skipping {len(chunks) - index} remaining chunk(s)"
                )
                break

            logger.debug(f"Job {progress.job_id}: chunk {index + 1}/{len(chunks)} ({len(chunk)} clips)")
            await asyncio.gather(*(
                self._process_clip(progress, clip_id, operation, options, results, progress_callback)
                for clip_id in chunk
            ))

        return results

    async def _process_clip(
        self,
        progress: BatchProgress,
        clip_id: str,
        operation: str,
        options: Dict[str, Any],
        results: List[ClipResult],
        progress_callback: Optional[ProgressCallback],
    ):
        try:
            data = await self.dispatcher.dispatch(clip_id, operation, options)
        except Exception as e:
            message = str(e)
            logger.warning(f"Job {progress.job_id}: clip {clip_id} failed: {message}")
            with self.registry.lock:
                progress.failed += 1
                progress.errors.append(f"{clip_id}: {message}")
                _update_estimate(progress)
            results.append(ClipResult(clip_id=clip_id, success=False, error=message))
        else:
            with self.registry.lock:
                progress.completed += 1
                progress.current_clip = clip_id
                _update_estimate(progress)
            results.append(ClipResult(clip_id=clip_id, success=True, data=data))

        _notify(progress_callback, progress)


def _update_estimate(progress: BatchProgress):
    processed = progress.processed
    if processed == 0:
        return
    elapsed = (datetime.utcnow() - progress.start_time).total_seconds()
    progress.estimated_time_remaining = elapsed / processed * (progress.total - processed)


def _notify(callback: Optional[ProgressCallback], progress: BatchProgress):
    if callback is None:
        return
    try:
        callback(progress)
    except Exception:
        logger.exception(f"Progress callback for job {progress.job_id} raised")
