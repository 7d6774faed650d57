"""In-memory registry of active batch jobs."""

import logging
import threading
from typing import Callable, Dict, List, Optional

from ..models import BatchJobStatus, BatchProgress

logger = logging.getLogger("clipbatch.registry")


class JobRegistry:
    """Table of live job records keyed by job id.

    All access goes through one lock so that the submitting caller, the
    scheduler task and cancel callers on other threads see consistent state.
    """

    def __init__(self):
        self._jobs: Dict[str, BatchProgress] = {}
        self._lock = threading.RLock()

    @property
    def lock(self):
        return self._lock

    def add(self, progress: BatchProgress):
        with self._lock:
            if progress.job_id in self._jobs:
                raise KeyError(f"Job {progress.job_id} already registered")
            self._jobs[progress.job_id] = progress
        logger.debug(f"Registered job {progress.job_id}")

    def get(self, job_id: str) -> Optional[BatchProgress]:
        with self._lock:
            return self._jobs.get(job_id)

    def retire(self, job_id: str, on_retire: Callable[[BatchProgress], None]) -> Optional[BatchProgress]:
        """Remove a job, running ``on_retire`` under the registry lock.

        Readers holding the lock never observe the job both active and
        archived, or neither.
        """
        with self._lock:
            progress = self._jobs.get(job_id)
            if progress is None:
                return None
            on_retire(progress)
            del self._jobs[job_id]
        logger.debug(f"Retired job {job_id}")
        return progress

    def set_status(self, job_id: str, status: BatchJobStatus, *, only_from: Optional[BatchJobStatus] = None) -> bool:
        """Set a job's status.

        Args:
            job_id: Job ID
            status: New status
            only_from: If given, change status only when the current one matches

        Returns:
            True if the status was changed
        """
        with self._lock:
            progress = self._jobs.get(job_id)
            if progress is None:
                return False
            if only_from is not None and progress.status != only_from:
                return False
            progress.status = status
            return True

    def status_of(self, job_id: str) -> Optional[BatchJobStatus]:
        with self._lock:
            progress = self._jobs.get(job_id)
            return progress.status if progress else None

    def snapshot(self) -> List[BatchProgress]:
        with self._lock:
            return list(self._jobs.values())

    def __contains__(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs
