from typing import Any, Dict, List, Optional, Tuple
import copy
import logging
import threading

from .models import AnalysisJob, JobNotFoundError, VersionConflictError

log = logging.getLogger(__name__)


class JobStore:
    """Persistence boundary for analysis jobs and the records a worker needs."""

    def get(self, user_id: str, file_id: str) -> AnalysisJob:
        raise NotImplementedError()

    def create(self, user_id: str, file_id: str, category: str) -> AnalysisJob:
        raise NotImplementedError()

    def save(self, job: AnalysisJob, expected_version: int) -> AnalysisJob:
        """Compare-and-set write of status fields.

        Raises VersionConflictError on a stale version. Log entries are not
        written here, only through append_log.
        """
        raise NotImplementedError()

    def append_log(self, user_id: str, file_id: str, level: str, message: str) -> None:
        raise NotImplementedError()

    def put_records(self, user_id: str, file_id: str, records: List[Dict[str, Any]]) -> None:
        raise NotImplementedError()

    def load_records(self, user_id: str, file_id: str) -> List[Dict[str, Any]]:
        raise NotImplementedError()

    def discard_records(self, user_id: str, file_id: str) -> None:
        raise NotImplementedError()


class InMemoryJobStore(JobStore):
    def __init__(self):
        self._jobs: Dict[Tuple[str, str], AnalysisJob] = {}
        self._records: Dict[Tuple[str, str], List[Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def _current(self, key) -> AnalysisJob:
        job = self._jobs.get(key)
        if job is None:
            raise JobNotFoundError(f"No analysis job for {key}")
        return job

    def get(self, user_id, file_id):
        with self._lock:
            return copy.deepcopy(self._current((user_id, file_id)))

    def create(self, user_id, file_id, category):
        key = (user_id, file_id)
        with self._lock:
            prev = self._jobs.get(key)
            job = AnalysisJob(user_id=user_id, file_id=file_id, category=category,
                              version=prev.version + 1 if prev else 1)
            if prev is not None:
                log.info("Resubmitted analysis for %s, previous status %s", key, prev.analysis_status)
            self._jobs[key] = job
            return copy.deepcopy(job)

    def save(self, job, expected_version):
        with self._lock:
            cur = self._current(job.key)
            if cur.version != expected_version:
                raise VersionConflictError(
                    f"Job {job.key} is at version {cur.version}, expected {expected_version}"
                )
            stored = copy.deepcopy(job)
            # logs are owned by append_log
            stored.analysis_logs = list(cur.analysis_logs)
            stored.version = expected_version + 1
            self._jobs[job.key] = stored
            return copy.deepcopy(stored)

    def append_log(self, user_id, file_id, level, message):
        with self._lock:
            self._current((user_id, file_id)).analysis_logs.append({"level": level, "message": message})

    def put_records(self, user_id, file_id, records):
        with self._lock:
            self._records[(user_id, file_id)] = list(records)

    def load_records(self, user_id, file_id):
        with self._lock:
            records = self._records.get((user_id, file_id))
        if records is None:
            raise JobNotFoundError(f"No stored records for {(user_id, file_id)}")
        return records

    def discard_records(self, user_id, file_id):
        with self._lock:
            self._records.pop((user_id, file_id), None)


_default_store: Optional[JobStore] = None


def get_job_store() -> JobStore:
    global _default_store
    if _default_store is None:
        _default_store = InMemoryJobStore()
    return _default_store


def set_job_store(store: Optional[JobStore]) -> None:
    global _default_store
    _default_store = store
