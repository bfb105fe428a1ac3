from typing import Any, Dict, Optional
import logging
import threading
import time

from pipeline.pipeline import PipelineConfig, run_pipeline

from .models import (
    STATUS_ADVANCED_READY,
    STATUS_FAILED,
    AnalysisJob,
    JobError,
    VersionConflictError,
    is_terminal,
)
from .orchestrator import stored_analysis, utcnow
from .store import JobStore, get_job_store

log = logging.getLogger(__name__)


def _heartbeat(store: JobStore, user_id: str, file_id: str, stop: threading.Event, interval: float) -> None:
    start = time.time()
    while not stop.wait(interval):
        msg = f"Processing heartbeat: elapsed {int(time.time() - start)}s"
        log.info("%s (%s/%s)", msg, user_id, file_id)
        try:
            store.append_log(user_id, file_id, "info", msg)
        except JobError:
            log.warning("Heartbeat could not be recorded for %s/%s", user_id, file_id, exc_info=True)


def _apply(job: AnalysisJob, status: str, result: Optional[Dict[str, Any]], error: Optional[str]) -> None:
    job.transition(status)
    if status == STATUS_ADVANCED_READY:
        job.analysis = stored_analysis(result)
        job.completed_at = utcnow()
        job.error = None
    else:
        job.error = error


def _finish(store: JobStore, job: AnalysisJob, version: int, status: str, result, error) -> bool:
    """Write the terminal state with a compare-and-set on ``version``.

    On a conflict the record is re-read once; the write is retried only if
    nobody has finished the job in the meantime.
    """
    try:
        _apply(job, status, result, error)
        store.save(job, version)
        return True
    except VersionConflictError:
        log.warning("Version conflict finishing %s/%s, retrying once", job.user_id, job.file_id)

    fresh = store.get(job.user_id, job.file_id)
    if is_terminal(fresh.analysis_status):
        log.warning("Job %s/%s already %s, result dropped", job.user_id, job.file_id, fresh.analysis_status)
        return False
    try:
        _apply(fresh, status, result, error)
        store.save(fresh, fresh.version)
    except JobError as e:
        log.warning("Could not finish %s/%s on retry (%s), result dropped", job.user_id, job.file_id, e)
        return False
    return True


def process_advanced_analysis(user_id: str, file_id: str, category: str, store: Optional[JobStore] = None, cfg: Optional[PipelineConfig] = None) -> str:
    """Full-table analysis for a queued job. Returns the status written."""
    store = store or get_job_store()
    cfg = cfg or PipelineConfig()

    job = store.get(user_id, file_id)
    version = job.version
    log.info("Background analysis started for %s/%s (%s)", user_id, file_id, category)
    store.append_log(user_id, file_id, "info", "Background analysis started")

    stop = threading.Event()
    beat = threading.Thread(
        target=_heartbeat,
        args=(store, user_id, file_id, stop, cfg.heartbeat_seconds),
        name=f"heartbeat-{file_id}",
        daemon=True,
    )
    beat.start()
    result, error = None, None
    try:
        records = store.load_records(user_id, file_id)
        result = run_pipeline(records, category, cfg)
        status = STATUS_ADVANCED_READY
    except Exception as e:
        log.exception("Background analysis failed for %s/%s", user_id, file_id)
        status, error = STATUS_FAILED, str(e) or e.__class__.__name__
    finally:
        stop.set()
        beat.join()

    if not _finish(store, job, version, status, result, error):
        current = store.get(user_id, file_id)
        # a resubmitted job still pending owns the stored records
        if is_terminal(current.analysis_status):
            store.discard_records(user_id, file_id)
        return current.analysis_status
    store.discard_records(user_id, file_id)
    if status == STATUS_ADVANCED_READY:
        store.append_log(user_id, file_id, "info", "Background analysis completed")
        log.info("Background analysis completed for %s/%s", user_id, file_id)
    else:
        store.append_log(user_id, file_id, "error", f"Background analysis failed: {error}")
    return status
