from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import logging

from pipeline.errors import InvalidInputError
from pipeline.pipeline import PipelineConfig, run_pipeline
from pipeline.validator import validate_records

from .models import (
    STATUS_ADVANCED_QUEUED,
    STATUS_BASIC_READY,
    STATUS_FAILED,
    AnalysisJob,
    JobError,
    VersionConflictError,
    is_terminal,
)
from .store import JobStore, get_job_store

log = logging.getLogger(__name__)

Dispatch = Callable[[str, str, str], Any]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def celery_dispatch(user_id: str, file_id: str, category: str) -> None:
    from .tasks import run_advanced_analysis

    run_advanced_analysis.delay(user_id, file_id, category)


def stored_analysis(result: Dict[str, Any]) -> Dict[str, Any]:
    return {"summary": result["stats"], "insights": result["insights"], "meta": result["meta"]}


class AnalysisOrchestrator:
    """Runs small inputs inline and defers large ones to the task queue.

    The orchestrator and the worker it dispatches are the only writers of a
    job's status.
    """

    def __init__(self, store: Optional[JobStore] = None, dispatch: Optional[Dispatch] = None, cfg: Optional[PipelineConfig] = None):
        self.store = store or get_job_store()
        self.dispatch = dispatch or celery_dispatch
        self.cfg = cfg or PipelineConfig()

    def request_analysis(self, user_id: str, file_id: str, category: str, records: Any) -> Dict[str, Any]:
        job = self.store.create(user_id, file_id, category)
        try:
            rows, _, errors = validate_records(records)
            if errors:
                raise InvalidInputError("; ".join(errors))
            if len(rows) <= self.cfg.async_row_threshold:
                return self._run_inline(job, rows, category)
            return self._queue(job, rows, category)
        except VersionConflictError:
            log.warning("Analysis request for %s/%s lost to a newer submission", user_id, file_id)
            raise
        except Exception as e:
            log.exception("Analysis request failed for %s/%s", user_id, file_id)
            self._mark_failed(job, str(e) or e.__class__.__name__)
            raise

    def _run_inline(self, job: AnalysisJob, rows: List[Dict[str, Any]], category: str) -> Dict[str, Any]:
        result = run_pipeline(rows, category, self.cfg)
        version = job.version
        job.analysis = stored_analysis(result)
        job.transition(STATUS_BASIC_READY)
        job.version = self.store.save(job, version).version
        self.store.append_log(job.user_id, job.file_id, "info", f"Analysis completed inline for {len(rows)} rows")
        log.info("Inline analysis ready for %s/%s (%d rows)", job.user_id, job.file_id, len(rows))
        return result

    def _queue(self, job: AnalysisJob, rows: List[Dict[str, Any]], category: str) -> Dict[str, Any]:
        self.store.put_records(job.user_id, job.file_id, rows)
        preview = run_pipeline(rows[: self.cfg.preview_rows], category, self.cfg)
        preview["meta"]["preview"] = True
        preview["meta"]["recordCount"]["total"] = len(rows)

        version = job.version
        job.analysis = stored_analysis(preview)
        job.queued_at = utcnow()
        job.transition(STATUS_ADVANCED_QUEUED)
        job.version = self.store.save(job, version).version
        self.store.append_log(
            job.user_id, job.file_id, "info",
            f"Advanced analysis queued for {len(rows)} rows (preview over first {self.cfg.preview_rows})",
        )
        log.info("Queued advanced analysis for %s/%s (%d rows)", job.user_id, job.file_id, len(rows))

        self.dispatch(job.user_id, job.file_id, category)
        return preview

    def _mark_failed(self, job: AnalysisJob, message: str) -> None:
        """Record ``failed`` only on the record this request last wrote."""
        user_id, file_id = job.key
        try:
            current = self.store.get(user_id, file_id)
            if current.version != job.version:
                log.warning("Job %s/%s was resubmitted, failure not recorded", user_id, file_id)
                return
            if is_terminal(current.analysis_status):
                return
            current.transition(STATUS_FAILED)
            current.error = message
            self.store.save(current, job.version)
            self.store.append_log(user_id, file_id, "error", f"Analysis failed: {message}")
        except JobError:
            log.warning("Could not record failure for %s/%s", user_id, file_id, exc_info=True)
