from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pipeline.constants import (
    STATUS_ADVANCED_QUEUED,
    STATUS_ADVANCED_READY,
    STATUS_BASIC_READY,
    STATUS_FAILED,
    STATUS_NONE,
    TERMINAL_STATUSES,
)
from pipeline.errors import AnalysisError

ALLOWED_TRANSITIONS = {
    STATUS_NONE: (STATUS_BASIC_READY, STATUS_ADVANCED_QUEUED, STATUS_FAILED),
    STATUS_ADVANCED_QUEUED: (STATUS_ADVANCED_READY, STATUS_FAILED),
    STATUS_BASIC_READY: (),
    STATUS_ADVANCED_READY: (),
    STATUS_FAILED: (),
}


class JobError(AnalysisError):
    pass


class JobNotFoundError(JobError):
    pass


class InvalidTransitionError(JobError):
    pass


class VersionConflictError(JobError):
    pass


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


@dataclass
class AnalysisJob:
    user_id: str
    file_id: str
    category: str = "general"
    analysis_status: str = STATUS_NONE
    analysis: Dict[str, Any] = field(default_factory=dict)
    queued_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    analysis_logs: List[Dict[str, str]] = field(default_factory=list)
    version: int = 0

    @property
    def key(self):
        return (self.user_id, self.file_id)

    def transition(self, new_status: str) -> None:
        if new_status not in ALLOWED_TRANSITIONS.get(self.analysis_status, ()):
            raise InvalidTransitionError(f"Cannot move job {self.key} from {self.analysis_status} to {new_status}")
        self.analysis_status = new_status

    def to_document(self) -> Dict[str, Any]:
        """Persisted field layout of the analysis record."""
        return {
            "userId": self.user_id,
            "fileId": self.file_id,
            "category": self.category,
            "analysisStatus": self.analysis_status,
            "analysis": self.analysis,
            "advancedAnalysisQueuedAt": self.queued_at.isoformat() if self.queued_at else None,
            "advancedAnalysisCompletedAt": self.completed_at.isoformat() if self.completed_at else None,
            "advancedAnalysisError": self.error,
            "analysisLogs": list(self.analysis_logs),
            "version": self.version,
        }


__all__ = [
    "ALLOWED_TRANSITIONS",
    "AnalysisJob",
    "InvalidTransitionError",
    "JobError",
    "JobNotFoundError",
    "VersionConflictError",
    "is_terminal",
    "STATUS_NONE",
    "STATUS_BASIC_READY",
    "STATUS_ADVANCED_QUEUED",
    "STATUS_ADVANCED_READY",
    "STATUS_FAILED",
]
