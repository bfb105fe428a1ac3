from celery.utils.log import get_task_logger

from .celery_app import app
from .worker import process_advanced_analysis

logger = get_task_logger(__name__)


@app.task(name="jobs.run_advanced_analysis", ignore_result=True)
def run_advanced_analysis(user_id: str, file_id: str, category: str) -> str:
    """Deferred full-table analysis. No automatic retry; failures land on the job record."""
    logger.info("Running advanced analysis for %s/%s", user_id, file_id)
    return process_advanced_analysis(user_id, file_id, category)
