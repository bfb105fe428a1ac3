import os

from celery import Celery


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


app = Celery("tabular_insights")

app.conf.update(
    broker_url=os.environ.get("INSIGHTS_BROKER_URL", "memory://"),
    task_always_eager=_env_flag("INSIGHTS_TASK_ALWAYS_EAGER"),
    task_eager_propagates=True,
    task_serializer="json",
    accept_content=["json"],
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    imports=("jobs.tasks",),
)
