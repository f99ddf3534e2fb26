from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging as celery_setup_logging

from litejira.config import settings

app = Celery(
    "litejira",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_routes={
        "litejira.tasks.report_tasks.*": {"queue": "reports"},
    },
    # Calendar report emails are owned by the in-process ReportScheduler
    beat_schedule={
        "purge-expired-reports": {
            "task": "litejira.tasks.report_tasks.purge_expired_reports",
            "schedule": crontab(hour=3, minute=0),
        },
    },
)


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    from litejira.common.logging import setup_logging

    setup_logging()


app.autodiscover_tasks(["litejira.tasks.report_tasks"])
