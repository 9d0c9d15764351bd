from celery import Celery

from app.core.config import get_redis_url, settings

STATS_QUEUE = "stats"


def make_celery(app_name: str = settings.APP_NAME) -> Celery:
    """Celery app on the Redis broker; hit recording is fire-and-forget so no results are kept."""
    broker_url = get_redis_url()
    celery = Celery(app_name, broker=broker_url, include=["app.tasks"])
    celery.conf.update(
        task_serializer="json",
        accept_content=["json"],
        task_ignore_result=True,
        task_acks_late=True,
        task_default_queue=STATS_QUEUE,
        task_routes={"app.tasks.record_hit_task": {"queue": STATS_QUEUE}},
        broker_connection_retry_on_startup=True,
        timezone="UTC",
    )
    return celery


celery_app = make_celery()
