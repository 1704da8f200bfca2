from celery import Celery
from hvacops.core.config import settings

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {
    "hvacops.services.tasks.refresh_delivery_statuses": {"queue": "status-refresh"},
}


@celery_app.task(bind=True, max_retries=3)
def refresh_delivery_statuses(self, today: str | None = None):
    """Recompute cached statuses; ``today`` is an ISO date or None for the business date."""
    import asyncio
    from datetime import date
    from hvacops.services.tasks_internal import refresh_delivery_statuses_async

    try:
        return asyncio.run(
            refresh_delivery_statuses_async(date.fromisoformat(today) if today else None)
        )
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)
