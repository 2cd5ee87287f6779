import logging

from celery import shared_task
from django.core.cache import cache

from . import realtime
from .exceptions import PollError

logger = logging.getLogger(__name__)


@shared_task(name="refresh_department_summary")
def refresh_department_summary(department_id):
    """Runs one debounced department refresh. Queued by change notifications with a countdown."""
    cache.delete(realtime.pending_key(department_id))
    try:
        summary = realtime.refresh_department(department_id)
    except PollError as exc:
        logger.error("Refreshing department %s failed: %s", department_id, exc.detail)
        return False
    return summary is not None
