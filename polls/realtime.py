"""Change notifications on polls, responses and students, and the department refresh they trigger.

A notification carries no diff; it only tells that a department summary is
stale. Notifications arriving within the debounce window are coalesced into a
single refresh, and only one refresh per department runs at a time.
"""
import logging

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.utils import timezone
from kombu.exceptions import OperationalError

from authentication.models import ClassSection, Department, Student

from . import exceptions, reports
from .models import Poll, PollResponse

logger = logging.getLogger(__name__)

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"
ALL_EVENTS = (INSERT, UPDATE, DELETE)

_subscriptions = []


def subscribe(model, events, callback):
    """Calls ``callback(event, instance)`` whenever a row of ``model`` changes.

    Args:
        model (class): model to watch
        events (iterable): any of "insert", "update", "delete"
        callback (callable): receives the event name and the changed instance

    Returns:
        callable: disconnects the callback when called
    """
    events = set(events)
    receivers = []

    def on_save(sender, instance, created, raw=False, **kwargs):
        if raw:
            return
        event = INSERT if created else UPDATE
        if event in events:
            callback(event, instance)

    def on_delete(sender, instance, **kwargs):
        callback(DELETE, instance)

    if events & {INSERT, UPDATE}:
        post_save.connect(on_save, sender=model, weak=False)
        receivers.append((post_save, on_save))
    if DELETE in events:
        post_delete.connect(on_delete, sender=model, weak=False)
        receivers.append((post_delete, on_delete))

    def unsubscribe():
        for signal, receiver in receivers:
            signal.disconnect(receiver, sender=model)

    return unsubscribe


def pending_key(department_id):
    return f"department-refresh-pending:{department_id}"


def busy_key(department_id):
    return f"department-refresh-busy:{department_id}"


def summary_key(department_id):
    return f"department-summary:{department_id}"


def department_of(instance):
    """Department whose summary a changed row affects, or None if it cannot be told."""
    if isinstance(instance, Student):
        return instance.department_id
    if isinstance(instance, Poll):
        return (
            ClassSection.objects.filter(pk=instance.target_class_id)
            .values_list("department_id", flat=True)
            .first()
        )
    if isinstance(instance, PollResponse):
        # None while the parent poll is being deleted; the poll's own event covers it
        return (
            Poll.objects.filter(pk=instance.poll_id)
            .values_list("target_class__department_id", flat=True)
            .first()
        )
    return None


def _enqueue_refresh(department_id):
    from .tasks import refresh_department_summary

    try:
        refresh_department_summary.apply_async(
            args=[department_id], countdown=settings.POLL_REFRESH_DEBOUNCE_SECONDS
        )
    except OperationalError:
        cache.delete(pending_key(department_id))
        logger.exception("Could not queue refresh of department %s", department_id)


def schedule_department_refresh(department_id):
    """Queues a delayed refresh unless one is already pending for the department.

    Returns:
        bool: True if a refresh was queued, False if coalesced into a pending one
    """
    if department_id is None:
        return False
    if not cache.add(pending_key(department_id), True, timeout=settings.POLL_REFRESH_BUSY_TIMEOUT):
        logger.debug("Refresh of department %s already pending", department_id)
        return False
    transaction.on_commit(lambda: _enqueue_refresh(department_id))
    return True


def _department_changed(event, instance):
    schedule_department_refresh(department_of(instance))


def connect_department_refresh():
    """Subscribes department refreshes to polls, responses and students once."""
    if _subscriptions:
        return
    for model in (Poll, PollResponse, Student):
        _subscriptions.append(subscribe(model, ALL_EVENTS, _department_changed))


def disconnect_department_refresh():
    while _subscriptions:
        _subscriptions.pop()()


def refresh_department(department_id):
    """Recomputes and caches a department summary.

    Raises:
        exceptions.NotFoundError: raises if the department does not exist
        exceptions.StoreError: raises if fetching the data fails

    Returns:
        dictionary: fresh summary, or None when a refresh is already running
    """
    if not cache.add(busy_key(department_id), True, timeout=settings.POLL_REFRESH_BUSY_TIMEOUT):
        logger.info("Refresh of department %s already in progress", department_id)
        return None
    try:
        department = Department.objects.filter(pk=department_id).first()
        if department is None:
            raise exceptions.NotFoundError("Department not found.")
        summary = reports.department_summary(department)
        summary["refreshed_at"] = timezone.now().isoformat()
        cache.set(summary_key(department_id), summary, timeout=None)
    finally:
        cache.delete(busy_key(department_id))
    logger.info("Refreshed summary of department %s", department_id)
    return summary


def department_summary(department):
    """Cached summary of a department, computed on first use."""
    summary = cache.get(summary_key(department.pk))
    if summary is not None:
        return summary
    summary = refresh_department(department.pk)
    if summary is None:
        summary = reports.department_summary(department)
        summary["refreshed_at"] = timezone.now().isoformat()
    return summary
