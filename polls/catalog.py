"""Creating, listing and deleting polls within an actor's class or department."""
import logging
from datetime import datetime, time

import pytz
from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from authentication.models import ClassSection

from . import exceptions
from .models import Poll

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M:%S"


def local_now():
    """Current time in the institution's time zone."""
    return datetime.now(pytz.timezone(settings.TIME_ZONE))


def _time_of_day(value):
    if isinstance(value, (datetime, time)):
        return value.strftime(TIME_FORMAT)
    return value


def is_expired(deadline, now=None):
    """Tells whether a poll deadline has passed.

    A full timestamp is compared with the current instant. A bare time of day
    (``"14:30:00"`` or a ``time``) is compared with the current time of day as
    text, so such a deadline expires again every day.

    Args:
        deadline (datetime | time | string): stored deadline, may be None
        now (datetime | time | string): reference point, defaults to now

    Returns:
        bool: True when the deadline is in the past
    """
    if not deadline:
        return False
    if isinstance(deadline, datetime):
        if now is None:
            now = timezone.now()
        return now > deadline
    if now is None:
        now = local_now()
    return _time_of_day(now) > _time_of_day(deadline)


def time_remaining(deadline, now=None):
    """Human readable time left before the deadline."""
    if not deadline:
        return "No deadline"

    if isinstance(deadline, datetime):
        if now is None:
            now = timezone.now()
        minutes_left = int((deadline - now).total_seconds() // 60)
    else:
        if now is None:
            now = local_now()
        # same rule as is_expired: a time of day already passed today is expired
        if is_expired(deadline, now):
            return "Expired"
        current = _time_of_day(now).split(":")
        target = _time_of_day(deadline).split(":")
        minutes_left = (int(target[0]) * 60 + int(target[1])) - (
            int(current[0]) * 60 + int(current[1])
        )

    if minutes_left <= 0:
        return "Expired"
    hours, minutes = divmod(minutes_left, 60)
    if hours > 0:
        return f"{hours}h {minutes}m remaining"
    return f"{minutes}m remaining"


def clean_options(options):
    """Strips every option and drops the blank ones."""
    return [str(option).strip() for option in options or [] if str(option).strip()]


def _resolve_targets(class_targets):
    ids = [getattr(target, "pk", target) for target in class_targets or []]
    if not ids:
        raise exceptions.ValidationError("Please select at least one class.")
    found = ClassSection.objects.select_related("department").in_bulk(set(ids))
    missing = [class_id for class_id in ids if class_id not in found]
    if missing:
        raise exceptions.NotFoundError(f"Class {missing[0]} not found.")
    # keep the caller's order and drop repeats
    return [found[class_id] for class_id in dict.fromkeys(ids)]


def _check_targets(actor, targets):
    if actor.is_faculty:
        if actor.class_section is None:
            raise exceptions.NotFoundError("No class is assigned to you.")
        if len(targets) != 1 or targets[0].pk != actor.class_section.pk:
            raise exceptions.OwnershipError("Faculty can only create polls for their own class.")
    elif actor.is_hod:
        for target in targets:
            if target.department_id != actor.department.pk:
                raise exceptions.OwnershipError(
                    f"Class {target} is not in the {actor.department} department."
                )
    else:
        raise exceptions.OwnershipError(
            "Only faculty and heads of department can create polls."
        )


def validate_poll(title, category, options, deadline=None, link_url=None, sort_mode=Poll.SORT_AUTO):
    """Checks poll fields and returns them cleaned.

    Raises:
        exceptions.ValidationError: raises on the first invalid field

    Returns:
        dictionary: cleaned poll fields
    """
    title = (title or "").strip()
    if not title:
        raise exceptions.ValidationError("Please enter a poll title.")

    if category not in dict(Poll.CATEGORY_CHOICES):
        raise exceptions.ValidationError(f"Unknown poll category {category!r}.")

    options = clean_options(options)
    if len(options) < settings.POLL_MIN_OPTIONS:
        raise exceptions.ValidationError(
            f"Please provide at least {settings.POLL_MIN_OPTIONS} options."
        )
    if len(options) > settings.POLL_MAX_OPTIONS:
        raise exceptions.ValidationError(
            f"A poll can have at most {settings.POLL_MAX_OPTIONS} options."
        )

    link_url = (link_url or "").strip()
    if category in Poll.LINKED_CATEGORIES:
        if not link_url:
            kind = "G-Form" if category == Poll.GFORM else "hackathon"
            raise exceptions.ValidationError(f"Please provide the {kind} link.")
    else:
        link_url = ""

    if isinstance(deadline, datetime) and deadline <= timezone.now():
        raise exceptions.ValidationError("Deadline must be in the future.")

    if sort_mode not in dict(Poll.SORT_CHOICES):
        raise exceptions.ValidationError(f"Unknown sort mode {sort_mode!r}.")

    return {
        "title": title,
        "category": category,
        "options": options,
        "deadline": deadline,
        "link_url": link_url or None,
        "sort_mode": sort_mode,
    }


def create_polls(
    actor,
    class_targets,
    title,
    category=Poll.GENERAL,
    options=None,
    deadline=None,
    link_url=None,
    sort_mode=Poll.SORT_AUTO,
    user=None,
):
    """Creates one poll per target class, all sharing the same content.

    Every insert is committed on its own; when one fails the polls already
    created stay in place and their ids travel on the raised StoreError.

    Args:
        actor (Actor): faculty or head of department creating the polls
        class_targets (list): ClassSection objects or ids
        user (object): login that issued the request, recorded as created_by

    Raises:
        exceptions.ValidationError: invalid poll fields, nothing written
        exceptions.OwnershipError: a target is outside the actor's scope
        exceptions.StoreError: an insert failed part way

    Returns:
        list: created Poll objects in target order
    """
    fields = validate_poll(title, category, options, deadline, link_url, sort_mode)
    targets = _resolve_targets(class_targets)
    _check_targets(actor, targets)

    created = []
    for target in targets:
        try:
            poll = Poll.objects.create(
                owner=actor.person, target_class=target, created_by=user, **fields
            )
        except DatabaseError as exc:
            logger.exception("Creating poll %r for class %s failed", fields["title"], target)
            raise exceptions.StoreError(
                f"Failed to create poll for class {target}; created for "
                f"{len(created)} of {len(targets)} classes.",
                created=[poll.pk for poll in created],
            ) from exc
        created.append(poll)

    logger.info(
        "%s created poll %r for %d class(es)", actor.person, fields["title"], len(created)
    )
    return created


def scoped_polls(actor):
    """Queryset of the polls an actor can see, ignoring deadlines."""
    queryset = Poll.objects.select_related("owner", "target_class__department")
    if actor is None:
        return queryset.none()
    if actor.is_hod:
        return queryset.filter(target_class__department=actor.department)
    if actor.class_section is None:
        return queryset.none()
    return queryset.filter(target_class=actor.class_section)


def list_polls(actor, now=None, category=None):
    """Lists the polls in an actor's scope, newest first.

    Students only get polls whose deadline has not passed.

    Args:
        actor (object): Actor whose class or department is listed
        category (string): only polls of this category when given

    Raises:
        exceptions.ValidationError: raises if the category is unknown
        exceptions.StoreError: raises if fetching the polls fails

    Returns:
        list: Poll objects
    """
    queryset = scoped_polls(actor).order_by("-created_at", "-pk")
    if category:
        if category not in dict(Poll.CATEGORY_CHOICES):
            raise exceptions.ValidationError(f"Unknown poll category {category!r}.")
        queryset = queryset.filter(category=category)
    try:
        polls = list(queryset)
    except DatabaseError as exc:
        logger.exception("Listing polls for %s failed", actor)
        raise exceptions.StoreError("Failed to fetch polls.") from exc
    if actor is not None and actor.is_student:
        polls = [poll for poll in polls if not is_expired(poll.deadline, now)]
    return polls


def get_poll(poll_id, actor=None):
    """Fetches one poll, optionally limited to the actor's scope.

    Raises:
        exceptions.NotFoundError: raises if the poll is missing or out of scope

    Returns:
        Object: Poll object
    """
    queryset = Poll.objects.select_related("owner", "target_class__department")
    if actor is not None:
        queryset = scoped_polls(actor)
    poll = queryset.filter(pk=poll_id).first()
    if poll is None:
        raise exceptions.NotFoundError("Poll not found.")
    return poll


def can_delete(actor, poll):
    """Owner of the poll or a head of the poll's department."""
    if actor is None or not actor.is_staff_member:
        return False
    if poll.owner_id == actor.person.pk:
        return True
    return actor.is_hod and poll.target_class.department_id == actor.department.pk


def delete_poll(poll_id, actor):
    """Deletes a poll and, through the cascade, its responses.

    Raises:
        exceptions.NotFoundError: raises if the poll does not exist
        exceptions.OwnershipError: raises if the actor did not create the poll
            and is not its department's head
        exceptions.StoreError: raises if the delete fails
    """
    poll = get_poll(poll_id)
    if not can_delete(actor, poll):
        raise exceptions.OwnershipError("You are not the creator of the poll.")
    try:
        poll.delete()
    except DatabaseError as exc:
        logger.exception("Deleting poll %s failed", poll_id)
        raise exceptions.StoreError("Failed to delete poll.") from exc
    logger.info("%s deleted poll %s", actor.person, poll_id)
