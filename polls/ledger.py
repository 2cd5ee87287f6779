"""Recording and editing student responses, one per student and poll."""
import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from . import exceptions
from .catalog import is_expired, list_polls
from .models import Poll, PollResponse

logger = logging.getLogger(__name__)


def _check_option(poll, option_index):
    if option_index is None or option_index == "":
        raise exceptions.ValidationError("Please select an option.")
    try:
        option_index = int(option_index)
    except (TypeError, ValueError):
        raise exceptions.ValidationError("Please select a valid option.")
    if not 0 <= option_index < len(poll.options or []):
        raise exceptions.ValidationError("Please select a valid option.")
    return option_index


def build_response_text(poll, option_index, free_text=None):
    """Builds the stored answer: the option, plus free text for general polls.

    Args:
        poll (object): Poll the answer belongs to
        option_index (int): index into poll.options
        free_text (string): optional comment, only kept for general polls

    Returns:
        string: "<option>" or "<option> - <free text>"
    """
    option = poll.options[option_index]
    free_text = (free_text or "").strip()
    if poll.category == Poll.GENERAL and free_text:
        return f"{option} - {free_text}"
    return option


def has_responded(poll_id, registration_number):
    return PollResponse.objects.filter(
        poll_id=poll_id, student_id=registration_number
    ).exists()


def submit_response(student, poll_id, option_index, free_text=None, user=None, now=None):
    """Records a student's first answer to a poll.

    Args:
        student (object): Student answering
        poll_id (int): poll being answered
        option_index (int): selected option, mandatory for every category
        free_text (string): optional comment for general polls
        user (object): login that issued the request

    Raises:
        exceptions.NotFoundError: poll missing or addressed to another class
        exceptions.ValidationError: no or invalid option, or the poll expired
        exceptions.DuplicateResponseError: the student already answered
        exceptions.StoreError: the insert failed

    Returns:
        Object: created PollResponse
    """
    poll = (
        Poll.objects.select_related("target_class")
        .filter(pk=poll_id)
        .first()
    )
    if poll is None:
        raise exceptions.NotFoundError("Poll not found.")
    target = poll.target_class
    if target.department_id != student.department_id or target.section != student.section:
        raise exceptions.NotFoundError("Poll not found.")

    option_index = _check_option(poll, option_index)
    if is_expired(poll.deadline, now):
        raise exceptions.ValidationError("This poll has expired.")

    try:
        with transaction.atomic():
            response = PollResponse.objects.create(
                poll=poll,
                student=student,
                response=build_response_text(poll, option_index, free_text),
                option_index=option_index,
                responded_at=timezone.now(),
                created_by=user,
            )
    except IntegrityError as exc:
        logger.info(
            "Rejected second response from %s to poll %s",
            student.registration_number,
            poll.pk,
        )
        raise exceptions.DuplicateResponseError() from exc
    except DatabaseError as exc:
        logger.exception("Saving response to poll %s failed", poll.pk)
        raise exceptions.StoreError("Failed to submit response.") from exc

    logger.info("%s responded to poll %s", student.registration_number, poll.pk)
    return response


def edit_response(response_id, registration_number, option_index, free_text=None, now=None):
    """Overwrites an existing answer in place.

    The row is read again right before the update so that a stale client
    cannot edit a response it does not own.

    Args:
        response_id (int): response being edited
        registration_number (string): student claiming the response

    Raises:
        exceptions.NotFoundError: raises if the response does not exist
        exceptions.OwnershipError: raises if the response belongs to another student
        exceptions.ValidationError: raises if the option is invalid, the answer
            is empty or the poll expired
        exceptions.StoreError: raises if the update fails

    Returns:
        Object: updated PollResponse
    """
    response = (
        PollResponse.objects.select_related("poll").filter(pk=response_id).first()
    )
    if response is None:
        raise exceptions.NotFoundError("Response not found.")
    if response.student_id != registration_number:
        logger.warning(
            "%s tried to edit response %s owned by %s",
            registration_number,
            response_id,
            response.student_id,
        )
        raise exceptions.OwnershipError("This response does not belong to you.")
    if is_expired(response.poll.deadline, now):
        raise exceptions.ValidationError("This poll has expired.")

    option_index = _check_option(response.poll, option_index)
    text = build_response_text(response.poll, option_index, free_text)
    if not text.strip():
        raise exceptions.ValidationError("Response cannot be empty.")

    response.response = text
    response.option_index = option_index
    response.responded_at = timezone.now()
    try:
        response.save(update_fields=["response", "option_index", "responded_at", "modified_at"])
    except DatabaseError as exc:
        logger.exception("Updating response %s failed", response_id)
        raise exceptions.StoreError("Failed to update response.") from exc
    return response


def list_for_student(registration_number):
    return list(
        PollResponse.objects.filter(student_id=registration_number)
        .select_related("poll")
        .order_by("-responded_at")
    )


def list_for_poll(poll_id):
    return list(
        PollResponse.objects.filter(poll_id=poll_id)
        .select_related("student")
        .order_by("responded_at", "pk")
    )


def pending_counts(actor, now=None):
    """Counts the open polls a student has not answered yet, per category.

    Args:
        actor (Actor): student whose class is looked at

    Returns:
        dictionary: category name to number of unanswered open polls
    """
    polls = list_polls(actor, now)
    answered = set(
        PollResponse.objects.filter(
            student_id=actor.person.registration_number,
            poll__in=[poll.pk for poll in polls],
        ).values_list("poll_id", flat=True)
    )
    counts = {category: 0 for category, _ in Poll.CATEGORY_CHOICES}
    for poll in polls:
        if poll.pk not in answered:
            counts[poll.category] += 1
    return counts
