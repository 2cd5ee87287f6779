"""Fetches polls, rosters and responses, then summarizes them with the aggregator."""
import logging

from django.db import DatabaseError

from authentication.models import Student

from . import aggregator, exceptions
from .catalog import is_expired
from .models import Poll, PollResponse

logger = logging.getLogger(__name__)


def student_row(student):
    return {
        "registration_number": student.registration_number,
        "name": student.name,
        "email": student.email,
        "department": str(student.department),
        "section": student.section,
    }


def class_roster(class_section):
    return list(
        Student.objects.filter(
            department_id=class_section.department_id, section=class_section.section
        )
        .select_related("department")
        .order_by("registration_number")
    )


def poll_row(poll, roster_size=None, responded=None):
    row = {
        "id": poll.pk,
        "title": poll.title,
        "category": poll.category,
        "class_name": str(poll.target_class),
        "section": poll.target_class.section,
        "owner": poll.owner.name,
        "created_at": poll.created_at.isoformat() if poll.created_at else None,
        "deadline": poll.deadline.isoformat() if poll.deadline else None,
        "expired": is_expired(poll.deadline),
    }
    if roster_size is not None:
        row["total_students"] = roster_size
        row["responded_students"] = responded
        row["response_rate"] = aggregator.percentage(responded, roster_size)
    return row


def poll_report(poll):
    """Everything known about one poll: who answered, who did not, and how.

    Args:
        poll (object): Poll to report on

    Raises:
        exceptions.StoreError: raises if any of the reads fails

    Returns:
        dictionary: poll, summary, option counts and section rates
    """
    try:
        roster = class_roster(poll.target_class)
        responses = list(
            PollResponse.objects.filter(poll=poll)
            .select_related("student")
            .order_by("responded_at", "pk")
        )
    except DatabaseError as exc:
        logger.exception("Fetching responses of poll %s failed", poll.pk)
        raise exceptions.StoreError("Failed to fetch responses.") from exc

    summary = aggregator.response_summary(poll, roster, responses)
    responded_total = len(summary["responded"])
    counts = aggregator.option_counts(poll, summary["responded"])
    for entry in counts:
        entry["percentage"] = aggregator.percentage(entry["count"], responded_total)

    names = {student.pk: student.name for student in roster}
    return {
        "poll": poll_row(poll, len(roster), responded_total),
        "owner_email": poll.owner.email,
        "options": list(poll.options),
        "link_url": poll.link_url,
        "sorted_descending": aggregator.sort_descending(poll),
        "responded": [
            {
                "id": response.pk,
                "registration_number": response.student_id,
                "name": names.get(response.student_id, "Unknown"),
                "response": response.response,
                "option_index": response.option_index,
                "selected_option": aggregator.selected_option(poll, response),
                "responded_at": response.responded_at.isoformat(),
            }
            for response in summary["responded"]
        ],
        "not_responded": [student_row(student) for student in summary["not_responded"]],
        "response_rate": summary["response_rate"],
        "option_counts": counts,
        "section_rates": aggregator.section_rates(roster, summary["responded"]),
    }


def _poll_rows(polls, roster):
    by_section = {}
    for student in roster:
        by_section.setdefault(student.section, set()).add(student.pk)

    rows = []
    responses = PollResponse.objects.filter(poll__in=polls).values_list(
        "poll_id", "student_id"
    )
    responders = {}
    for poll_id, student_id in responses:
        responders.setdefault(poll_id, set()).add(student_id)

    for poll in polls:
        members = by_section.get(poll.target_class.section, set())
        responded = len(members & responders.get(poll.pk, set()))
        rows.append(poll_row(poll, len(members), responded))
    return rows


def class_summary(class_section):
    """Roster and response rate of every poll addressed to one class."""
    try:
        roster = class_roster(class_section)
        polls = list(
            Poll.objects.filter(target_class=class_section)
            .select_related("owner", "target_class__department")
            .order_by("-created_at", "-pk")
        )
        poll_rows = _poll_rows(polls, roster)
    except DatabaseError as exc:
        logger.exception("Fetching class summary of %s failed", class_section)
        raise exceptions.StoreError("Failed to fetch class data.") from exc

    return {
        "class_name": str(class_section),
        "department": str(class_section.department),
        "section": class_section.section,
        "total_students": len(roster),
        "students": [student_row(student) for student in roster],
        "polls": poll_rows,
    }


def department_summary(department):
    """Department wide totals, per section rates and per poll rates for a head of department.

    Args:
        department (object): Department to summarize

    Raises:
        exceptions.StoreError: raises if any of the reads fails

    Returns:
        dictionary: totals, section_rates and polls
    """
    try:
        roster = list(
            Student.objects.filter(department=department)
            .select_related("department")
            .order_by("section", "registration_number")
        )
        polls = list(
            Poll.objects.filter(target_class__department=department)
            .select_related("owner", "target_class__department")
            .order_by("-created_at", "-pk")
        )
        responses = list(
            PollResponse.objects.filter(poll__in=polls).only("poll", "student")
        )
        poll_rows = _poll_rows(polls, roster)
    except DatabaseError as exc:
        logger.exception("Fetching department summary of %s failed", department)
        raise exceptions.StoreError("Failed to fetch department data.") from exc

    sections = aggregator.section_rates(roster, responses)
    return {
        "department": department.name,
        "total_students": len(roster),
        "total_sections": len(sections),
        "total_polls": len(polls),
        "total_responses": len(responses),
        "section_rates": sections,
        "polls": poll_rows,
    }


def department_students(department, section=None):
    queryset = Student.objects.filter(department=department).select_related("department")
    if section and section != "all":
        queryset = queryset.filter(section=section)
    return list(queryset.order_by("section", "registration_number"))
