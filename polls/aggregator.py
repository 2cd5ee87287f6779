"""Response rates and option counts computed over already fetched rows.

Nothing here touches the database. Empty rosters and missing polls give
zeroed results instead of errors.
"""
import math
import re

SORT_AUTO = "auto"
SORT_ASCENDING = "ascending"
SORT_DESCENDING = "descending"

ACHIEVEMENT_KEYWORDS = (
    "how many",
    "number of",
    "problems solved",
    "questions answered",
    "score",
    "points",
    "marks",
    "grade",
    "level",
    "difficulty",
    "problems",
    "questions",
    "tasks",
    "assignments",
    "exercises",
)

NUMBER_WORDS = (
    "none",
    "zero",
    "one",
    "two",
    "three",
    "four",
    "five",
    "six",
    "seven",
    "eight",
    "nine",
    "ten",
)

_DIGITS = re.compile(r"\d")


def percentage(part, whole):
    """Whole-number percentage with halves rounded up, 0 for an empty whole."""
    if not whole:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


def _poll_responses(poll, responses):
    if poll is None:
        return []
    return [response for response in responses or [] if response.poll_id == poll.pk]


def response_summary(poll, roster, responses):
    """Splits a poll's roster into students who responded and those who did not.

    Only responses to this poll from roster members count, one per student.

    Args:
        poll (object): Poll, may be None
        roster (list): Student objects of the poll's target class
        responses (list): PollResponse objects, may include other polls

    Returns:
        dictionary: responded responses, not_responded students, response_rate
    """
    roster = list(roster or [])
    if poll is None:
        return {"responded": [], "not_responded": roster, "response_rate": 0}

    members = {student.pk for student in roster}
    responded = []
    seen = set()
    for response in _poll_responses(poll, responses):
        if response.student_id in members and response.student_id not in seen:
            seen.add(response.student_id)
            responded.append(response)

    not_responded = [student for student in roster if student.pk not in seen]
    return {
        "responded": responded,
        "not_responded": not_responded,
        "response_rate": percentage(len(responded), len(roster)),
    }


def looks_numeric(options):
    for option in options:
        option = option.lower()
        if _DIGITS.search(option) or any(word in option for word in NUMBER_WORDS):
            return True
    return False


def is_achievement_poll(title, options):
    """Guesses from the wording whether a poll measures performance.

    Such polls ask about quantities ("How many problems did you solve?") and
    offer numeric options.
    """
    title = (title or "").lower()
    asks_quantity = any(keyword in title for keyword in ACHIEVEMENT_KEYWORDS)
    return asks_quantity and looks_numeric(options or [])


def sort_descending(poll):
    """Resolves a poll's sort mode, falling back to the wording heuristic for auto."""
    mode = getattr(poll, "sort_mode", SORT_AUTO) or SORT_AUTO
    if mode == SORT_DESCENDING:
        return True
    if mode == SORT_ASCENDING:
        return False
    return is_achievement_poll(poll.title, poll.options)


def _matches_text(response, option):
    text = response.response or ""
    return text == option or text.startswith(option)


def option_counts(poll, responses, descending=None):
    """Counts responses per option.

    Responses are matched on their stored option index. Rows saved before the
    index existed carry only text, so when no option gets any indexed match the
    counts are taken from the response text instead.

    Args:
        poll (object): Poll with its options, may be None
        responses (list): PollResponse objects, may include other polls
        descending (bool): overrides the poll's sort mode when given

    Returns:
        list: {option, index, count} dictionaries sorted by count
    """
    if poll is None:
        return []
    options = list(poll.options or [])
    responses = _poll_responses(poll, responses)

    counts = [
        {
            "option": option,
            "index": index,
            "count": sum(1 for response in responses if response.option_index == index),
        }
        for index, option in enumerate(options)
    ]
    if responses and not any(entry["count"] for entry in counts):
        for entry in counts:
            entry["count"] = sum(
                1 for response in responses if _matches_text(response, entry["option"])
            )

    if descending is None:
        descending = sort_descending(poll)
    counts.sort(key=lambda entry: entry["count"], reverse=descending)
    return counts


def selected_option(poll, response):
    """Label of the option a response picked, for reports."""
    options = list(poll.options or []) if poll is not None else []
    if response.option_index is not None:
        if 0 <= response.option_index < len(options):
            return options[response.option_index]
        return "Unknown"
    for option in options:
        if (response.response or "").startswith(option):
            return option
    return response.response


def section_rates(roster, responses):
    """Response rate of every section present in the roster.

    A student counts as responded once they have any response in
    ``responses``; the caller decides which polls those cover.

    Returns:
        list: {section, total_students, responded_students, response_rate}
        dictionaries ordered by section
    """
    roster = list(roster or [])
    responders = {response.student_id for response in responses or []}

    by_section = {}
    for student in roster:
        by_section.setdefault(student.section, []).append(student)

    rates = []
    for section in sorted(by_section, key=lambda value: (value is None, value or "")):
        students = by_section[section]
        responded = sum(1 for student in students if student.pk in responders)
        rates.append(
            {
                "section": section,
                "total_students": len(students),
                "responded_students": responded,
                "response_rate": percentage(responded, len(students)),
            }
        )
    return rates
