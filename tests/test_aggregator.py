from authentication.models import Student
from polls import aggregator
from polls.models import Poll, PollResponse


def make_poll(title="Attending the workshop?", options=("Yes", "No"), sort_mode="auto", pk=1):
    return Poll(id=pk, title=title, options=list(options), sort_mode=sort_mode)


def make_roster(count, section="A", prefix="R"):
    return [
        Student(registration_number=f"{prefix}{i}", name=f"Student {i}", section=section)
        for i in range(count)
    ]


def answer(student, option_index=None, text="", poll_id=1):
    return PollResponse(
        poll_id=poll_id,
        student_id=student.registration_number,
        option_index=option_index,
        response=text,
    )


def test_percentage_rounds_half_up_and_handles_empty_whole():
    assert aggregator.percentage(0, 0) == 0
    assert aggregator.percentage(1, 8) == 13
    assert aggregator.percentage(4, 5) == 80
    assert aggregator.percentage(2, 3) == 67


def test_summary_of_empty_roster_is_zero():
    summary = aggregator.response_summary(make_poll(), [], [])
    assert summary == {"responded": [], "not_responded": [], "response_rate": 0}


def test_summary_without_poll_is_zeroed():
    roster = make_roster(3)
    summary = aggregator.response_summary(None, roster, [])
    assert summary["responded"] == []
    assert summary["not_responded"] == roster
    assert summary["response_rate"] == 0


def test_yes_no_scenario():
    poll = make_poll()
    roster = make_roster(5)
    responses = [
        answer(roster[0], 0, "Yes"),
        answer(roster[1], 0, "Yes"),
        answer(roster[2], 0, "Yes"),
        answer(roster[3], 1, "No"),
    ]

    summary = aggregator.response_summary(poll, roster, responses)
    counts = aggregator.option_counts(poll, responses)

    assert summary["response_rate"] == 80
    assert summary["not_responded"] == [roster[4]]
    assert counts == [
        {"option": "No", "index": 1, "count": 1},
        {"option": "Yes", "index": 0, "count": 3},
    ]


def test_responded_and_pending_always_add_up_to_roster():
    poll = make_poll()
    for size in range(0, 7):
        roster = make_roster(size)
        outsider = Student(registration_number="X1", section="A")
        responses = [answer(student, 0, "Yes") for student in roster[::2]]
        responses.append(answer(outsider, 1, "No"))
        responses.extend(answer(student, 1, "No", poll_id=2) for student in roster)

        summary = aggregator.response_summary(poll, roster, responses)
        assert len(summary["responded"]) + len(summary["not_responded"]) == size


def test_option_counts_sum_to_number_of_responses():
    poll = make_poll(options=["Red", "Green", "Blue"])
    roster = make_roster(6)
    responses = [answer(student, i % 3) for i, student in enumerate(roster)]

    counts = aggregator.option_counts(poll, responses)

    assert sum(entry["count"] for entry in counts) == len(responses)


def test_legacy_rows_are_counted_by_text():
    poll = make_poll()
    roster = make_roster(3)
    responses = [
        answer(roster[0], None, "Yes - will bring a laptop"),
        answer(roster[1], None, "Yes"),
        answer(roster[2], None, "No"),
    ]

    counts = {entry["option"]: entry["count"] for entry in aggregator.option_counts(poll, responses)}

    assert counts == {"Yes": 2, "No": 1}


def test_text_fallback_is_skipped_once_any_index_matches():
    poll = make_poll()
    roster = make_roster(2)
    responses = [answer(roster[0], 0, "Yes"), answer(roster[1], None, "No")]

    counts = {entry["option"]: entry["count"] for entry in aggregator.option_counts(poll, responses)}

    assert counts == {"Yes": 1, "No": 0}


def test_achievement_polls_sort_best_first():
    poll = make_poll(
        title="How many problems did you solve this week?",
        options=["0", "1-2", "3-5", "More than 5"],
    )
    roster = make_roster(6)
    responses = [
        answer(roster[0], 0),
        answer(roster[1], 2),
        answer(roster[2], 2),
        answer(roster[3], 2),
        answer(roster[4], 1),
        answer(roster[5], 1),
    ]

    counts = aggregator.option_counts(poll, responses)

    assert [entry["index"] for entry in counts] == [2, 1, 0, 3]


def test_keyword_without_numeric_options_sorts_ascending():
    poll = make_poll(title="What score would you give the canteen?", options=["Good", "Bad"])
    assert not aggregator.is_achievement_poll(poll.title, poll.options)
    assert aggregator.sort_descending(poll) is False


def test_number_words_count_as_numeric():
    assert aggregator.is_achievement_poll("Number of tasks finished", ["None", "A few", "Ten or more"])


def test_explicit_sort_mode_overrides_heuristic():
    poll = make_poll(title="Favourite language", options=["Python", "Go"], sort_mode="descending")
    roster = make_roster(3)
    responses = [answer(roster[0], 0), answer(roster[1], 1), answer(roster[2], 1)]

    counts = aggregator.option_counts(poll, responses)

    assert [entry["option"] for entry in counts] == ["Go", "Python"]

    poll.sort_mode = "ascending"
    poll.title = "How many points did you score?"
    poll.options = ["1", "2"]
    assert aggregator.sort_descending(poll) is False


def test_option_counts_for_missing_poll_is_empty():
    assert aggregator.option_counts(None, []) == []


def test_selected_option_prefers_index_then_text():
    poll = make_poll()
    student = make_roster(1)[0]
    assert aggregator.selected_option(poll, answer(student, 1, "whatever")) == "No"
    assert aggregator.selected_option(poll, answer(student, 7, "Yes")) == "Unknown"
    assert aggregator.selected_option(poll, answer(student, None, "Yes - sure")) == "Yes"
    assert aggregator.selected_option(poll, answer(student, None, "Maybe")) == "Maybe"


def test_section_rates_one_entry_per_section():
    roster = make_roster(4, section="B", prefix="B") + make_roster(2, section="A", prefix="A")
    responses = [
        answer(roster[0], 0),
        answer(roster[0], 1, poll_id=2),
        answer(roster[1], 0),
        answer(roster[4], 0),
    ]

    rates = aggregator.section_rates(roster, responses)

    assert rates == [
        {"section": "A", "total_students": 2, "responded_students": 1, "response_rate": 50},
        {"section": "B", "total_students": 4, "responded_students": 2, "response_rate": 50},
    ]


def test_section_rates_of_empty_roster():
    assert aggregator.section_rates([], []) == []
