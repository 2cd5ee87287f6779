import io

import openpyxl
import pytest
from django.core.cache import cache
from django.urls import reverse
from rest_framework.test import APIClient

from polls import realtime
from polls.models import Poll, PollResponse


@pytest.fixture
def faculty_client(client_for, faculty):
    return client_for(faculty)


@pytest.fixture
def hod_client(client_for, hod):
    return client_for(hod)


@pytest.fixture
def student_client(client_for, students_a):
    return client_for(students_a[0])


def test_activation_creates_hashed_login(students_a):
    client = APIClient()
    url = reverse("activate")

    response = client.post(url, {"email": "A1@college.edu", "password": "s3cure-passw0rd"}, format="json")
    assert response.status_code == 201
    assert response.data == {"email": "a1@college.edu"}

    again = client.post(url, {"email": "a1@college.edu", "password": "s3cure-passw0rd"}, format="json")
    assert again.status_code == 400

    unknown = client.post(url, {"email": "nobody@college.edu", "password": "s3cure-passw0rd"}, format="json")
    assert unknown.status_code == 400
    assert "email" in unknown.data


def test_login_returns_tokens_after_activation(students_a):
    client = APIClient()
    client.post(reverse("activate"), {"email": "a1@college.edu", "password": "s3cure-passw0rd"}, format="json")

    response = client.post(
        reverse("login"), {"email": "a1@college.edu", "password": "s3cure-passw0rd"}, format="json"
    )
    assert response.status_code == 200
    assert "access" in response.data

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
    me = client.get(reverse("me"))
    assert me.data["role"] == "student"


@pytest.mark.parametrize("typed", ["A1@College.edu", "a1@college.edu", "A1@COLLEGE.EDU"])
def test_login_ignores_email_casing(students_a, typed):
    client = APIClient()
    activated = client.post(
        reverse("activate"), {"email": "A1@College.edu", "password": "s3cure-passw0rd"}, format="json"
    )
    assert activated.status_code == 201

    response = client.post(reverse("login"), {"email": typed, "password": "s3cure-passw0rd"}, format="json")
    assert response.status_code == 200
    assert "refresh" in response.data


def test_login_rejects_wrong_password(students_a):
    client = APIClient()
    client.post(reverse("activate"), {"email": "a1@college.edu", "password": "s3cure-passw0rd"}, format="json")

    response = client.post(reverse("login"), {"email": "A1@college.edu", "password": "wrong"}, format="json")
    assert response.status_code == 401


def test_requests_need_authentication(db):
    assert APIClient().get(reverse("polls")).status_code == 401


def test_me_describes_role_and_scope(faculty_client):
    response = faculty_client.get(reverse("me"))

    assert response.status_code == 200
    assert response.data["role"] == "faculty"
    assert response.data["access_level"] == 2
    assert response.data["department"] == "CSE"
    assert response.data["class"]["section"] == "A"


def test_classes_scope(hod_client, class_a, class_b, client_for, students_b):
    assert [row["section"] for row in hod_client.get(reverse("classes")).data] == ["A", "B"]

    student = client_for(students_b[0])
    assert [row["section"] for row in student.get(reverse("classes")).data] == ["B"]


def test_roster_scope(faculty_client, hod_client, students_a, students_b, client_for):
    assert len(faculty_client.get(reverse("roster")).data) == 5
    assert len(hod_client.get(reverse("roster")).data) == 7
    assert len(hod_client.get(reverse("roster"), {"section": "B"}).data) == 2

    student = client_for(students_a[1])
    assert student.get(reverse("roster")).status_code == 403


def test_faculty_creates_and_lists_poll(faculty_client, class_a, students_a, client_for):
    payload = {
        "class_targets": [class_a.pk],
        "title": "Attending the workshop?",
        "category": "General Poll",
        "options": ["Yes", "No"],
    }
    response = faculty_client.post(reverse("polls"), payload, format="json")

    assert response.status_code == 201
    assert response.data[0]["class_name"] == "CSE A"
    assert response.data[0]["time_remaining"] == "No deadline"

    student = client_for(students_a[0])
    listed = student.get(reverse("polls"))
    assert [poll["title"] for poll in listed.data] == ["Attending the workshop?"]


def test_student_category_tab_and_pending_counts(make_poll, student_client):
    answered = make_poll(title="Answered")
    make_poll(title="Hackathon", category=Poll.HACKATHON, link_url="https://hack.example.com")
    student_client.post(reverse("poll-responses", args=[answered.pk]), {"option_index": 0}, format="json")

    tab = student_client.get(reverse("polls"), {"category": "Hackathon"})
    assert [poll["title"] for poll in tab.data] == ["Hackathon"]
    assert student_client.get(reverse("polls"), {"category": "Quiz"}).status_code == 400

    pending = student_client.get(reverse("pending-counts"))
    assert pending.data == {"General Poll": 0, "Hackathon": 1, "G-Form Poll": 0}


def test_pending_counts_are_for_students(faculty_client):
    assert faculty_client.get(reverse("pending-counts")).status_code == 403


def test_poll_validation_errors_are_reported(faculty_client, class_a):
    payload = {"class_targets": [class_a.pk], "title": "One option", "options": ["Yes"]}
    response = faculty_client.post(reverse("polls"), payload, format="json")
    assert response.status_code == 400
    assert Poll.objects.count() == 0


def test_faculty_cannot_target_other_class(faculty_client, class_b):
    payload = {"class_targets": [class_b.pk], "title": "Other class", "options": ["Yes", "No"]}
    assert faculty_client.post(reverse("polls"), payload, format="json").status_code == 403


def test_hod_fans_out_to_classes(hod_client, class_a, class_b, class_c):
    payload = {
        "class_targets": [class_a.pk, class_b.pk, class_c.pk],
        "title": "Hackathon next week",
        "category": "Hackathon",
        "options": ["Interested", "Not interested"],
        "link_url": "https://hack.example.com",
        "deadline": "2099-01-01T10:00:00",
    }
    response = hod_client.post(reverse("polls"), payload, format="json")

    assert response.status_code == 201
    assert sorted(poll["class_name"] for poll in response.data) == ["CSE A", "CSE B", "CSE C"]
    assert Poll.objects.count() == 3


def test_students_cannot_create_polls(student_client, class_a):
    payload = {"class_targets": [class_a.pk], "title": "Mine", "options": ["Yes", "No"]}
    assert student_client.post(reverse("polls"), payload, format="json").status_code == 403


def test_submit_and_edit_response(make_poll, student_client):
    poll = make_poll(options=["Yes", "No", "Maybe"])
    url = reverse("poll-responses", args=[poll.pk])

    created = student_client.post(url, {"option_index": 0, "free_text": "with laptop"}, format="json")
    assert created.status_code == 201
    assert created.data["response"] == "Yes - with laptop"

    duplicate = student_client.post(url, {"option_index": 1}, format="json")
    assert duplicate.status_code == 400

    edited = student_client.put(
        reverse("response-detail", args=[created.data["id"]]), {"option_index": 2}, format="json"
    )
    assert edited.status_code == 200
    assert edited.data["response"] == "Maybe"
    assert PollResponse.objects.count() == 1

    mine = student_client.get(reverse("my-responses"))
    assert [row["poll_title"] for row in mine.data] == [poll.title]


def test_submit_without_option_is_rejected(make_poll, student_client):
    poll = make_poll()
    response = student_client.post(reverse("poll-responses", args=[poll.pk]), {}, format="json")
    assert response.status_code == 400


def test_editing_another_students_response_is_forbidden(make_poll, students_a, client_for):
    poll = make_poll()
    owner = client_for(students_a[0])
    created = owner.post(reverse("poll-responses", args=[poll.pk]), {"option_index": 0}, format="json")

    intruder = client_for(students_a[1])
    response = intruder.put(
        reverse("response-detail", args=[created.data["id"]]), {"option_index": 1}, format="json"
    )
    assert response.status_code == 403


def test_staff_list_responses_and_summary(make_poll, students_a, client_for, faculty_client):
    poll = make_poll()
    client_for(students_a[0]).post(
        reverse("poll-responses", args=[poll.pk]), {"option_index": 1}, format="json"
    )

    listed = faculty_client.get(reverse("poll-responses", args=[poll.pk]))
    assert [row["registration_number"] for row in listed.data] == ["CSA001"]

    summary = faculty_client.get(reverse("poll-summary", args=[poll.pk]))
    assert summary.status_code == 200
    assert summary.data["response_rate"] == 20
    assert len(summary.data["not_responded"]) == 4


def test_poll_export_downloads_workbook(make_poll, faculty_client, students_a):
    poll = make_poll()
    response = faculty_client.get(reverse("poll-export", args=[poll.pk]))

    assert response.status_code == 200
    assert response["Content-Type"].startswith("application/vnd.openxmlformats")
    assert "Attending_the_workshop_" in response["Content-Disposition"]
    wb = openpyxl.load_workbook(io.BytesIO(response.content))
    assert "Non-Responded Students" in wb.sheetnames


def test_delete_poll(make_poll, faculty_client, client_for, faculty_b):
    poll = make_poll()
    other = client_for(faculty_b)

    assert other.delete(reverse("poll-detail", args=[poll.pk])).status_code == 403
    assert faculty_client.delete(reverse("poll-detail", args=[poll.pk])).status_code == 204
    assert faculty_client.get(reverse("poll-detail", args=[poll.pk])).status_code == 404


def test_class_summary_and_export(make_poll, faculty_client, students_a):
    make_poll()
    summary = faculty_client.get(reverse("class-summary"))
    assert summary.data["total_students"] == 5

    export = faculty_client.get(reverse("class-export"))
    assert export.status_code == 200
    assert 'filename="students_CSE_A.xlsx"' in export["Content-Disposition"]


def test_department_summary_and_manual_refresh(make_poll, hod_client, hod, students_a, department):
    make_poll()
    url = reverse("department-summary")

    summary = hod_client.get(url)
    assert summary.status_code == 200
    assert summary.data["total_polls"] == 1

    cache.add(realtime.busy_key(department.pk), True)
    assert hod_client.post(url).status_code == 409
    cache.delete(realtime.busy_key(department.pk))

    refreshed = hod_client.post(url)
    assert refreshed.status_code == 200
    assert refreshed.data["total_students"] == 5


def test_department_views_need_hod(faculty_client):
    assert faculty_client.get(reverse("department-summary")).status_code == 403
    assert faculty_client.get(reverse("department-export")).status_code == 403


def test_department_export_by_section(hod_client, students_a, students_b):
    response = hod_client.get(reverse("department-export"), {"section": "B"})

    assert response.status_code == 200
    assert "CSE_Section_B_Students_" in response["Content-Disposition"]
    wb = openpyxl.load_workbook(io.BytesIO(response.content))
    assert wb["Student Details"].max_row == 3
