import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from authentication.models import ClassSection, Department, Staff, Student, Users
from authentication.roles import resolve_actor
from poll_management.celery import app as celery_app
from polls.models import Poll


@pytest.fixture(autouse=True)
def clear_cache(settings):
    settings.CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "poll-management-tests",
        }
    }
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def eager_celery():
    # reading a key first loads the CELERY_ settings, which would override the flag
    previous = celery_app.conf.task_always_eager
    celery_app.conf.update(CELERY_TASK_ALWAYS_EAGER=True)
    yield
    celery_app.conf.update(CELERY_TASK_ALWAYS_EAGER=previous)


@pytest.fixture
def department(db):
    return Department.objects.create(name="CSE")


@pytest.fixture
def other_department(db):
    return Department.objects.create(name="ECE")


@pytest.fixture
def class_a(department):
    return ClassSection.objects.create(department=department, section="A")


@pytest.fixture
def class_b(department):
    return ClassSection.objects.create(department=department, section="B")


@pytest.fixture
def class_c(department):
    return ClassSection.objects.create(department=department, section="C")


@pytest.fixture
def students_a(department, class_a):
    return [
        Student.objects.create(
            registration_number=f"CSA00{i}",
            name=f"Student A{i}",
            email=f"a{i}@college.edu",
            department=department,
            section="A",
        )
        for i in range(1, 6)
    ]


@pytest.fixture
def students_b(department, class_b):
    return [
        Student.objects.create(
            registration_number=f"CSB00{i}",
            name=f"Student B{i}",
            email=f"b{i}@college.edu",
            department=department,
            section="B",
        )
        for i in range(1, 3)
    ]


@pytest.fixture
def faculty(department, class_a):
    return Staff.objects.create(
        name="Faculty A",
        email="Faculty.A@college.edu",
        designation=Staff.CLASS_ADVISOR,
        department=department,
        section="A",
    )


@pytest.fixture
def faculty_b(department, class_b):
    return Staff.objects.create(
        name="Faculty B",
        email="faculty.b@college.edu",
        designation=Staff.CLASS_ADVISOR,
        department=department,
        section="B",
    )


@pytest.fixture
def hod(department):
    return Staff.objects.create(
        name="Head CSE",
        email="hod.cse@college.edu",
        designation=Staff.HEAD_OF_DEPARTMENT,
        department=department,
    )


@pytest.fixture
def other_hod(other_department):
    return Staff.objects.create(
        name="Head ECE",
        email="hod.ece@college.edu",
        designation=Staff.HEAD_OF_DEPARTMENT,
        department=other_department,
    )


def make_login(person):
    return Users.objects.create_user(
        username=person.email.lower(),
        email=person.email.lower(),
        password="s3cure-passw0rd",
    )


def actor_for(person):
    return resolve_actor(make_login(person))


@pytest.fixture
def make_actor(db):
    return actor_for


@pytest.fixture
def faculty_actor(faculty):
    return actor_for(faculty)


@pytest.fixture
def hod_actor(hod):
    return actor_for(hod)


@pytest.fixture
def student_actor(students_a):
    return actor_for(students_a[0])


@pytest.fixture
def make_poll(faculty, class_a):
    def _make_poll(**kwargs):
        fields = {
            "owner": faculty,
            "target_class": class_a,
            "title": "Attending the workshop?",
            "category": Poll.GENERAL,
            "options": ["Yes", "No"],
        }
        fields.update(kwargs)
        return Poll.objects.create(**fields)

    return _make_poll


@pytest.fixture
def client_for():
    def _client_for(person):
        client = APIClient()
        client.force_authenticate(user=make_login(person))
        return client

    return _client_for
