"""Maps a logged in identity to a role and the scope it may act on."""
import logging

from .models import ClassSection, Staff, Student

logger = logging.getLogger(__name__)

STUDENT = "student"
FACULTY = "faculty"
HOD = "hod"
CDC = "cdc"

ACCESS_LEVELS = {STUDENT: 1, FACULTY: 2, HOD: 3, CDC: 4}


def role_from_designation(designation):
    """Translates a staff designation into a role, defaulting to faculty."""
    if designation == Staff.HEAD_OF_DEPARTMENT:
        return HOD
    if designation == Staff.CAREER_DEVELOPMENT:
        return CDC
    return FACULTY


def access_level(role):
    return ACCESS_LEVELS.get(role, 0)


class Actor:
    """The person behind a request together with the department and class they act on."""

    def __init__(self, role, person, department, class_section=None):
        self.role = role
        self.person = person
        self.department = department
        self.class_section = class_section

    @property
    def is_student(self):
        return self.role == STUDENT

    @property
    def is_faculty(self):
        return self.role == FACULTY

    @property
    def is_hod(self):
        return self.role == HOD

    @property
    def is_staff_member(self):
        return self.role in (FACULTY, HOD, CDC)

    def __repr__(self):
        return f"<Actor {self.role} {self.person}>"


def find_class(department, section):
    """Returns the class of a department section or None."""
    if not section:
        return None
    return ClassSection.objects.filter(department=department, section=section).first()


def resolve_actor(user):
    """Looks up the directory entry behind a login and builds its actor.

    Args:
        user (object): authenticated Users instance

    Returns:
        Actor: actor for the staff member or student with the same email, or None
    """
    if user is None or not getattr(user, "is_authenticated", False) or not user.email:
        return None

    staff = (
        Staff.objects.select_related("department")
        .filter(email__iexact=user.email)
        .first()
    )
    if staff:
        role = role_from_designation(staff.designation)
        class_section = None
        if role == FACULTY:
            class_section = find_class(staff.department, staff.section)
        return Actor(role, staff, staff.department, class_section)

    student = (
        Student.objects.select_related("department")
        .filter(email__iexact=user.email)
        .first()
    )
    if student:
        return Actor(
            STUDENT,
            student,
            student.department,
            find_class(student.department, student.section),
        )

    logger.warning("No directory entry for login %s", user.email)
    return None


def get_actor(request):
    """Resolves the request's actor once and caches it on the request."""
    if not hasattr(request, "_actor"):
        request._actor = resolve_actor(request.user)
    return request._actor
