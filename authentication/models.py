from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


class Department(models.Model):
    """Stores all the available departments"""

    name = models.CharField(max_length=50, unique=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = "departments"


class BaseModel(models.Model):
    """Defines basic fields to be included in each and every class without reflecting in database."""

    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        abstract = True


class Users(AbstractUser):
    """Stores login credentials. Linked to a student or staff member through email."""

    email = models.EmailField(unique=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]


class ClassSection(models.Model):
    """One section of a department. Polls always target exactly one of these."""

    department = models.ForeignKey(
        Department, on_delete=models.CASCADE, related_name="classes"
    )
    section = models.CharField(max_length=10)

    def __str__(self):
        return f"{self.department} {self.section}"

    class Meta:
        db_table = "classes"
        unique_together = (("department", "section"),)


class Student(models.Model):
    """Stores student directory entries keyed by registration number."""

    registration_number = models.CharField(max_length=30, primary_key=True)
    name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    department = models.ForeignKey(
        Department, on_delete=models.CASCADE, related_name="students"
    )
    section = models.CharField(max_length=10)

    def __str__(self):
        return f"{self.registration_number} {self.name}"

    class Meta:
        db_table = "students"


class Staff(models.Model):
    """Stores faculty (class advisors) and heads of department."""

    CLASS_ADVISOR = "CA"
    HEAD_OF_DEPARTMENT = "HOD"
    CAREER_DEVELOPMENT = "CDC"
    DESIGNATION_CHOICES = (
        (CLASS_ADVISOR, "Class Advisor"),
        (HEAD_OF_DEPARTMENT, "Head of Department"),
        (CAREER_DEVELOPMENT, "Career Development Cell"),
    )

    name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    designation = models.CharField(max_length=10, choices=DESIGNATION_CHOICES)
    department = models.ForeignKey(
        Department, on_delete=models.CASCADE, related_name="staffs"
    )
    section = models.CharField(max_length=10, null=True, blank=True)

    def __str__(self):
        return f"{self.name} ({self.designation})"

    class Meta:
        db_table = "staffs"
        verbose_name_plural = "staffs"
