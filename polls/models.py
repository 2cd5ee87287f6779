from django.db import models

from authentication.models import BaseModel, ClassSection, Staff, Student


class Poll(BaseModel):
    """stores a poll addressed to one class section"""

    GENERAL = "General Poll"
    HACKATHON = "Hackathon"
    GFORM = "G-Form Poll"
    CATEGORY_CHOICES = (
        (GENERAL, "General Poll"),
        (HACKATHON, "Hackathon"),
        (GFORM, "G-Form Poll"),
    )
    LINKED_CATEGORIES = (HACKATHON, GFORM)

    SORT_AUTO = "auto"
    SORT_ASCENDING = "ascending"
    SORT_DESCENDING = "descending"
    SORT_CHOICES = (
        (SORT_AUTO, "Auto"),
        (SORT_ASCENDING, "Lowest count first"),
        (SORT_DESCENDING, "Highest count first"),
    )

    owner = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name="polls")
    target_class = models.ForeignKey(
        ClassSection, on_delete=models.CASCADE, related_name="polls"
    )
    title = models.CharField(max_length=300)
    category = models.CharField(
        max_length=20, choices=CATEGORY_CHOICES, default=GENERAL
    )
    options = models.JSONField(default=list)
    deadline = models.DateTimeField(null=True, blank=True)
    link_url = models.URLField(max_length=500, null=True, blank=True)
    sort_mode = models.CharField(max_length=10, choices=SORT_CHOICES, default=SORT_AUTO)

    def __str__(self):
        return self.title

    class Meta:
        db_table = "polls"
        ordering = ("-created_at",)


class PollResponse(BaseModel):
    """stores one student's answer to one poll"""

    poll = models.ForeignKey(Poll, on_delete=models.CASCADE, related_name="responses")
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name="poll_responses",
        db_column="student_reg_no",
    )
    response = models.TextField()
    option_index = models.PositiveSmallIntegerField(null=True, blank=True)
    responded_at = models.DateTimeField()

    def __str__(self):
        return f"{self.student_id}: {self.response}"

    class Meta:
        db_table = "poll_responses"
        constraints = [
            models.UniqueConstraint(
                fields=("poll", "student"), name="unique_response_per_student"
            ),
        ]
