import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("authentication", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Poll",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("modified_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(max_length=300)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("General Poll", "General Poll"),
                            ("Hackathon", "Hackathon"),
                            ("G-Form Poll", "G-Form Poll"),
                        ],
                        default="General Poll",
                        max_length=20,
                    ),
                ),
                ("options", models.JSONField(default=list)),
                ("deadline", models.DateTimeField(blank=True, null=True)),
                ("link_url", models.URLField(blank=True, max_length=500, null=True)),
                (
                    "sort_mode",
                    models.CharField(
                        choices=[
                            ("auto", "Auto"),
                            ("ascending", "Lowest count first"),
                            ("descending", "Highest count first"),
                        ],
                        default="auto",
                        max_length=10,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="polls",
                        to="authentication.staff",
                    ),
                ),
                (
                    "target_class",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="polls",
                        to="authentication.classsection",
                    ),
                ),
            ],
            options={
                "db_table": "polls",
                "ordering": ("-created_at",),
            },
        ),
        migrations.CreateModel(
            name="PollResponse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("modified_at", models.DateTimeField(auto_now=True)),
                ("response", models.TextField()),
                ("option_index", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("responded_at", models.DateTimeField()),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "poll",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="responses",
                        to="polls.poll",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        db_column="student_reg_no",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="poll_responses",
                        to="authentication.student",
                    ),
                ),
            ],
            options={
                "db_table": "poll_responses",
            },
        ),
        migrations.AddConstraint(
            model_name="pollresponse",
            constraint=models.UniqueConstraint(
                fields=("poll", "student"), name="unique_response_per_student"
            ),
        ),
    ]
