from datetime import datetime, time

from django.utils import timezone
from rest_framework import serializers

from authentication.models import ClassSection

from . import catalog
from .models import Poll, PollResponse


class DeadlineField(serializers.DateTimeField):
    """Accepts a full timestamp or a bare time of day, which is taken as today."""

    def to_internal_value(self, value):
        if isinstance(value, str) and ":" in value and "-" not in value and "T" not in value:
            try:
                parsed = time.fromisoformat(value.strip())
            except ValueError:
                self.fail("invalid", format="HH:MM[:SS] or an ISO 8601 timestamp")
            today = catalog.local_now()
            return today.replace(
                hour=parsed.hour, minute=parsed.minute, second=parsed.second, microsecond=0
            )
        return super().to_internal_value(value)


class PollSerializer(serializers.ModelSerializer):
    """Serializes a poll with its owner, class and time left"""

    owner = serializers.CharField(source="owner.name", read_only=True)
    class_name = serializers.SerializerMethodField()
    expired = serializers.SerializerMethodField()
    time_remaining = serializers.SerializerMethodField()

    class Meta:
        model = Poll
        fields = (
            "id",
            "title",
            "category",
            "options",
            "deadline",
            "link_url",
            "sort_mode",
            "owner",
            "target_class",
            "class_name",
            "created_at",
            "expired",
            "time_remaining",
        )
        read_only_fields = fields

    def get_class_name(self, obj):
        return str(obj.target_class)

    def get_expired(self, obj):
        return catalog.is_expired(obj.deadline)

    def get_time_remaining(self, obj):
        return catalog.time_remaining(obj.deadline)


class PollCreateSerializer(serializers.Serializer):
    """Takes poll content and the classes it should be created for.

    Only shapes are checked here; the rules live in catalog.validate_poll.
    """

    class_targets = serializers.PrimaryKeyRelatedField(
        queryset=ClassSection.objects.all(), many=True, allow_empty=True
    )
    title = serializers.CharField(allow_blank=True, trim_whitespace=False)
    category = serializers.CharField(default=Poll.GENERAL)
    options = serializers.ListField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False),
        allow_empty=True,
    )
    deadline = DeadlineField(required=False, allow_null=True, default=None)
    link_url = serializers.URLField(required=False, allow_blank=True, allow_null=True, default=None)
    sort_mode = serializers.CharField(default=Poll.SORT_AUTO)

    def validate_deadline(self, value):
        if isinstance(value, datetime) and timezone.is_naive(value):
            value = timezone.make_aware(value)
        return value


class PollResponseSerializer(serializers.ModelSerializer):
    """Serializes a stored response with its poll title"""

    registration_number = serializers.CharField(source="student_id", read_only=True)
    poll_title = serializers.CharField(source="poll.title", read_only=True)

    class Meta:
        model = PollResponse
        fields = (
            "id",
            "poll",
            "poll_title",
            "registration_number",
            "response",
            "option_index",
            "responded_at",
        )
        read_only_fields = fields


class ResponseSubmitSerializer(serializers.Serializer):
    """Takes the selected option and an optional comment"""

    option_index = serializers.IntegerField(required=False, allow_null=True, default=None)
    free_text = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
