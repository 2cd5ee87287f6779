from django.contrib import admin

from .models import Poll, PollResponse


@admin.register(Poll)
class PollAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "target_class", "owner", "deadline", "created_at")
    list_filter = ("category", "target_class__department")
    search_fields = ("title",)


@admin.register(PollResponse)
class PollResponseAdmin(admin.ModelAdmin):
    list_display = ("poll", "student", "response", "option_index", "responded_at")
    search_fields = ("student__registration_number", "response")
