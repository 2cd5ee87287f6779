from django.urls import path

from .views import (
    ClassExport,
    ClassSummary,
    DepartmentExport,
    DepartmentSummary,
    MyResponses,
    PendingCounts,
    PollDetail,
    PollExport,
    PollResponses,
    Polls,
    PollSummary,
    ResponseDetail,
)

urlpatterns = [
    path("", Polls.as_view(), name="polls"),
    path("<int:pk>/", PollDetail.as_view(), name="poll-detail"),
    path("<int:pk>/responses/", PollResponses.as_view(), name="poll-responses"),
    path("<int:pk>/summary/", PollSummary.as_view(), name="poll-summary"),
    path("<int:pk>/export/", PollExport.as_view(), name="poll-export"),
    path("responses/<int:pk>/", ResponseDetail.as_view(), name="response-detail"),
    path("my-responses/", MyResponses.as_view(), name="my-responses"),
    path("pending/", PendingCounts.as_view(), name="pending-counts"),
    path("class/summary/", ClassSummary.as_view(), name="class-summary"),
    path("class/export/", ClassExport.as_view(), name="class-export"),
    path("department/summary/", DepartmentSummary.as_view(), name="department-summary"),
    path("department/export/", DepartmentExport.as_view(), name="department-export"),
]
