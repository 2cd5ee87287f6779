import logging

from django.http import HttpResponse
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import IsFaculty, IsHod, IsPollCreator, IsStaffMember, IsStudent
from authentication.roles import get_actor

from . import catalog, exports, ledger, realtime, reports
from .exceptions import NotFoundError
from .serializers import (
    PollCreateSerializer,
    PollResponseSerializer,
    PollSerializer,
    ResponseSubmitSerializer,
)

logger = logging.getLogger(__name__)


def xlsx_response(sheets, filename):
    response = HttpResponse(exports.write_workbook(sheets), content_type=exports.XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}.xlsx"'
    return response


class Polls(APIView):
    """For creating and listing polls."""

    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.IsAuthenticated(), IsPollCreator()]
        return super().get_permissions()

    def get(self, request):
        """Lists polls of the requesting user's class, or department for a head of department.

        Args:
            request (query): optional category to show one tab only

        Returns:
            JSON: polls, newest first
        """
        polls = catalog.list_polls(
            get_actor(request), category=request.query_params.get("category")
        )
        return Response(PollSerializer(polls, many=True).data)

    def post(self, request):
        """Creates the poll once for every requested class.

        Args:
            request (JSON): class_targets, title, category, options, deadline, link_url, sort_mode

        Returns:
            JSON: created polls or error
        """
        serializer = PollCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        polls = catalog.create_polls(
            get_actor(request), user=request.user, **serializer.validated_data
        )
        return Response(PollSerializer(polls, many=True).data, status=status.HTTP_201_CREATED)


class PollDetail(APIView):
    """To get detail view of poll and delete it."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        poll = catalog.get_poll(pk, get_actor(request))
        return Response(PollSerializer(poll).data)

    def delete(self, request, pk):
        """Deletes the poll if the requesting user created it or heads its department

        Returns:
            JSON: success or error message for deletion
        """
        catalog.delete_poll(pk, get_actor(request))
        return Response({"detail": "Poll deleted"}, status=status.HTTP_204_NO_CONTENT)


class PollResponses(APIView):
    """Staff list the responses of a poll; students answer it."""

    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.IsAuthenticated(), IsStudent()]
        return [permissions.IsAuthenticated(), IsStaffMember()]

    def get(self, request, pk):
        poll = catalog.get_poll(pk, get_actor(request))
        responses = ledger.list_for_poll(poll.pk)
        return Response(PollResponseSerializer(responses, many=True).data)

    def post(self, request, pk):
        """Records the requesting student's answer

        Args:
            request (JSON): option_index and optional free_text

        Returns:
            JSON: stored response or error
        """
        serializer = ResponseSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        response = ledger.submit_response(
            get_actor(request).person,
            pk,
            serializer.validated_data["option_index"],
            serializer.validated_data["free_text"],
            user=request.user,
        )
        return Response(PollResponseSerializer(response).data, status=status.HTTP_201_CREATED)


class ResponseDetail(APIView):
    """Lets a student change their own answer."""

    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def put(self, request, pk):
        """Overwrites the answer if it belongs to the requesting student

        Args:
            request (JSON): option_index and optional free_text

        Returns:
            JSON: updated response or error
        """
        serializer = ResponseSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        response = ledger.edit_response(
            pk,
            get_actor(request).person.registration_number,
            serializer.validated_data["option_index"],
            serializer.validated_data["free_text"],
        )
        return Response(PollResponseSerializer(response).data)

    def patch(self, request, pk):
        return self.put(request, pk)


class MyResponses(generics.ListAPIView):
    """Returns every response of the requesting student."""

    serializer_class = PollResponseSerializer
    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def get_queryset(self):
        return ledger.list_for_student(get_actor(self.request).person.registration_number)


class PendingCounts(APIView):
    """Unanswered open polls of the requesting student, per category."""

    permission_classes = [permissions.IsAuthenticated, IsStudent]

    def get(self, request):
        return Response(ledger.pending_counts(get_actor(request)))


class PollSummary(APIView):
    """Responded and pending students, option counts and section rates of one poll."""

    permission_classes = [permissions.IsAuthenticated, IsStaffMember]

    def get(self, request, pk):
        poll = catalog.get_poll(pk, get_actor(request))
        return Response(reports.poll_report(poll))


class PollExport(APIView):
    permission_classes = [permissions.IsAuthenticated, IsStaffMember]

    def get(self, request, pk):
        """Downloads the poll report as a workbook

        Returns:
            xlsx: Poll Summary, Option Counts, Responded and Non-Responded sheets
        """
        poll = catalog.get_poll(pk, get_actor(request))
        report = reports.poll_report(poll)
        logger.info("Exporting poll %s for %s", poll.pk, request.user.email)
        return xlsx_response(exports.poll_sheets(report), exports.poll_filename(report))


def _own_class(request):
    actor = get_actor(request)
    if actor.class_section is None:
        raise NotFoundError("No class is assigned to you.")
    return actor.class_section


class ClassSummary(APIView):
    permission_classes = [permissions.IsAuthenticated, IsFaculty]

    def get(self, request):
        return Response(reports.class_summary(_own_class(request)))


class ClassExport(APIView):
    permission_classes = [permissions.IsAuthenticated, IsFaculty]

    def get(self, request):
        """Downloads the faculty member's class roster and poll overview

        Returns:
            xlsx: Students and Polls sheets
        """
        summary = reports.class_summary(_own_class(request))
        return xlsx_response(exports.class_sheets(summary), exports.class_filename(summary))


class DepartmentSummary(APIView):
    """Department analytics for a head of department."""

    permission_classes = [permissions.IsAuthenticated, IsHod]

    def get(self, request):
        """Returns the last refreshed summary, computing it if there is none yet

        Returns:
            JSON: department totals, section rates and poll rates
        """
        return Response(realtime.department_summary(get_actor(request).department))

    def post(self, request):
        """Manual refresh. Rejected while another refresh of the department runs.

        Returns:
            JSON: fresh summary or conflict message
        """
        summary = realtime.refresh_department(get_actor(request).department.pk)
        if summary is None:
            return Response(
                {"detail": "A refresh is already in progress."},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(summary)


class DepartmentExport(APIView):
    permission_classes = [permissions.IsAuthenticated, IsHod]

    def get(self, request):
        """Downloads the department's students, optionally one section only

        Returns:
            xlsx: Section Summary and Student Details sheets
        """
        actor = get_actor(request)
        section = request.query_params.get("section")
        students = [
            reports.student_row(student)
            for student in reports.department_students(actor.department, section)
        ]
        sheets = exports.department_sheets(actor.department.name, actor.person.name, students)
        filename = exports.department_filename(actor.department.name, section)
        return xlsx_response(sheets, filename)
