import logging

from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from .models import ClassSection, Student
from .permissions import IsStaffMember
from .roles import access_level, get_actor
from .serializers import (
    AccountActivationSerializer,
    ClassSectionSerializer,
    LoginSerializer,
    StaffSerializer,
    StudentSerializer,
)

logger = logging.getLogger(__name__)


class AccountActivation(APIView):
    permission_classes = ()
    authentication_classes = ()
    serializer_class = AccountActivationSerializer

    def post(self, request):
        """Creates the login of a student or staff member listed in the directory

        Returns:
            JSON: activated email OR error object
        """
        serializer = self.serializer_class(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            logger.info("Activated account for %s", user.email)
            return Response({"email": user.email}, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class Login(TokenObtainPairView):
    """Obtains an access and refresh token pair with email and password."""

    serializer_class = LoginSerializer


class Me(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        """Returns the role and scope of the requesting user

        Returns:
            JSON: role, access level, directory entry and class OR error message
        """
        actor = get_actor(request)
        if actor is None:
            return Response(
                {"detail": "No directory entry for this account."},
                status=status.HTTP_404_NOT_FOUND,
            )
        if actor.is_student:
            person = StudentSerializer(actor.person).data
        else:
            person = StaffSerializer(actor.person).data
        class_section = None
        if actor.class_section is not None:
            class_section = ClassSectionSerializer(actor.class_section).data
        return Response(
            {
                "role": actor.role,
                "access_level": access_level(actor.role),
                "person": person,
                "department": actor.department.name,
                "class": class_section,
            }
        )


class Classes(generics.ListAPIView):
    """Lists the classes the requesting user can see."""

    serializer_class = ClassSectionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        """HOD sees every class of the department, everybody else only their own.

        Returns:
            Objects: matching class objects
        """
        actor = get_actor(self.request)
        if actor is None:
            return ClassSection.objects.none()
        if actor.is_hod:
            return ClassSection.objects.filter(department=actor.department).order_by(
                "section"
            )
        if actor.class_section is None:
            return ClassSection.objects.none()
        return ClassSection.objects.filter(pk=actor.class_section.pk)


class Roster(generics.ListAPIView):
    """Lists students in the requesting staff member's scope."""

    serializer_class = StudentSerializer
    permission_classes = [permissions.IsAuthenticated, IsStaffMember]

    def get_queryset(self):
        """Filters students by department, and by section for faculty or when requested.

        Returns:
            Objects: matching student objects
        """
        actor = get_actor(self.request)
        queryset = Student.objects.filter(department=actor.department).select_related(
            "department"
        )
        if actor.is_faculty:
            queryset = queryset.filter(section=actor.person.section)
        else:
            section = self.request.query_params.get("section")
            if section and section != "all":
                queryset = queryset.filter(section=section)
        return queryset.order_by("section", "registration_number")
