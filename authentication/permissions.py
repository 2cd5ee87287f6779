from rest_framework import permissions

from .roles import get_actor


class RolePermission(permissions.BasePermission):
    """Grants access when the requesting user resolves to an actor with an allowed role."""

    allowed_roles = ()
    message = "You are not allowed to perform this action."

    def has_permission(self, request, view):
        actor = get_actor(request)
        return actor is not None and actor.role in self.allowed_roles


class IsStudent(RolePermission):
    allowed_roles = ("student",)
    message = "Only students can perform this action."


class IsFaculty(RolePermission):
    allowed_roles = ("faculty",)
    message = "Only faculty can perform this action."


class IsHod(RolePermission):
    allowed_roles = ("hod",)
    message = "Only heads of department can perform this action."


class IsStaffMember(RolePermission):
    allowed_roles = ("faculty", "hod", "cdc")
    message = "Only staff can perform this action."


class IsPollCreator(RolePermission):
    allowed_roles = ("faculty", "hod")
    message = "Only faculty and heads of department can manage polls."
