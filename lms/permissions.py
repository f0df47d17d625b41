"""Role-based permissions for students, lecturers and admins."""
from rest_framework.permissions import BasePermission


def user_role(user):
	if not user or not getattr(user, "is_authenticated", False):
		return None
	profile = getattr(user, "profile", None)
	role = getattr(profile, "role", None)
	if role:
		return role
	if getattr(user, "is_superuser", False):
		return "admin"
	return None


def has_role(user, *roles) -> bool:
	if not user or not getattr(user, "is_authenticated", False):
		return False
	if getattr(user, "is_superuser", False):
		return True
	return user_role(user) in roles


class RolePermission(BasePermission):
	roles = ()
	message = "You do not have permission to perform this action"

	def has_permission(self, request, view):
		return has_role(getattr(request, "user", None), *self.roles)


class IsAdmin(RolePermission):
	roles = ("admin",)
	message = "Only administrators can access this resource"


class IsLecturer(RolePermission):
	roles = ("lecturer",)
	message = "Only lecturers can access this resource"


class IsStudent(RolePermission):
	roles = ("student",)
	message = "Only students can access this resource"


class IsLecturerOrAdmin(RolePermission):
	roles = ("lecturer", "admin")
	message = "Only lecturers and administrators can access this resource"
