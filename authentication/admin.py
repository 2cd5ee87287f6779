from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import ClassSection, Department, Staff, Student, Users


@admin.register(Users)
class UsersAdmin(UserAdmin):
    ordering = ("email",)
    list_display = ("email", "username", "is_staff", "is_active")


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    search_fields = ("name",)


@admin.register(ClassSection)
class ClassSectionAdmin(admin.ModelAdmin):
    list_display = ("department", "section")
    list_filter = ("department",)


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("registration_number", "name", "email", "department", "section")
    list_filter = ("department", "section")
    search_fields = ("registration_number", "name", "email")


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "designation", "department", "section")
    list_filter = ("department", "designation")
    search_fields = ("name", "email")
