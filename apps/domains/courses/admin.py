from django.contrib import admin

from .models import Course, Content, CourseMembership


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("title",)


@admin.register(Content)
class ContentAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "course", "order", "duration_seconds", "is_active")
    list_display_links = ("id", "title")
    list_filter = ("course", "is_active")
    search_fields = ("title",)
    ordering = ("course", "order")


@admin.register(CourseMembership)
class CourseMembershipAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "course", "kind", "created_at")
    list_filter = ("kind", "course")
    search_fields = ("user__username", "user__email")
