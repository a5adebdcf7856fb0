# PATH: apps/support/video/exceptions.py
"""
Service-layer errors.

They subclass DRF exceptions so views can let them propagate and DRF
renders the right status. Ownership failures are NotFound on purpose:
a 403 would confirm that another user's session exists.
"""

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied


class ViewerNotFound(NotFound):
    default_detail = "Viewer not found."
    default_code = "viewer_not_found"


class ContentNotFound(NotFound):
    default_detail = "Content not found."
    default_code = "content_not_found"


class WatchSessionNotFound(NotFound):
    default_detail = "Session not found or already finalized."
    default_code = "session_not_found"


class ContentAccessDenied(PermissionDenied):
    default_detail = "No access to this content."
    default_code = "content_access_denied"


class TeacherRoleRequired(PermissionDenied):
    default_detail = "Only teachers can access analytics."
    default_code = "teacher_role_required"


class CourseNotAssigned(PermissionDenied):
    default_detail = "You are not assigned to this course."
    default_code = "course_not_assigned"


class WatchSessionConflict(APIException):
    """Active-session constraint tripped despite the viewer lock."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error."
    default_code = "session_conflict"
