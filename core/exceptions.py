from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("teamboard.core")


# ---- Domain errors -----------------------------------------------------
# The code of each class is the error "kind" the client renders.


class NotFound(APIException):
    """
    Target project/task does not exist OR the caller is not a member.
    Both cases share one message so existence is never confirmed.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class InsufficientPermissions(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions."
    default_code = "insufficient_permissions"


class UserNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found."
    default_code = "user_not_found"


class AlreadyMember(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "User is already a member of this project."
    default_code = "already_member"


class CannotRemoveOwner(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Cannot remove the project owner."
    default_code = "cannot_remove_owner"


class AssigneeNotMember(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Assigned user is not a member of this project."
    default_code = "assignee_not_member"


def _error_code(exc) -> str:
    if isinstance(exc, APIException):
        return exc.default_code
    # Django-native errors DRF converts on the way out (e.g. get_object_or_404)
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    return "error"


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "code": _error_code(exc),
                "errors": response.data,
            },
            status=response.status_code,
            headers={
                name: response[name]
                for name in ("WWW-Authenticate", "Retry-After")
                if response.has_header(name)
            },
        )

    # Unhandled exceptions (DB down, bugs) -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "code": "server_error",
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
