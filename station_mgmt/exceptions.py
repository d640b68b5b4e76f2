from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class StationError(Exception):
    """Base for business-rule violations raised by the service layer.

    Views (or the API exception handler) answer with ``{"error": message}``
    and ``status_code``.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request violates a business rule"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(StationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(StationError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflicting request"


def api_exception_handler(exc, context):
    if isinstance(exc, StationError):
        return Response({"error": exc.message}, status=exc.status_code)
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else {"error": exc.messages}
        return Response(detail, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, ProtectedError):
        return Response(
            {"error": "Record is referenced by other records and cannot be deleted"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", type(view).__name__ if view else "API")
    return Response(
        {"error": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
