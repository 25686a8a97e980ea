"""
DRF exception handler for application errors.

Registered through REST_FRAMEWORK["EXCEPTION_HANDLER"]. Application
exceptions (core.exceptions) are rendered with their own status code and
error code; DRF exceptions keep DRF's rendering; database failures are
logged and answered with a generic 500 so no internals leak to clients.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Convert exceptions raised by views into API responses.

    Args:
        exc: The raised exception
        context: DRF handler context (view, request, args, kwargs)

    Returns:
        Response, or None to let Django handle the exception
    """
    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception(
            f"Database error in {view.__class__.__name__ if view else 'unknown view'}"
        )
        return Response(
            {"error": str(_("Internal error")), "error_code": "INTERNAL_ERROR"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return None
