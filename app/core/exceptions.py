"""
Application errors with stable error codes.

Services raise these; core.exception_handler renders them as
``{"error", "error_code"[, "details"]}`` with the class's status code.

    raise NotFoundError(
        _("Channel not found"),
        error_code="CHANNEL_NOT_FOUND",
        details={"channel_id": str(channel_id)},
    )

Messages may be lazy translation strings; they are resolved on render.
"""

from __future__ import annotations

from typing import Any


class BaseApplicationError(Exception):
    """
    Root of the hierarchy. Subclasses fix the HTTP status and the code
    used when the raiser gives none.
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": str(self.message), "error_code": self.error_code}
        if self.details:
            body["details"] = self.details
        return body

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(BaseApplicationError):
    """Bad input the serializers cannot catch, such as an unparseable id."""

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """Missing resource, or one the caller may not see."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Caller is known but lacks the needed role on the resource.

    Missing or bad credentials stay with DRF's NotAuthenticated.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403
