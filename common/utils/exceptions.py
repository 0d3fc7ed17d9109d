"""
HTTP exceptions carrying a machine-readable error code.

Every exception renders as the standard error envelope (see
common.utils.responses.error_response). Subclasses fix the status code
and the default message/code; callers override message and code when a
more specific failure applies.

Example:
    from common.utils import UnauthorizedException

    raise UnauthorizedException("Authentication required", code="AUTH_REQUIRED")
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from common.utils.responses import error_response


class APIException(HTTPException):
    """
    Base API exception.

    The FastAPI ``detail`` holds ``{"message", "code", "details"?}`` so the
    exception still renders sensibly without the envelope handler.
    """

    status: int = 500
    default_message: str = "Internal server error"
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        detail: Dict[str, Any] = {
            "message": message or self.default_message,
            "code": code or self.default_code,
        }
        if details is not None:
            detail["details"] = details

        super().__init__(status_code=self.status, detail=detail, headers=headers)

    @property
    def message(self) -> str:
        return self.detail["message"]

    @property
    def code(self) -> str:
        return self.detail["code"]

    @property
    def details(self) -> Optional[Any]:
        return self.detail.get("details")

    @property
    def errors(self) -> Optional[List[str]]:
        """Itemised problems, for validation failures."""
        return None

    def to_response(self) -> Dict[str, Any]:
        """Body of the error envelope for this exception."""
        return error_response(
            self.message,
            code=self.code,
            details=self.details,
            errors=self.errors,
        )


class BadRequestException(APIException):
    """400 - Invalid input or a request the current state does not allow."""

    status = 400
    default_message = "Bad request"
    default_code = "BAD_REQUEST"


class UnauthorizedException(APIException):
    """401 - Missing or rejected authentication."""

    status = 401
    default_message = "Unauthorized"
    default_code = "UNAUTHORIZED"


class ConflictException(APIException):
    """409 - Resource already exists or a concurrent change won."""

    status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class ValidationException(APIException):
    """422 - Request content failed validation."""

    status = 422
    default_message = "Validation error"
    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        errors: Optional[List[str]] = None,
    ):
        super().__init__(message, code, details)
        self._errors = list(errors) if errors else None

    @property
    def errors(self) -> Optional[List[str]]:
        return self._errors


class InternalServerException(APIException):
    """500 - Unexpected server-side failure. Never carries internal detail."""
