"""
Standard API response envelopes.

Successful responses look like ``{"success": true, "data": ..., "message": ...}``
and failures like ``{"success": false, "error": {"message", "code", ...}}``;
optional members are omitted rather than sent as null.

Example:
    from common.utils import success_response

    @router.get("/auth/session")
    async def get_session(...):
        return success_response({"user": None})
"""

from typing import Any, Dict, Optional


def success_response(
    data: Any = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Wrap a successful result.

    Args:
        data: Any JSON-serializable payload
        message: Optional human-readable note

    Returns:
        Envelope with success=True
    """
    response: Dict[str, Any] = {"success": True}

    if data is not None:
        response["data"] = data
    if message:
        response["message"] = message

    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
    errors: Optional[list] = None,
) -> Dict[str, Any]:
    """
    Wrap a failure.

    Args:
        message: Human-readable error message, safe to show to end users
        code: Machine-readable error code (e.g. "INVALID_CREDENTIALS")
        details: Structured context, such as the offending field
        errors: Itemised problems (e.g. every password rule that failed)

    Returns:
        Envelope with success=False
    """
    error: Dict[str, Any] = {"message": message}

    for key, value in (("code", code), ("details", details), ("errors", errors)):
        if value:
            error[key] = value

    return {"success": False, "error": error}
