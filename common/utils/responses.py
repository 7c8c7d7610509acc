"""
Standard API response helpers.

Every response body uses the same envelope: ``success`` and ``message`` at the
top level, with any payload fields alongside them.

Example:
    from common.utils import success_response, error_response

    @app.get("/users/{id}")
    async def get_user(id: str):
        user = await users.find_one({"_id": id})
        if not user:
            return JSONResponse(
                status_code=404,
                content=error_response("User not found", code="USER_NOT_FOUND")
            )
        return success_response("User retrieved", user=user)
"""

from typing import Any, Optional, Dict


def success_response(
    message: str,
    **fields: Any,
) -> Dict[str, Any]:
    """
    Create a standard success response.

    Args:
        message: Human-readable success message
        **fields: Payload fields placed next to success/message (user, tokens, ...)

    Returns:
        Dictionary with success=True, the message and the payload fields
    """
    response: Dict[str, Any] = {"success": True, "message": message}
    response.update({key: value for key, value in fields.items() if value is not None})
    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
    errors: Optional[list] = None,
) -> Dict[str, Any]:
    """
    Create a standard error response.

    Args:
        message: Human-readable error message
        code: Machine-readable error code (e.g., "USER_NOT_FOUND")
        details: Additional error details
        errors: List of specific errors (for validation errors)

    Returns:
        Dictionary with success=False and error info
    """
    response: Dict[str, Any] = {"success": False, "message": message}

    if code:
        response["code"] = code

    if details is not None:
        response["details"] = details

    if errors:
        response["errors"] = errors

    return response
