"""
HTTP exceptions carrying a machine-readable error code.

Raised at the HTTP boundary only (the bearer-token middleware). The
``detail`` is a dict so the exception handler can render it in the
standard error envelope:

    {"success": false, "message": "...", "code": "..."}

Example:
    from common.utils import UnauthorizedException

    raise UnauthorizedException("Invalid token.", code="INVALID_TOKEN")
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException


class APIException(HTTPException):
    """HTTPException whose detail is ``{"message", "code"?, "details"?}``."""

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        detail: Dict[str, Any] = {"message": message}
        if code:
            detail["code"] = code
        if details is not None:
            detail["details"] = details

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @property
    def message(self) -> str:
        return self.detail["message"]

    @property
    def code(self) -> Optional[str]:
        return self.detail.get("code")


class UnauthorizedException(APIException):
    """401 with a Bearer challenge header."""

    def __init__(
        self,
        message: str = "Unauthorized",
        code: str = "UNAUTHORIZED",
        details: Optional[Any] = None,
    ):
        super().__init__(
            401, message, code, details,
            headers={"WWW-Authenticate": "Bearer"},
        )
