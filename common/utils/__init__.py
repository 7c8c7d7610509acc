"""
Utilities module - response envelope, HTTP exceptions, password rules.
"""

from common.utils.responses import success_response, error_response
from common.utils.exceptions import APIException, UnauthorizedException
from common.utils.password import PasswordPolicy, validate_password

__all__ = [
    "success_response",
    "error_response",
    "APIException",
    "UnauthorizedException",
    "PasswordPolicy",
    "validate_password",
]
