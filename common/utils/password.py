"""
Password strength rules.

Accounts only require a minimum length by default; the character-class
rules exist for deployments that want stricter passwords.

Example:
    from common.utils import PasswordPolicy, validate_password

    is_valid, errors = validate_password("abc")
    # False, ["Password must be at least 6 characters long"]

    strict = PasswordPolicy(min_length=10, require_digit=True)
    is_valid, errors = validate_password("longbutnodigits", strict)
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 6
    max_length: int = 128
    require_letter: bool = False
    require_uppercase: bool = False
    require_digit: bool = False
    require_special: bool = False


DEFAULT_POLICY = PasswordPolicy()

# (enabled-flag attribute, pattern, message)
_CHARACTER_RULES = (
    ("require_letter", r"[A-Za-z]", "Password must contain at least one letter"),
    ("require_uppercase", r"[A-Z]", "Password must contain at least one uppercase letter"),
    ("require_digit", r"\d", "Password must contain at least one digit"),
    ("require_special", r"[^A-Za-z0-9]", "Password must contain at least one special character"),
)


def validate_password(
    password: Optional[str],
    policy: PasswordPolicy = DEFAULT_POLICY,
) -> Tuple[bool, List[str]]:
    """
    Check a password against a policy.

    Returns:
        (is_valid, errors); errors are ordered length first, so ``errors[0]``
        is the most useful single message to show
    """
    password = password or ""
    errors: List[str] = []

    if len(password) < policy.min_length:
        errors.append(f"Password must be at least {policy.min_length} characters long")
    if len(password) > policy.max_length:
        errors.append(f"Password must be no more than {policy.max_length} characters")

    for flag, pattern, message in _CHARACTER_RULES:
        if getattr(policy, flag) and not re.search(pattern, password):
            errors.append(message)

    return not errors, errors
