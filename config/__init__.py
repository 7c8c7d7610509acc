"""
Configuration module - Fixed constants for outbound email and push delivery.
"""

from config.email_config import RESEND_API_URL, EMAIL_DEFAULTS, EMAIL_SUBJECTS
from config.push_config import EXPO_PUSH_URL, EXPO_MAX_BATCH_SIZE, PUSH_DEFAULTS

__all__ = [
    "RESEND_API_URL",
    "EMAIL_DEFAULTS",
    "EMAIL_SUBJECTS",
    "EXPO_PUSH_URL",
    "EXPO_MAX_BATCH_SIZE",
    "PUSH_DEFAULTS",
]
