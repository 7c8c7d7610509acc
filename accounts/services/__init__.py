"""Account services."""

from accounts.services.account_store import AccountRepository, MongoAccountStore
from accounts.services.auth_service import AuthResult, AuthService
from accounts.services.email_service import EmailService
from accounts.services.notifier import Notifier
from accounts.services.photo_storage import PhotoStorage
from accounts.services.profile_service import ProfileService
from accounts.services.push_service import ExpoPushClient, PushDeliveryError, PushService

__all__ = [
    "AccountRepository",
    "MongoAccountStore",
    "AuthResult",
    "AuthService",
    "EmailService",
    "Notifier",
    "PhotoStorage",
    "ProfileService",
    "ExpoPushClient",
    "PushDeliveryError",
    "PushService",
]
