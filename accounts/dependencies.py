"""
FastAPI dependencies for the Tamu accounts API.

Provides dependency injection for all services.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import (
    BcryptPasswordHasher,
    GoogleIdentityVerifier,
    IdentityVerifier,
    JWTAuth,
    PasswordHasher,
)

from accounts.config import Settings
from accounts.middleware.auth import AuthMiddleware
from accounts.models import Account
from accounts.services.account_store import AccountRepository, MongoAccountStore
from accounts.services.auth_service import AuthService
from accounts.services.email_service import EmailService
from accounts.services.notifier import Notifier
from accounts.services.photo_storage import PhotoStorage
from accounts.services.profile_service import ProfileService
from accounts.services.push_service import ExpoPushClient, PushService


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

_repository: Optional[AccountRepository] = None
_jwt_auth: Optional[JWTAuth] = None
_auth_middleware: Optional[AuthMiddleware] = None
_notifier: Optional[Notifier] = None
_auth_service: Optional[AuthService] = None
_profile_service: Optional[ProfileService] = None
_push_service: Optional[PushService] = None


# ─────────────────────────────────────────────────────────────────
# Initialization
# ─────────────────────────────────────────────────────────────────

def init_all_services(
    settings: Settings,
    db: Optional[AsyncIOMotorDatabase] = None,
    repository: Optional[AccountRepository] = None,
    hasher: Optional[PasswordHasher] = None,
    identity_verifier: Optional[IdentityVerifier] = None,
    email_service: Optional[EmailService] = None,
    push_client: Optional[ExpoPushClient] = None,
    notifier: Optional[Notifier] = None,
) -> None:
    """
    Initialize all services at application startup.

    Args:
        settings: Application settings
        db: Main MongoDB database connection (used when no repository is given)
        repository: Account storage override
        hasher: Password hasher override
        identity_verifier: Federated identity verifier override
        email_service: Email service override
        push_client: Expo client override
        notifier: Notifier override
    """
    global _repository, _jwt_auth, _auth_middleware, _notifier
    global _auth_service, _profile_service, _push_service

    if repository is None:
        if db is None:
            raise ValueError("Either db or repository is required")
        repository = MongoAccountStore(db)

    hasher = hasher or BcryptPasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    identity_verifier = identity_verifier or GoogleIdentityVerifier(settings.GOOGLE_CLIENT_ID)
    email_service = email_service or EmailService(
        mode=settings.EMAIL_MODE,
        resend_api_key=settings.RESEND_API_KEY,
        from_email=settings.EMAIL_FROM_ADDRESS,
        from_name=settings.EMAIL_FROM_NAME,
        team_name=settings.EMAIL_TEAM_NAME,
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        smtp_user=settings.SMTP_USER,
        smtp_password=settings.SMTP_PASSWORD,
    )
    push_client = push_client or ExpoPushClient(
        push_url=settings.EXPO_PUSH_URL,
        access_token=settings.EXPO_ACCESS_TOKEN,
    )

    _repository = repository
    _jwt_auth = JWTAuth(
        secret=settings.get_jwt_secret(),
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_token_expire_days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS,
    )
    _auth_middleware = AuthMiddleware(jwt_auth=_jwt_auth, repository=repository)
    _notifier = notifier or Notifier(
        email_service=email_service,
        push_client=push_client,
        otp_expire_minutes=settings.OTP_EXPIRE_MINUTES,
    )
    _auth_service = AuthService(
        repository=repository,
        hasher=hasher,
        jwt_auth=_jwt_auth,
        identity_verifier=identity_verifier,
        notifier=_notifier,
        otp_length=settings.OTP_LENGTH,
        otp_expire_minutes=settings.OTP_EXPIRE_MINUTES,
    )
    _profile_service = ProfileService(
        repository=repository,
        hasher=hasher,
        photo_storage=PhotoStorage(
            upload_dir=settings.UPLOAD_DIR,
            url_prefix=settings.UPLOAD_URL_PREFIX,
            max_bytes=settings.MAX_PHOTO_BYTES,
        ),
    )
    _push_service = PushService(repository=repository, push_client=push_client)


# ─────────────────────────────────────────────────────────────────
# Getters
# ─────────────────────────────────────────────────────────────────

def get_repository() -> AccountRepository:
    """Get account repository instance."""
    if _repository is None:
        raise RuntimeError("Account services not initialized.")
    return _repository


def get_auth_middleware() -> AuthMiddleware:
    """Get auth middleware instance."""
    if _auth_middleware is None:
        raise RuntimeError("Account services not initialized.")
    return _auth_middleware


def get_notifier() -> Notifier:
    if _notifier is None:
        raise RuntimeError("Account services not initialized.")
    return _notifier


def get_auth_service() -> AuthService:
    """Get auth service instance."""
    if _auth_service is None:
        raise RuntimeError("Account services not initialized.")
    return _auth_service


def get_profile_service() -> ProfileService:
    """Get profile service instance."""
    if _profile_service is None:
        raise RuntimeError("Account services not initialized.")
    return _profile_service


def get_push_service() -> PushService:
    """Get push service instance."""
    if _push_service is None:
        raise RuntimeError("Account services not initialized.")
    return _push_service


async def require_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> Account:
    """Dependency that requires authentication."""
    return await auth_middleware.require_auth(request)
