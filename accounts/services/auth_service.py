"""
Authentication and session lifecycle.

An account moves from unauthenticated, through OTP-pending, to holding a
token pair. Access tokens are stateless; a refresh token is only honoured
while it is both validly signed and still present in the account's
``refreshTokens`` list, so rotation and logout revoke it immediately.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from typing import List, Optional

from common.auth import (
    IdentityVerificationError,
    IdentityVerifier,
    InvalidTokenError,
    JWTAuth,
    PasswordHasher,
    TokenKind,
    TokenPair,
    UNUSABLE_PASSWORD,
)
from common.utils.password import validate_password

from accounts.errors import (
    AuthenticationError,
    ConflictError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)
from accounts.models import Account, OtpPurpose
from accounts.services.account_store import AccountRepository, normalize_email
from accounts.services.notifier import Notifier
from accounts.services.otp import codes_match, is_otp_expired, new_challenge

logger = logging.getLogger(__name__)

# Same text for unknown account and wrong password
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
FORGOT_PASSWORD_ACK = "If an account with this email exists, a password reset code has been sent."

VERIFICATION_PURPOSES = (OtpPurpose.EMAIL_VERIFICATION, OtpPurpose.PHONE_VERIFICATION)


@dataclass
class AuthResult:
    """An authenticated account and the token pair just issued to it."""

    account: Account
    tokens: TokenPair


class AuthService:
    """
    Orchestrates registration, login, OTP flows, password reset,
    refresh-token rotation, logout and Google sign-in.
    """

    def __init__(
        self,
        repository: AccountRepository,
        hasher: PasswordHasher,
        jwt_auth: JWTAuth,
        identity_verifier: IdentityVerifier,
        notifier: Notifier,
        otp_length: int = 6,
        otp_expire_minutes: int = 10,
    ):
        """
        Initialize AuthService.

        Args:
            repository: Account storage
            hasher: Password hash/verify capability
            jwt_auth: Token issuer
            identity_verifier: Google ID token verifier
            notifier: Background email/push delivery
            otp_length: Digits per OTP code
            otp_expire_minutes: OTP lifetime
        """
        self._repository = repository
        self._hasher = hasher
        self._jwt_auth = jwt_auth
        self._identity_verifier = identity_verifier
        self._notifier = notifier
        self._otp_length = otp_length
        self._otp_expire_minutes = otp_expire_minutes
        self._dummy_hash: Optional[str] = None

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    async def _hash(self, password: str) -> str:
        # bcrypt is CPU bound; keep it off the event loop
        return await asyncio.to_thread(self._hasher.hash_password, password)

    async def _verify(self, password: str, hashed: str) -> bool:
        return await asyncio.to_thread(self._hasher.verify_password, password, hashed)

    async def _burn_password_check(self, password: str) -> None:
        """Spend the same time as a real check when the account is unknown."""
        if self._dummy_hash is None:
            self._dummy_hash = await self._hash(secrets.token_urlsafe(16))
        await self._verify(password, self._dummy_hash)

    def _new_challenge(self, purpose: OtpPurpose):
        return new_challenge(purpose, self._otp_length, self._otp_expire_minutes)

    @staticmethod
    def _check_new_password(password: str, confirm_password: str) -> None:
        if password != confirm_password:
            raise ValidationError("Passwords do not match", code="PASSWORD_MISMATCH")
        is_valid, errors = validate_password(password)
        if not is_valid:
            raise ValidationError(errors[0], code="WEAK_PASSWORD")

    def _stale_refresh_tokens(self, account: Account) -> List[str]:
        """Stored refresh tokens that no longer verify (expired or re-keyed)."""
        stale = []
        for token in account.refreshTokens:
            try:
                self._jwt_auth.verify_token(token, TokenKind.REFRESH)
            except InvalidTokenError:
                stale.append(token)
        return stale

    async def _issue(self, account: Account) -> AuthResult:
        tokens = self._jwt_auth.create_token_pair(account.id)
        stale = self._stale_refresh_tokens(account)
        await self._repository.add_refresh_token(account.id, tokens.refresh_token, prune=stale)
        account.refreshTokens = [t for t in account.refreshTokens if t not in stale]
        account.refreshTokens.append(tokens.refresh_token)
        return AuthResult(account=account, tokens=tokens)

    # ─────────────────────────────────────────────────────────────────
    # Registration & login
    # ─────────────────────────────────────────────────────────────────

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        confirm_password: str,
        phone: Optional[str] = None,
    ) -> Account:
        """
        Create an unverified account and email it a verification code.

        Returns:
            The new account (no tokens; the client verifies or logs in next)

        Raises:
            ValidationError: Password mismatch or too weak
            ConflictError: Email or phone already registered
        """
        self._check_new_password(password, confirm_password)

        email = normalize_email(email)
        phone = phone.strip() if phone and phone.strip() else None

        conflict = await self._repository.find_conflict(email, phone)
        if conflict:
            raise ConflictError(f"User with this {conflict} already exists", field=conflict)

        challenge = self._new_challenge(OtpPurpose.EMAIL_VERIFICATION)
        account = Account(
            firstName=first_name.strip(),
            lastName=last_name.strip(),
            email=email,
            phone=phone,
            password=await self._hash(password),
            isEmailVerified=False,
            otp=challenge,
        )
        account = await self._repository.create(account)
        logger.info(f"Registered account {account.id}")

        self._notifier.send_otp(account, challenge)
        return account

    async def login(self, email_or_phone: str, password: str) -> AuthResult:
        """
        Authenticate by email or phone plus password.

        Raises:
            AuthenticationError: Unknown account or wrong password (same message)
        """
        account = await self._repository.find_by_email_or_phone(email_or_phone)

        if account is None:
            await self._burn_password_check(password)
            raise AuthenticationError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

        if not await self._verify(password, account.password):
            logger.info(f"Failed login for account {account.id}")
            raise AuthenticationError(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")

        logger.info(f"Login for account {account.id}")
        return await self._issue(account)

    # ─────────────────────────────────────────────────────────────────
    # OTP
    # ─────────────────────────────────────────────────────────────────

    async def verify_otp(self, email: str, code: str) -> AuthResult:
        """
        Confirm email ownership with the pending verification code.

        Raises:
            NotFoundError: No account for the email
            ValidationError: No pending verification challenge
            ExpiredError: Challenge expired (even if the code is right)
            AuthenticationError: Wrong code, or the code was used concurrently
        """
        account = await self._repository.find_by_email(email)
        if account is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        challenge = account.otp
        if challenge is None or challenge.type not in {p.value for p in VERIFICATION_PURPOSES}:
            raise ValidationError("No OTP found. Please request a new one.", code="OTP_NOT_FOUND")

        if is_otp_expired(challenge.expiresAt):
            raise ExpiredError("OTP has expired. Please request a new one.", code="OTP_EXPIRED")

        if not codes_match(code, challenge.code):
            raise AuthenticationError("Invalid OTP", code="INVALID_OTP")

        tokens = self._jwt_auth.create_token_pair(account.id)
        consumed = await self._repository.consume_otp(
            account.id,
            challenge.code,
            VERIFICATION_PURPOSES,
            {"isEmailVerified": True},
            add_refresh_token=tokens.refresh_token,
        )
        if not consumed:
            raise AuthenticationError("Invalid OTP", code="INVALID_OTP")

        account.isEmailVerified = True
        account.otp = None
        account.refreshTokens.append(tokens.refresh_token)
        logger.info(f"Email verified for account {account.id}")

        self._notifier.send_welcome(account)
        return AuthResult(account=account, tokens=tokens)

    async def resend_otp(self, email: str, purpose: str = OtpPurpose.EMAIL_VERIFICATION.value) -> None:
        """
        Replace the pending challenge with a fresh one and email it.

        Raises:
            ValidationError: Unknown purpose
            NotFoundError: No account for the email
        """
        try:
            otp_purpose = OtpPurpose(purpose or OtpPurpose.EMAIL_VERIFICATION.value)
        except ValueError:
            raise ValidationError("Invalid OTP type", code="INVALID_OTP_TYPE")

        account = await self._repository.find_by_email(email)
        if account is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        challenge = self._new_challenge(otp_purpose)
        await self._repository.set_otp(account.id, challenge)
        account.otp = challenge

        self._notifier.send_otp(account, challenge)

    # ─────────────────────────────────────────────────────────────────
    # Password recovery
    # ─────────────────────────────────────────────────────────────────

    async def forgot_password(self, email: str) -> str:
        """
        Start a password reset. The acknowledgment is the same whether or
        not the account exists.
        """
        account = await self._repository.find_by_email(email)
        if account is not None:
            challenge = self._new_challenge(OtpPurpose.PASSWORD_RESET)
            await self._repository.set_otp(account.id, challenge)
            account.otp = challenge
            self._notifier.send_otp(account, challenge)
            logger.info(f"Password reset requested for account {account.id}")

        return FORGOT_PASSWORD_ACK

    async def reset_password(
        self,
        email: str,
        code: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        """
        Set a new password with a reset code. Revokes every refresh token.

        Raises:
            ValidationError: Mismatch, weak password, or no reset challenge
            NotFoundError: No account for the email
            ExpiredError: Challenge expired
            AuthenticationError: Wrong code
        """
        self._check_new_password(new_password, confirm_password)

        account = await self._repository.find_by_email(email)
        if account is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")

        challenge = account.otp
        if challenge is None or challenge.type != OtpPurpose.PASSWORD_RESET.value:
            raise ValidationError("Invalid or expired reset request", code="INVALID_RESET_REQUEST")

        if is_otp_expired(challenge.expiresAt):
            raise ExpiredError("OTP has expired. Please request a new one.", code="OTP_EXPIRED")

        if not codes_match(code, challenge.code):
            raise AuthenticationError("Invalid OTP", code="INVALID_OTP")

        consumed = await self._repository.consume_otp(
            account.id,
            challenge.code,
            (OtpPurpose.PASSWORD_RESET,),
            {"password": await self._hash(new_password)},
            clear_refresh_tokens=True,
        )
        if not consumed:
            raise AuthenticationError("Invalid OTP", code="INVALID_OTP")

        logger.info(f"Password reset for account {account.id}; all sessions revoked")

    # ─────────────────────────────────────────────────────────────────
    # Sessions
    # ─────────────────────────────────────────────────────────────────

    async def refresh(self, refresh_token: str) -> AuthResult:
        """
        Exchange a refresh token for a new pair (rotation).

        The presented token is removed before the replacement is added, so
        replaying it afterwards always fails.

        Raises:
            AuthenticationError: Bad/expired/wrong-kind token, unknown
                account, or token not in the account's list
        """
        try:
            claims = self._jwt_auth.verify_token(refresh_token, TokenKind.REFRESH)
        except InvalidTokenError as e:
            logger.info(f"Refresh rejected: {e}")
            raise AuthenticationError(INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")

        account = await self._repository.find_by_id(claims.subject)
        if account is None or refresh_token not in account.refreshTokens:
            raise AuthenticationError(INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")

        tokens = self._jwt_auth.create_token_pair(account.id)
        rotated = await self._repository.rotate_refresh_token(
            account.id, refresh_token, tokens.refresh_token
        )
        if not rotated:
            raise AuthenticationError(INVALID_REFRESH_TOKEN, code="INVALID_REFRESH_TOKEN")

        account.refreshTokens = [t for t in account.refreshTokens if t != refresh_token]
        account.refreshTokens.append(tokens.refresh_token)
        return AuthResult(account=account, tokens=tokens)

    async def logout(self, account: Account, refresh_token: Optional[str] = None) -> None:
        """Revoke one refresh token, or all of them when none is given."""
        if refresh_token:
            await self._repository.remove_refresh_token(account.id, refresh_token)
            account.refreshTokens = [t for t in account.refreshTokens if t != refresh_token]
        else:
            await self._repository.clear_refresh_tokens(account.id)
            account.refreshTokens = []

    # ─────────────────────────────────────────────────────────────────
    # Google sign-in
    # ─────────────────────────────────────────────────────────────────

    async def google_auth(self, id_token: str) -> AuthResult:
        """
        Sign in with a Google ID token, creating or linking the account.

        An existing account is only linked when Google asserts the email is
        verified. New accounts get an unusable password.

        Raises:
            AuthenticationError: Verification failed, no email claim, an
                unverified email for linking, or a different Google id
                already linked to the email
        """
        try:
            identity = await self._identity_verifier.verify(id_token)
        except IdentityVerificationError as e:
            logger.info(f"Google sign-in rejected: {e}")
            raise AuthenticationError("Invalid Google token", code="INVALID_GOOGLE_TOKEN")

        if not identity.email:
            raise AuthenticationError("Email not provided by Google", code="GOOGLE_EMAIL_MISSING")

        account = await self._repository.find_by_email_or_google_id(identity.email, identity.subject)

        if account is None:
            account = Account(
                firstName=identity.given_name or "",
                lastName=identity.family_name or "",
                email=identity.email,
                googleId=identity.subject,
                password=UNUSABLE_PASSWORD,
                isEmailVerified=True,
                profilePhoto=identity.picture,
            )
            account = await self._repository.create(account)
            logger.info(f"Created account {account.id} from Google sign-in")

        elif not account.googleId:
            if not identity.email_verified:
                raise AuthenticationError(
                    "Google account email is not verified",
                    code="GOOGLE_EMAIL_UNVERIFIED",
                )
            account.googleId = identity.subject
            account.isEmailVerified = True
            account = await self._repository.save(account)
            logger.info(f"Linked Google identity to account {account.id}")

        elif account.googleId != identity.subject:
            logger.warning(f"Google id mismatch for account {account.id}")
            raise AuthenticationError("Invalid Google token", code="INVALID_GOOGLE_TOKEN")

        return await self._issue(account)
