"""
Google Sign-In identity verifier.

Verifies Google-issued OpenID Connect ID tokens (the ``idToken`` a mobile
client obtains from Google Sign-In) against Google's public certificates.
Requires the google-auth package.

Example:
    verifier = GoogleIdentityVerifier(client_id="1234.apps.googleusercontent.com")
    identity = await verifier.verify(id_token)
    print(identity.subject, identity.email)
"""

import asyncio
import logging
from threading import RLock
from typing import Optional

import google.auth.exceptions
import google.auth.transport.requests
import google.oauth2.id_token
import requests

from common.auth.base import FederatedIdentity, IdentityVerificationError, IdentityVerifier

logger = logging.getLogger(__name__)


class GoogleIdentityVerifier(IdentityVerifier):
    """
    Verifies Google ID tokens for a single OAuth client (the audience).
    """

    def __init__(self, client_id: Optional[str]):
        """
        Initialize Google verifier.

        Args:
            client_id: OAuth client ID the tokens must be issued for
        """
        self._client_id = client_id
        self._session: Optional[requests.Session] = None
        # requests sessions are not documented as thread safe
        self._lock = RLock()

    def _verify_sync(self, token: str) -> dict:
        with self._lock:
            if self._session is None:
                self._session = requests.Session()
            request = google.auth.transport.requests.Request(session=self._session)
            return google.oauth2.id_token.verify_oauth2_token(
                token, request, self._client_id
            )

    async def verify(self, token: str) -> FederatedIdentity:
        """Verify a Google ID token and extract the identity claims."""
        if not self._client_id:
            raise IdentityVerificationError("Google Sign-In is not configured")
        if not token:
            raise IdentityVerificationError("Google ID token is required")

        try:
            # Certificate fetch is blocking network I/O
            idinfo = await asyncio.to_thread(self._verify_sync, token)
        except (ValueError, google.auth.exceptions.GoogleAuthError) as e:
            logger.warning(f"Google ID token verification failed: {e}")
            raise IdentityVerificationError("Invalid Google token")

        if not idinfo or not idinfo.get("sub"):
            raise IdentityVerificationError("Invalid Google token")

        email = idinfo.get("email")
        return FederatedIdentity(
            subject=str(idinfo["sub"]),
            email=email.strip().lower() if email else None,
            email_verified=bool(idinfo.get("email_verified", False)),
            given_name=idinfo.get("given_name"),
            family_name=idinfo.get("family_name"),
            picture=idinfo.get("picture"),
        )
