"""
Email service for sending transactional emails.

Supports SMTP, Resend API, and console logging modes.
Every public method returns a result dict and never raises: delivery
problems are reported through ``{"success": False, "error": ...}``.
"""

import html as html_lib
import logging
import os
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

import httpx
import aiosmtplib

from config.email_config import (
    RESEND_API_URL,
    EMAIL_DEFAULTS,
    EMAIL_SUBJECTS,
)

logger = logging.getLogger(__name__)


def _render(title: str, body: str) -> str:
    """Wrap email body content in the shared layout."""
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
</head>
<body style="margin: 0; padding: 0; background-color: #f5f5f5; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333333;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background-color: #f5f5f5;">
        <tr>
            <td align="center" style="padding: 20px 0;">
                <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background-color: #ffffff; max-width: 600px;">
                    <tr>
                        <td align="center" bgcolor="#E8590C" style="background-color: #E8590C; padding: 32px 20px;">
                            <h1 style="margin: 0; font-size: 26px; color: #ffffff; font-weight: 600;">{title}</h1>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 32px 40px;">
                            {body}
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
"""


def _code_block(code: str) -> str:
    return (
        '<p style="margin: 24px 0; text-align: center; font-size: 32px; '
        f'letter-spacing: 8px; font-weight: 700; color: #E8590C;">{code}</p>'
    )


class EmailService:
    """
    Email service with multi-mode support.

    Modes:
        - console: Log emails to console (development)
        - smtp: Send via SMTP
        - resend: Send via Resend HTTP API
    """

    def __init__(
        self,
        mode: Optional[str] = None,
        resend_api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        team_name: Optional[str] = None,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize email service.

        Args:
            mode: "console", "smtp", or "resend" (default from EMAIL_MODE env var)
            resend_api_key: Resend API key (default from RESEND_API_KEY env var)
            from_email: Sender email address
            from_name: Sender display name
            team_name: Team name for email signatures
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
            http_client: Shared client for the Resend API (one per call if omitted)
        """
        self._mode = mode or os.environ.get("EMAIL_MODE", EMAIL_DEFAULTS["mode"])
        self._from_email = from_email or os.environ.get("EMAIL_FROM_ADDRESS", EMAIL_DEFAULTS["from_email"])
        self._from_name = from_name or os.environ.get("EMAIL_FROM_NAME", EMAIL_DEFAULTS["from_name"])
        self._team_name = team_name or os.environ.get("EMAIL_TEAM_NAME", EMAIL_DEFAULTS["team_name"])
        self._resend_api_key = resend_api_key or os.environ.get("RESEND_API_KEY")

        self._smtp_host = smtp_host or os.environ.get("SMTP_HOST")
        self._smtp_port = smtp_port or int(os.environ.get("SMTP_PORT", "587"))
        self._smtp_user = smtp_user or os.environ.get("SMTP_USER")
        self._smtp_password = smtp_password or os.environ.get("SMTP_PASSWORD")

        self._http_client = http_client

        if self._mode == "resend" and not self._resend_api_key:
            logger.warning("Resend API key not configured, falling back to console mode")
            self._mode = "console"
        elif self._mode == "smtp" and not self._smtp_host:
            logger.warning("SMTP host not configured, falling back to console mode")
            self._mode = "console"

        logger.info(f"Email service initialized in {self._mode} mode")

    @property
    def mode(self) -> str:
        return self._mode

    async def send_otp_verification_email(
        self,
        to_email: str,
        first_name: str,
        otp_code: str,
        expiry_minutes: int,
    ) -> dict:
        """
        Send the email-verification code.

        Args:
            to_email: Recipient email address
            first_name: Greeting name
            otp_code: The one-time passcode
            expiry_minutes: Minutes until the code expires

        Returns:
            dict with success status and message
        """
        name = html_lib.escape(first_name or "there")
        body = (
            f"<p>Hi {name},</p>"
            "<p>Use the code below to verify your email address.</p>"
            f"{_code_block(otp_code)}"
            f"<p>This code will expire in {expiry_minutes} minutes.</p>"
            "<p>If you didn't request this, please ignore this email.</p>"
            f"<p>Best regards,<br>{self._team_name}</p>"
        )
        text = (
            f"Hi {first_name or 'there'},\n\n"
            f"Your OTP verification code is: {otp_code}\n\n"
            f"This code will expire in {expiry_minutes} minutes.\n\n"
            "If you didn't request this, please ignore this email.\n\n"
            f"Best regards,\n{self._team_name}"
        )
        return await self._send(
            to_email,
            EMAIL_SUBJECTS["otp_verification"],
            _render("Verify your email", body),
            text,
        )

    async def send_password_reset_email(
        self,
        to_email: str,
        first_name: str,
        otp_code: str,
        expiry_minutes: int,
    ) -> dict:
        """Send the password reset code."""
        name = html_lib.escape(first_name or "there")
        body = (
            f"<p>Hi {name},</p>"
            "<p>We received a request to reset your password. Enter this code in the app:</p>"
            f"{_code_block(otp_code)}"
            f"<p>This code will expire in {expiry_minutes} minutes.</p>"
            "<p>If you didn't request this, please ignore this email.</p>"
            f"<p>Best regards,<br>{self._team_name}</p>"
        )
        text = (
            f"Hi {first_name or 'there'},\n\n"
            f"Your password reset code is: {otp_code}\n\n"
            f"This code will expire in {expiry_minutes} minutes.\n\n"
            "If you didn't request this, please ignore this email.\n\n"
            f"Best regards,\n{self._team_name}"
        )
        return await self._send(
            to_email,
            EMAIL_SUBJECTS["password_reset"],
            _render("Reset your password", body),
            text,
        )

    async def send_welcome_email(self, to_email: str, first_name: str) -> dict:
        name = html_lib.escape(first_name or "there")
        body = (
            f"<p>Welcome to Tamu, {name}!</p>"
            "<p>Thank you for joining our community. We're excited to have you on board!</p>"
            f"<p>Best regards,<br>{self._team_name}</p>"
        )
        text = (
            f"Welcome to Tamu, {first_name or 'there'}!\n\n"
            "Thank you for joining our community. We're excited to have you on board!\n\n"
            f"Best regards,\n{self._team_name}"
        )
        return await self._send(
            to_email,
            EMAIL_SUBJECTS["welcome"],
            _render("Welcome to Tamu", body),
            text,
        )

    async def _send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """
        Send email via configured provider.

        Args:
            to: Recipient email
            subject: Email subject
            html: HTML content
            text: Plain text content

        Returns:
            dict with success status and details
        """
        if self._mode == "console":
            return self._send_console(to, subject, html, text)
        elif self._mode == "smtp":
            return await self._send_smtp(to, subject, html, text)
        elif self._mode == "resend":
            return await self._send_resend(to, subject, html, text)
        else:
            logger.error(f"Unknown email mode: {self._mode}")
            return {"success": False, "error": f"Unknown email mode: {self._mode}"}

    def _send_console(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Log email to console (development mode)."""
        logger.info("=" * 60)
        logger.info("EMAIL (console mode)")
        logger.info(f"To: {to}")
        logger.info(f"Subject: {subject}")
        logger.info("-" * 60)
        logger.info(text)
        logger.info("=" * 60)

        return {
            "success": True,
            "mode": "console",
            "message": "Email logged to console",
        }

    async def _send_smtp(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Send email via SMTP."""
        try:
            message = MIMEMultipart("alternative")
            message["Subject"] = subject
            message["From"] = f"{self._from_name} <{self._from_email}>"
            message["To"] = to

            message.attach(MIMEText(text, "plain"))
            message.attach(MIMEText(html, "html"))

            # Port 465 is implicit TLS, anything else upgrades with STARTTLS
            use_tls = self._smtp_port == 465

            await aiosmtplib.send(
                message,
                hostname=self._smtp_host,
                port=self._smtp_port,
                username=self._smtp_user,
                password=self._smtp_password,
                use_tls=use_tls,
                start_tls=not use_tls,
            )

            logger.info(f"Email sent via SMTP to {to}")
            return {
                "success": True,
                "mode": "smtp",
                "message": "Email sent via SMTP",
            }

        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email via SMTP: {e}")
            return {
                "success": False,
                "error": str(e),
            }

    async def _post_resend(self, client: httpx.AsyncClient, payload: dict) -> httpx.Response:
        return await client.post(
            RESEND_API_URL,
            headers={
                "Authorization": f"Bearer {self._resend_api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )

    async def _send_resend(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Send email via Resend API."""
        payload = {
            "from": f"{self._from_name} <{self._from_email}>",
            "to": [to],
            "subject": subject,
            "html": html,
            "text": text,
        }

        try:
            if self._http_client is not None:
                response = await self._post_resend(self._http_client, payload)
            else:
                async with httpx.AsyncClient(timeout=10.0) as client:
                    response = await self._post_resend(client, payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email via Resend: {e}")
            return {
                "success": False,
                "error": str(e),
            }

        if response.status_code == 200:
            data = response.json()
            return {
                "success": True,
                "mode": "resend",
                "messageId": data.get("id"),
            }

        try:
            error_msg = response.json().get("message", "Unknown error")
        except ValueError:
            error_msg = response.text or "Unknown error"
        logger.error(f"Resend API error: {error_msg}")
        return {
            "success": False,
            "error": error_msg,
        }
