"""
Email service configuration constants.

These are fixed values that don't change per environment.
Environment-specific values (API keys, SMTP credentials) are loaded from env vars.
"""

# Resend API endpoint
RESEND_API_URL = "https://api.resend.com/emails"

# Default values (can be overridden by env vars)
EMAIL_DEFAULTS = {
    "mode": "console",
    "from_email": "noreply@tamu.com",
    "from_name": "Tamu",
    "team_name": "Tamu Team",
}

# Subjects per email type
EMAIL_SUBJECTS = {
    "otp_verification": "Verify Your Email - Tamu",
    "password_reset": "Password Reset - Tamu",
    "welcome": "Welcome to Tamu!",
}
