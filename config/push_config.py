"""
Expo push notification constants.
"""

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"

# Expo accepts at most 100 messages per request
EXPO_MAX_BATCH_SIZE = 100

PUSH_DEFAULTS = {
    "sound": "default",
    "priority": "high",
    "test_title": "TAMU Test",
    "test_body": "This is a test push",
    "welcome_title": "Welcome to Tamu!",
    "welcome_body": "Your email is verified. Enjoy Tamu!",
}
