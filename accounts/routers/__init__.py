"""
API routers.

Exports all routers for inclusion in the main app.
"""

from accounts.routers.auth import router as auth_router
from accounts.routers.profile import router as profile_router
from accounts.routers.push import router as push_router

__all__ = [
    "auth_router",
    "profile_router",
    "push_router",
]
