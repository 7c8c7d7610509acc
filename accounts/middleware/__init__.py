"""Request middleware."""

from accounts.middleware.auth import AuthMiddleware

__all__ = ["AuthMiddleware"]
