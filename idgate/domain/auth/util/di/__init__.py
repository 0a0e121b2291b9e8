"""Auth domain DI."""

from .provider import AuthProvider

__all__ = ["AuthProvider"]
