"""Portal session bootstrap."""

from __future__ import annotations

from .base import AuthResult, AuthStrategy
from .portal import PortalLoginStrategy
from .types import AuthErrorType

__all__ = [
    "AuthErrorType",
    "AuthResult",
    "AuthStrategy",
    "PortalLoginStrategy",
]
