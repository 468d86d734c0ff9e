"""Authentication error classification."""

from __future__ import annotations

from enum import Enum


class AuthErrorType(Enum):
    """Classification of authentication errors.

    Used to provide specific feedback about why the login failed.
    """

    NONE = "none"
    """No error - authentication succeeded."""

    MISSING_CREDENTIALS = "missing_credentials"
    """Username or password not provided."""

    INVALID_CREDENTIALS = "invalid_credentials"
    """Credentials rejected by the portal."""

    CONNECTION_FAILED = "connection_failed"
    """Could not reach the portal or a login step returned an error status."""
