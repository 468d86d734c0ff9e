"""Base classes for authentication strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .types import AuthErrorType

if TYPE_CHECKING:
    from ..transport import SessionTransport

_LOGGER = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Result of an authentication attempt.

    Attributes:
        success: Whether authentication succeeded
        error_type: Classification of error (NONE if success=True)
        error_message: Human-readable error description (if failed)
    """

    success: bool
    error_type: AuthErrorType = AuthErrorType.NONE
    error_message: str | None = None

    @classmethod
    def ok(cls) -> AuthResult:
        """Create successful result."""
        return cls(success=True)

    @classmethod
    def fail(cls, error_type: AuthErrorType, message: str | None = None) -> AuthResult:
        """Create failure result with error classification."""
        return cls(success=False, error_type=error_type, error_message=message)


class AuthStrategy(ABC):
    """Abstract base class for authentication strategies.

    The login method establishes session state (cookies) on the transport
    in-place and returns an AuthResult with success/failure details.
    """

    @abstractmethod
    async def login(
        self,
        transport: SessionTransport,
        base_url: str,
        username: str | None,
        password: str | None,
    ) -> AuthResult:
        """Authenticate with the portal.

        Args:
            transport: Session transport (cookie state modified in-place)
            base_url: Portal base URL (e.g., "https://www.mujkaktus.cz")
            username: Username for authentication
            password: Password for authentication

        Returns:
            AuthResult with success status and error details.
        """
        raise NotImplementedError
