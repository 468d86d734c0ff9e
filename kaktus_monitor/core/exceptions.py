"""Exceptions for Kaktus portal monitoring.

These exceptions are raised while bootstrapping the portal session,
resolving lazy-loaded dashboard islands and extracting status fields.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .islands import Island


class CannotConnectError(Exception):
    """Error to indicate we cannot connect to the portal or router.

    Raised for network connectivity issues, timeouts, or connection refused.
    """

    def __init__(self, message: str | None = None, url: str | None = None):
        """Initialize error with optional message and URL."""
        super().__init__(message or "Cannot connect")
        self.user_message = message
        self.url = url

    def __str__(self) -> str:
        """Format error with context."""
        parts = [super().__str__()]
        if self.url:
            parts.append(f"url={self.url}")
        return " | ".join(parts)


class InvalidAuthError(Exception):
    """Error to indicate authentication failed.

    Raised when credentials are missing or rejected by the portal.
    """


class ParsingError(Exception):
    """A dashboard value or marker that could not be read.

    `field` names what was being read, usually a dotted status field such
    as "tariff.sms_left". `raw_value` holds the rejected text.
    """

    def __init__(self, message: str, field: str | None = None, raw_value: str | None = None):
        super().__init__(message)
        self.field = field
        self.raw_value = raw_value

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.field:
            parts.append(f"field={self.field}")
        if self.raw_value is not None:
            shown = self.raw_value if len(self.raw_value) <= 50 else self.raw_value[:50] + "..."
            parts.append(f"raw_value={shown!r}")
        return " | ".join(parts)


class ResourceFetchError(Exception):
    """The portal answered a skeleton or island request with a non-2xx status."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.url:
            parts.append(f"url={self.url}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " | ".join(parts)


class IslandContentNotFoundError(Exception):
    """Error for a page that no longer matches the expected structure.

    Raised when the portlet root container is missing from the dashboard,
    or when a resolved island fragment has no element with the original
    component id.

    Attributes:
        selector: CSS selector that matched nothing
        component_id: Component id that was looked up
    """

    def __init__(
        self,
        message: str,
        selector: str | None = None,
        component_id: str | None = None,
    ):
        """Initialize error with the selector or id that came back empty."""
        super().__init__(message)
        self.selector = selector
        self.component_id = component_id

    def __str__(self) -> str:
        """Format error with context."""
        parts = [super().__str__()]
        if self.selector:
            parts.append(f"selector={self.selector}")
        if self.component_id:
            parts.append(f"component_id={self.component_id}")
        return " | ".join(parts)


class IslandResolutionExhaustedError(Exception):
    """Error for an island that stayed pending for the whole poll budget.

    Retry the whole status check rather than the single island.

    Attributes:
        island: The island as originally discovered
        attempts: Number of follow-up requests that were made
    """

    def __init__(self, island: Island, attempts: int):
        """Initialize error for the originally discovered island."""
        super().__init__(
            f"Island {island.title!r} still pending after {attempts} attempts"
        )
        self.island = island
        self.attempts = attempts

    def __str__(self) -> str:
        """Format error with context."""
        return f"{super().__str__()} | component_id={self.island.component_id}"
