"""Kaktus portal login.

The portal hands out its session cookie on the dashboard page and expects
a fixed sequence of GETs before the credentials are accepted:

1. /moje-sluzby        - session cookie
2. /delegate/recdef    - registers the session with the login delegate
3. /.gang/login?...    - credentials as query parameters
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from ...const import DASHBOARD_PATH, LOGIN_PATH, RECDEF_PATH
from .base import AuthResult, AuthStrategy
from .types import AuthErrorType

if TYPE_CHECKING:
    from ..transport import SessionTransport

_LOGGER = logging.getLogger(__name__)


class PortalLoginStrategy(AuthStrategy):
    """Cookie session bootstrap followed by query-string login."""

    async def login(
        self,
        transport: SessionTransport,
        base_url: str,
        username: str | None,
        password: str | None,
    ) -> AuthResult:
        """Run the login sequence; stop at the first failing step."""
        if not username or not password:
            _LOGGER.warning("Portal login requires username and password")
            return AuthResult.fail(
                AuthErrorType.MISSING_CREDENTIALS,
                "Portal login requires username and password",
            )

        steps = [
            ("session", f"{base_url}{DASHBOARD_PATH}"),
            ("recdef", f"{base_url}{RECDEF_PATH}"),
            ("login", f"{base_url}{LOGIN_PATH}?{urlencode({'username': username, 'password': password})}"),
        ]

        for step, url in steps:
            status, _ = await transport.request(url)
            _LOGGER.debug("Portal login step %s: status %d", step, status)
            if step == "login" and status in (401, 403):
                _LOGGER.warning("Portal rejected credentials for %s (status %d)", username, status)
                return AuthResult.fail(AuthErrorType.INVALID_CREDENTIALS, "Credentials rejected by portal")
            if not 200 <= status < 300:
                _LOGGER.warning("Portal login step %s failed with status %d", step, status)
                return AuthResult.fail(
                    AuthErrorType.CONNECTION_FAILED,
                    f"Login step '{step}' returned status {status}",
                )

        _LOGGER.debug("Portal login sequence completed for %s", username)
        return AuthResult.ok()
