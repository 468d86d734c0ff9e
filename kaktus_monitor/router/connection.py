"""Command channel to a MikroTik LTE router.

The RouterOS API wire protocol (sentences, =key=value words, !re/!done
markers) is handled by librouteros. Commands here receive already-parsed
rows as dicts.

Only a small set of commands is issued:
- /interface/lte/info             LTE status
- /interface/lte/at-chat          AT*Cell cell lock/unlock
- /tool/sms/inbox/print           received SMS
- /tool/sms/send                  send one SMS
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any

import librouteros
from librouteros.exceptions import LibRouterosError

from ..const import LTE_INTERFACE_NUMBER, MAX_SMS_LENGTH
from ..core.exceptions import CannotConnectError, ParsingError
from .lte import LteInfo

if TYPE_CHECKING:
    from ..config.schema import RouterConfig

_LOGGER = logging.getLogger(__name__)


class RouterConnection:
    """RouterOS API session.

    Usage:
        with RouterConnection(config) as router:
            info = router.lte_info()
    """

    def __init__(self, config: RouterConfig):
        """Initialize with router connection settings."""
        self.config = config
        self._api: Any = None

    def __enter__(self) -> RouterConnection:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def connect(self) -> None:
        """Open and log in to the RouterOS API."""
        _LOGGER.debug("Connecting to RouterOS API at %s:%d", self.config.host, self.config.port)
        try:
            self._api = librouteros.connect(
                host=self.config.host,
                username=self.config.username,
                password=self.config.password,
                port=self.config.port,
                timeout=self.config.timeout,
            )
        except (OSError, LibRouterosError) as e:
            raise CannotConnectError(
                f"Cannot connect to router {self.config.host}:{self.config.port}: {e}"
            ) from e

    def close(self) -> None:
        """Close the API connection."""
        if self._api is not None:
            self._api.close()
            self._api = None

    def execute(self, command: str, **args: Any) -> list[dict[str, Any]]:
        """Run a command and return all reply rows.

        Args:
            command: Command path, e.g. "/interface/lte/info"
            **args: Attribute words; pass dashed names via **{"phone-number": ...}

        Raises:
            CannotConnectError: On connection loss or a trap reply
        """
        if self._api is None:
            raise RuntimeError("RouterConnection used before connect()")

        _LOGGER.debug("RouterOS %s %s", command, args)
        try:
            return [dict(row) for row in self._api(command, **args)]
        except (OSError, LibRouterosError) as e:
            raise CannotConnectError(f"Router command {command} failed: {e}") from e

    def lte_info(self) -> LteInfo:
        """Return the current LTE status."""
        rows = self.execute("/interface/lte/info", number=LTE_INTERFACE_NUMBER, once=True)
        if not rows:
            raise ParsingError("Empty reply from /interface/lte/info")
        return LteInfo.from_row(rows[-1])

    def at_chat(self, command: str) -> list[dict[str, Any]]:
        """Send an AT command to the LTE modem."""
        return self.execute("/interface/lte/at-chat", number=LTE_INTERFACE_NUMBER, input=command)

    def lte_lock(self, earfcn: int, phy_cellid: int) -> list[dict[str, Any]]:
        """Lock the modem to one cell (EARFCN + physical cell id)."""
        _LOGGER.info("Locking LTE to earfcn=%d phy-cellid=%d", earfcn, phy_cellid)
        return self.at_chat(f"AT*Cell=2,3,,{earfcn},{phy_cellid}")

    def lte_lock_current(self) -> list[dict[str, Any]]:
        """Lock the modem to the primary band cell it is currently on."""
        info = self.lte_info()
        if info.primary_band_earfcn is None or info.primary_band_phy_cellid is None:
            raise ParsingError(
                "Cannot read current cell from primary band",
                field="primary-band",
                raw_value=info.primary_band,
            )
        return self.lte_lock(info.primary_band_earfcn, info.primary_band_phy_cellid)

    def lte_unlock(self) -> list[dict[str, Any]]:
        """Remove any cell lock."""
        _LOGGER.info("Unlocking LTE cell")
        return self.at_chat("AT*Cell=0")

    def sms_inbox(self) -> list[dict[str, Any]]:
        """Return received SMS messages."""
        return self.execute("/tool/sms/inbox/print")

    def send_sms(self, phone_number: str, message: str) -> None:
        """Send a single SMS.

        Raises:
            ValueError: If message is longer than MAX_SMS_LENGTH
        """
        if len(message) > MAX_SMS_LENGTH:
            raise ValueError(f"Message too long ({len(message)} > {MAX_SMS_LENGTH} characters)")

        _LOGGER.info("Sending SMS to %s (%d characters)", phone_number, len(message))
        self.execute("/tool/sms/send", **{"phone-number": phone_number, "message": message})
