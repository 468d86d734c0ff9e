"""Kaktus account status check.

Flow:
    login bootstrap -> dashboard skeleton -> .portlet-body
    -> resolve islands concurrently -> pick credit/tariff island by title
    -> FieldQuery extraction -> locale normalization -> StatusRecord

A field whose label is missing extracts as "" and then fails normalization
with a ParsingError naming the field. No partial record is ever returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, TypeVar

from bs4 import Tag

from ..const import (
    CREDIT_ISLAND_LABEL,
    DASHBOARD_PATH,
    PORTLET_ROOT_SELECTOR,
    TARIFF_ISLAND_LABEL,
)
from ..lib.utils import (
    extract_leading_integer,
    parse_locale_date,
    parse_locale_decimal,
    parse_minutes_seconds,
)
from .auth import AuthErrorType, PortalLoginStrategy
from .exceptions import CannotConnectError, IslandContentNotFoundError, InvalidAuthError, ParsingError
from .extraction import FieldQuery, ValueLocation
from .islands import ResolvedIsland, fetch_html, resolve_islands
from .models import Credit, CreditBalance, StatusRecord, Tariff
from .transport import PortalSession

if TYPE_CHECKING:
    from ..config.schema import AppConfig, PortalConfig
    from .transport import SessionTransport

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Credit island
CREDIT_TOTAL = FieldQuery("credit.total", ".price", "")
CREDIT_STANDARD = FieldQuery("credit.standard", "p.font-size-xs", "standard")
CREDIT_BONUS = FieldQuery("credit.bonus", "p.font-size-xs", "bonus")

# Tariff island
TARIFF_DATA = FieldQuery("tariff.gigs_left", "p", "data", ValueLocation.SIBLING_BEFORE)
TARIFF_CALLS = FieldQuery("tariff.minutes_left", "p", "minut", ValueLocation.SIBLING_BEFORE)
TARIFF_SMS = FieldQuery("tariff.sms_left", "p", "sms", ValueLocation.SIBLING_BEFORE)
TARIFF_NAME = FieldQuery("tariff.tariff_name", "p", "balíček:", ValueLocation.NESTED_DESCENDANT)
TARIFF_RENEWAL = FieldQuery("tariff.renewal_date", "p", "obnoví se", ValueLocation.NESTED_DESCENDANT)
TARIFF_AUTO_RENEWAL = FieldQuery("tariff.auto_subscription", "span.badge", "samoobnovující")


def find_island(islands: Sequence[ResolvedIsland], label: str) -> Tag | None:
    """Return the content of the first island whose title contains label."""
    needle = label.casefold()
    for island in islands:
        if needle in island.title.casefold():
            return island.content

    _LOGGER.warning("No island titled like %r among %s", label, [i.title for i in islands])
    return None


def _parse_field(field: str, raw: str, parse: Callable[[str], T]) -> T:
    """Apply a normalizer, attaching the field name to any failure."""
    try:
        return parse(raw)
    except ParsingError as e:
        raise ParsingError(f"Cannot parse {field}", field=field, raw_value=raw) from e


def _credit_balance(query: FieldQuery, island: Tag | None) -> CreditBalance:
    text = query.extract(island)
    return CreditBalance(
        amount=_parse_field(f"{query.name}.amount", text, extract_leading_integer),
        expires=_parse_field(f"{query.name}.expires", text, parse_locale_date),
    )


def assemble_status(islands: Sequence[ResolvedIsland]) -> StatusRecord:
    """Build the StatusRecord from resolved islands.

    Raises:
        ParsingError: If any field is missing or malformed
    """
    credit_island = find_island(islands, CREDIT_ISLAND_LABEL)
    tariff_island = find_island(islands, TARIFF_ISLAND_LABEL)

    credit = Credit(
        total=_parse_field(CREDIT_TOTAL.name, CREDIT_TOTAL.extract(credit_island), extract_leading_integer),
        standard=_credit_balance(CREDIT_STANDARD, credit_island),
        bonus=_credit_balance(CREDIT_BONUS, credit_island),
    )

    minutes_left, seconds_left = _parse_field(
        TARIFF_CALLS.name, TARIFF_CALLS.extract(tariff_island), parse_minutes_seconds
    )
    tariff = Tariff(
        tariff_name=TARIFF_NAME.extract(tariff_island),
        auto_subscription=TARIFF_AUTO_RENEWAL.present(tariff_island),
        renewal_date=_parse_field(TARIFF_RENEWAL.name, TARIFF_RENEWAL.extract(tariff_island), parse_locale_date),
        gigs_left=_parse_field(TARIFF_DATA.name, TARIFF_DATA.extract(tariff_island), parse_locale_decimal),
        minutes_left=minutes_left,
        seconds_left=seconds_left,
        sms_left=_parse_field(TARIFF_SMS.name, TARIFF_SMS.extract(tariff_island), parse_locale_decimal),
    )

    return StatusRecord(credit=credit, tariff=tariff)


async def fetch_status(transport: SessionTransport, portal: PortalConfig) -> StatusRecord:
    """Fetch the dashboard over an authenticated transport and assemble the status.

    Raises:
        IslandContentNotFoundError: If the portlet root is missing
    """
    skeleton = await fetch_html(transport, f"{portal.base_url}{DASHBOARD_PATH}", "dashboard skeleton")

    root = skeleton.select_one(PORTLET_ROOT_SELECTOR)
    if root is None:
        raise IslandContentNotFoundError("Portlet root not found in dashboard", selector=PORTLET_ROOT_SELECTOR)

    islands = await resolve_islands(
        transport,
        root,
        base_url=portal.base_url,
        attempts=portal.poll_attempts,
        poll_delay=portal.poll_delay,
    )
    _LOGGER.debug("Resolved %d island(s)", len(islands))

    return assemble_status(islands)


async def check_status(config: AppConfig) -> StatusRecord:
    """Log in and run one full status check.

    Raises:
        InvalidAuthError: Missing or rejected credentials
        CannotConnectError: Portal unreachable or login step failed
    """
    portal = config.portal
    async with PortalSession(timeout=portal.timeout) as transport:
        result = await PortalLoginStrategy().login(transport, portal.base_url, portal.username, portal.password)
        if not result.success:
            if result.error_type in (AuthErrorType.MISSING_CREDENTIALS, AuthErrorType.INVALID_CREDENTIALS):
                raise InvalidAuthError(result.error_message)
            raise CannotConnectError(result.error_message, url=portal.base_url)

        status = await fetch_status(transport, portal)

    _LOGGER.info(
        "Credit %d CZK, %.2f GB / %.1f min / %.0f SMS left",
        status.credit.total,
        status.tariff.gigs_left,
        status.tariff.minutes_left,
        status.tariff.sms_left,
    )
    return status
