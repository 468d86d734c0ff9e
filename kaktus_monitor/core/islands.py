"""Lazy-loaded dashboard island resolution.

The dashboard skeleton contains placeholders instead of content:

    <h2>Můj kredit</h2>
    <div id="cmp42" data-lazy-loading='{"rk": "r1"}'></div>

Each placeholder is fetched again with componentIds=<rk>.<id>. The answer
can be another placeholder carrying a new rk/id pair while the server is
still rendering, so resolution polls recursively with the newest pair until
real content arrives or the attempt budget runs out. The final content is
always looked up by the component id reported in the skeleton.

All islands of one container are resolved concurrently. The first failure
cancels the rest and propagates, since a partial status is of no use.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from bs4 import BeautifulSoup, Tag

from ..const import (
    DASHBOARD_PATH,
    DEFAULT_POLL_ATTEMPTS,
    DEFAULT_POLL_DELAY,
    ISLAND_COMPONENT_IDS_PARAM,
    ISLAND_MARKER_ATTR,
    ISLAND_QUERY_PARAMS,
    ISLAND_REQUEST_KEY,
    PORTAL_BASE_URL,
)
from .exceptions import (
    IslandContentNotFoundError,
    IslandResolutionExhaustedError,
    ParsingError,
    ResourceFetchError,
)

if TYPE_CHECKING:
    from .transport import SessionTransport

_LOGGER = logging.getLogger(__name__)

MARKER_SELECTOR = f"[{ISLAND_MARKER_ATTR}]"


@dataclass(frozen=True)
class Island:
    """A placeholder discovered in a container.

    Attributes:
        title: Text of the preceding sibling element ("" if absent)
        request_id: rk token from the marker JSON (None if unparseable)
        component_id: The placeholder's id attribute (None if absent)
    """

    title: str
    request_id: str | None
    component_id: str | None


@dataclass(frozen=True)
class ResolvedIsland:
    """Final island content paired with its title."""

    title: str
    content: Tag


def _parse_request_id(raw: str | None) -> str | None:
    """Return the rk token from marker JSON, or None if it cannot be read."""
    try:
        data = json.loads(raw or "{}")
    except json.JSONDecodeError:
        _LOGGER.warning("Malformed %s attribute: %r", ISLAND_MARKER_ATTR, raw)
        return None

    if not isinstance(data, dict) or data.get(ISLAND_REQUEST_KEY) is None:
        _LOGGER.warning("No %r in %s attribute: %r", ISLAND_REQUEST_KEY, ISLAND_MARKER_ATTR, raw)
        return None
    return str(data[ISLAND_REQUEST_KEY])


def parse_island_element(el: Tag) -> Island:
    """Build an Island from a placeholder element."""
    title_el = el.find_previous_sibling(True)
    raw_id = el.get("id")
    return Island(
        title=title_el.get_text().strip() if title_el is not None else "",
        request_id=_parse_request_id(el.get(ISLAND_MARKER_ATTR)),
        component_id=str(raw_id) if raw_id else None,
    )


def discover_islands(container: Tag) -> list[Island]:
    """Find all placeholders under container, in document order."""
    islands = [parse_island_element(el) for el in container.select(MARKER_SELECTOR)]
    _LOGGER.debug("Discovered %d island(s): %s", len(islands), [i.title for i in islands])
    return islands


def build_island_url(base_url: str, pairs: Iterable[tuple[str, str]]) -> str:
    """Build the lazy-loading URL addressing one or more request/component pairs.

    Pairs are encoded as "<request_id>.<component_id>" joined by "|".
    """
    params = dict(ISLAND_QUERY_PARAMS)
    params[ISLAND_COMPONENT_IDS_PARAM] = "|".join(f"{rid}.{cid}" for rid, cid in pairs)
    return f"{base_url}{DASHBOARD_PATH}?{urlencode(params, safe='.|')}"


def parse_fragment(body: str, context: str) -> BeautifulSoup:
    """Parse an HTML response body.

    Raises:
        ParsingError: If the parser rejects the markup
    """
    try:
        return BeautifulSoup(body, "html.parser")
    except Exception as e:
        raise ParsingError(f"Failed to parse HTML: {e}", field=context) from e


async def fetch_html(transport: SessionTransport, url: str, context: str) -> BeautifulSoup:
    """Fetch url and parse the body, treating non-2xx status as fatal."""
    status, body = await transport.request(url)
    if not 200 <= status < 300:
        raise ResourceFetchError(f"Unexpected response for {context}", url=url, status_code=status)
    return parse_fragment(body, context)


async def _poll_island(
    transport: SessionTransport,
    island: Island,
    request_id: str | None,
    component_id: str | None,
    attempts_remaining: int,
    *,
    base_url: str,
    max_attempts: int,
    poll_delay: float,
) -> ResolvedIsland:
    """Poll until the island content arrives, following rotated tokens."""
    if attempts_remaining <= 0:
        _LOGGER.warning("Island %r still pending after %d attempts", island.title, max_attempts)
        raise IslandResolutionExhaustedError(island, max_attempts)

    if not request_id or not component_id:
        raise ParsingError(
            f"Island {island.title!r} has no request/component id",
            field=ISLAND_MARKER_ATTR,
            raw_value=f"{request_id}.{component_id}",
        )

    url = build_island_url(base_url, [(request_id, component_id)])
    attempt = max_attempts - attempts_remaining + 1
    _LOGGER.debug(
        "Polling island %r (attempt %d/%d): %s.%s", island.title, attempt, max_attempts, request_id, component_id
    )
    fragment = await fetch_html(transport, url, f"island {island.title!r}")

    pending = fragment.select_one(MARKER_SELECTOR)
    if pending is not None:
        if poll_delay > 0:
            await asyncio.sleep(poll_delay)
        rotated = parse_island_element(pending)
        return await _poll_island(
            transport,
            island,
            rotated.request_id,
            rotated.component_id,
            attempts_remaining - 1,
            base_url=base_url,
            max_attempts=max_attempts,
            poll_delay=poll_delay,
        )

    content = fragment.find(id=island.component_id)
    if content is None:
        raise IslandContentNotFoundError(
            f"Resolved island {island.title!r} has no element with the original id",
            component_id=island.component_id,
        )

    _LOGGER.debug("Island %r resolved after %d attempt(s)", island.title, attempt)
    return ResolvedIsland(title=island.title, content=content)


async def resolve_island(
    transport: SessionTransport,
    island: Island,
    *,
    base_url: str = PORTAL_BASE_URL,
    attempts: int = DEFAULT_POLL_ATTEMPTS,
    poll_delay: float = DEFAULT_POLL_DELAY,
) -> ResolvedIsland:
    """Resolve one island to its final content.

    Raises:
        IslandResolutionExhaustedError: Still pending after `attempts` polls
        IslandContentNotFoundError: No element with the original component id
        ParsingError: Missing ids or unparseable fragment
        ResourceFetchError: Non-success response
    """
    return await _poll_island(
        transport,
        island,
        island.request_id,
        island.component_id,
        attempts,
        base_url=base_url,
        max_attempts=attempts,
        poll_delay=poll_delay,
    )


async def resolve_islands(
    transport: SessionTransport,
    container: Tag,
    *,
    base_url: str = PORTAL_BASE_URL,
    attempts: int = DEFAULT_POLL_ATTEMPTS,
    poll_delay: float = DEFAULT_POLL_DELAY,
) -> list[ResolvedIsland]:
    """Discover and concurrently resolve every island under container.

    Fail-fast: the first error cancels outstanding resolutions.
    """
    islands = discover_islands(container)
    if not islands:
        return []

    tasks = [
        asyncio.ensure_future(
            resolve_island(transport, island, base_url=base_url, attempts=attempts, poll_delay=poll_delay)
        )
        for island in islands
    ]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
