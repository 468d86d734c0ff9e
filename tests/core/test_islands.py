"""Tests for lazy-loaded island discovery and resolution."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest
from bs4 import BeautifulSoup

from kaktus_monitor.const import PORTAL_BASE_URL
from kaktus_monitor.core.exceptions import (
    IslandContentNotFoundError,
    IslandResolutionExhaustedError,
    ParsingError,
    ResourceFetchError,
)
from kaktus_monitor.core.islands import (
    Island,
    build_island_url,
    discover_islands,
    parse_island_element,
    resolve_island,
    resolve_islands,
)
from tests.portal_fakes import (
    CREDIT_IDS,
    TARIFF_IDS,
    FakeTransport,
    component_ids,
    load_fixture,
)

CREDIT_ID = "_rkaktusvcc_WAR_vcc_credit"


def _container(name: str = "skeleton.html"):
    return BeautifulSoup(load_fixture(name), "html.parser").select_one(".portlet-body")


def _element(html: str):
    return BeautifulSoup(html, "html.parser").find(attrs={"data-lazy-loading": True})


class TestParseIslandElement:
    """Tests for placeholder parsing."""

    def test_parses_title_request_and_component(self):
        """Title comes from the preceding sibling, ids from the marker."""
        el = _element('<h2> Můj kredit </h2><div id="c1" data-lazy-loading=\'{"rk": "r1"}\'></div>')
        assert parse_island_element(el) == Island(title="Můj kredit", request_id="r1", component_id="c1")

    def test_missing_title(self):
        """A placeholder without a preceding sibling has an empty title."""
        el = _element('<div id="c1" data-lazy-loading=\'{"rk": "r1"}\'></div>')
        assert parse_island_element(el).title == ""

    def test_malformed_json(self):
        """Malformed marker JSON degrades to an absent request id."""
        el = _element('<div id="c1" data-lazy-loading="{rk: r1"></div>')
        island = parse_island_element(el)
        assert island.request_id is None
        assert island.component_id == "c1"

    def test_missing_rk(self):
        """Marker JSON without rk degrades to an absent request id."""
        el = _element('<div id="c1" data-lazy-loading=\'{"m": "dashboard"}\'></div>')
        assert parse_island_element(el).request_id is None

    def test_non_object_json(self):
        """Marker JSON that is not an object degrades to an absent request id."""
        el = _element('<div id="c1" data-lazy-loading="[1, 2]"></div>')
        assert parse_island_element(el).request_id is None

    def test_numeric_rk(self):
        """A numeric rk is kept as text."""
        el = _element('<div id="c1" data-lazy-loading=\'{"rk": 42}\'></div>')
        assert parse_island_element(el).request_id == "42"

    def test_missing_id(self):
        """A placeholder without id has an absent component id."""
        el = _element('<div data-lazy-loading=\'{"rk": "r1"}\'></div>')
        assert parse_island_element(el).component_id is None


class TestDiscoverIslands:
    """Tests for container scans."""

    def test_discovers_all_placeholders_in_order(self):
        """Finds both dashboard islands."""
        islands = discover_islands(_container())
        assert [i.title for i in islands] == ["Můj kredit", "Aktivní balíček"]
        assert islands[0].request_id == "r8f2a1"
        assert islands[1].component_id == "_rkaktusvcc_WAR_vcc_tariff"

    def test_malformed_marker_does_not_break_discovery(self):
        """One broken marker still yields every island."""
        html = (
            '<div><h2>A</h2><div id="a" data-lazy-loading="not json"></div>'
            '<h2>B</h2><div id="b" data-lazy-loading=\'{"rk": "rb"}\'></div></div>'
        )
        islands = discover_islands(BeautifulSoup(html, "html.parser").div)
        assert [(i.title, i.request_id) for i in islands] == [("A", None), ("B", "rb")]

    def test_empty_container(self):
        """No placeholders, no islands."""
        assert discover_islands(BeautifulSoup("<div><p>x</p></div>", "html.parser").div) == []


class TestBuildIslandUrl:
    """Tests for the dashboard addressing contract."""

    def test_single_pair(self):
        """One pair is addressed as request.component."""
        url = build_island_url(PORTAL_BASE_URL, [("r1", "c1")])
        assert url.startswith("https://www.mujkaktus.cz/moje-sluzby?")
        assert "_rkaktusvcc_WAR_vcc_componentIds=r1.c1" in url
        assert "_rkaktusvcc_WAR_vcc_lazyLoading=true" in url
        assert "p_p_state=exclusive" in url

    def test_batched_pairs(self):
        """Several pairs are joined with a pipe."""
        url = build_island_url(PORTAL_BASE_URL, [("r1", "c1"), ("r2", "c2")])
        assert component_ids(url) == "r1.c1|r2.c2"
        assert "componentIds=r1.c1|r2.c2" in url


class TestResolveIsland:
    """Tests for single island resolution."""

    @pytest.mark.asyncio
    async def test_one_hop(self):
        """Final content on the first poll costs exactly one request."""
        transport = FakeTransport({CREDIT_IDS: (200, load_fixture("credit_island.html"))})
        island = discover_islands(_container())[0]

        resolved = await resolve_island(transport, island, poll_delay=0)

        assert len(transport.requests) == 1
        assert resolved.title == "Můj kredit"
        assert resolved.content.get("id") == CREDIT_ID

    @pytest.mark.asyncio
    async def test_follows_rotated_token(self):
        """A pending answer is re-polled with its new pair."""
        final = load_fixture("credit_island.html")
        transport = FakeTransport(
            {
                CREDIT_IDS: (200, load_fixture("credit_island_pending.html")),
                "r8f2b7._rkaktusvcc_WAR_vcc_credit_p2": (200, final),
            }
        )
        island = discover_islands(_container())[0]

        resolved = await resolve_island(transport, island, poll_delay=0)

        assert [component_ids(u) for u in transport.requests] == [
            CREDIT_IDS,
            "r8f2b7._rkaktusvcc_WAR_vcc_credit_p2",
        ]
        # Content is looked up by the id reported in the skeleton
        assert resolved.content.get("id") == CREDIT_ID

    @pytest.mark.asyncio
    async def test_waits_between_polls(self):
        """The poll delay is applied before each re-poll."""
        transport = FakeTransport(
            {
                CREDIT_IDS: (200, load_fixture("credit_island_pending.html")),
                "r8f2b7._rkaktusvcc_WAR_vcc_credit_p2": (200, load_fixture("credit_island.html")),
            }
        )
        island = discover_islands(_container())[0]

        with patch("kaktus_monitor.core.islands.asyncio.sleep") as mock_sleep:
            await resolve_island(transport, island, poll_delay=0.05)

        mock_sleep.assert_awaited_once_with(0.05)

    @pytest.mark.asyncio
    async def test_exhaustion_after_exactly_ten_attempts(self):
        """A server that never finishes gets 10 requests and no 11th."""
        counter = iter(range(1000))

        def always_pending(url):
            n = next(counter)
            return 200, f'<div id="c{n}" data-lazy-loading=\'{{"rk": "r{n}"}}\'></div>'

        transport = FakeTransport({})
        transport.responses = _AnyKey(always_pending)
        island = Island(title="Můj kredit", request_id="r-start", component_id="c-start")

        with pytest.raises(IslandResolutionExhaustedError) as exc_info:
            await resolve_island(transport, island, poll_delay=0)

        assert len(transport.requests) == 10
        assert exc_info.value.island == island
        assert exc_info.value.attempts == 10
        assert "c-start" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_custom_attempt_budget(self):
        """The attempt budget is configurable."""
        transport = FakeTransport({})
        transport.responses = _AnyKey(lambda url: (200, '<div id="x" data-lazy-loading=\'{"rk": "y"}\'></div>'))
        island = Island(title="t", request_id="r", component_id="c")

        with pytest.raises(IslandResolutionExhaustedError):
            await resolve_island(transport, island, attempts=3, poll_delay=0)

        assert len(transport.requests) == 3

    @pytest.mark.asyncio
    async def test_content_not_found(self):
        """A final fragment without the original id is a contract break."""
        transport = FakeTransport({CREDIT_IDS: (200, '<div id="something-else">1 Kč</div>')})
        island = discover_islands(_container())[0]

        with pytest.raises(IslandContentNotFoundError) as exc_info:
            await resolve_island(transport, island, poll_delay=0)

        assert exc_info.value.component_id == CREDIT_ID

    @pytest.mark.asyncio
    async def test_error_status(self):
        """A non-success status is surfaced with URL and status."""
        transport = FakeTransport({CREDIT_IDS: (503, "Service Unavailable")})
        island = discover_islands(_container())[0]

        with pytest.raises(ResourceFetchError) as exc_info:
            await resolve_island(transport, island, poll_delay=0)

        assert exc_info.value.status_code == 503
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_missing_request_id_fails_without_request(self):
        """An island with an unreadable marker fails on its own."""
        transport = FakeTransport({})
        island = Island(title="Můj kredit", request_id=None, component_id="c1")

        with pytest.raises(ParsingError, match="Můj kredit"):
            await resolve_island(transport, island, poll_delay=0)

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_unparseable_fragment(self):
        """A parser failure is fatal for the island."""
        transport = FakeTransport({CREDIT_IDS: (200, "<div></div>")})
        island = discover_islands(_container())[0]

        with patch("kaktus_monitor.core.islands.BeautifulSoup", side_effect=ValueError("bad markup")):
            with pytest.raises(ParsingError, match="Failed to parse HTML"):
                await resolve_island(transport, island, poll_delay=0)


class TestResolveIslands:
    """Tests for concurrent resolution of a container."""

    @pytest.mark.asyncio
    async def test_no_islands_no_requests(self):
        """A container without placeholders resolves to nothing."""
        transport = FakeTransport({})
        container = BeautifulSoup("<div class='portlet-body'><p>Nic</p></div>", "html.parser").div

        assert await resolve_islands(transport, container, poll_delay=0) == []
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_resolves_all(self, dashboard_transport):
        """Every island is resolved with its title."""
        resolved = await resolve_islands(dashboard_transport, _container(), poll_delay=0)

        assert sorted(r.title for r in resolved) == ["Aktivní balíček", "Můj kredit"]
        assert sorted(component_ids(u) for u in dashboard_transport.requests) == [CREDIT_IDS, TARIFF_IDS]

    @pytest.mark.asyncio
    async def test_resolutions_run_concurrently(self):
        """Both islands are in flight at the same time."""
        both_started = asyncio.Event()
        started: list[str] = []

        class BarrierTransport(FakeTransport):
            async def request(self, url):
                started.append(url)
                if len(started) == 2:
                    both_started.set()
                await both_started.wait()
                return await super().request(url)

        transport = BarrierTransport(
            {
                CREDIT_IDS: (200, load_fixture("credit_island.html")),
                TARIFF_IDS: (200, load_fixture("tariff_island.html")),
            }
        )

        resolved = await asyncio.wait_for(resolve_islands(transport, _container(), poll_delay=0), timeout=2)

        assert len(resolved) == 2

    @pytest.mark.asyncio
    async def test_fail_fast(self):
        """One island's fatal error aborts the whole resolution."""
        transport = FakeTransport(
            {
                CREDIT_IDS: (200, load_fixture("credit_island.html")),
                TARIFF_IDS: (500, "Internal Server Error"),
            }
        )

        with pytest.raises(ResourceFetchError):
            await resolve_islands(transport, _container(), poll_delay=0)

    @pytest.mark.asyncio
    async def test_fail_fast_cancels_pending_siblings(self):
        """A failing island cancels resolutions still waiting on the portal."""
        sibling_cancelled = asyncio.Event()

        class StallingTransport(FakeTransport):
            async def request(self, url):
                if component_ids(url) == CREDIT_IDS:
                    try:
                        await asyncio.sleep(10)
                    except asyncio.CancelledError:
                        sibling_cancelled.set()
                        raise
                return await super().request(url)

        transport = StallingTransport({TARIFF_IDS: (500, "Internal Server Error")})

        with pytest.raises(ResourceFetchError) as exc_info:
            await asyncio.wait_for(resolve_islands(transport, _container(), poll_delay=0), timeout=2)

        assert exc_info.value.status_code == 500
        await asyncio.wait_for(sibling_cancelled.wait(), timeout=1)
        assert sibling_cancelled.is_set()


class _AnyKey(dict):
    """Response map that answers every key with the same handler."""

    def __init__(self, handler):
        super().__init__()
        self.handler = handler

    def __contains__(self, key):
        return True

    def __getitem__(self, key):
        return self.handler
