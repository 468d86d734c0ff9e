"""Pytest configuration and fixtures for kaktus_monitor tests."""

from __future__ import annotations

import pytest

from kaktus_monitor.config import AppConfig, PortalConfig, RouterConfig
from tests.portal_fakes import FakeTransport, dashboard_responses


@pytest.fixture
def portal_config() -> PortalConfig:
    """Portal config with no inter-poll delay."""
    return PortalConfig(username="777123456", password="secret", poll_delay=0)


@pytest.fixture
def router_config() -> RouterConfig:
    """Router config for a lab MikroTik."""
    return RouterConfig(host="192.168.88.1", username="admin", password="secret")


@pytest.fixture
def app_config(portal_config: PortalConfig, router_config: RouterConfig) -> AppConfig:
    """Full application config."""
    return AppConfig(portal=portal_config, router=router_config)


@pytest.fixture
def dashboard_transport() -> FakeTransport:
    """Transport serving the full dashboard fixture set."""
    return FakeTransport(dashboard_responses())
