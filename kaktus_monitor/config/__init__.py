"""Configuration for Kaktus Monitor."""

from __future__ import annotations

from .loader import load_config
from .schema import AppConfig, PortalConfig, RouterConfig

__all__ = ["AppConfig", "PortalConfig", "RouterConfig", "load_config"]
