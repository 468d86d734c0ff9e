"""MikroTik LTE router control over the RouterOS API."""

from __future__ import annotations

from .connection import RouterConnection
from .lte import LteInfo

__all__ = ["LteInfo", "RouterConnection"]
