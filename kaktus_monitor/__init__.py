"""Kaktus portal status and LTE router control."""

from __future__ import annotations

from .const import VERSION

__version__ = VERSION
