"""LTE modem status as reported by /interface/lte/info."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_EARFCN_RE = re.compile(r"earfcn:\s*(\d+)")
_PHY_CELLID_RE = re.compile(r"phy-cellid:\s*(\d+)")


def _extract_int(text: Any, pattern: re.Pattern[str]) -> int | None:
    """Pull an integer out of a band description like "B3@20Mhz earfcn: 1850 phy-cellid: 287"."""
    if text is None:
        return None
    match = pattern.search(str(text))
    return int(match.group(1)) if match else None


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class LteInfo:
    """Selected LTE info fields plus the raw row.

    RouterOS keys are dashed ("primary-band"); attributes are snake_case.
    """

    registration_status: str | None
    current_operator: str | None
    access_technology: str | None
    current_cellid: int | None
    phy_cellid: int | None
    primary_band: str | None
    primary_band_earfcn: int | None
    primary_band_phy_cellid: int | None
    ca_band: str | None
    ca_band_earfcn: int | None
    ca_band_phy_cellid: int | None
    rssi: float | None
    rsrp: float | None
    rsrq: float | None
    sinr: float | None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> LteInfo:
        """Build from one reply row of /interface/lte/info."""
        primary = row.get("primary-band")
        ca = row.get("ca-band")
        operator = row.get("current-operator")
        return cls(
            registration_status=row.get("registration-status"),
            current_operator=str(operator) if operator is not None else None,
            access_technology=row.get("access-technology"),
            current_cellid=_to_int(row.get("current-cellid")),
            phy_cellid=_to_int(row.get("phy-cellid")),
            primary_band=str(primary) if primary is not None else None,
            primary_band_earfcn=_extract_int(primary, _EARFCN_RE),
            primary_band_phy_cellid=_extract_int(primary, _PHY_CELLID_RE),
            ca_band=str(ca) if ca is not None else None,
            ca_band_earfcn=_extract_int(ca, _EARFCN_RE),
            ca_band_phy_cellid=_extract_int(ca, _PHY_CELLID_RE),
            rssi=_to_float(row.get("rssi")),
            rsrp=_to_float(row.get("rsrp")),
            rsrq=_to_float(row.get("rsrq")),
            sinr=_to_float(row.get("sinr")),
            raw=dict(row),
        )

    def as_dict(self) -> dict[str, Any]:
        """Return parsed fields without the raw row."""
        return {k: v for k, v in self.__dict__.items() if k != "raw"}
