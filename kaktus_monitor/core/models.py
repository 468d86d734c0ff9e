"""Typed account status assembled from the dashboard."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Any

from .exceptions import ParsingError


def _check_non_negative(obj: Any, prefix: str) -> None:
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, bool) or not isinstance(value, int | float):
            continue
        if value < 0:
            raise ParsingError("Negative value", field=f"{prefix}.{f.name}", raw_value=str(value))


@dataclass(frozen=True)
class CreditBalance:
    """One credit bucket (standard or bonus)."""

    amount: int
    expires: date


@dataclass(frozen=True)
class Credit:
    """Prepaid credit totals in CZK."""

    total: int
    standard: CreditBalance
    bonus: CreditBalance

    def __post_init__(self) -> None:
        _check_non_negative(self, "credit")
        _check_non_negative(self.standard, "credit.standard")
        _check_non_negative(self.bonus, "credit.bonus")


@dataclass(frozen=True)
class Tariff:
    """Active tariff package and what is left of it."""

    tariff_name: str
    auto_subscription: bool
    renewal_date: date
    gigs_left: float
    minutes_left: float
    seconds_left: float
    sms_left: float

    def __post_init__(self) -> None:
        _check_non_negative(self, "tariff")


@dataclass(frozen=True)
class StatusRecord:
    """Result of one status check."""

    credit: Credit
    tariff: Tariff

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict with ISO formatted dates."""

        def convert(value: Any) -> Any:
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            if isinstance(value, date):
                return value.isoformat()
            return value

        result: dict[str, Any] = convert(asdict(self))
        return result
