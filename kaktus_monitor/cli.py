"""Command line interface for Kaktus Monitor.

Examples:
    # Prepaid credit and tariff status as JSON
    kaktus-monitor status

    # Lock the LTE modem to the cell it is on now, then check
    kaktus-monitor lte-lock
    kaktus-monitor lte-info

    # Explicit cell lock and unlock
    kaktus-monitor lte-lock --earfcn 6200 --phy-cellid 287
    kaktus-monitor lte-unlock

    # SMS
    kaktus-monitor sms-inbox
    kaktus-monitor sms-send +420777123456 "Hello"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any

from .config import AppConfig, RouterConfig, load_config
from .const import DEFAULT_CONFIG_PATH, VERSION
from .core.exceptions import (
    CannotConnectError,
    InvalidAuthError,
    IslandContentNotFoundError,
    IslandResolutionExhaustedError,
    ParsingError,
    ResourceFetchError,
)
from .core.status import check_status
from .router import RouterConnection

_LOGGER = logging.getLogger(__name__)

KNOWN_ERRORS = (
    CannotConnectError,
    InvalidAuthError,
    IslandContentNotFoundError,
    IslandResolutionExhaustedError,
    ParsingError,
    ResourceFetchError,
    FileNotFoundError,
    ValueError,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kaktus-monitor",
        description="Kaktus prepaid status and MikroTik LTE router control",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="YAML or JSON secrets file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show prepaid credit and tariff status")
    sub.add_parser("lte-info", help="Show LTE modem status")

    lock = sub.add_parser("lte-lock", help="Lock LTE to a cell (default: current cell)")
    lock.add_argument("--earfcn", type=int, help="EARFCN of the cell")
    lock.add_argument("--phy-cellid", type=int, help="Physical cell id")

    sub.add_parser("lte-unlock", help="Remove the LTE cell lock")
    sub.add_parser("sms-inbox", help="List received SMS")

    send = sub.add_parser("sms-send", help="Send one SMS")
    send.add_argument("phone_number")
    send.add_argument("message")
    return parser


def _router_config(config: AppConfig) -> RouterConfig:
    if config.router is None:
        raise ValueError("No 'router' section in config")
    return config.router


def run_router_command(args: argparse.Namespace, config: RouterConfig) -> Any:
    """Execute a router subcommand and return its printable result."""
    with RouterConnection(config) as router:
        if args.command == "lte-info":
            return router.lte_info().as_dict()
        if args.command == "lte-lock":
            if args.earfcn is None and args.phy_cellid is None:
                return router.lte_lock_current()
            if args.earfcn is None or args.phy_cellid is None:
                raise ValueError("--earfcn and --phy-cellid must be given together")
            return router.lte_lock(args.earfcn, args.phy_cellid)
        if args.command == "lte-unlock":
            return router.lte_unlock()
        if args.command == "sms-inbox":
            return router.sms_inbox()
        if args.command == "sms-send":
            router.send_sms(args.phone_number, args.message)
            return {"sent": True}
    raise ValueError(f"Unknown command {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        if args.command == "status":
            result: Any = asyncio.run(check_status(config)).as_dict()
        else:
            result = run_router_command(args, _router_config(config))
    except KNOWN_ERRORS as e:
        _LOGGER.error("%s failed: %s", args.command, e)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    return 0
