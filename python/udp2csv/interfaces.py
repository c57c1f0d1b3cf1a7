"""Local network interface listing, shown when a bind fails."""

from __future__ import annotations

import logging
import socket
import sys
from typing import TextIO

import psutil

logger = logging.getLogger(__name__)


def list_local_interfaces() -> list[tuple[str, str]]:
    """Return (interface name, IP address) pairs for every IPv4/IPv6 address."""
    result: list[tuple[str, str]] = []
    for name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family in (socket.AF_INET, socket.AF_INET6):
                result.append((name, addr.address))
    return result


def print_local_interfaces(stream: TextIO | None = None) -> None:
    out = stream if stream is not None else sys.stderr
    try:
        interfaces = list_local_interfaces()
    except (OSError, RuntimeError) as exc:
        logger.error("Error getting network interfaces: %s", exc)
        return
    print("Available network interfaces:", file=out)
    for name, ip in interfaces:
        print(f"\t{name}:\t{ip}", file=out)
