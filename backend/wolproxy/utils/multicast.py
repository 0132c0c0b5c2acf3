"""Multicast group membership per interface (Linux /proc/net/igmp{,6})."""

from __future__ import annotations

import ipaddress
import logging
import socket
import struct
from pathlib import Path

logger = logging.getLogger(__name__)

PROC_NET = Path("/proc/net")

MulticastAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def parse_igmp(text: str) -> dict[str, list[ipaddress.IPv4Address]]:
    """Parse /proc/net/igmp.

    Device lines start in column 0, group lines are indented below them.
    Groups are 32-bit hex in host byte order.
    """
    groups: dict[str, list[ipaddress.IPv4Address]] = {}
    device: str | None = None

    for line in text.splitlines()[1:]:
        if not line.strip():
            continue
        fields = line.split()
        if not line[0].isspace():
            device = fields[1] if len(fields) > 1 else None
            if device is not None:
                groups.setdefault(device, [])
            continue
        if device is None:
            continue
        try:
            packed = struct.pack("=I", int(fields[0], 16))
        except (ValueError, struct.error):
            logger.debug("Skipping malformed igmp line: %r", line)
            continue
        groups[device].append(ipaddress.IPv4Address(socket.inet_ntoa(packed)))

    return groups


def parse_igmp6(text: str) -> dict[str, list[ipaddress.IPv6Address]]:
    """Parse /proc/net/igmp6 into scoped addresses (``ff02::1%eth0``)."""
    groups: dict[str, list[ipaddress.IPv6Address]] = {}

    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 3 or len(fields[2]) != 32:
            continue
        device = fields[1]
        try:
            plain = ipaddress.IPv6Address(bytes.fromhex(fields[2]))
        except ValueError:
            logger.debug("Skipping malformed igmp6 line: %r", line)
            continue
        groups.setdefault(device, []).append(ipaddress.IPv6Address(f"{plain}%{device}"))

    return groups


class MulticastGroupTable:
    """Joined multicast groups keyed by interface name."""

    def __init__(self, groups: dict[str, list[MulticastAddress]] | None = None):
        self._groups: dict[str, list[MulticastAddress]] = groups or {}

    @classmethod
    def from_proc(cls, root: Path = PROC_NET) -> MulticastGroupTable:
        """Read the kernel tables; missing files give an empty table."""
        groups: dict[str, list[MulticastAddress]] = {}

        for name, parser in (("igmp", parse_igmp), ("igmp6", parse_igmp6)):
            path = root / name
            try:
                text = path.read_text(encoding="ascii", errors="replace")
            except OSError as e:
                logger.debug("Multicast table %s unavailable: %s", path, e)
                continue
            for device, addresses in parser(text).items():
                groups.setdefault(device, []).extend(addresses)

        return cls(groups)

    def groups(self, interface: str) -> list[MulticastAddress]:
        return list(self._groups.get(interface, ()))

    def __contains__(self, interface: str) -> bool:
        return interface in self._groups
