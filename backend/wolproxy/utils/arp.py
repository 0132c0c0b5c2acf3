"""IPv4 -> MAC resolution from the kernel ARP table (Linux only)."""

from __future__ import annotations

import ipaddress
from pathlib import Path

from wolproxy.utils.address import PhysicalAddress

ARP_TABLE = Path("/proc/net/arp")

ATF_COM = 0x2  # entry complete


class AddressResolutionError(LookupError):
    """The IP address has no usable entry in the ARP table."""


def parse_arp_table(text: str) -> dict[ipaddress.IPv4Address, PhysicalAddress]:
    """Map IP -> MAC for complete entries of /proc/net/arp."""
    entries: dict[ipaddress.IPv4Address, PhysicalAddress] = {}
    for line in text.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 4:
            continue
        try:
            ip = ipaddress.IPv4Address(fields[0])
            flags = int(fields[2], 16)
        except ValueError:
            continue
        if not flags & ATF_COM:
            continue
        mac = PhysicalAddress.try_parse(fields[3])
        if mac is None or not any(mac.address):
            continue
        entries[ip] = mac
    return entries


def resolve_address(ip: ipaddress.IPv4Address, table: Path = ARP_TABLE) -> PhysicalAddress:
    """Look up ``ip`` in the ARP cache.

    Works only while the target is online or still cached, or has a static
    ARP entry.
    """
    if ip.version != 4:
        raise AddressResolutionError(f"ARP resolution needs an IPv4 address, got {ip}")
    try:
        text = table.read_text(encoding="ascii", errors="replace")
    except OSError as e:
        raise AddressResolutionError(
            f"Resolving MAC addresses is not supported on this platform ({e})"
        ) from e

    mac = parse_arp_table(text).get(ip)
    if mac is None:
        raise AddressResolutionError(f"No ARP entry for {ip}")
    return mac
