"""Network interface discovery — source address + WoL destinations per interface."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from enum import Enum

import psutil

from wolproxy.utils.multicast import MulticastGroupTable
from wolproxy.utils.network import (
    BROADCAST_ADDRESS,
    LOOPBACK_ADDRESS,
    Endpoint,
    InterfaceBinding,
    IPAddress,
)

logger = logging.getLogger(__name__)

DEFAULT_WOL_PORT = 9

IPV4_ALL_HOSTS_PREFIX = "224.0.0.1"
IPV6_ALL_NODES_PREFIX = "ff02::1%"



class NoInterfacesAvailable(LookupError):
    """Discovery produced no usable interface (IPv6-only without multicast)."""


class IpFamily(str, Enum):
    UNSPECIFIED = "unspecified"
    IPV4 = "ipv4"
    IPV6 = "ipv6"


@dataclass(frozen=True)
class DiscoveryOptions:
    address_family: IpFamily = IpFamily.UNSPECIFIED
    port: int = DEFAULT_WOL_PORT
    use_single_interface: bool = False
    prefer_broadcast: bool = False


@dataclass
class InterfaceInfo:
    """Snapshot of one OS network interface.

    ``automatic_private_addressing`` mirrors the platform's APIPA flag. psutil
    does not expose one, so interfaces from list_interfaces() leave it False.
    """
    name: str
    is_up: bool
    is_loopback: bool
    addresses: list[IPAddress] = field(default_factory=list)
    automatic_private_addressing: bool = False


def _ip(text: str) -> IPAddress | None:
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def list_interfaces() -> list[InterfaceInfo]:
    """Enumerate interfaces via psutil, in system-reported order."""
    stats = psutil.net_if_stats()
    interfaces: list[InterfaceInfo] = []

    for name, snics in psutil.net_if_addrs().items():
        addresses = [ip for ip in (_ip(s.address) for s in snics) if ip is not None]
        stat = stats.get(name)
        flags = getattr(stat, "flags", "") or ""
        if flags:
            is_loopback = "loopback" in flags.split(",")
        else:
            is_loopback = bool(addresses) and all(a.is_loopback for a in addresses)
        interfaces.append(InterfaceInfo(
            name=name,
            is_up=bool(stat and stat.isup),
            is_loopback=is_loopback,
            addresses=addresses,
        ))

    return interfaces


def _multicast_endpoints(
    groups: list[IPAddress], version: int, port: int,
) -> tuple[Endpoint, ...]:
    prefix = IPV4_ALL_HOSTS_PREFIX if version == 4 else IPV6_ALL_NODES_PREFIX
    return tuple(
        Endpoint(group, port)
        for group in groups
        if group.version == version and str(group).startswith(prefix)
    )


def _query(
    interface: InterfaceInfo,
    groups: MulticastGroupTable,
    family: IpFamily,
    port: int,
) -> list[InterfaceBinding]:
    bindings: list[InterfaceBinding] = []
    joined = groups.groups(interface.name)

    if family in (IpFamily.UNSPECIFIED, IpFamily.IPV6):
        local = next(
            (a for a in interface.addresses if a.version == 6 and not a.is_link_local),
            None,
        )
        if local is not None:
            endpoints = _multicast_endpoints(joined, 6, port)
            if endpoints:
                bindings.append(InterfaceBinding(local, endpoints))

    if family in (IpFamily.UNSPECIFIED, IpFamily.IPV4) and not interface.automatic_private_addressing:
        local = next((a for a in interface.addresses if a.version == 4), None)
        if local is not None:
            endpoints = _multicast_endpoints(joined, 4, port)
            if endpoints:
                bindings.append(InterfaceBinding(local, endpoints))

    return bindings


def broadcast_binding(port: int = DEFAULT_WOL_PORT) -> InterfaceBinding:
    """Loopback source, single all-ones broadcast destination."""
    return InterfaceBinding(LOOPBACK_ADDRESS, (Endpoint(BROADCAST_ADDRESS, port),))


def discover(
    options: DiscoveryOptions | None = None,
    *,
    interfaces: list[InterfaceInfo] | None = None,
    groups: MulticastGroupTable | None = None,
) -> tuple[InterfaceBinding, ...]:
    """Return the ordered interface bindings to send a magic packet from.

    Multicast all-nodes / all-hosts groups are preferred; the global
    broadcast address is the fallback when nothing usable was found (never
    for IPv6-only).
    """
    options = options or DiscoveryOptions()
    bindings: list[InterfaceBinding] = []

    if not options.prefer_broadcast:
        if interfaces is None:
            interfaces = list_interfaces()
        if groups is None:
            groups = MulticastGroupTable.from_proc()

        for interface in interfaces:
            if not interface.is_up or interface.is_loopback:
                continue
            if options.use_single_interface and bindings:
                break
            found = _query(interface, groups, options.address_family, options.port)
            for binding in found:
                logger.debug(
                    "Interface %s: %s -> %s",
                    interface.name, binding.local_address,
                    ", ".join(str(e) for e in binding.endpoints),
                )
            bindings.extend(found)

    if not bindings and options.address_family is not IpFamily.IPV6:
        logger.info("No multicast-capable interface found, falling back to broadcast")
        bindings.append(broadcast_binding(options.port))

    return tuple(bindings)


def discover_or_raise(
    options: DiscoveryOptions | None = None,
    **kwargs,
) -> tuple[InterfaceBinding, ...]:
    """Like discover(), but an empty result raises NoInterfacesAvailable."""
    bindings = discover(options, **kwargs)
    if not bindings:
        raise NoInterfacesAvailable("No usable network interface for Wake-on-LAN")
    return bindings
