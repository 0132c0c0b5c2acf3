"""IP endpoint value types shared by discovery and the packet sender."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

BROADCAST_ADDRESS = ipaddress.IPv4Address("255.255.255.255")
LOOPBACK_ADDRESS = ipaddress.IPv4Address("127.0.0.1")


@dataclass(frozen=True)
class Endpoint:
    address: IPAddress
    port: int

    @property
    def is_broadcast(self) -> bool:
        return self.address == BROADCAST_ADDRESS

    def __str__(self) -> str:
        if self.address.version == 6:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


@dataclass(frozen=True)
class InterfaceBinding:
    local_address: IPAddress
    endpoints: tuple[Endpoint, ...]
