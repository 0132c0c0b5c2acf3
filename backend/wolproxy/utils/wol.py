"""Wake-on-LAN (WOL) magic packet construction and transmission."""

from __future__ import annotations

import asyncio
import logging
import socket
from dataclasses import dataclass
from typing import Iterable

from wolproxy.utils.address import PhysicalAddress
from wolproxy.utils.network import Endpoint, InterfaceBinding, IPAddress

logger = logging.getLogger(__name__)

SYNC_STREAM = b"\xff" * 6
REPETITIONS = 16


@dataclass(frozen=True)
class SendFailure:
    local_address: IPAddress
    endpoint: Endpoint
    error: OSError


class TransportError(OSError):
    """One or more destinations could not be sent to."""

    def __init__(self, failures: list[SendFailure]):
        self.failures = failures
        details = "; ".join(
            f"{f.local_address} -> {f.endpoint}: {f.error}" for f in failures
        )
        super().__init__(f"Failed to send magic packet to {len(failures)} endpoint(s): {details}")


def build_magic_packet(address: PhysicalAddress) -> bytes:
    """Magic packet: 6x 0xFF + 16x the physical address (102 or 134 bytes)."""
    return SYNC_STREAM + address.address * REPETITIONS


def _sockaddr(address: IPAddress, port: int) -> tuple:
    if address.version == 4:
        return (str(address), port)
    host = str(address).split("%", 1)[0]
    scope = address.scope_id
    if not scope:
        return (host, port, 0, 0)
    scope_index = int(scope) if scope.isdigit() else socket.if_nametoindex(scope)
    return (host, port, 0, scope_index)


async def send_magic_packet(bindings: Iterable[InterfaceBinding], packet: bytes) -> None:
    """Send ``packet`` from every binding's local address to each of its endpoints.

    Best effort: a failing endpoint does not stop the remaining sends. All
    failures are raised together as one TransportError at the end.
    """
    loop = asyncio.get_running_loop()
    failures: list[SendFailure] = []

    await asyncio.sleep(0)

    for binding in bindings:
        local = binding.local_address
        family = socket.AF_INET6 if local.version == 6 else socket.AF_INET

        try:
            sock = socket.socket(family, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        except OSError as e:
            failures.extend(SendFailure(local, ep, e) for ep in binding.endpoints)
            logger.warning("Could not open socket for %s: %s", local, e)
            continue

        with sock:
            sock.setblocking(False)
            try:
                sock.bind(_sockaddr(local, 0))
            except OSError as e:
                failures.extend(SendFailure(local, ep, e) for ep in binding.endpoints)
                logger.warning("Could not bind to %s: %s", local, e)
                continue

            for endpoint in binding.endpoints:
                await asyncio.sleep(0)
                try:
                    sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, int(endpoint.is_broadcast))
                    await loop.sock_sendto(sock, packet, _sockaddr(endpoint.address, endpoint.port))
                except OSError as e:
                    failures.append(SendFailure(local, endpoint, e))
                    logger.warning("WoL send %s -> %s failed: %s", local, endpoint, e)
                else:
                    logger.debug("WoL packet sent %s -> %s", local, endpoint)

    if failures:
        raise TransportError(failures)
