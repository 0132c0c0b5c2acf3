"""WoL client — discovery result + send, with a TTL-cached factory."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from wolproxy.services.discovery import DiscoveryOptions, InterfaceBinding, discover
from wolproxy.utils.address import PhysicalAddress
from wolproxy.utils.wol import build_magic_packet, send_magic_packet

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=5)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WolClient:
    """Sends magic packets over a fixed set of interface bindings."""

    def __init__(self, bindings: tuple[InterfaceBinding, ...]):
        self._bindings = tuple(bindings)

    @classmethod
    def from_options(cls, options: DiscoveryOptions | None = None) -> WolClient:
        return cls(discover(options))

    @property
    def bindings(self) -> tuple[InterfaceBinding, ...]:
        return self._bindings

    @property
    def endpoint_count(self) -> int:
        return sum(len(b.endpoints) for b in self._bindings)

    async def wake(self, address: PhysicalAddress) -> None:
        """Build the magic packet for ``address`` and send it everywhere."""
        packet = build_magic_packet(address)
        await send_magic_packet(self._bindings, packet)

    def to_dict(self) -> list[dict]:
        return [
            {
                "local_address": str(b.local_address),
                "endpoints": [
                    {"address": str(e.address), "port": e.port, "is_broadcast": e.is_broadcast}
                    for e in b.endpoints
                ],
            }
            for b in self._bindings
        ]


class WolClientFactory:
    """Caches one WolClient and rediscovers interfaces once it expires.

    Not locked: concurrent refreshes from several threads just repeat the
    discovery and the last writer wins.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        options: DiscoveryOptions | None = None,
        ttl: timedelta = DEFAULT_TTL,
    ):
        self._clock = clock or utc_now
        self._options = options or DiscoveryOptions()
        self._ttl = ttl
        self._client: WolClient | None = None
        self._refresh_at: datetime | None = None

    @property
    def options(self) -> DiscoveryOptions:
        return self._options

    @property
    def refresh_at(self) -> datetime | None:
        return self._refresh_at

    def create(self) -> WolClient:
        """Return the cached client, rediscovering if missing or expired."""
        now = self._clock()
        if self._client is None or self._refresh_at is None or now > self._refresh_at:
            self._client = WolClient.from_options(self._options)
            self._refresh_at = now + self._ttl
            logger.debug(
                "Interface cache refreshed: %d binding(s), valid until %s",
                len(self._client.bindings), self._refresh_at.isoformat(),
            )
        return self._client

    def invalidate(self) -> None:
        self._client = None
        self._refresh_at = None
