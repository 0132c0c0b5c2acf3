"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wolproxy.services.client import WolClientFactory

logger = logging.getLogger(__name__)

_client_factory: WolClientFactory | None = None


def init_services() -> None:
    """Create the process-wide WoL client factory."""
    global _client_factory

    from wolproxy.config import settings
    from wolproxy.services.client import WolClientFactory

    _client_factory = WolClientFactory(
        options=settings.discovery_options(),
        ttl=timedelta(seconds=settings.interface_cache_ttl_seconds),
    )
    logger.info(
        "WoL client factory initialized (family=%s, port=%d, single=%s, broadcast=%s)",
        settings.wol_address_family,
        settings.wol_port,
        settings.wol_use_single_interface,
        settings.wol_prefer_broadcast,
    )


def shutdown_services() -> None:
    global _client_factory
    _client_factory = None


def get_client_factory() -> WolClientFactory:
    if _client_factory is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _client_factory
