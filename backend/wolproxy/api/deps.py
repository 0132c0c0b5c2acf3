"""FastAPI dependency injection — WoL client & address parsing."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from wolproxy.services import get_client_factory
from wolproxy.services.client import WolClient
from wolproxy.utils.address import PhysicalAddress

logger = logging.getLogger(__name__)


def get_physical_address(mac_address: str) -> PhysicalAddress:
    """Parse the ``{mac_address}`` path segment, 400 if malformed."""
    address = PhysicalAddress.try_parse(mac_address)
    if address is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid MAC address: {mac_address}",
        )
    return address


def get_wol_client() -> WolClient:
    """Cached WoL client; rediscovers interfaces when the cache expired."""
    try:
        return get_client_factory().create()
    except RuntimeError as e:
        logger.error("WoL client unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="WoL service not initialized",
        )
