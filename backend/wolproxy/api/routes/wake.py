"""Wake-on-LAN routes — send magic packets, inspect interface bindings."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from wolproxy.api.deps import get_physical_address, get_wol_client
from wolproxy.config import settings
from wolproxy.schemas.wake import InterfaceOut, WakeResult
from wolproxy.services import get_client_factory
from wolproxy.services.client import WolClient
from wolproxy.utils.address import PhysicalAddress
from wolproxy.utils.wol import TransportError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/wake/{mac_address}", response_model=WakeResult)
async def wake(
    address: PhysicalAddress = Depends(get_physical_address),
    client: WolClient = Depends(get_wol_client),
):
    """Send a magic packet for ``mac_address`` over every discovered interface."""
    if not client.bindings:
        raise HTTPException(503, "No usable network interface for Wake-on-LAN")

    if settings.is_dev_mode:
        logger.info("[DEV] WoL packet (not sent): %s", address)
    else:
        try:
            await client.wake(address)
        except TransportError as e:
            logger.error("WoL for %s failed: %s", address, e)
            raise HTTPException(
                502,
                f"Failed to send WoL packet to {len(e.failures)} of {client.endpoint_count} endpoint(s)",
            )
        logger.info("WoL packet sent: %s", address)

    return WakeResult(
        address=str(address),
        interfaces=len(client.bindings),
        endpoints=client.endpoint_count,
        dev_mode=settings.is_dev_mode,
    )


@router.get("/interfaces", response_model=list[InterfaceOut])
async def list_interfaces(client: WolClient = Depends(get_wol_client)):
    """Interface bindings currently used for sending."""
    return client.to_dict()


@router.post("/interfaces/refresh", response_model=list[InterfaceOut])
async def refresh_interfaces():
    """Drop the cached discovery result and rediscover now."""
    try:
        factory = get_client_factory()
    except RuntimeError:
        raise HTTPException(503, "WoL service not initialized")
    factory.invalidate()
    return factory.create().to_dict()
