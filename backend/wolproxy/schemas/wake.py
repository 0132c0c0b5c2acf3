"""Wake-on-LAN request/response schemas."""

from pydantic import BaseModel


class WakeResult(BaseModel):
    """Result of a wake request."""
    wol_sent: bool = True
    address: str
    interfaces: int
    endpoints: int
    dev_mode: bool = False


class EndpointOut(BaseModel):
    address: str
    port: int
    is_broadcast: bool = False


class InterfaceOut(BaseModel):
    """One interface binding: source address and its WoL destinations."""
    local_address: str
    endpoints: list[EndpointOut]
