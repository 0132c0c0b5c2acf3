"""WolProxy: Wake-on-LAN over multicast/broadcast as a library, HTTP proxy and CLI."""

__version__ = "1.0.0"
