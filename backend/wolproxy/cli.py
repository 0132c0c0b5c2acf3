"""wolctl — command-line Wake-on-LAN client.

Usage:
    wolctl 01-23-45-67-89-AB
    wolctl 01:23:45:67:89:ab -c 3 -i 500
    wolctl 192.168.1.20 -4        (MAC resolved from the ARP table)
"""

from __future__ import annotations

import argparse
import asyncio
import ipaddress
import logging
import time

from wolproxy import __version__
from wolproxy.services.client import WolClient
from wolproxy.services.discovery import DEFAULT_WOL_PORT, DiscoveryOptions, IpFamily
from wolproxy.utils.address import PhysicalAddress
from wolproxy.utils.arp import AddressResolutionError, resolve_address
from wolproxy.utils.wol import TransportError

logger = logging.getLogger("wolctl")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wolctl", description="Wake-on-LAN client")
    parser.add_argument(
        "address",
        help="MAC address of the target (EUI-48 or EUI-64), or an IPv4 address to "
             "resolve through the ARP table. ARP resolution only works while the "
             "device is online, still cached, or has a static ARP entry.",
    )
    parser.add_argument("-c", "--count", type=_positive_int, default=1,
                        help="Number of magic packets to send (default: 1)")
    parser.add_argument("-i", "--interval", type=_positive_int, default=100,
                        help="Interval between packets in milliseconds (default: 100)")
    parser.add_argument("-p", "--port", type=int, default=DEFAULT_WOL_PORT,
                        help="UDP port to send to (default: 9)")
    parser.add_argument("-4", "--ipv4-only", action="store_true", help="Only send over IPv4")
    parser.add_argument("-6", "--ipv6-only", action="store_true", help="Only send over IPv6")
    parser.add_argument("-s", "--use-single-interface", action="store_true",
                        help="Use a single network interface")
    parser.add_argument("-b", "--broadcast", action="store_true",
                        help="Skip interface discovery and send to 255.255.255.255")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _address_family(ipv4_only: bool, ipv6_only: bool) -> IpFamily | None:
    if ipv4_only and ipv6_only:
        return None
    if ipv4_only:
        return IpFamily.IPV4
    if ipv6_only:
        return IpFamily.IPV6
    return IpFamily.UNSPECIFIED


def _resolve_target(value: str) -> PhysicalAddress | None:
    address = PhysicalAddress.try_parse(value)
    if address is not None:
        return address

    try:
        ip = ipaddress.ip_address(value)
    except ValueError:
        logger.error("Invalid MAC/IP address: %s", value)
        return None

    try:
        address = resolve_address(ip)
    except AddressResolutionError as e:
        logger.error("%s", e)
        return None

    logger.info("Resolved address %s to %s.", ip, address)
    return address


async def _wake_loop(client: WolClient, address: PhysicalAddress, count: int, interval_ms: int) -> int:
    started = time.monotonic()
    failed = 0

    for index in range(count):
        elapsed_ms = int((time.monotonic() - started) * 1000)
        print(f"#{index + 1:<3} {elapsed_ms:6}ms     {address}")
        try:
            await client.wake(address)
        except TransportError as e:
            failed += 1
            logger.error("%s", e)

        if index < count - 1:
            await asyncio.sleep(interval_ms / 1000)

    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        format="%(levelname)s: %(message)s",
    )

    family = _address_family(args.ipv4_only, args.ipv6_only)
    if family is None:
        logger.error("Cannot specify both --ipv4-only and --ipv6-only.")
        return 1

    address = _resolve_target(args.address)
    if address is None:
        return 1

    options = DiscoveryOptions(
        address_family=family,
        port=args.port,
        use_single_interface=args.use_single_interface,
        prefer_broadcast=args.broadcast,
    )
    client = WolClient.from_options(options)

    if not client.bindings:
        logger.error("No usable network interface found for %s.", family.value)
        return 1

    for binding in client.bindings:
        logger.debug(
            "Network interface %s has the following destinations: %s.",
            binding.local_address, ", ".join(str(e) for e in binding.endpoints),
        )

    try:
        return asyncio.run(_wake_loop(client, address, args.count, args.interval))
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
