"""Tests for magic packet construction and the UDP broadcaster."""

import asyncio
import ipaddress
import socket
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from wolproxy.utils.address import PhysicalAddress
from wolproxy.utils.network import Endpoint, InterfaceBinding
from wolproxy.utils.wol import TransportError, _sockaddr, build_magic_packet, send_magic_packet

LOOPBACK = ipaddress.IPv4Address("127.0.0.1")
UNASSIGNED = ipaddress.IPv4Address("192.0.2.123")  # TEST-NET-1, never local
IPV6_LOOPBACK = ipaddress.IPv6Address("::1")


@pytest.fixture
def receiver():
    """UDP socket on loopback to receive magic packets."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


@pytest.fixture
def receiver6():
    """UDP socket on the IPv6 loopback."""
    if not socket.has_ipv6:
        pytest.skip("IPv6 not supported")
    sock = socket.socket(socket.AF_INET6, socket.SOCK_DGRAM)
    try:
        sock.bind(("::1", 0))
    except OSError:
        sock.close()
        pytest.skip("IPv6 loopback not available")
    sock.settimeout(2.0)
    yield sock
    sock.close()


def _binding_to(receiver, local=LOOPBACK) -> InterfaceBinding:
    port = receiver.getsockname()[1]
    return InterfaceBinding(local, (Endpoint(LOOPBACK, port),))


class TestBuildMagicPacket:
    def test_eui48_packet(self):
        address = PhysicalAddress.parse("01:23:45:67:89:AB")
        packet = build_magic_packet(address)

        assert len(packet) == 102
        assert packet[:6] == b"\xff" * 6
        assert packet[6:] == bytes.fromhex("0123456789AB") * 16

    def test_eui64_packet(self):
        address = PhysicalAddress.parse("01-23-45-67-89-AB-CD-EF")
        packet = build_magic_packet(address)

        assert len(packet) == 134
        assert packet[:6] == b"\xff" * 6
        for offset in range(6, 134, 8):
            assert packet[offset:offset + 8] == bytes.fromhex("0123456789ABCDEF")

    def test_deterministic(self):
        address = PhysicalAddress.parse("aa-bb-cc-dd-ee-ff")
        assert build_magic_packet(address) == build_magic_packet(address)


class TestSendMagicPacket:
    @pytest.mark.asyncio
    async def test_packet_received_on_loopback(self, receiver):
        packet = build_magic_packet(PhysicalAddress.parse("01:23:45:67:89:AB"))

        await send_magic_packet([_binding_to(receiver)], packet)

        data = receiver.recv(4096)
        assert data == packet

    @pytest.mark.asyncio
    async def test_sends_to_every_endpoint(self, receiver):
        port = receiver.getsockname()[1]
        binding = InterfaceBinding(LOOPBACK, (Endpoint(LOOPBACK, port), Endpoint(LOOPBACK, port)))

        await send_magic_packet([binding], b"payload")

        assert receiver.recv(4096) == b"payload"
        assert receiver.recv(4096) == b"payload"

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_bindings(self, receiver):
        broken = _binding_to(receiver, local=UNASSIGNED)
        working = _binding_to(receiver)

        with pytest.raises(TransportError) as exc_info:
            await send_magic_packet([broken, working], b"payload")

        assert receiver.recv(4096) == b"payload"
        failures = exc_info.value.failures
        assert len(failures) == 1
        assert failures[0].local_address == UNASSIGNED
        assert isinstance(failures[0].error, OSError)

    @pytest.mark.asyncio
    async def test_transport_error_is_os_error(self, receiver):
        with pytest.raises(OSError):
            await send_magic_packet([_binding_to(receiver, local=UNASSIGNED)], b"payload")

    @pytest.mark.asyncio
    async def test_cancelled_before_start_sends_nothing(self, receiver):
        task = asyncio.ensure_future(send_magic_packet([_binding_to(receiver)], b"payload"))
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        receiver.settimeout(0.2)
        with pytest.raises(socket.timeout):
            receiver.recv(4096)

    @pytest.mark.asyncio
    async def test_cancelled_between_sends(self, receiver):
        port = receiver.getsockname()[1]
        binding = InterfaceBinding(LOOPBACK, tuple(Endpoint(LOOPBACK, port) for _ in range(3)))
        loop = asyncio.get_running_loop()
        real_sendto = loop.sock_sendto
        sent = []

        async def send_then_cancel(sock, data, address):
            await real_sendto(sock, data, address)
            sent.append(address)
            task.cancel()

        with patch.object(loop, "sock_sendto", send_then_cancel):
            task = asyncio.ensure_future(send_magic_packet([binding], b"payload"))
            with pytest.raises(asyncio.CancelledError):
                await task

        assert len(sent) == 1
        assert receiver.recv(4096) == b"payload"
        receiver.settimeout(0.2)
        with pytest.raises(socket.timeout):
            receiver.recv(4096)

    @pytest.mark.asyncio
    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs the 'lo' interface name")
    async def test_ipv6_scoped_endpoint(self, receiver6):
        port = receiver6.getsockname()[1]
        binding = InterfaceBinding(IPV6_LOOPBACK, (Endpoint(ipaddress.ip_address("::1%lo"), port),))

        await send_magic_packet([binding], b"payload")

        data, (host, *_) = receiver6.recvfrom(4096)
        assert data == b"payload"
        assert host == "::1"

    @pytest.mark.asyncio
    async def test_no_bindings(self):
        await send_magic_packet([], b"payload")


def test_broadcast_flag():
    assert Endpoint(ipaddress.IPv4Address("255.255.255.255"), 9).is_broadcast is True
    assert Endpoint(ipaddress.IPv4Address("224.0.0.1"), 9).is_broadcast is False


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs the 'lo' interface name")
def test_scoped_ipv6_sockaddr_uses_interface_index():
    sockaddr = _sockaddr(ipaddress.ip_address("ff02::1%lo"), 9)
    assert sockaddr == ("ff02::1", 9, 0, socket.if_nametoindex("lo"))


def test_sender_does_not_import_services():
    code = "import sys, wolproxy.utils.wol; sys.exit('wolproxy.services' in sys.modules)"
    backend = Path(__file__).resolve().parents[1]
    result = subprocess.run([sys.executable, "-c", code], cwd=backend, timeout=30)
    assert result.returncode == 0
