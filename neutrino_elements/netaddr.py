"""Network addresses and service flags."""

from __future__ import annotations

import enum
import ipaddress
import re
from dataclasses import dataclass, field
from typing import BinaryIO

PROTOCOL_VERSION = 70016

_IPV4_MAPPED_PREFIX = bytes(10) + b"\xff\xff"
_PORT_PATTERN = re.compile(r"[+-]?[0-9]+")


class ServiceFlag(enum.IntFlag):
    """Services a peer advertises."""

    NODE_NETWORK = 1 << 0
    NODE_GET_UTXO = 1 << 1
    NODE_BLOOM = 1 << 2
    NODE_WITNESS = 1 << 3
    NODE_XTHIN = 1 << 4
    NODE_BIT5 = 1 << 5
    NODE_CF = 1 << 6
    NODE_2X = 1 << 7


class MalformedNodeAddressError(ValueError):
    """Raised when a host:port string cannot be parsed."""

    def __init__(self) -> None:
        super().__init__("malformed node address")


@dataclass(frozen=True)
class IPv4:
    """An IPv4 address as four octets."""

    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0

    def __post_init__(self) -> None:
        if any(not 0 <= octet <= 0xFF for octet in self.octets):
            raise ValueError("IPv4 octets must be in range 0..255")

    @property
    def octets(self) -> tuple[int, int, int, int]:
        return (self.a, self.b, self.c, self.d)

    def __str__(self) -> str:
        return ".".join(str(octet) for octet in self.octets)

    def to_bytes(self) -> bytes:
        """Serialize as a 16-byte IPv4-mapped IPv6 address."""
        return _IPV4_MAPPED_PREFIX + bytes(self.octets)


def read_ipv4(stream: BinaryIO) -> IPv4:
    """Read a 16-byte IPv4-mapped address and keep its last four bytes."""
    data = stream.read(16)
    if data is None or len(data) != 16:
        raise ValueError("invalid IPv4: wrong length")
    return IPv4(*data[12:16])


@dataclass(frozen=True)
class VersionNetAddr:
    """Address of a node as carried in a version message."""

    services: int
    ip: IPv4
    port: int

    def to_bytes(self) -> bytes:
        """Services little-endian, mapped address, port big-endian."""
        return (
            int(self.services).to_bytes(8, "little")
            + self.ip.to_bytes()
            + self.port.to_bytes(2, "big")
        )


@dataclass(frozen=True)
class Addr:
    """A node address as host IP and port."""

    ip: IPv4 = field(default_factory=IPv4)
    port: int = 0


def _parse_ip(host: str) -> IPv4:
    try:
        parsed = ipaddress.ip_address(host)
    except ValueError:
        return IPv4()
    if isinstance(parsed, ipaddress.IPv6Address):
        mapped = parsed.ipv4_mapped
        if mapped is None:
            return IPv4()
        parsed = mapped
    return IPv4(*parsed.packed)


def parse_node_addr(node_addr: str) -> Addr:
    """Parse ``host:port``; an unparseable host yields 0.0.0.0."""
    parts = node_addr.split(":")
    if len(parts) != 2:
        raise MalformedNodeAddressError()
    host, port_text = parts
    if not host or not port_text:
        raise MalformedNodeAddressError()
    if not _PORT_PATTERN.fullmatch(port_text):
        raise MalformedNodeAddressError()
    port = int(port_text)
    if not 0 <= port <= 0xFFFF:
        raise MalformedNodeAddressError()
    return Addr(ip=_parse_ip(host), port=port)