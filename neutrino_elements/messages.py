"""Concrete peer-to-peer messages and their constructors."""

from __future__ import annotations

import enum
import random
import struct
import time
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, Iterator

from neutrino_elements.magic import Magic
from neutrino_elements.message import Message, VarStr, new_message, new_user_agent
from neutrino_elements.netaddr import (
    PROTOCOL_VERSION,
    IPv4,
    ServiceFlag,
    VersionNetAddr,
)
from neutrino_elements.varint import read_varint, varint_from_int

HASH_LENGTH = 32
MAX_BLOCK_LOCATORS_PER_MSG = 500
BIP157_MAX_HEIGHT_DIFF = 1000


class DataObjectType(enum.IntEnum):
    """Kinds of objects referenced by inventory vectors."""

    ERROR = 0
    TX = 1
    BLOCK = 2
    FILTER_BLOCK = 3
    CMPCT_BLOCK = 4


def _check_hash(value: bytes) -> bytes:
    value = bytes(value)
    if len(value) != HASH_LENGTH:
        raise ValueError(f"hash must be {HASH_LENGTH} bytes, got {len(value)}")
    return value


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise EOFError(f"expected {size} bytes while reading {what}")
    return data


@dataclass(frozen=True)
class InvVector:
    """A typed reference to a transaction, block or filter."""

    type: int
    hash: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash", _check_hash(self.hash))

    def to_bytes(self) -> bytes:
        return struct.pack("<I", self.type) + self.hash


@dataclass
class MsgGetData:
    """Payload of a 'getdata' message."""

    inventory: list[InvVector] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.inventory)

    def to_bytes(self) -> bytes:
        if self.count > 0xFF:
            raise ValueError("getdata holds at most 255 inventory vectors")
        return bytes([self.count]) + b"".join(v.to_bytes() for v in self.inventory)


@dataclass
class MsgInv:
    """Payload of an 'inv' message."""

    count: int = 0
    inventory: list[InvVector] = field(default_factory=list)


def read_msg_inv(stream: BinaryIO) -> MsgInv:
    """Read an 'inv' payload: a count byte followed by that many vectors."""
    count = _read_exact(stream, 1, "inv count")[0]
    inventory = []
    for _ in range(count):
        raw = _read_exact(stream, 4 + HASH_LENGTH, "inventory vector")
        (inv_type,) = struct.unpack("<I", raw[:4])
        inventory.append(InvVector(inv_type, raw[4:]))
    return MsgInv(count=count, inventory=inventory)


@dataclass(frozen=True)
class MsgPing:
    """Payload of a 'ping' message."""

    nonce: int

    def to_bytes(self) -> bytes:
        return struct.pack("<Q", self.nonce)


@dataclass(frozen=True)
class MsgPong:
    """Payload of a 'pong' message."""

    nonce: int

    def to_bytes(self) -> bytes:
        return struct.pack("<Q", self.nonce)


@dataclass(frozen=True)
class MsgSendCmpct:
    """Payload of a 'sendcmpct' message."""

    low_bandwidth_type: bool = False
    version: int = 0


@dataclass
class MsgVersion:
    """Payload of a 'version' message."""

    version: int
    services: int
    timestamp: int
    addr_recv: VersionNetAddr
    addr_from: VersionNetAddr
    nonce: int
    user_agent: VarStr
    start_height: int = -1
    relay: bool = True

    def to_bytes(self) -> bytes:
        return (
            struct.pack("<iQq", self.version, int(self.services), self.timestamp)
            + self.addr_recv.to_bytes()
            + self.addr_from.to_bytes()
            + struct.pack("<Q", self.nonce)
            + self.user_agent.to_bytes()
            + struct.pack("<i?", self.start_height, self.relay)
        )

    def has_service(self, service: int) -> bool:
        return int(self.services) & int(service) == int(service)


@dataclass
class BlockLocators:
    """An ordered list of block hashes describing a chain position."""

    hashes: list[bytes] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.hashes = [_check_hash(h) for h in self.hashes]

    def __len__(self) -> int:
        return len(self.hashes)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.hashes)

    def append(self, block_hash: bytes) -> None:
        self.hashes.append(_check_hash(block_hash))

    def to_bytes(self) -> bytes:
        return varint_from_int(len(self.hashes)).encode() + b"".join(self.hashes)


def read_block_locators(stream: BinaryIO) -> BlockLocators:
    """Read a varint count followed by that many 32-byte hashes."""
    count = read_varint(stream).as_int()
    return BlockLocators(
        [_read_exact(stream, HASH_LENGTH, "locator hash") for _ in range(count)]
    )


@dataclass
class MsgGetHeaders:
    """Payload of a 'getheaders' message."""

    version: int = PROTOCOL_VERSION
    block_locator_hashes: BlockLocators = field(default_factory=BlockLocators)
    hash_stop: bytes = bytes(HASH_LENGTH)

    def __post_init__(self) -> None:
        self.hash_stop = _check_hash(self.hash_stop)

    def add_block_locator_hash(self, block_hash: bytes) -> None:
        if len(self.block_locator_hashes) + 1 > MAX_BLOCK_LOCATORS_PER_MSG:
            raise ValueError(
                "too many block locator hashes in getheaders message "
                f"(max: {MAX_BLOCK_LOCATORS_PER_MSG})"
            )
        self.block_locator_hashes.append(block_hash)

    def to_bytes(self) -> bytes:
        return (
            struct.pack("<I", self.version)
            + self.block_locator_hashes.to_bytes()
            + self.hash_stop
        )


@dataclass(frozen=True)
class MsgGetCFilters:
    """Payload of a 'getcfilters' message."""

    filter_type: int
    start_height: int
    stop_hash: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "stop_hash", _check_hash(self.stop_hash))

    def to_bytes(self) -> bytes:
        return struct.pack("<BI", self.filter_type, self.start_height) + self.stop_hash


def new_ping_msg(magic: Magic | bytes) -> tuple[Message, int]:
    """Build a 'ping' with a random nonce; return the message and the nonce."""
    nonce = random.getrandbits(64)
    return new_message("ping", magic, MsgPing(nonce)), nonce


def new_pong_msg(magic: Magic | bytes, nonce: int) -> Message:
    return new_message("pong", magic, MsgPong(nonce))


def new_verack_msg(magic: Magic | bytes) -> Message:
    return new_message("verack", magic, b"")


def new_send_headers_message(magic: Magic | bytes) -> Message:
    return new_message("sendheaders", magic, b"")


def new_version_msg(
    magic: Magic | bytes,
    user_agent: str,
    peer_ip: IPv4,
    peer_port: int,
    services: int,
) -> Message:
    """Build a 'version' message announcing ``services`` to a peer."""
    services = int(services)
    payload = MsgVersion(
        version=PROTOCOL_VERSION,
        services=services,
        timestamp=int(time.time()),
        addr_recv=VersionNetAddr(
            services=services | int(ServiceFlag.NODE_NETWORK),
            ip=peer_ip,
            port=peer_port,
        ),
        addr_from=VersionNetAddr(services=services, ip=IPv4(127, 0, 0, 1), port=9334),
        nonce=random.getrandbits(64),
        user_agent=new_user_agent(user_agent),
        start_height=-1,
        relay=True,
    )
    return new_message("version", magic, payload)


def new_msg_get_headers(
    magic: Magic | bytes, hash_stop: bytes, block_locator: Iterable[bytes]
) -> Message:
    """Build a 'getheaders' message from a block locator."""
    payload = MsgGetHeaders(version=PROTOCOL_VERSION, hash_stop=hash_stop)
    for block_hash in block_locator:
        payload.add_block_locator_hash(block_hash)
    return new_message("getheaders", magic, payload)


def new_get_cfilters(
    magic: Magic | bytes, start_height: int, stop_height: int, stop_hash: bytes
) -> Message:
    """Build a 'getcfilters' message for the range start_height..stop_height."""
    if stop_height < start_height:
        raise ValueError(
            "getcfilters stopHeight must be greater or equal to startHeight"
        )
    if stop_height - start_height >= BIP157_MAX_HEIGHT_DIFF:
        raise ValueError(
            "diff (stopHeight-startHeight) must be strictly less than "
            f"{BIP157_MAX_HEIGHT_DIFF}"
        )
    payload = MsgGetCFilters(filter_type=0, start_height=start_height, stop_hash=stop_hash)
    return new_message("getcfilters", magic, payload)