"""Message framing: headers, checksums and variable-length strings."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, Union, runtime_checkable

from neutrino_elements.command import COMMAND_LENGTH, COMMANDS
from neutrino_elements.magic import Magic

CHECKSUM_LENGTH = 4
MAGIC_LENGTH = 4
MSG_HEADER_LENGTH = MAGIC_LENGTH + COMMAND_LENGTH + CHECKSUM_LENGTH + 4

_VALID_MAGICS = frozenset(m.value for m in Magic)


@runtime_checkable
class Serializable(Protocol):
    """Anything that knows its own wire encoding."""

    def to_bytes(self) -> bytes: ...


Payload = Union[bytes, bytearray, Serializable]


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise EOFError(f"expected {size} bytes while reading {what}")
    return data


@dataclass(frozen=True)
class VarStr:
    """A string prefixed by a one-byte length."""

    string: str = ""

    def __post_init__(self) -> None:
        if len(self.string.encode("utf-8")) > 0xFF:
            raise ValueError("var_str longer than 255 bytes")

    @property
    def length(self) -> int:
        return len(self.string.encode("utf-8"))

    def to_bytes(self) -> bytes:
        raw = self.string.encode("utf-8")
        return bytes([len(raw)]) + raw


def read_var_str(stream: BinaryIO) -> VarStr:
    """Read a length-prefixed string from a binary stream."""
    length = _read_exact(stream, 1, "var_str length")[0]
    raw = _read_exact(stream, length, "var_str") if length else b""
    return VarStr(raw.decode("utf-8", errors="replace"))


def new_user_agent(user_agent: str) -> VarStr:
    """Wrap a user agent string for a version message."""
    return VarStr(user_agent)


def checksum(data: bytes) -> bytes:
    """First four bytes of the double SHA-256 of ``data``."""
    digest = hashlib.sha256(hashlib.sha256(bytes(data)).digest()).digest()
    return digest[:CHECKSUM_LENGTH]


@dataclass
class MessageHeader:
    """The fixed-size header preceding every message payload."""

    magic: bytes = bytes(MAGIC_LENGTH)
    command: bytes = bytes(COMMAND_LENGTH)
    length: int = 0
    checksum: bytes = bytes(CHECKSUM_LENGTH)

    def command_string(self) -> str:
        """The command name with padding zero bytes removed."""
        return bytes(self.command).decode("latin-1").strip("\x00")

    def validate(self) -> None:
        """Raise ValueError if the magic or the command is not supported."""
        if not self.has_valid_magic():
            raise ValueError(f"invalid magic: {bytes(self.magic).hex()}")
        if not self.has_valid_command():
            raise ValueError(f"invalid command: {self.command_string()}")

    def has_valid_command(self) -> bool:
        return self.command_string() in COMMANDS

    def has_valid_magic(self) -> bool:
        return bytes(self.magic) in _VALID_MAGICS

    def to_bytes(self) -> bytes:
        return (
            bytes(self.magic)
            + bytes(self.command)
            + self.length.to_bytes(4, "little")
            + bytes(self.checksum)
        )


@dataclass
class Message:
    """A header together with its serialized payload."""

    header: MessageHeader = field(default_factory=MessageHeader)
    payload: bytes = b""

    def to_bytes(self) -> bytes:
        return self.header.to_bytes() + self.payload


def _serialize_payload(payload: Payload) -> bytes:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if isinstance(payload, Serializable):
        return payload.to_bytes()
    raise TypeError(f"cannot serialize payload of type {type(payload).__name__}")


def new_message(command: str, magic: Magic | bytes, payload: Payload) -> Message:
    """Serialize ``payload`` and wrap it in a header for ``command``."""
    serialized = _serialize_payload(payload)
    packed = COMMANDS.get(command)
    if packed is None:
        raise ValueError(f"unsupported command {command}")
    header = MessageHeader(
        magic=bytes(magic),
        command=packed,
        length=len(serialized),
        checksum=checksum(serialized),
    )
    return Message(header=header, payload=serialized)