"""Variable length integers as used on the peer-to-peer wire."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

MAX_INT64 = (1 << 63) - 1

_PREFIX_BY_WIDTH = {1: None, 2: 0xFD, 4: 0xFE, 8: 0xFF}
_WIDTH_BY_PREFIX = {0xFD: 2, 0xFE: 4, 0xFF: 8}


class InvalidVarIntError(ValueError):
    """Raised when a value cannot be represented as a varint."""

    def __init__(self, message: str = "invalid varint value") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class VarInt:
    """An unsigned integer together with the width (in bytes) it is encoded with."""

    value: int
    width: int = 1

    def __post_init__(self) -> None:
        if self.width not in _PREFIX_BY_WIDTH:
            raise InvalidVarIntError(f"unknown varint width: {self.width}")
        if not 0 <= self.value < (1 << (8 * self.width)):
            raise InvalidVarIntError(
                f"value {self.value} does not fit in {self.width} bytes"
            )

    def as_int(self) -> int:
        """Return the value, clamping 8-byte values to the largest signed 64-bit int."""
        if self.width == 8:
            return min(self.value, MAX_INT64)
        return self.value

    def encode(self) -> bytes:
        """Serialize to wire format: optional prefix byte then little-endian value."""
        prefix = _PREFIX_BY_WIDTH[self.width]
        body = self.value.to_bytes(self.width, "little")
        return body if prefix is None else bytes([prefix]) + body


def varint_from_int(value: int) -> VarInt:
    """Build a varint using the smallest width that holds ``value``.

    Negative values become a one-byte zero.
    """
    if value < 0:
        return VarInt(0, 1)
    if value <= 0xFC:
        return VarInt(value, 1)
    if value <= 0xFFFF:
        return VarInt(value, 2)
    if value <= 0xFFFFFFFF:
        return VarInt(value, 4)
    return VarInt(min(value, (1 << 64) - 1), 8)


def new_varint(value: int, width: int | None = None) -> VarInt:
    """Build a varint of an explicit width, or the smallest one when width is None.

    Values given with width 8 are clamped to the largest signed 64-bit int.
    """
    if width is None:
        return varint_from_int(value)
    if width == 8:
        if not 0 <= value < (1 << 64):
            raise InvalidVarIntError()
        return VarInt(min(value, MAX_INT64), 8)
    if width in (1, 2, 4):
        return VarInt(value, width)
    raise InvalidVarIntError()


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise EOFError(f"expected {size} bytes while reading varint")
    return data


def read_varint(stream: BinaryIO) -> VarInt:
    """Read one varint from a binary stream."""
    first = _read_exact(stream, 1)[0]
    width = _WIDTH_BY_PREFIX.get(first)
    if width is None:
        return VarInt(first, 1)
    return VarInt(int.from_bytes(_read_exact(stream, width), "little"), width)