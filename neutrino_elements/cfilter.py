"""The 'cfilter' message carrying a compact block filter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from neutrino_elements.gcs import DEFAULT_M, DEFAULT_P, GCSFilter, from_n_bytes
from neutrino_elements.magic import Magic
from neutrino_elements.message import Message, new_message
from neutrino_elements.varint import read_varint, varint_from_int

HASH_LENGTH = 32


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise EOFError(f"expected {size} bytes while reading {what}")
    return data


@dataclass(frozen=True)
class MsgCFilter:
    """Payload of a 'cfilter' message."""

    filter_type: int
    block_hash: bytes
    filter: GCSFilter

    def __post_init__(self) -> None:
        object.__setattr__(self, "block_hash", bytes(self.block_hash))
        if len(self.block_hash) != HASH_LENGTH:
            raise ValueError(f"block hash must be {HASH_LENGTH} bytes")

    def to_bytes(self) -> bytes:
        filter_bytes = self.filter.n_bytes()
        return (
            bytes([self.filter_type])
            + self.block_hash
            + varint_from_int(len(filter_bytes)).encode()
            + filter_bytes
        )


def read_msg_cfilter(stream: BinaryIO) -> MsgCFilter:
    """Read a 'cfilter' payload; only the regular filter type is accepted."""
    filter_type = _read_exact(stream, 1, "filter type")[0]
    if filter_type != 0:
        raise ValueError("invalid filter type")
    block_hash = _read_exact(stream, HASH_LENGTH, "block hash")
    length = read_varint(stream).as_int()
    filter_bytes = _read_exact(stream, length, "filter")
    gcs = from_n_bytes(DEFAULT_P, DEFAULT_M, filter_bytes)
    return MsgCFilter(filter_type=filter_type, block_hash=block_hash, filter=gcs)


def new_msg_cfilter(
    magic: Magic | bytes, block_hash: bytes, gcs_filter: GCSFilter
) -> Message:
    """Build a 'cfilter' message for a block's regular filter."""
    payload = MsgCFilter(filter_type=0, block_hash=block_hash, filter=gcs_filter)
    return new_message("cfilter", magic, payload)