"""Golomb-coded set filters (BIP158) and the SipHash-2-4 they hash with."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from neutrino_elements.varint import read_varint, varint_from_int

DEFAULT_P = 19
DEFAULT_M = 784931
KEY_SIZE = 16

_MASK64 = (1 << 64) - 1
_MAX_INT32 = (1 << 31) - 1


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def _sip_rounds(v0: int, v1: int, v2: int, v3: int, count: int) -> tuple[int, int, int, int]:
    for _ in range(count):
        v0 = (v0 + v1) & _MASK64
        v1 = _rotl(v1, 13) ^ v0
        v0 = _rotl(v0, 32)
        v2 = (v2 + v3) & _MASK64
        v3 = _rotl(v3, 16) ^ v2
        v0 = (v0 + v3) & _MASK64
        v3 = _rotl(v3, 21) ^ v0
        v2 = (v2 + v1) & _MASK64
        v1 = _rotl(v1, 17) ^ v2
        v2 = _rotl(v2, 32)
    return v0, v1, v2, v3


def siphash24(key: bytes, data: bytes) -> int:
    """SipHash-2-4 of ``data`` under a 16-byte key, as an unsigned 64-bit int."""
    key = bytes(key)
    if len(key) != KEY_SIZE:
        raise ValueError(f"siphash key must be {KEY_SIZE} bytes, got {len(key)}")
    data = bytes(data)
    k0, k1 = struct.unpack("<QQ", key)
    v0 = k0 ^ 0x736F6D6570736575
    v1 = k1 ^ 0x646F72616E646F6D
    v2 = k0 ^ 0x6C7967656E657261
    v3 = k1 ^ 0x7465646279746573

    full = len(data) - len(data) % 8
    for offset in range(0, full, 8):
        (word,) = struct.unpack_from("<Q", data, offset)
        v3 ^= word
        v0, v1, v2, v3 = _sip_rounds(v0, v1, v2, v3, 2)
        v0 ^= word

    tail = data[full:].ljust(8, b"\x00")
    (last,) = struct.unpack("<Q", tail)
    last |= (len(data) & 0xFF) << 56
    v3 ^= last
    v0, v1, v2, v3 = _sip_rounds(v0, v1, v2, v3, 2)
    v0 ^= last

    v2 ^= 0xFF
    v0, v1, v2, v3 = _sip_rounds(v0, v1, v2, v3, 4)
    return v0 ^ v1 ^ v2 ^ v3


def _fast_reduction(value: int, modulus: int) -> int:
    """Map a 64-bit hash uniformly into [0, modulus)."""
    return (value * modulus) >> 64


def derive_key(block_hash: bytes) -> bytes:
    """The filter key of a block: the first 16 bytes of its hash."""
    block_hash = bytes(block_hash)
    if len(block_hash) < KEY_SIZE:
        raise ValueError("block hash too short to derive a filter key")
    return block_hash[:KEY_SIZE]


def _check_params(p: int, key: bytes | None = None) -> None:
    if p > 32:
        raise ValueError("P is too big to fit in uint32")
    if key is not None and len(bytes(key)) != KEY_SIZE:
        raise ValueError(f"filter key must be {KEY_SIZE} bytes")


class _BitWriter:
    def __init__(self) -> None:
        self._acc = 0
        self._bits = 0

    def write_unary(self, quotient: int) -> None:
        self._acc = (self._acc << (quotient + 1)) | (((1 << quotient) - 1) << 1)
        self._bits += quotient + 1

    def write_bits(self, value: int, count: int) -> None:
        self._acc = (self._acc << count) | (value & ((1 << count) - 1))
        self._bits += count

    def to_bytes(self) -> bytes:
        pad = (-self._bits) % 8
        total = self._bits + pad
        return (self._acc << pad).to_bytes(total // 8, "big")


class _BitReader:
    def __init__(self, data: bytes) -> None:
        self._value = int.from_bytes(data, "big")
        self._total = len(data) * 8
        self._pos = 0

    def read_bit(self) -> int:
        if self._pos >= self._total:
            raise EOFError("filter data exhausted")
        bit = (self._value >> (self._total - 1 - self._pos)) & 1
        self._pos += 1
        return bit

    def read_bits(self, count: int) -> int:
        if self._pos + count > self._total:
            raise EOFError("filter data exhausted")
        shift = self._total - self._pos - count
        self._pos += count
        return (self._value >> shift) & ((1 << count) - 1)


@dataclass(frozen=True)
class GCSFilter:
    """A Golomb-Rice coded set of ``n`` items with parameters ``p`` and ``m``."""

    p: int
    m: int
    n: int
    data: bytes

    @property
    def modulus_np(self) -> int:
        return self.n * self.m

    def n_bytes(self) -> bytes:
        """Serialize as a varint item count followed by the encoded set."""
        return varint_from_int(self.n).encode() + self.data

    def _values(self) -> Iterator[int]:
        reader = _BitReader(self.data)
        last = 0
        for _ in range(self.n):
            try:
                quotient = 0
                while reader.read_bit():
                    quotient += 1
                remainder = reader.read_bits(self.p)
            except EOFError:
                return
            last += (quotient << self.p) | remainder
            yield last

    def _term(self, key: bytes, item: bytes) -> int:
        return _fast_reduction(siphash24(key, item), self.modulus_np)

    def match(self, key: bytes, item: bytes) -> bool:
        """Return True if ``item`` is (probably) in the set."""
        _check_params(self.p, key)
        if self.n == 0:
            return False
        term = self._term(key, item)
        for value in self._values():
            if value == term:
                return True
            if value > term:
                return False
        return False

    def match_any(self, key: bytes, items: Sequence[bytes]) -> bool:
        """Return True if any of ``items`` is (probably) in the set."""
        _check_params(self.p, key)
        if self.n == 0 or not items:
            return False
        terms = {self._term(key, item) for item in items}
        return any(value in terms for value in self._values())


def build_gcs_filter(p: int, m: int, key: bytes, items: Iterable[bytes]) -> GCSFilter:
    """Encode ``items`` into a filter keyed by a 16-byte key."""
    key = bytes(key)
    _check_params(p, key)
    items = [bytes(item) for item in items]
    if len(items) > _MAX_INT32:
        raise ValueError("too many items for a filter")
    modulus = len(items) * m
    values = sorted(_fast_reduction(siphash24(key, item), modulus) for item in items)

    writer = _BitWriter()
    last = 0
    for value in values:
        delta = value - last
        writer.write_unary(delta >> p)
        writer.write_bits(delta, p)
        last = value
    return GCSFilter(p=p, m=m, n=len(items), data=writer.to_bytes())


def from_n_bytes(p: int, m: int, data: bytes) -> GCSFilter:
    """Decode a filter serialized by :meth:`GCSFilter.n_bytes`."""
    _check_params(p)
    stream = io.BytesIO(bytes(data))
    n = read_varint(stream).value
    if n >= _MAX_INT32:
        raise ValueError("N is too big to fit in uint32")
    return GCSFilter(p=p, m=m, n=n, data=stream.read())