"""Storage interfaces for block filters and block headers."""

from __future__ import annotations

import abc
import enum
import hashlib
from dataclasses import dataclass
from typing import Any

from Crypto.Hash import RIPEMD160

from neutrino_elements.gcs import DEFAULT_M, DEFAULT_P, GCSFilter, from_n_bytes


class FilterNotFoundError(LookupError):
    """Raised when no filter is stored for a key."""

    def __init__(self, message: str = "filter not found") -> None:
        super().__init__(message)


class BlockNotFoundError(LookupError):
    """Raised when a block header is not stored."""

    def __init__(self, message: str = "block not found") -> None:
        super().__init__(message)


class NoBlockHeadersError(LookupError):
    """Raised when the header store is empty."""

    def __init__(self, message: str = "no block headers in repository") -> None:
        super().__init__(message)


class FilterType(enum.IntEnum):
    """Kinds of block filters; only the regular one is supported."""

    REGULAR = 0


def _hash160(data: bytes) -> bytes:
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


@dataclass(frozen=True)
class FilterKey:
    """Unique key of a stored filter: one filter per block and type."""

    block_hash: bytes
    filter_type: FilterType = FilterType.REGULAR

    def __post_init__(self) -> None:
        object.__setattr__(self, "block_hash", bytes(self.block_hash))

    def __str__(self) -> str:
        digest = _hash160(self.block_hash + bytes([int(self.filter_type)]))
        return digest[:6].hex()


@dataclass(frozen=True)
class FilterEntry:
    """A stored filter in its serialized form."""

    key: FilterKey
    n_bytes: bytes

    def gcs_filter(self) -> GCSFilter:
        return from_n_bytes(DEFAULT_P, DEFAULT_M, self.n_bytes)


def new_filter_entry(key: FilterKey, gcs_filter: GCSFilter) -> FilterEntry:
    """Wrap a filter for storage under ``key``."""
    return FilterEntry(key=key, n_bytes=gcs_filter.n_bytes())


class FilterRepository(abc.ABC):
    """Stores block filters by key."""

    @abc.abstractmethod
    def put_filter(self, entry: FilterEntry) -> None:
        """Store ``entry``, replacing any filter under the same key."""

    @abc.abstractmethod
    def get_filter(self, key: FilterKey) -> FilterEntry:
        """Return the filter for ``key`` or raise FilterNotFoundError."""


class BlockHeaderRepository(abc.ABC):
    """Stores block headers and answers chain queries."""

    @abc.abstractmethod
    def chain_tip(self) -> Any:
        """Return the best block header in the store."""

    @abc.abstractmethod
    def get_block_header(self, block_hash: bytes) -> Any:
        """Return the header with ``block_hash`` or raise BlockNotFoundError."""

    @abc.abstractmethod
    def get_block_hash_by_height(self, height: int) -> bytes:
        """Return the hash of the block at ``height``."""

    @abc.abstractmethod
    def write_headers(self, *headers: Any) -> None:
        """Store the given headers."""

    @abc.abstractmethod
    def latest_block_locator(self) -> list[bytes]:
        """Return a block locator rooted at the latest known tip."""

    @abc.abstractmethod
    def has_all_ancestors(self, block_hash: bytes) -> bool:
        """Return True if every ancestor of ``block_hash`` is stored."""