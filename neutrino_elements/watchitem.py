"""Items the scanner looks for in blocks: new outputs and spent outpoints."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field

HASH_LENGTH = 32


class EventType(enum.IntEnum):
    """Kinds of events the scanner reports."""

    UNSPENT_UTXO = 0
    SPENT_UTXO = 1


@dataclass(frozen=True)
class TxInput:
    """A transaction input referring to a previous output."""

    hash: bytes
    index: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash", bytes(self.hash))


@dataclass(frozen=True)
class TxOutput:
    """A transaction output; only its locking script matters for watching."""

    script: bytes
    asset: bytes = b""
    value: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "script", bytes(self.script))


@dataclass
class Transaction:
    """The parts of a transaction that watch items inspect."""

    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)


class WatchItem(abc.ABC):
    """Something the scanner searches for in block filters and transactions."""

    @abc.abstractmethod
    def to_bytes(self) -> bytes:
        """The element looked up in a block filter."""

    @abc.abstractmethod
    def match(self, tx: Transaction) -> bool:
        """Return True if ``tx`` contains this item."""

    @abc.abstractmethod
    def event_type(self) -> EventType:
        """The kind of event reported when the item is found."""


@dataclass(frozen=True)
class SpentWatchItem(WatchItem):
    """Watches for the spending of one outpoint."""

    hash: bytes
    index: int
    output_script: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash", bytes(self.hash))
        object.__setattr__(self, "output_script", bytes(self.output_script))
        if len(self.hash) != HASH_LENGTH:
            raise ValueError(
                f"outpoint hash must be {HASH_LENGTH} bytes, got {len(self.hash)}"
            )

    def to_bytes(self) -> bytes:
        return self.output_script

    def match(self, tx: Transaction) -> bool:
        return any(
            len(tx_input.hash) == HASH_LENGTH
            and tx_input.hash == self.hash
            and tx_input.index == self.index
            for tx_input in tx.inputs
        )

    def event_type(self) -> EventType:
        return EventType.SPENT_UTXO


@dataclass(frozen=True)
class UnspentWatchItem(WatchItem):
    """Watches for new outputs locked by a given script."""

    output_script: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "output_script", bytes(self.output_script))

    def to_bytes(self) -> bytes:
        return self.output_script

    def match(self, tx: Transaction) -> bool:
        return any(output.script == self.output_script for output in tx.outputs)

    def event_type(self) -> EventType:
        return EventType.UNSPENT_UTXO


def new_spent_watch_item_from_input(
    tx_input: TxInput, prevout_script: bytes
) -> SpentWatchItem:
    """Watch for the spending of the outpoint ``tx_input`` refers to."""
    return SpentWatchItem(
        hash=tx_input.hash, index=tx_input.index, output_script=prevout_script
    )


def new_unspent_watch_item_from_script(output_script: bytes) -> UnspentWatchItem:
    """Watch for new outputs paying to ``output_script``."""
    return UnspentWatchItem(output_script=output_script)