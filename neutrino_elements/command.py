"""Fixed-width command names carried in message headers."""

from __future__ import annotations

COMMAND_LENGTH = 12

_COMMAND_NAMES = (
    "block",
    "getdata",
    "inv",
    "ping",
    "pong",
    "tx",
    "verack",
    "version",
    "addr",
    "notfound",
    "getblocks",
    "getheaders",
    "headers",
    "getaddr",
    "mempool",
    "checkorder",
    "submitorder",
    "reply",
    "reject",
    "filterload",
    "filteradd",
    "filterclear",
    "merkleblock",
    "alert",
    "sendheaders",
    "feefilter",
    "sendcmpct",
    "cmpctblock",
    "getblocktxn",
    "blocktxn",
    "getcfilters",
    "cfilter",
    "wtxidrelay",
    "sendaddrv2",
)


def new_command(name: str) -> bytes:
    """Pack a command name into its zero-padded 12-byte form."""
    raw = name.encode("ascii")
    if len(raw) > COMMAND_LENGTH:
        raise ValueError(f"command {name} is too long")
    return raw.ljust(COMMAND_LENGTH, b"\x00")


COMMANDS: dict[str, bytes] = {name: new_command(name) for name in _COMMAND_NAMES}


def is_known_command(name: str) -> bool:
    """Return True if ``name`` is a supported command."""
    return name in COMMANDS