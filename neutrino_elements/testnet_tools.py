"""Helpers for driving a local regtest network and its explorer."""

from __future__ import annotations

import re
import subprocess
import time
from typing import Any

import requests

DEFAULT_BASE_URL = "http://localhost:3001"
PEER_ADDR_LOCAL = "localhost:18886"
ESPLORA_URL_LOCAL = "http://localhost:3001"

_HTTP_TIMEOUT = 30.0
_POLL_INTERVAL = 1.0
_HEX_PAIRS = re.compile(r"(?:[0-9a-fA-F]{2})*")


class FaucetError(RuntimeError):
    """Raised when the faucet refuses to fund an address."""


class ExplorerError(RuntimeError):
    """Raised when the explorer answers with a non-success status."""


class CommandError(RuntimeError):
    """Raised when an external command cannot be started or fails."""


def h2b(text: str) -> bytes:
    """Decode hex, keeping the bytes decoded before the first invalid pair."""
    return bytes.fromhex(_HEX_PAIRS.match(text).group())


def faucet(address: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Ask the faucet to fund ``address``; return the funding transaction id."""
    response = requests.post(
        f"{base_url}/faucet", json={"address": address}, timeout=_HTTP_TIMEOUT
    )
    body = response.text
    if not body or "sendtoaddress" in body:
        raise FaucetError(f"cannot fund address with faucet: {body}")
    data: Any = response.json()
    if not isinstance(data, dict):
        raise FaucetError(f"unexpected faucet response: {body}")
    return str(data.get("txId", ""))


def unspents(address: str, base_url: str = DEFAULT_BASE_URL) -> list[dict[str, Any]]:
    """Poll the explorer every second until ``address`` has unspent outputs."""
    while True:
        time.sleep(_POLL_INTERVAL)
        response = requests.get(
            f"{base_url}/address/{address}/utxo", timeout=_HTTP_TIMEOUT
        )
        utxos = response.json()
        if not isinstance(utxos, list):
            raise ExplorerError(f"unexpected utxo response: {response.text}")
        if utxos:
            return [dict(utxo) for utxo in utxos]


def get_transaction_hex(tx_hash: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Return the raw hex of a transaction known to the explorer."""
    response = requests.get(f"{base_url}/tx/{tx_hash}/hex", timeout=_HTTP_TIMEOUT)
    if response.status_code != 200:
        raise ExplorerError(
            f"{response.status_code} {response.reason}: {response.text}"
        )
    return response.text


def get_raw_block(block_hash: str, base_url: str = DEFAULT_BASE_URL) -> bytes:
    """Return the serialized block with ``block_hash``."""
    response = requests.get(
        f"{base_url}/block/{block_hash}/raw", timeout=_HTTP_TIMEOUT
    )
    return response.content


def output_command(name: str, *args: str) -> bytes:
    """Run a command to completion and return what it wrote to stdout."""
    completed = subprocess.run(
        [name, *args], stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=True
    )
    return completed.stdout


def send_to_addr(addr: str) -> None:
    """Send 0.01 coins to ``addr`` through the local node."""
    output_command("nigiri", "rpc", "--liquid", "sendtoaddress", addr, "0.01")


def generate_to_addr(addr: str) -> None:
    """Mine one block paying its reward to ``addr``."""
    output_command("nigiri", "rpc", "--liquid", "generatetoaddress", "1", addr)


def run_command_detached(name: str, *args: str) -> subprocess.Popen:
    """Start a command sharing this process's stdout and stderr."""
    try:
        return subprocess.Popen([name, *args])
    except OSError as exc:
        raise CommandError(f"name: {name}, args: {list(args)}, err: {exc}") from exc


def run_command(name: str, *args: str) -> None:
    """Run a command and wait for it; raise CommandError if it fails."""
    process = run_command_detached(name, *args)
    code = process.wait()
    if code != 0:
        raise CommandError(
            f"name: {name}, args: {list(args)}, err: exit status {code}"
        )