# neutrino_elements

Building blocks for a light client of Elements-based chains such as Liquid.
The package provides the peer-to-peer wire format for the messages a light
client sends and receives. It also provides BIP158 Golomb-coded set filters,
storage interfaces, and a background scanner. The scanner uses block filters
to find transactions that pay to a script or spend an outpoint.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `neutrino_elements.varint`: variable-length integers. `VarInt` carries a value and its width and has `as_int()` and `encode()`. The module also has `varint_from_int`, `new_varint` and `read_varint`.
- `neutrino_elements.command`: zero-padded 12-byte command names (`new_command`, `is_known_command`, `COMMANDS`).
- `neutrino_elements.netaddr`: `ServiceFlag`, `IPv4`, `VersionNetAddr`, `Addr`, `read_ipv4` and `parse_node_addr`. `parse_node_addr` parses `host:port` and raises `MalformedNodeAddressError` on bad input. A host that cannot be parsed gives `0.0.0.0`.
- `neutrino_elements.magic`: network magics (`Magic.LIQUID`, `Magic.LIQUID_TESTNET`, `Magic.REGTEST`) and `get_checkpoints`. `get_checkpoints` returns the genesis hash by height, and an unknown magic gets the regtest checkpoints.
- `neutrino_elements.message`: message framing.
  - `MessageHeader` has `command_string`, `validate`, `has_valid_command`, `has_valid_magic` and `to_bytes`.
  - `Message` holds a header and a payload.
  - `new_message` serializes a payload and computes its double-SHA-256 `checksum`.
  - `VarStr` and `read_var_str` handle one-byte-length strings.
- `neutrino_elements.messages`: concrete payloads. These are `InvVector`, `MsgGetData`, `MsgInv` (with `read_msg_inv`), `MsgPing`, `MsgPong`, `MsgSendCmpct`, `MsgVersion`, `BlockLocators` (with `read_block_locators`), `MsgGetHeaders` and `MsgGetCFilters`. The module has these constructors:
  - `new_ping_msg`, which returns the message and its random nonce
  - `new_pong_msg`
  - `new_verack_msg`
  - `new_send_headers_message`
  - `new_version_msg`
  - `new_msg_get_headers`, which allows at most 500 locator hashes
  - `new_get_cfilters`, which needs `stop_height >= start_height` and a height span below 1000
- `neutrino_elements.gcs`: Golomb-coded set filters. `GCSFilter` has `n_bytes`, `match` and `match_any`. The module also has `build_gcs_filter`, `from_n_bytes`, `derive_key` (the first 16 bytes of a block hash) and `siphash24`. `DEFAULT_P` and `DEFAULT_M` hold the regular-filter parameters.
- `neutrino_elements.cfilter`: the `cfilter` message (`MsgCFilter`, `read_msg_cfilter`, `new_msg_cfilter`). Only filter type 0 is accepted.
- `neutrino_elements.repository`:
  - `FilterKey`: its `str()` is the first 6 bytes of HASH160(block hash + type), in hex.
  - `FilterEntry` and `new_filter_entry`.
  - The abstract classes `FilterRepository` and `BlockHeaderRepository`.
  - The errors `FilterNotFoundError`, `BlockNotFoundError` and `NoBlockHeadersError`.
- `neutrino_elements.watchitem`: the minimal `Transaction`, `TxInput` and `TxOutput` records. It also has the watch items, which are `UnspentWatchItem` (an output paying to a script) and `SpentWatchItem` (an input spending an outpoint). Their constructors are `new_unspent_watch_item_from_script` and `new_spent_watch_item_from_input`.
- `neutrino_elements.request`:
  - `ScanRequest` and the option functions `with_watch_item`, `with_start_block`, `with_persistent_watch` and `with_request_id`.
  - `new_scan_request`.
  - `ScanRequestQueue`, a thread-safe queue.
- `neutrino_elements.scanner`: the `Scanner` itself, plus `Report`, `Block`, the abstract `BlockService`, `BlockServiceBlockNotFoundError` and `new_request_id`.
- `neutrino_elements.testnet_tools`: helpers for a local regtest setup.
  - `h2b` decodes hex.
  - Against an explorer at `http://localhost:3001`: `faucet`, `unspents`, `get_transaction_hex` and `get_raw_block`.
  - For running programs: `output_command`, `run_command` and `run_command_detached`.
  - `send_to_addr` and `generate_to_addr` call `nigiri rpc --liquid ...`.

## Examples

Building a message:

```python
from neutrino_elements.magic import Magic
from neutrino_elements.messages import new_verack_msg

msg = new_verack_msg(Magic.REGTEST)
wire = msg.to_bytes()  # 24-byte header, empty payload
```

Parsing a peer address:

```python
from neutrino_elements.netaddr import parse_node_addr

addr = parse_node_addr("127.0.0.1:18886")
print(addr.ip, addr.port)  # 127.0.0.1 18886
```

Building and querying a block filter:

```python
from neutrino_elements.gcs import DEFAULT_M, DEFAULT_P, build_gcs_filter, derive_key, from_n_bytes

block_hash = bytes(32)
key = derive_key(block_hash)
script = bytes.fromhex("0014" + "11" * 20)

gcs_filter = build_gcs_filter(DEFAULT_P, DEFAULT_M, key, [script])
restored = from_n_bytes(DEFAULT_P, DEFAULT_M, gcs_filter.n_bytes())
assert restored.match_any(key, [script])
```

## Using the scanner

You construct `Scanner` from four things:

- a `FilterRepository`
- a `BlockHeaderRepository` whose `chain_tip()` returns an object with a `height`
- a `BlockService` that returns a `Block` for a block hash
- the genesis block hash

`start()` runs a background thread and returns a `queue.Queue` of `Report` objects. `watch(...)` takes the option functions from `neutrino_elements.request` and queues a request. A persistent request is queued again after each match, from the next height on. `stop()` ends the thread.

## What this package does not do

- It does not connect to peers. There is no node, handshake loop or header synchronisation; the messages are built and parsed, not exchanged.
- It ships no storage backend. `FilterRepository` and `BlockHeaderRepository` are interfaces that you implement.
- It does not parse full blocks, block headers or Elements transactions from raw bytes. There is no `block`, `tx` or `headers` message decoder, and no address or wallet-descriptor parsing.
- It has no command-line program and no server.