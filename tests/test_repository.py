import pytest

from neutrino_elements.gcs import DEFAULT_M, DEFAULT_P, build_gcs_filter, derive_key
from neutrino_elements.repository import (
    BlockHeaderRepository,
    BlockNotFoundError,
    FilterEntry,
    FilterKey,
    FilterNotFoundError,
    FilterRepository,
    FilterType,
    NoBlockHeadersError,
    new_filter_entry,
)

BLOCK_HASH = bytes.fromhex(
    "db262c78cff2454b5dbc811d1e4782e7bd22c04a4a328ad561513dbaab12373a"
)
OTHER_HASH = bytes.fromhex(
    "ab262c78cff2454b5dbc811d1e4782e7bd22c04a4a328ad561513dbaab12373a"
)


class _MemoryFilters(FilterRepository):
    def __init__(self):
        self._entries = {}

    def put_filter(self, entry):
        self._entries[entry.key] = entry

    def get_filter(self, key):
        try:
            return self._entries[key]
        except KeyError:
            raise FilterNotFoundError() from None


def _gcs(block_hash=BLOCK_HASH):
    return build_gcs_filter(DEFAULT_P, DEFAULT_M, derive_key(block_hash), [b"dummy"])


def test_filter_key_string():
    assert str(FilterKey(BLOCK_HASH, FilterType.REGULAR)) == "2df74a01a958"


def test_filter_key_string_depends_on_hash():
    first = str(FilterKey(BLOCK_HASH))
    second = str(FilterKey(OTHER_HASH))
    assert len(first) == len(second) == 12
    assert first != second


def test_filter_entry_round_trip():
    gcs = _gcs()
    entry = new_filter_entry(FilterKey(BLOCK_HASH), gcs)
    assert entry.n_bytes == gcs.n_bytes()
    assert entry.gcs_filter() == gcs
    assert entry.gcs_filter().match(derive_key(BLOCK_HASH), b"dummy")


def test_put_and_get_filter():
    repo = _MemoryFilters()
    key = FilterKey(OTHER_HASH, FilterType.REGULAR)
    repo.put_filter(new_filter_entry(key, _gcs(OTHER_HASH)))
    fetched = repo.get_filter(FilterKey(OTHER_HASH))
    assert str(fetched.key) == str(key)
    assert isinstance(fetched, FilterEntry) and fetched.key == key


def test_missing_filter():
    with pytest.raises(FilterNotFoundError, match="filter not found"):
        _MemoryFilters().get_filter(FilterKey(BLOCK_HASH))


def test_error_messages():
    assert str(BlockNotFoundError()) == "block not found"
    assert str(NoBlockHeadersError()) == "no block headers in repository"


def test_interfaces_are_abstract():
    with pytest.raises(TypeError):
        FilterRepository()
    with pytest.raises(TypeError):
        BlockHeaderRepository()