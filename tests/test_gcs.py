import pytest

from neutrino_elements.gcs import (
    DEFAULT_M,
    DEFAULT_P,
    GCSFilter,
    build_gcs_filter,
    derive_key,
    from_n_bytes,
    siphash24,
)

KEY = bytes(range(16))
ITEMS = [b"alpha", b"beta", b"gamma", b"delta", b"epsilon", b"\x00\x14" + bytes(20)]


def _filter(items=ITEMS):
    return build_gcs_filter(DEFAULT_P, DEFAULT_M, KEY, items)


def test_siphash_reference_vectors():
    assert siphash24(KEY, b"") == 0x726FDB47DD0E0E31
    assert siphash24(KEY, b"\x00") == 0x74F839C593DC67FD


def test_siphash_rejects_bad_key():
    with pytest.raises(ValueError):
        siphash24(b"short", b"data")


def test_derive_key_takes_first_sixteen_bytes():
    block_hash = bytes(range(32))
    assert derive_key(block_hash) == block_hash[:16]


def test_all_items_match():
    gcs = _filter()
    for item in ITEMS:
        assert gcs.match(KEY, item)


def test_non_members_do_not_match():
    gcs = _filter()
    others = [b"zeta", b"eta", b"theta", b"iota", b"kappa"]
    assert not any(gcs.match(KEY, item) for item in others)
    assert not gcs.match_any(KEY, others)


def test_match_any():
    gcs = _filter()
    assert gcs.match_any(KEY, [b"nothing-here", b"gamma"])
    assert not gcs.match_any(KEY, [])


def test_n_bytes_round_trip():
    gcs = _filter()
    decoded = from_n_bytes(DEFAULT_P, DEFAULT_M, gcs.n_bytes())
    assert decoded == gcs
    assert decoded.n == len(ITEMS)
    for item in ITEMS:
        assert decoded.match(KEY, item)


def test_empty_filter():
    gcs = _filter([])
    assert gcs.n == 0
    assert gcs.data == b""
    assert gcs.n_bytes() == b"\x00"
    assert not gcs.match(KEY, b"alpha")
    assert not gcs.match_any(KEY, [b"alpha"])


def test_deterministic_encoding():
    assert _filter().n_bytes() == _filter(list(reversed(ITEMS))).n_bytes()


def test_duplicates_are_counted():
    gcs = _filter([b"same", b"same", b"other"])
    assert gcs.n == 3
    assert gcs.match(KEY, b"same")


def test_small_p_round_trip():
    gcs = build_gcs_filter(2, 4, KEY, ITEMS)
    decoded = from_n_bytes(2, 4, gcs.n_bytes())
    assert all(decoded.match(KEY, item) for item in ITEMS)


def test_p_too_big():
    with pytest.raises(ValueError):
        build_gcs_filter(33, DEFAULT_M, KEY, ITEMS)
    with pytest.raises(ValueError):
        from_n_bytes(33, DEFAULT_M, b"\x00")


def test_bad_key_length():
    with pytest.raises(ValueError):
        build_gcs_filter(DEFAULT_P, DEFAULT_M, b"\x01" * 8, ITEMS)


def test_n_too_big():
    raw = b"\xfe" + (0xFFFFFFFF).to_bytes(4, "little")
    with pytest.raises(ValueError):
        from_n_bytes(DEFAULT_P, DEFAULT_M, raw)


def test_truncated_data_does_not_match_everything():
    gcs = _filter()
    truncated = GCSFilter(p=gcs.p, m=gcs.m, n=gcs.n, data=gcs.data[:1])
    assert not truncated.match(KEY, b"no-such-item")