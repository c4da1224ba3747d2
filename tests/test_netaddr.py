import io

import pytest

from neutrino_elements.netaddr import (
    Addr,
    IPv4,
    MalformedNodeAddressError,
    ServiceFlag,
    VersionNetAddr,
    parse_node_addr,
    read_ipv4,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("127.0.0.1:8333", Addr(ip=IPv4(127, 0, 0, 1), port=8333)),
        ("300.300.300.300:1234", Addr(ip=IPv4(0, 0, 0, 0), port=1234)),
    ],
)
def test_parse_node_addr_ok(text, expected):
    assert parse_node_addr(text) == expected


@pytest.mark.parametrize(
    "text", ["", "127.0.0.1", ":1234", "127.0.0.1:", "127.0.0.1:abc", "127.0.0.1:70000", "a:b:c"]
)
def test_parse_node_addr_malformed(text):
    with pytest.raises(MalformedNodeAddressError, match="malformed node address"):
        parse_node_addr(text)


def test_ipv4_to_bytes():
    assert IPv4(127, 0, 0, 1).to_bytes() == bytes.fromhex("00000000000000000000ffff7f000001")


def test_ipv4_str():
    assert str(IPv4(127, 0, 0, 1)) == "127.0.0.1"


def test_ipv4_round_trip():
    ip = IPv4(10, 20, 30, 40)
    assert read_ipv4(io.BytesIO(ip.to_bytes())) == ip


def test_read_ipv4_short():
    with pytest.raises(ValueError, match="wrong length"):
        read_ipv4(io.BytesIO(b"\x00" * 5))


def test_ipv4_octet_range():
    with pytest.raises(ValueError):
        IPv4(256, 0, 0, 0)


def test_version_net_addr_bytes():
    addr = VersionNetAddr(services=ServiceFlag.NODE_CF, ip=IPv4(127, 0, 0, 1), port=9333)
    assert addr.to_bytes() == bytes.fromhex(
        "400000000000000000000000000000000000ffff7f0000012475"
    )


def test_version_net_addr_combined_service_flags():
    addr = VersionNetAddr(
        services=ServiceFlag.NODE_NETWORK | ServiceFlag.NODE_CF,
        ip=IPv4(127, 0, 0, 1),
        port=9333,
    )
    assert addr.to_bytes()[:8] == bytes.fromhex("4100000000000000")