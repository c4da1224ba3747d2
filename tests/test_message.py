import io

import pytest

from neutrino_elements.magic import Magic
from neutrino_elements.message import (
    MSG_HEADER_LENGTH,
    Message,
    MessageHeader,
    VarStr,
    checksum,
    new_message,
    new_user_agent,
    read_var_str,
)


def _packed(name: str) -> bytes:
    return name.encode().ljust(12, b"\x00")


@pytest.mark.parametrize("name, expected", [("version", True), ("invalid", False)])
def test_has_valid_command(name, expected):
    assert MessageHeader(command=_packed(name)).has_valid_command() is expected


@pytest.mark.parametrize(
    "magic, expected",
    [
        (Magic.LIQUID, True),
        (Magic.REGTEST, True),
        (Magic.LIQUID_TESTNET, True),
        (b"\xde\xad\xbe\xef", False),
    ],
)
def test_has_valid_magic(magic, expected):
    assert MessageHeader(magic=magic).has_valid_magic() is expected


def test_command_string_strips_padding():
    assert MessageHeader(command=_packed("verack")).command_string() == "verack"


def test_validate_rejects_bad_magic():
    header = MessageHeader(magic=b"\xde\xad\xbe\xef", command=_packed("ping"))
    with pytest.raises(ValueError, match="invalid magic: deadbeef"):
        header.validate()


def test_validate_rejects_bad_command():
    header = MessageHeader(magic=Magic.REGTEST.value, command=_packed("nope"))
    with pytest.raises(ValueError, match="invalid command: nope"):
        header.validate()


def test_checksum_of_empty_payload():
    assert checksum(b"") == bytes([93, 246, 224, 226])


def test_var_str_round_trip():
    encoded = new_user_agent("/test:0.1.0/").to_bytes()
    assert encoded == b"\x0c/test:0.1.0/"
    decoded = read_var_str(io.BytesIO(encoded))
    assert decoded == VarStr("/test:0.1.0/")
    assert decoded.length == 12


def test_read_var_str_truncated():
    with pytest.raises(EOFError):
        read_var_str(io.BytesIO(b"\x05ab"))


def test_var_str_too_long():
    with pytest.raises(ValueError):
        VarStr("x" * 256)


def test_new_message_unsupported_command():
    with pytest.raises(ValueError, match="unsupported command bogus"):
        new_message("bogus", Magic.REGTEST, b"")


def test_new_message_empty_payload():
    msg = new_message("verack", Magic.REGTEST, b"")
    assert msg == Message(
        header=MessageHeader(
            magic=b"\x12\x34\x56\x78",
            command=_packed("verack"),
            length=0,
            checksum=bytes([93, 246, 224, 226]),
        ),
        payload=b"",
    )
    assert len(msg.to_bytes()) == MSG_HEADER_LENGTH


def test_new_message_serializable_payload():
    msg = new_message("ping", Magic.REGTEST, VarStr("ab"))
    assert msg.payload == b"\x02ab"
    assert msg.header.length == 3
    assert msg.header.checksum == checksum(b"\x02ab")
    assert msg.to_bytes().endswith(b"\x02ab")


def test_new_message_rejects_unknown_payload_type():
    with pytest.raises(TypeError):
        new_message("ping", Magic.REGTEST, 42)