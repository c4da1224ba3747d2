import pytest

from neutrino_elements.watchitem import (
    EventType,
    SpentWatchItem,
    Transaction,
    TxInput,
    TxOutput,
    UnspentWatchItem,
    WatchItem,
    new_spent_watch_item_from_input,
    new_unspent_watch_item_from_script,
)

OUTPOINT_HASH = bytes(range(32))
OTHER_HASH = bytes(reversed(range(32)))
SCRIPT = bytes.fromhex("76a91439397080b51ef22c59bd7469afacffbeec0da12e88ac")
OTHER_SCRIPT = b"\x00\x14" + bytes(20)


def test_event_type_values_follow_declaration_order():
    unspent = new_unspent_watch_item_from_script(SCRIPT)
    spent = new_spent_watch_item_from_input(TxInput(OUTPOINT_HASH, 0), SCRIPT)
    assert unspent.event_type() == 0
    assert spent.event_type() == 1


def test_unspent_item_bytes_are_the_script():
    item = new_unspent_watch_item_from_script(SCRIPT)
    assert item.to_bytes() == SCRIPT
    assert item.event_type() is EventType.UNSPENT_UTXO


def test_unspent_item_matches_output_with_script():
    item = UnspentWatchItem(SCRIPT)
    tx = Transaction(outputs=[TxOutput(OTHER_SCRIPT), TxOutput(SCRIPT)])
    assert item.match(tx) is True


def test_unspent_item_ignores_other_outputs():
    item = UnspentWatchItem(SCRIPT)
    tx = Transaction(outputs=[TxOutput(OTHER_SCRIPT)])
    assert item.match(tx) is False
    assert item.match(Transaction()) is False


def test_spent_item_from_input_keeps_outpoint_and_script():
    item = new_spent_watch_item_from_input(TxInput(OUTPOINT_HASH, 3), SCRIPT)
    assert isinstance(item, WatchItem)
    assert item.hash == OUTPOINT_HASH
    assert item.index == 3
    assert item.to_bytes() == SCRIPT
    assert item.event_type() is EventType.SPENT_UTXO


def test_spent_item_matches_input_spending_outpoint():
    item = SpentWatchItem(OUTPOINT_HASH, 1, SCRIPT)
    tx = Transaction(inputs=[TxInput(OTHER_HASH, 1), TxInput(OUTPOINT_HASH, 1)])
    assert item.match(tx) is True


def test_spent_item_requires_same_index():
    item = SpentWatchItem(OUTPOINT_HASH, 1, SCRIPT)
    tx = Transaction(inputs=[TxInput(OUTPOINT_HASH, 2)])
    assert item.match(tx) is False


def test_spent_item_skips_inputs_with_malformed_hash():
    item = SpentWatchItem(OUTPOINT_HASH, 0, SCRIPT)
    tx = Transaction(inputs=[TxInput(OUTPOINT_HASH[:10], 0)])
    assert item.match(tx) is False


def test_spent_item_from_input_with_short_hash_raises():
    with pytest.raises(ValueError):
        new_spent_watch_item_from_input(TxInput(b"\x01\x02", 0), SCRIPT)