from eth_utils import (
    ValidationError,
)
import pytest
import rlp

from mapo.constants import (
    EMPTY_BLOOM,
)
from mapo.exceptions import (
    EventError,
)
from mapo.rlp.receipts import (
    LogEntry,
    Receipt,
    ReceiptData,
)

LOG = LogEntry(
    address=20 * b"\x11",
    topics=(32 * b"\x01", 32 * b"\x02"),
    data=b"some data",
)
VALID_RECEIPT_FIELDS = dict(
    receipt_type=2,
    post_state_or_status=b"\x01",
    cumulative_gas_used=21000,
    logs=(LOG,),
)


def test_legacy_receipt_encoding_has_no_type_byte():
    receipt = ReceiptData(0, b"\x01", 21000, EMPTY_BLOOM, (LOG,))
    expected = rlp.encode(Receipt(b"\x01", 21000, EMPTY_BLOOM, (LOG,)))

    assert receipt.encode_index() == expected


@pytest.mark.parametrize("receipt_type", (1, 2, 0x7F))
def test_typed_receipt_encoding_is_prefixed(receipt_type):
    receipt = ReceiptData(receipt_type, b"\x01", 21000, EMPTY_BLOOM, (LOG,))
    payload = rlp.encode(Receipt(b"\x01", 21000, EMPTY_BLOOM, (LOG,)))

    assert receipt.encode_index() == bytes([receipt_type]) + payload


@pytest.mark.parametrize("receipt_type", (0, 2))
def test_receipt_decode_round_trip(receipt_type):
    receipt = ReceiptData(receipt_type, b"", 42, EMPTY_BLOOM, (LOG, LOG))
    decoded = ReceiptData.decode(receipt.encode_index())

    assert decoded == receipt
    assert decoded.logs[1] == LOG


@pytest.mark.parametrize("receipt_type", (-1, 0x80, 0xFF))
def test_invalid_receipt_type(receipt_type):
    with pytest.raises(ValidationError):
        ReceiptData(receipt_type)


@pytest.mark.parametrize("encoded", (b"", b"\x02", b"\x02\xc0", b"\xc1\x80"))
def test_decode_malformed_receipt(encoded):
    with pytest.raises(ValidationError):
        ReceiptData.decode(encoded)


@pytest.mark.parametrize(
    "fields",
    (
        dict(bloom=255 * b"\x00"),
        dict(cumulative_gas_used=-1),
        dict(logs=(LogEntry(address=19 * b"\x01"),)),
        dict(logs=(LOG, LogEntry(address=20 * b"\x01", topics=(31 * b"\x01",)))),
    ),
)
def test_malformed_receipt_fields(fields):
    receipt = ReceiptData(**dict(VALID_RECEIPT_FIELDS, **fields))

    with pytest.raises(EventError):
        receipt.encode_index()
