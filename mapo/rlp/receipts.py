from typing import (
    Any,
    Sequence,
)

from eth_typing import (
    Address,
    Hash32,
)
from eth_utils import (
    ValidationError,
)
import rlp
from rlp.sedes import (
    CountableList,
    big_endian_int,
    binary,
)

from mapo.constants import (
    EMPTY_BLOOM,
)
from mapo.exceptions import (
    EventError,
)

from .sedes import (
    address,
    bloom,
    hash32,
)

LEGACY_RECEIPT_TYPE = 0

# EIP-2718 type bytes live below the first byte of an RLP list
MAX_RECEIPT_TYPE = 0x7F


class LogEntry(rlp.Serializable):
    fields = [
        ("address", address),
        ("topics", CountableList(hash32)),
        ("data", binary),
    ]

    def __init__(
        self, address: Address, topics: Sequence[Hash32] = (), data: bytes = b""
    ) -> None:
        super().__init__(address=address, topics=tuple(topics), data=data)


class Receipt(rlp.Serializable):
    fields = [
        ("post_state_or_status", binary),
        ("cumulative_gas_used", big_endian_int),
        ("bloom", bloom),
        ("logs", CountableList(LogEntry)),
    ]


class ReceiptData:
    """
    A receipt as claimed by a transfer proof. Typed receipts are encoded
    with their type byte in front of the RLP payload, legacy receipts
    (type ``0``) without.
    """

    def __init__(
        self,
        receipt_type: int = LEGACY_RECEIPT_TYPE,
        post_state_or_status: bytes = b"",
        cumulative_gas_used: int = 0,
        bloom: bytes = EMPTY_BLOOM,
        logs: Sequence[LogEntry] = (),
    ) -> None:
        if not 0 <= receipt_type <= MAX_RECEIPT_TYPE:
            raise ValidationError(f"Invalid receipt type {receipt_type}")

        self.receipt_type = receipt_type
        self._inner = Receipt(
            post_state_or_status=post_state_or_status,
            cumulative_gas_used=cumulative_gas_used,
            bloom=bloom,
            logs=tuple(logs),
        )

    @classmethod
    def decode(cls, encoded: bytes) -> "ReceiptData":
        if len(encoded) == 0:
            raise ValidationError("Encoded receipt was empty, which makes it invalid")

        if encoded[0] <= MAX_RECEIPT_TYPE:
            receipt_type, payload = encoded[0], encoded[1:]
        else:
            receipt_type, payload = LEGACY_RECEIPT_TYPE, encoded

        try:
            inner = rlp.decode(payload, sedes=Receipt)
        except (rlp.DecodingError, rlp.DeserializationError) as err:
            raise ValidationError(f"Malformed receipt: {err}") from err

        return cls(
            receipt_type,
            inner.post_state_or_status,
            inner.cumulative_gas_used,
            inner.bloom,
            inner.logs,
        )

    def encode_index(self) -> bytes:
        """
        Return the bytes stored in the receipt trie for this receipt. Raise
        ``EventError`` if a field of the receipt or of one of its logs has the
        wrong shape, like a log address that is not 20 bytes.
        """
        try:
            payload = rlp.encode(self._inner)
        except rlp.SerializationError as err:
            raise EventError(f"Malformed receipt {self!r}: {err}") from err

        if self.receipt_type == LEGACY_RECEIPT_TYPE:
            return payload
        return bytes([self.receipt_type]) + payload

    @property
    def post_state_or_status(self) -> bytes:
        return self._inner.post_state_or_status

    @property
    def cumulative_gas_used(self) -> int:
        return self._inner.cumulative_gas_used

    @property
    def bloom(self) -> bytes:
        return self._inner.bloom

    @property
    def logs(self) -> Sequence[LogEntry]:
        return self._inner.logs

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ReceiptData):
            return False
        return self.receipt_type == other.receipt_type and self._inner == other._inner

    def __repr__(self) -> str:
        return (
            f"ReceiptData(receipt_type={self.receipt_type}, "
            f"logs={len(self.logs)}, cumulative_gas_used={self.cumulative_gas_used})"
        )
