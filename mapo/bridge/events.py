from typing import (
    NamedTuple,
)

from eth_abi import (
    decode,
    encode,
)
from eth_abi.exceptions import (
    DecodingError,
)
from eth_hash.auto import (
    keccak,
)
from eth_typing import (
    Address,
    Hash32,
)
from eth_utils import (
    big_endian_to_int,
    int_to_big_endian,
)

from mapo.exceptions import (
    ProofError,
)
from mapo.rlp.receipts import (
    LogEntry,
)

TRANSFER_OUT_EVENT_NAME = "mapTransferOut"

# fromChain and toChain are indexed, everything else is abi encoded in the log data
TRANSFER_OUT_INDEXED_TYPES = ("uint256", "uint256")
TRANSFER_OUT_DATA_TYPES = ("bytes32", "bytes", "bytes", "bytes", "uint256", "bytes")

TRANSFER_OUT_EVENT_SIGNATURE = (
    f"{TRANSFER_OUT_EVENT_NAME}"
    f"({','.join(TRANSFER_OUT_INDEXED_TYPES + TRANSFER_OUT_DATA_TYPES)})"
)
TRANSFER_OUT_TOPIC = Hash32(keccak(TRANSFER_OUT_EVENT_SIGNATURE.encode("ascii")))


class TransferEvent(NamedTuple):
    """
    A ``mapTransferOut`` event emitted by the bridge contract on the Map chain.
    """

    map_bridge_address: Address
    from_chain: int
    to_chain: int
    order_id: Hash32
    token: bytes
    from_: bytes
    to: bytes
    amount: int
    to_chain_token: bytes

    @classmethod
    def from_log_entry(cls, log: LogEntry) -> "TransferEvent":
        """
        Decode ``log`` as a ``mapTransferOut`` event. Raise ``ProofError`` if the
        log is a different event or its data is malformed.
        """
        if len(log.topics) != len(TRANSFER_OUT_INDEXED_TYPES) + 1:
            raise ProofError(
                f"Log has {len(log.topics)} topics, not a {TRANSFER_OUT_EVENT_NAME} event"
            )

        signature_topic, from_chain_topic, to_chain_topic = log.topics
        if signature_topic != TRANSFER_OUT_TOPIC:
            raise ProofError(f"Log is not a {TRANSFER_OUT_EVENT_NAME} event")

        try:
            order_id, token, from_, to, amount, to_chain_token = decode(
                TRANSFER_OUT_DATA_TYPES, log.data
            )
        except DecodingError as err:
            raise ProofError(
                f"Malformed {TRANSFER_OUT_EVENT_NAME} event data: {err}"
            ) from err

        return cls(
            map_bridge_address=log.address,
            from_chain=big_endian_to_int(from_chain_topic),
            to_chain=big_endian_to_int(to_chain_topic),
            order_id=order_id,
            token=token,
            from_=from_,
            to=to,
            amount=amount,
            to_chain_token=to_chain_token,
        )

    def to_log_entry(self) -> LogEntry:
        return LogEntry(
            address=self.map_bridge_address,
            topics=(
                TRANSFER_OUT_TOPIC,
                int_to_big_endian(self.from_chain).rjust(32, b"\x00"),
                int_to_big_endian(self.to_chain).rjust(32, b"\x00"),
            ),
            data=encode(
                TRANSFER_OUT_DATA_TYPES,
                (
                    self.order_id,
                    self.token,
                    self.from_,
                    self.to,
                    self.amount,
                    self.to_chain_token,
                ),
            ),
        )
