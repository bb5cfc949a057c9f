import logging
from typing import (
    Iterable,
)

from eth_typing import (
    Address,
)
from eth_utils import (
    ValidationError,
    encode_hex,
)

from mapo.abc import (
    AssetTransferAPI,
    LightClientStoreAPI,
)
from mapo.consensus.istanbul.constants import (
    DEFAULT_EPOCH_SIZE,
    DEFAULT_MAX_RECORDS,
)
from mapo.consensus.istanbul.datatypes import (
    G2Point,
    HeaderAdvanced,
    MapLightClient,
    ReceiptProof,
    Validator,
)
from mapo.consensus.istanbul.epochs import (
    create_light_client,
)
from mapo.consensus.istanbul.light_client import (
    advance_header,
    verify_proof_data,
)
from mapo.constants import (
    ACCOUNT_ID_LENGTH,
    ADDRESS_LENGTH,
    UINT_16_MAX,
    UINT_128_MAX,
)
from mapo.exceptions import (
    EventError,
    ProofError,
    TokenError,
)
from mapo.typing import (
    AccountId,
)
from mapo.validation import (
    validate_length,
)

from .events import (
    TransferEvent,
)


class MapBridgeContext:
    """
    Everything a :class:`MapBridge` depends on. Subclass or override the class
    attributes to change the chain parameters.
    """

    epoch_size = DEFAULT_EPOCH_SIZE
    max_records = DEFAULT_MAX_RECORDS

    def __init__(
        self,
        store: LightClientStoreAPI,
        assets: AssetTransferAPI,
        bridge_address: Address,
    ) -> None:
        validate_length(bridge_address, ADDRESS_LENGTH, title="Bridge address")
        self.store = store
        self.assets = assets
        self.bridge_address = bridge_address


class MapBridge:
    """
    Entry point of the bridge: keeps the light client of the Map chain up to
    date and releases assets for transfers proven against it.
    """

    logger = logging.getLogger("mapo.bridge.MapBridge")

    def __init__(self, context: MapBridgeContext) -> None:
        if context is None:
            raise ValueError("Can not instantiate without `context`")
        self._context = context
        self._store = context.store
        self._assets = context.assets
        self._bridge_address = context.bridge_address

    def initialize(
        self,
        validators: Iterable[Validator],
        epoch: int,
        header_height: int,
        epoch_size: int = None,
        max_records: int = None,
        threshold: int = None,
    ) -> MapLightClient:
        """
        Store the genesis light client, trusting ``validators`` for ``epoch``.
        """
        if self._store.is_initialized():
            raise ValidationError("Light client is already initialized")

        client = create_light_client(
            validators,
            epoch=epoch,
            epoch_size=self._context.epoch_size if epoch_size is None else epoch_size,
            header_height=header_height,
            max_records=(
                self._context.max_records if max_records is None else max_records
            ),
            threshold=threshold,
        )
        self._store.store(client)

        self.logger.info(
            "Initialized light client at height %d with %d validators for epoch %d",
            client.header_height,
            len(client.epoch_records[epoch].validators),
            epoch,
        )
        return client

    def get_light_client(self) -> MapLightClient:
        return self._store.load()

    def advance_header(self, header: bytes, agg_pk: G2Point) -> HeaderAdvanced:
        """
        Verify the last header of the next epoch and move the light client to it.
        The stored client is only replaced if every check passed.
        """
        client = self._store.load()
        advanced, verified_header = advance_header(client, header, agg_pk)
        self._store.store(advanced)

        next_epoch = max(advanced.epoch_records)
        self.logger.info(
            "Advanced light client to %s, now verifying epoch %d",
            verified_header,
            next_epoch,
        )
        return HeaderAdvanced(advanced.header_height, next_epoch)

    def verify_transfer(
        self, receipt_proof: ReceiptProof, log_index: int
    ) -> TransferEvent:
        """
        Verify that the receipt in ``receipt_proof`` holds a ``mapTransferOut``
        event at ``log_index`` and release the transferred asset to its recipient.
        """
        client = self._store.load()
        header = verify_proof_data(client, receipt_proof)

        logs = receipt_proof.receipt.logs
        if not 0 <= log_index < len(logs):
            raise ProofError(
                f"Log index {log_index} out of range, receipt has {len(logs)} logs"
            )

        event = TransferEvent.from_log_entry(logs[log_index])
        self.validate_transfer_event(event)

        recipient = AccountId(event.to)
        token = Address(event.to_chain_token)
        chain_id = event.from_chain

        if self._assets.is_native(token):
            self._assets.unlock(recipient, event.amount, token, chain_id, event.order_id)
        else:
            try:
                asset_id = self._assets.lookup_asset(chain_id, token)
            except KeyError:
                raise TokenError(
                    f"No asset registered for token {encode_hex(token)} "
                    f"of chain {chain_id}"
                )
            self._assets.mint(recipient, event.amount, asset_id, chain_id, event.order_id)

        self.logger.info(
            "Transfer in of %d %s from chain %d to %s proven by %s, order %s",
            event.amount,
            encode_hex(token),
            chain_id,
            encode_hex(recipient),
            header,
            encode_hex(event.order_id),
        )
        return event

    def validate_transfer_event(self, event: TransferEvent) -> None:
        if event.map_bridge_address != self._bridge_address:
            raise ProofError(
                f"Event was emitted by {encode_hex(event.map_bridge_address)}, "
                f"not by the bridge contract {encode_hex(self._bridge_address)}"
            )
        if len(event.to) != ACCOUNT_ID_LENGTH:
            raise EventError(
                f"Recipient must be {ACCOUNT_ID_LENGTH} bytes, got {len(event.to)}"
            )
        if len(event.to_chain_token) != ADDRESS_LENGTH:
            raise TokenError(
                f"Destination token must be {ADDRESS_LENGTH} bytes, "
                f"got {len(event.to_chain_token)}"
            )
        if event.from_chain >= UINT_16_MAX:
            raise EventError(f"Chain id {event.from_chain} out of range")
        if event.amount > UINT_128_MAX:
            raise EventError(f"Amount {event.amount} out of range")
