"""
Pure functions driving a :class:`~mapo.consensus.istanbul.datatypes.MapLightClient`.
None of them modify the client they are given, an updated client is returned
instead so that a failure can never leave a half applied state behind.
"""
import logging
from typing import (
    Sequence,
    Tuple,
    Union,
)

from eth_utils import (
    ValidationError,
    encode_hex,
)
import rlp

from mapo._utils.trie import (
    verify_trie_proof,
)
from mapo.exceptions import (
    HeaderError,
    HeaderVerificationError,
    ProofError,
)
from mapo.rlp.headers import (
    MapHeader,
)
from mapo.rlp.istanbul import (
    IstanbulExtra,
)
from mapo.rlp.receipts import (
    ReceiptData,
)
from mapo.validation import (
    validate_uint64,
)

from ._utils import (
    get_epoch_number,
)
from .datatypes import (
    G2Point,
    MapLightClient,
    ReceiptProof,
)
from .epochs import (
    apply_epoch_transition,
    get_epoch_record,
)
from .verification import (
    verify_signatures,
)

logger = logging.getLogger("mapo.consensus.istanbul.light_client")


def normalize_key_index(key_index: Union[bytes, int]) -> bytes:
    """
    Receipt trie keys are the RLP encoded receipt index. Accept the index
    itself as well as the already encoded key.
    """
    if isinstance(key_index, int):
        try:
            validate_uint64(key_index, title="Receipt index")
        except ValidationError as err:
            raise ProofError(str(err)) from err
        return rlp.encode(key_index)
    return key_index


def advance_header(
    client: MapLightClient, raw_header: bytes, agg_pk: G2Point
) -> Tuple[MapLightClient, MapHeader]:
    """
    Verify the last header of the epoch following the client's current height
    and return the client moved into the next epoch together with the header.
    """
    header = MapHeader.decode(raw_header)
    extra = IstanbulExtra.from_extra_data(header.extra)
    extra.validate_validator_changes()

    expected_number = client.header_height + client.epoch_size
    if header.number != expected_number:
        raise HeaderError(
            f"Expected header #{expected_number}, got #{header.number}"
        )

    epoch = get_epoch_number(header.number, client.epoch_size)
    epoch_record = get_epoch_record(client, epoch)

    verify_signatures(header, agg_pk, extra, epoch_record)

    logger.debug("Verified %s against validator set of epoch %d", header, epoch)

    advanced = apply_epoch_transition(client, epoch_record, extra)
    return advanced._replace(header_height=header.number), header


def verify_receipt_proof(
    header: MapHeader,
    key_index: Union[bytes, int],
    proof: Sequence[bytes],
    receipt: ReceiptData,
) -> None:
    """
    Check that ``receipt`` is stored under ``key_index`` in the receipt trie of
    ``header``. The header itself must have been verified already.
    """
    key = normalize_key_index(key_index)
    proven = verify_trie_proof(header.receipt_hash, key, proof)

    expected = receipt.encode_index()
    if proven != expected:
        raise HeaderVerificationError(
            f"Receipt under key {encode_hex(key)} of {header} does not match "
            f"the claimed receipt"
        )


def verify_proof_data(client: MapLightClient, receipt_proof: ReceiptProof) -> MapHeader:
    """
    Verify ``receipt_proof`` against the validator set of the header's epoch
    and return the verified header.
    """
    header = MapHeader.decode(receipt_proof.header)
    extra = IstanbulExtra.from_extra_data(header.extra)

    epoch = get_epoch_number(header.number, client.epoch_size)
    epoch_record = get_epoch_record(client, epoch)

    verify_signatures(header, receipt_proof.agg_pk, extra, epoch_record)
    verify_receipt_proof(
        header, receipt_proof.key_index, receipt_proof.proof, receipt_proof.receipt
    )
    return header
