import logging
from typing import (
    Sequence,
)

from eth_typing import (
    Hash32,
)
from eth_utils import (
    ValidationError,
    encode_hex,
)
from py_ecc import (
    optimized_bn128 as bn128,
)

from mapo._utils.bn256 import (
    decode_g1,
    decode_g2,
    pairing_check,
    sum_points,
)
from mapo._utils.hash_to_curve import (
    hash_to_g1,
)
from mapo.exceptions import (
    BlsInvalidSignature,
    HeaderVerifyFailed,
)
from mapo.rlp.headers import (
    MapHeader,
)
from mapo.rlp.istanbul import (
    IstanbulAggregatedSeal,
    IstanbulExtra,
)
from mapo.typing import (
    G1PublicKey,
)

from ._utils import (
    get_block_signer,
    is_quorum,
    prepare_committed_seal,
)
from .datatypes import (
    EpochRecord,
    G2Point,
)

logger = logging.getLogger("mapo.consensus.istanbul.verification")


def check_aggregated_g2_pub_key(
    g1_pub_keys: Sequence[G1PublicKey], bitmap: int, agg_pk: G2Point
) -> bool:
    """
    Return ``True`` if ``agg_pk`` is the G2 counterpart of the sum of the G1
    keys selected by ``bitmap``.
    """
    try:
        g1_sum = sum_points(g1_pub_keys, bitmap)
        g2_key = decode_g2(agg_pk.to_bytes())
    except ValidationError as err:
        logger.debug("Could not build aggregated public key: %s", err)
        return False

    return pairing_check(((bn128.G2, g1_sum), (g2_key, bn128.neg(bn128.G1))))


def check_sealed_signature(
    aggregated_seal: IstanbulAggregatedSeal, header_hash: Hash32, agg_pk: G2Point
) -> bool:
    """
    Return ``True`` if the aggregated signature commits ``header_hash`` in
    the round of the seal under ``agg_pk``.
    """
    try:
        signature = decode_g1(aggregated_seal.signature)
        g2_key = decode_g2(agg_pk.to_bytes())
        message_point = hash_to_g1(
            prepare_committed_seal(header_hash, aggregated_seal.round)
        )
    except ValidationError as err:
        logger.debug("Could not decode aggregated seal: %s", err)
        return False

    return pairing_check(((bn128.G2, signature), (g2_key, bn128.neg(message_point))))


def verify_ecdsa_signature(
    header: MapHeader, seal: bytes, addresses: Sequence[bytes]
) -> None:
    coinbase_count = addresses.count(header.coinbase)
    if coinbase_count != 1:
        raise HeaderVerifyFailed(
            f"Coinbase {encode_hex(header.coinbase)} appears {coinbase_count} "
            f"times in the validator set"
        )

    try:
        signer = get_block_signer(header, seal)
    except ValidationError as err:
        raise HeaderVerifyFailed(f"Invalid proposer seal: {err}") from err

    if signer != header.coinbase:
        raise HeaderVerifyFailed(
            f"Header {header} was sealed by {encode_hex(signer)} instead of "
            f"coinbase {encode_hex(header.coinbase)}"
        )


def verify_aggregated_seal(
    header: MapHeader,
    extra: IstanbulExtra,
    epoch_record: EpochRecord,
    agg_pk: G2Point,
) -> None:
    aggregated_seal = extra.aggregated_seal

    if not is_quorum(
        aggregated_seal.bitmap, epoch_record.validators, epoch_record.threshold
    ):
        raise HeaderVerifyFailed(
            f"Signers of {header} do not reach the threshold of epoch "
            f"{epoch_record.epoch}"
        )

    if not check_aggregated_g2_pub_key(
        epoch_record.g1_pub_keys, aggregated_seal.bitmap, agg_pk
    ):
        raise BlsInvalidSignature(
            f"Aggregated public key does not match the signers of {header}"
        )

    if not check_sealed_signature(aggregated_seal, header.hash, agg_pk):
        raise BlsInvalidSignature(f"Invalid aggregated seal on {header}")


def verify_signatures(
    header: MapHeader,
    agg_pk: G2Point,
    extra: IstanbulExtra,
    epoch_record: EpochRecord,
) -> None:
    """
    Verify the proposer seal and the quorum certificate of ``header`` against
    the validator set of its epoch.
    """
    verify_ecdsa_signature(header, extra.seal, epoch_record.addresses)
    verify_aggregated_seal(header, extra, epoch_record, agg_pk)
