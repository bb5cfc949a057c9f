from typing import (
    Mapping,
    Sequence,
    Tuple,
)

from eth_hash.auto import (
    keccak,
)
from py_ecc import (
    optimized_bn128 as bn128,
)

from mapo._utils.bn256 import (
    encode_g1,
)
from mapo.consensus.istanbul._utils import (
    prepare_committed_seal,
)
from mapo.consensus.istanbul.datatypes import (
    G2Point,
)
from mapo.rlp.headers import (
    MapHeader,
)
from mapo.rlp.istanbul import (
    ISTANBUL_EXTRA_VANITY_LENGTH,
    IstanbulAggregatedSeal,
    IstanbulExtra,
)

from .keys import (
    ValidatorKey,
    aggregate_g2_pub_keys,
)

DEFAULT_VANITY = ISTANBUL_EXTRA_VANITY_LENGTH * b"\x00"


def make_istanbul_extra(
    added: Sequence[ValidatorKey] = (), removed_validators: int = 0
) -> IstanbulExtra:
    return IstanbulExtra(
        added_validators=[key.address for key in added],
        added_public_keys=[key.g2_pub_key for key in added],
        added_g1_public_keys=[key.g1_pub_key for key in added],
        removed_validators=removed_validators,
    )


def seal_header(
    header: MapHeader,
    proposer: ValidatorKey,
    signers: Mapping[int, ValidatorKey],
    extra: IstanbulExtra = None,
    round: int = 0,
    vanity: bytes = DEFAULT_VANITY,
) -> Tuple[MapHeader, G2Point]:
    """
    Seal ``header`` the way an Istanbul validator set would: ``proposer`` signs
    the header as coinbase, then every validator in ``signers`` (keyed by its
    index in the epoch's validator set) commits to it.

    Return the sealed header and the aggregated G2 public key of the signers.
    """
    if extra is None:
        extra = IstanbulExtra()
    extra = extra.filtered(keep_seal=False)

    unsealed = header.copy(
        coinbase=proposer.address, extra=extra.to_extra_data(vanity)
    )
    seal = proposer.private_key.sign_msg_hash(
        keccak(unsealed.hash_without_seal)
    ).to_bytes()

    extra = extra.copy(seal=seal)
    proposed = unsealed.copy(extra=extra.to_extra_data(vanity))

    message = prepare_committed_seal(proposed.hash, round)
    signature = bn128.Z1
    bitmap = 0
    for index, key in signers.items():
        signature = bn128.add(signature, key.bls_sign(message))
        bitmap |= 1 << index

    extra = extra.copy(
        aggregated_seal=IstanbulAggregatedSeal(bitmap, encode_g1(signature), round)
    )
    sealed = proposed.copy(extra=extra.to_extra_data(vanity))
    return sealed, aggregate_g2_pub_keys(signers.values())
