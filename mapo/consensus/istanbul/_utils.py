from typing import (
    Sequence,
)

from eth_hash.auto import (
    keccak,
)
from eth_keys import (
    keys,
)
from eth_keys.exceptions import (
    BadSignature,
)
from eth_typing import (
    Address,
    Hash32,
)
from eth_utils import (
    ValidationError,
    big_endian_to_int,
    int_to_big_endian,
)

from mapo.rlp.headers import (
    MapHeader,
)

from .constants import (
    ECDSA_SIGNATURE_LENGTH,
    SECPK1_N,
    IstanbulMsg,
)
from .datatypes import (
    Validator,
)


def get_number_within_epoch(block_number: int, epoch_size: int) -> int:
    """
    Return the 1-based position of the block within its epoch. The last block
    of an epoch has the position ``epoch_size``.
    """
    number = block_number % epoch_size
    if number == 0:
        return epoch_size
    return number


def get_epoch_number(block_number: int, epoch_size: int) -> int:
    """
    Return the epoch a block belongs to. Epoch ``n`` covers the blocks
    ``(n - 1) * epoch_size + 1`` up to and including ``n * epoch_size``;
    the genesis block is epoch ``0``.
    """
    epoch_number, remainder = divmod(block_number, epoch_size)
    if remainder == 0:
        return epoch_number
    return epoch_number + 1


def is_last_block_of_epoch(block_number: int, epoch_size: int) -> bool:
    return get_number_within_epoch(block_number, epoch_size) == epoch_size


def compute_threshold(total_weight: int) -> int:
    """
    Return the weight a quorum certificate needs to be accepted, which is
    more than two thirds of ``total_weight``.
    """
    return total_weight - total_weight // 3


def is_quorum(bitmap: int, validators: Sequence[Validator], threshold: int) -> bool:
    weight = sum(
        validator.weight
        for index, validator in enumerate(validators)
        if (bitmap >> index) & 1
    )
    return weight >= threshold


def prepare_committed_seal(header_hash: Hash32, round: int) -> bytes:
    """
    Return the message the validators sign when committing ``header_hash``
    in ``round``. The round is appended in its RLP scalar form.
    """
    return header_hash + int_to_big_endian(round).lstrip(b"\x00") + bytes(
        [IstanbulMsg.COMMIT]
    )


def get_signature_hash(header: MapHeader) -> Hash32:
    return Hash32(keccak(header.hash_without_seal))


def get_block_signer(header: MapHeader, seal: bytes) -> Address:
    """
    Recover the proposer address from ``seal`` over the header's signature hash.
    """
    if len(seal) != ECDSA_SIGNATURE_LENGTH:
        raise ValidationError(
            f"Seal must be {ECDSA_SIGNATURE_LENGTH} bytes, got {len(seal)}"
        )

    r = big_endian_to_int(seal[0:32])
    s = big_endian_to_int(seal[32:64])
    v = seal[64]
    if v >= 27:
        v -= 27

    if v not in (0, 1):
        raise ValidationError(f"Invalid recovery id in seal: {seal[64]}")
    if not (0 < r < SECPK1_N and 0 < s < SECPK1_N):
        raise ValidationError("Seal signature values out of range")

    signature = keys.Signature(vrs=(v, r, s))
    try:
        public_key = signature.recover_public_key_from_msg_hash(
            get_signature_hash(header)
        )
    except BadSignature as err:
        raise ValidationError(f"Could not recover signer from seal: {err}") from err

    return public_key.to_canonical_address()
