from typing import (
    Sequence,
)

from eth_typing import (
    Address,
)
import rlp
from rlp.sedes import (
    CountableList,
    big_endian_int,
    binary,
)

from mapo.exceptions import (
    IstanbulExtraDecodeError,
)

from .sedes import (
    address,
    bls_public_key,
    g1_public_key,
)

# Number of bytes reserved at the start of extra-data for validator vanity
ISTANBUL_EXTRA_VANITY_LENGTH = 32


class IstanbulAggregatedSeal(rlp.Serializable):
    """
    The aggregated BLS signature of the validators that committed a block.
    Bit ``i`` of ``bitmap`` is set if validator ``i`` of the epoch signed.
    """

    fields = [
        ("bitmap", big_endian_int),
        ("signature", binary),
        ("round", big_endian_int),
    ]

    def __init__(self, bitmap: int = 0, signature: bytes = b"", round: int = 0) -> None:
        super().__init__(bitmap=bitmap, signature=signature, round=round)

    def signer_indices(self, validator_count: int) -> Sequence[int]:
        return tuple(
            index for index in range(validator_count) if (self.bitmap >> index) & 1
        )


class IstanbulExtra(rlp.Serializable):
    """
    Istanbul BFT consensus data, RLP encoded after the vanity prefix of a
    header's extra-data.
    """

    fields = [
        ("added_validators", CountableList(address)),
        ("added_public_keys", CountableList(bls_public_key)),
        ("added_g1_public_keys", CountableList(g1_public_key)),
        ("removed_validators", big_endian_int),
        ("seal", binary),
        ("aggregated_seal", IstanbulAggregatedSeal),
        ("parent_aggregated_seal", IstanbulAggregatedSeal),
    ]

    def __init__(
        self,
        added_validators: Sequence[Address] = (),
        added_public_keys: Sequence[bytes] = (),
        added_g1_public_keys: Sequence[bytes] = (),
        removed_validators: int = 0,
        seal: bytes = b"",
        aggregated_seal: IstanbulAggregatedSeal = None,
        parent_aggregated_seal: IstanbulAggregatedSeal = None,
    ) -> None:
        if aggregated_seal is None:
            aggregated_seal = IstanbulAggregatedSeal()
        if parent_aggregated_seal is None:
            parent_aggregated_seal = IstanbulAggregatedSeal()

        super().__init__(
            added_validators=tuple(added_validators),
            added_public_keys=tuple(added_public_keys),
            added_g1_public_keys=tuple(added_g1_public_keys),
            removed_validators=removed_validators,
            seal=seal,
            aggregated_seal=aggregated_seal,
            parent_aggregated_seal=parent_aggregated_seal,
        )

    @classmethod
    def from_extra_data(cls, extra_data: bytes) -> "IstanbulExtra":
        """
        Strip the vanity from ``extra_data`` and decode the remainder.
        """
        if len(extra_data) < ISTANBUL_EXTRA_VANITY_LENGTH:
            raise IstanbulExtraDecodeError(
                f"Extra-data of {len(extra_data)} bytes is missing the "
                f"{ISTANBUL_EXTRA_VANITY_LENGTH} byte vanity"
            )

        try:
            extra = rlp.decode(
                extra_data[ISTANBUL_EXTRA_VANITY_LENGTH:], sedes=cls
            )
        except (rlp.DecodingError, rlp.DeserializationError) as err:
            raise IstanbulExtraDecodeError(
                f"Malformed Istanbul extra-data: {err}"
            ) from err

        return extra

    def validate_validator_changes(self) -> None:
        """
        Every added validator needs a G1 public key to join the next epoch.
        """
        if len(self.added_validators) != len(self.added_g1_public_keys):
            raise IstanbulExtraDecodeError(
                f"Got {len(self.added_validators)} added validators but "
                f"{len(self.added_g1_public_keys)} G1 public keys"
            )

    def to_extra_data(self, vanity: bytes) -> bytes:
        if len(vanity) < ISTANBUL_EXTRA_VANITY_LENGTH:
            raise ValueError(
                f"Vanity must be at least {ISTANBUL_EXTRA_VANITY_LENGTH} bytes"
            )
        return vanity[:ISTANBUL_EXTRA_VANITY_LENGTH] + rlp.encode(self)

    def filtered(self, keep_seal: bool) -> "IstanbulExtra":
        """
        Return the extra with the aggregated seal cleared, and the proposer
        seal cleared as well unless ``keep_seal`` is set.
        """
        return self.copy(
            seal=self.seal if keep_seal else b"",
            aggregated_seal=IstanbulAggregatedSeal(),
        )
