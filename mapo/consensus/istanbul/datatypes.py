from typing import (
    Dict,
    NamedTuple,
    Sequence,
    Tuple,
    Union,
)

from eth_typing import (
    Address,
)
from eth_utils import (
    ValidationError,
    decode_hex,
    encode_hex,
)

from mapo.rlp.receipts import (
    ReceiptData,
)
from mapo.typing import (
    G1PublicKey,
    G2PublicKey,
    HexPointDict,
)

G2_COORDINATES = ("xr", "xi", "yr", "yi")


class G2Point(NamedTuple):
    """
    An alt_bn128 G2 point, each coordinate 32 bytes big endian. The
    aggregated public key of the signers of a header is passed in this form.
    """

    xr: bytes
    xi: bytes
    yr: bytes
    yi: bytes

    @classmethod
    def from_bytes(cls, encoded: bytes) -> "G2Point":
        if len(encoded) != 128:
            raise ValidationError(f"G2 point must be 128 bytes, got {len(encoded)}")
        return cls(encoded[:32], encoded[32:64], encoded[64:96], encoded[96:])

    @classmethod
    def from_hex_dict(cls, value: HexPointDict) -> "G2Point":
        try:
            coordinates = [decode_hex(value[name]) for name in G2_COORDINATES]
        except KeyError as err:
            raise ValidationError(f"G2 point is missing coordinate {err}") from err

        for name, coordinate in zip(G2_COORDINATES, coordinates):
            if len(coordinate) != 32:
                raise ValidationError(
                    f"G2 coordinate {name} must be 32 bytes, got {len(coordinate)}"
                )
        return cls(*coordinates)

    def to_bytes(self) -> G2PublicKey:
        return G2PublicKey(b"".join(self))

    def to_hex_dict(self) -> HexPointDict:
        return {name: encode_hex(getattr(self, name)) for name in G2_COORDINATES}


class Validator(NamedTuple):
    address: Address
    g1_pub_key: G1PublicKey
    weight: int


class EpochRecord(NamedTuple):
    """
    The validator set governing one epoch. The index of a validator in
    ``validators`` is its bit in the signer and removal bitmaps.
    """

    epoch: int
    validators: Tuple[Validator, ...]
    threshold: int

    @property
    def total_weight(self) -> int:
        return sum(validator.weight for validator in self.validators)

    @property
    def addresses(self) -> Tuple[Address, ...]:
        return tuple(validator.address for validator in self.validators)

    @property
    def g1_pub_keys(self) -> Tuple[G1PublicKey, ...]:
        return tuple(validator.g1_pub_key for validator in self.validators)


class MapLightClient(NamedTuple):
    """
    The persisted state of the light client. Treated as a value: operations
    return an updated copy and never modify ``epoch_records`` in place.
    """

    # There is no FrozenDict, the map is copied whenever it changes
    epoch_records: Dict[int, EpochRecord]
    epoch_size: int
    header_height: int
    max_records: int


class ReceiptProof(NamedTuple):
    header: bytes
    agg_pk: G2Point
    key_index: Union[bytes, int]
    proof: Sequence[bytes]
    receipt: ReceiptData


class HeaderAdvanced(NamedTuple):
    """
    Emitted once a header moved the light client into the next epoch.
    """

    header_height: int
    next_epoch: int
