from typing import (
    cast,
)

from eth_hash.auto import (
    keccak,
)
from eth_typing import (
    Address,
    Hash32,
)
from eth_utils import (
    encode_hex,
)
import rlp
from rlp.sedes import (
    big_endian_int,
    binary,
)

from mapo.constants import (
    EMPTY_BLOOM,
    EMPTY_NONCE,
    UINT_64_MAX,
    ZERO_ADDRESS,
    ZERO_HASH32,
)
from mapo.exceptions import (
    HeaderDecodeError,
    IstanbulExtraDecodeError,
)

from .istanbul import (
    ISTANBUL_EXTRA_VANITY_LENGTH,
    IstanbulExtra,
)
from .sedes import (
    address,
    bloom,
    hash32,
    nonce,
)


class MapHeader(rlp.Serializable):
    """
    A block header of the Map chain. The consensus data lives in ``extra``,
    see :class:`~mapo.rlp.istanbul.IstanbulExtra`.
    """

    fields = [
        ("parent_hash", hash32),
        ("coinbase", address),
        ("root", hash32),
        ("tx_hash", hash32),
        ("receipt_hash", hash32),
        ("bloom", bloom),
        ("number", big_endian_int),
        ("gas_limit", big_endian_int),
        ("gas_used", big_endian_int),
        ("time", big_endian_int),
        ("extra", binary),
        ("mix_digest", hash32),
        ("nonce", nonce),
        ("base_fee", big_endian_int),
    ]

    def __init__(
        self,
        parent_hash: Hash32 = ZERO_HASH32,
        coinbase: Address = ZERO_ADDRESS,
        root: Hash32 = ZERO_HASH32,
        tx_hash: Hash32 = ZERO_HASH32,
        receipt_hash: Hash32 = ZERO_HASH32,
        bloom: bytes = EMPTY_BLOOM,
        number: int = 0,
        gas_limit: int = 0,
        gas_used: int = 0,
        time: int = 0,
        extra: bytes = b"",
        mix_digest: Hash32 = ZERO_HASH32,
        nonce: bytes = EMPTY_NONCE,
        base_fee: int = 0,
    ) -> None:
        super().__init__(
            parent_hash=parent_hash,
            coinbase=coinbase,
            root=root,
            tx_hash=tx_hash,
            receipt_hash=receipt_hash,
            bloom=bloom,
            number=number,
            gas_limit=gas_limit,
            gas_used=gas_used,
            time=time,
            extra=extra,
            mix_digest=mix_digest,
            nonce=nonce,
            base_fee=base_fee,
        )

    def __str__(self) -> str:
        return f"<MapHeader #{self.number} {encode_hex(self.hash)[2:10]}>"

    @classmethod
    def decode(cls, encoded: bytes) -> "MapHeader":
        try:
            header = rlp.decode(encoded, sedes=cls)
        except (rlp.DecodingError, rlp.DeserializationError) as err:
            raise HeaderDecodeError(f"Malformed header RLP: {err}") from err

        if header.number > UINT_64_MAX:
            raise HeaderDecodeError(f"Header number {header.number} exceeds uint64")
        return header

    def encode(self) -> bytes:
        return rlp.encode(self)

    _hash = None
    _hash_without_seal = None

    @property
    def hash(self) -> Hash32:
        """
        The hash committed to by the aggregated seal. The proposer seal is part
        of it, the aggregated seal is not.
        """
        if self._hash is None:
            self._hash = self._filtered_hash(keep_seal=True)
        return cast(Hash32, self._hash)

    @property
    def hash_without_seal(self) -> Hash32:
        """
        The hash signed by the proposer, with both seals cleared.
        """
        if self._hash_without_seal is None:
            self._hash_without_seal = self._filtered_hash(keep_seal=False)
        return cast(Hash32, self._hash_without_seal)

    @property
    def hex_hash(self) -> str:
        return encode_hex(self.hash)

    @property
    def vanity(self) -> bytes:
        return self.extra[:ISTANBUL_EXTRA_VANITY_LENGTH]

    def rlp_hash(self) -> Hash32:
        return cast(Hash32, keccak(rlp.encode(self)))

    def _filtered_hash(self, keep_seal: bool) -> Hash32:
        if len(self.extra) < ISTANBUL_EXTRA_VANITY_LENGTH:
            return self.rlp_hash()

        try:
            istanbul_extra = IstanbulExtra.from_extra_data(self.extra)
        except IstanbulExtraDecodeError:
            return self.rlp_hash()

        filtered_extra = istanbul_extra.filtered(keep_seal)
        filtered_header = self.copy(extra=filtered_extra.to_extra_data(self.vanity))
        return filtered_header.rlp_hash()
