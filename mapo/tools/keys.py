"""
Key material for Map validators. Only meant for tests and local networks,
the secrets are derived from small integers.
"""
from typing import (
    Iterable,
    NamedTuple,
    Tuple,
)

from eth_keys import (
    keys,
)
from eth_typing import (
    Address,
)
from eth_utils import (
    int_to_big_endian,
)
from py_ecc import (
    optimized_bn128 as bn128,
)

from mapo._utils.bn256 import (
    G1Point,
    encode_g1,
    encode_g2,
)
from mapo._utils.hash_to_curve import (
    hash_to_g1,
)
from mapo.consensus.istanbul.constants import (
    DEFAULT_VALIDATOR_WEIGHT,
)
from mapo.consensus.istanbul.datatypes import (
    G2Point,
    Validator,
)
from mapo.typing import (
    G1PublicKey,
    G2PublicKey,
)


class ValidatorKey(NamedTuple):
    private_key: keys.PrivateKey
    bls_secret: int

    @property
    def address(self) -> Address:
        return self.private_key.public_key.to_canonical_address()

    @property
    def g1_pub_key(self) -> G1PublicKey:
        return G1PublicKey(encode_g1(bn128.multiply(bn128.G1, self.bls_secret)))

    @property
    def g2_pub_key(self) -> G2PublicKey:
        return G2PublicKey(encode_g2(bn128.multiply(bn128.G2, self.bls_secret)))

    def bls_sign(self, message: bytes) -> G1Point:
        return bn128.multiply(hash_to_g1(message), self.bls_secret)

    def to_validator(self, weight: int = DEFAULT_VALIDATOR_WEIGHT) -> Validator:
        return Validator(self.address, self.g1_pub_key, weight)


def make_validator_key(seed: int) -> ValidatorKey:
    private_key = keys.PrivateKey(int_to_big_endian(seed).rjust(32, b"\x00"))
    return ValidatorKey(private_key, bls_secret=seed % bn128.curve_order)


def make_validator_keys(count: int, start: int = 1) -> Tuple[ValidatorKey, ...]:
    return tuple(make_validator_key(seed) for seed in range(start, start + count))


def aggregate_g2_pub_keys(validator_keys: Iterable[ValidatorKey]) -> G2Point:
    total = sum(key.bls_secret for key in validator_keys) % bn128.curve_order
    return G2Point.from_bytes(encode_g2(bn128.multiply(bn128.G2, total)))
