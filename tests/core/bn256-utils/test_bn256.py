from eth_utils import (
    ValidationError,
)
from py_ecc import (
    optimized_bn128 as bn128,
)
import pytest

from mapo._utils.bn256 import (
    decode_g1,
    decode_g2,
    encode_g1,
    encode_g2,
    is_bit_set,
    pairing_check,
    sum_points,
)

G1_POINTS = tuple(encode_g1(bn128.multiply(bn128.G1, secret)) for secret in (3, 5, 7))


@pytest.mark.parametrize("secret", (1, 2, 12345))
def test_g1_encoding_round_trip(secret):
    point = bn128.multiply(bn128.G1, secret)
    encoded = encode_g1(point)

    assert len(encoded) == 64
    assert bn128.eq(decode_g1(encoded), point)


@pytest.mark.parametrize("secret", (1, 2, 12345))
def test_g2_encoding_round_trip(secret):
    point = bn128.multiply(bn128.G2, secret)
    encoded = encode_g2(point)

    assert len(encoded) == 128
    assert bn128.eq(decode_g2(encoded), point)


def test_g2_encoding_puts_real_part_first():
    x, y = bn128.normalize(bn128.G2)
    encoded = encode_g2(bn128.G2)

    assert int.from_bytes(encoded[:32], "big") == x.coeffs[0]
    assert int.from_bytes(encoded[32:64], "big") == x.coeffs[1]
    assert int.from_bytes(encoded[64:96], "big") == y.coeffs[0]
    assert int.from_bytes(encoded[96:], "big") == y.coeffs[1]


def test_point_at_infinity():
    assert bn128.is_inf(decode_g1(64 * b"\x00"))
    assert bn128.is_inf(decode_g2(128 * b"\x00"))
    assert encode_g1(bn128.Z1) == 64 * b"\x00"


@pytest.mark.parametrize(
    "encoded",
    (
        b"",
        63 * b"\x00",
        # (1, 1) is not on the curve
        31 * b"\x00" + b"\x01" + 31 * b"\x00" + b"\x01",
        # coordinates above the field modulus
        64 * b"\xff",
    ),
)
def test_decode_invalid_g1(encoded):
    with pytest.raises(ValidationError):
        decode_g1(encoded)


@pytest.mark.parametrize(
    "encoded",
    (
        b"",
        127 * b"\x00",
        encode_g2(bn128.G2)[:-1] + b"\x00",
        128 * b"\xff",
    ),
)
def test_decode_invalid_g2(encoded):
    with pytest.raises(ValidationError):
        decode_g2(encoded)


@pytest.mark.parametrize(
    "bitmap, index, expected",
    ((0b101, 0, True), (0b101, 1, False), (0b101, 2, True), (0b101, 64, False)),
)
def test_is_bit_set(bitmap, index, expected):
    assert is_bit_set(bitmap, index) is expected


@pytest.mark.parametrize(
    "bitmap, secret",
    ((0b001, 3), (0b010, 5), (0b101, 10), (0b111, 15), (0b1111, 15)),
)
def test_sum_points(bitmap, secret):
    assert bn128.eq(sum_points(G1_POINTS, bitmap), bn128.multiply(bn128.G1, secret))


def test_sum_points_requires_a_selection():
    with pytest.raises(ValidationError):
        sum_points(G1_POINTS, 0)
    with pytest.raises(ValidationError):
        sum_points(G1_POINTS, 0b1000)


def test_pairing_check():
    a = bn128.multiply(bn128.G1, 6)
    b = bn128.multiply(bn128.G2, 6)

    assert pairing_check(((bn128.G2, a), (b, bn128.neg(bn128.G1))))
    assert not pairing_check(((bn128.G2, a), (bn128.G2, bn128.neg(bn128.G1))))
