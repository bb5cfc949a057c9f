"""
Helpers for points on the alt_bn128 (bn256) curve as they appear in Map
headers: big endian, 32 bytes per coordinate, ``(x, y)`` for G1 and
``(xr, xi, yr, yi)`` for G2.
"""
from typing import (
    Iterable,
    Sequence,
    Tuple,
)

from eth_utils import (
    ValidationError,
    big_endian_to_int,
    int_to_big_endian,
)
from py_ecc import (
    optimized_bn128 as bn128,
)
from py_ecc.fields import (
    optimized_bn128_FQ as FQ,
    optimized_bn128_FQ2 as FQ2,
    optimized_bn128_FQ12 as FQ12,
)
from py_ecc.typing import (
    Optimized_Point3D,
)

G1Point = Optimized_Point3D[FQ]
G2Point = Optimized_Point3D[FQ2]

G1_ENCODED_LENGTH = 64
G2_ENCODED_LENGTH = 128


def _pad32(value: bytes) -> bytes:
    return value.rjust(32, b"\x00")


def _split_words(encoded: bytes) -> Tuple[int, ...]:
    return tuple(
        big_endian_to_int(encoded[start : start + 32])
        for start in range(0, len(encoded), 32)
    )


def _validate_field_elements(values: Iterable[int]) -> None:
    for value in values:
        if value >= bn128.field_modulus:
            raise ValidationError("Point coordinate is greater than field modulus")


def validate_point(x: int, y: int) -> G1Point:
    _validate_field_elements((x, y))

    if (x, y) != (0, 0):
        p1 = (FQ(x), FQ(y), FQ(1))
        if not bn128.is_on_curve(p1, bn128.b):
            raise ValidationError("Point is not on the curve")
    else:
        p1 = bn128.Z1

    return p1


def decode_g1(encoded: bytes) -> G1Point:
    if len(encoded) != G1_ENCODED_LENGTH:
        raise ValidationError(
            f"G1 point must be {G1_ENCODED_LENGTH} bytes, got {len(encoded)}"
        )
    x, y = _split_words(encoded)
    return validate_point(x, y)


def encode_g1(point: G1Point) -> bytes:
    if bn128.is_inf(point):
        return G1_ENCODED_LENGTH * b"\x00"
    x, y = bn128.normalize(point)
    return _pad32(int_to_big_endian(x.n)) + _pad32(int_to_big_endian(y.n))


def decode_g2(encoded: bytes) -> G2Point:
    if len(encoded) != G2_ENCODED_LENGTH:
        raise ValidationError(
            f"G2 point must be {G2_ENCODED_LENGTH} bytes, got {len(encoded)}"
        )
    x_r, x_i, y_r, y_i = _split_words(encoded)
    _validate_field_elements((x_r, x_i, y_r, y_i))

    fq2_x = FQ2([x_r, x_i])
    fq2_y = FQ2([y_r, y_i])
    if (fq2_x, fq2_y) == (FQ2.zero(), FQ2.zero()):
        return bn128.Z2

    point = (fq2_x, fq2_y, FQ2.one())
    if not bn128.is_on_curve(point, bn128.b2):
        raise ValidationError("G2 point is not on the curve")
    if not bn128.is_inf(bn128.multiply(point, bn128.curve_order)):
        raise ValidationError("G2 point is not in the prime order subgroup")
    return point


def encode_g2(point: G2Point) -> bytes:
    if bn128.is_inf(point):
        return G2_ENCODED_LENGTH * b"\x00"
    x, y = bn128.normalize(point)
    return b"".join(
        _pad32(int_to_big_endian(coefficient))
        for coefficient in (x.coeffs[0], x.coeffs[1], y.coeffs[0], y.coeffs[1])
    )


def is_bit_set(bitmap: int, index: int) -> bool:
    return (bitmap >> index) & 1 == 1


def sum_points(encoded_points: Sequence[bytes], bitmap: int) -> G1Point:
    """
    Add up the G1 points whose index is set in ``bitmap``.
    """
    selected = [
        decode_g1(encoded)
        for index, encoded in enumerate(encoded_points)
        if is_bit_set(bitmap, index)
    ]
    if not selected:
        raise ValidationError("Bitmap does not select any point")

    total = bn128.Z1
    for point in selected:
        total = bn128.add(total, point)
    return total


def pairing_check(pairs: Sequence[Tuple[G2Point, G1Point]]) -> bool:
    """
    Return ``True`` if the product of the pairings of all ``(G2, G1)`` pairs
    is the identity.
    """
    exponent = FQ12.one()
    for q, p in pairs:
        exponent *= bn128.pairing(q, p, final_exponentiate=False)
    return bn128.final_exponentiate(exponent) == FQ12.one()
