"""
Map's hash to G1: two independent field elements derived from keccak, each
mapped to the curve with the Fouque-Tibouchi encoding, then added.
"""
from eth_hash.auto import (
    keccak,
)
from eth_utils import (
    ValidationError,
    big_endian_to_int,
)
from py_ecc import (
    optimized_bn128 as bn128,
)
from py_ecc.fields import (
    optimized_bn128_FQ as FQ,
)

from .bn256 import (
    G1Point,
)

P = bn128.field_modulus
CURVE_B = 3

HASH_CONST_1 = 2203960485148121921418603742825762020974279258880205651966
HASH_CONST_2 = 4407920970296243842837207485651524041948558517760411303933
HASH_CONST_3 = (
    14592161914559516814830937163504850059130874104865215775126025263096817472389
)
HASH_CONST_4 = 4

TWO_256_MOD_P = (
    6350874878119819312338956282401532409788428879151445726012394534686998597021
)
P_MINUS_1 = P - 1
P_MINUS_2 = P - 2
P_MINUS_1_OVER_2 = (P - 1) // 2
P_PLUS_1_OVER_4 = (P + 1) // 4


def hash_to_base(message: bytes, dsp0: int, dsp1: int) -> int:
    hash0 = big_endian_to_int(keccak(bytes([dsp0]) + message))
    hash1 = big_endian_to_int(keccak(bytes([dsp1]) + message))

    return ((hash0 * TWO_256_MOD_P) % P + hash1 % P) % P


def _invert(value: int) -> int:
    return pow(value, P_MINUS_2, P)


def _neg(value: int) -> int:
    return 0 if value == 0 else P - value


def _legendre(value: int) -> int:
    symbol = pow(value, P_MINUS_1_OVER_2, P)
    if symbol == 0:
        return 0
    elif symbol == 1:
        return 1
    else:
        return -1


def _sqrt(value: int) -> int:
    return pow(value, P_PLUS_1_OVER_4, P)


def _sign0(value: int) -> int:
    return P_MINUS_1 if value > P_MINUS_1_OVER_2 else 1


def _curve_rhs(x: int) -> int:
    return (pow(x, 3, P) + CURVE_B) % P


def is_on_curve(x: int, y: int) -> bool:
    return pow(y, 2, P) == _curve_rhs(x)


def base_to_g1(t: int) -> G1Point:
    ap1 = pow(t, 2, P)
    ap2 = (ap1 + HASH_CONST_4) % P

    alpha = _invert((ap1 * ap2) % P)

    tmp = pow(ap2, 3, P)
    ap1 = pow(ap1, 2, P)

    x1 = (HASH_CONST_2 * ap1) % P
    x1 = (x1 * alpha) % P
    x1 = (_neg(x1) + HASH_CONST_1) % P

    x2 = _neg((x1 + 1) % P)

    x3 = (HASH_CONST_3 * tmp) % P
    x3 = (x3 * alpha) % P
    x3 = (_neg(x3) + 1) % P

    residue1 = _legendre(_curve_rhs(x1))
    residue2 = _legendre(_curve_rhs(x2))

    # both factors are non-positive, so floor division matches truncation
    index = (residue1 - 1) * (residue2 - 3) // 4 + 1
    if index == 1:
        x = x1
    elif index == 2:
        x = x2
    else:
        x = x3

    y = _sqrt(_curve_rhs(x))
    y = (y * _sign0(t)) % P

    if not is_on_curve(x, y):
        raise ValidationError("Invalid point: not on elliptic curve")

    return (FQ(x), FQ(y), FQ(1))


def hash_to_g1(message: bytes) -> G1Point:
    t0 = hash_to_base(message, 0x00, 0x01)
    t1 = hash_to_base(message, 0x02, 0x03)

    point = bn128.add(base_to_g1(t0), base_to_g1(t1))

    x, y = bn128.normalize(point)
    if not is_on_curve(x.n, y.n):
        raise ValidationError("Invalid hash point: not on elliptic curve")
    if x.n in (0, 1):
        raise ValidationError("Dangerous hash point: not safe for signing")

    return point
