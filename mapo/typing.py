from typing import (
    Dict,
    NewType,
    Tuple,
)

from eth_typing import (
    Address,
    Hash32,
)

# 64 byte big endian (x, y) encoding of an alt_bn128 G1 point
G1PublicKey = NewType("G1PublicKey", bytes)

# 128 byte big endian (xr, xi, yr, yi) encoding of an alt_bn128 G2 point
G2PublicKey = NewType("G2PublicKey", bytes)

AccountId = NewType("AccountId", bytes)

HeaderRange = Tuple[int, int]

HexPointDict = Dict[str, str]

__all__ = (
    "AccountId",
    "Address",
    "G1PublicKey",
    "G2PublicKey",
    "Hash32",
    "HeaderRange",
    "HexPointDict",
)
