from enum import (
    IntEnum,
)

# 64 bytes ECDSA signature + 1 byte recovery id
ECDSA_SIGNATURE_LENGTH = 64 + 1

# Weight given to validators added through extra-data
DEFAULT_VALIDATOR_WEIGHT = 1

SECPK1_N = 115792089237316195423570985008687907852837564279074904382605163141518161494337  # noqa: E501

DEFAULT_EPOCH_SIZE = 50000
DEFAULT_MAX_RECORDS = 20


class IstanbulMsg(IntEnum):
    PRE_PREPARE = 0
    PREPARE = 1
    COMMIT = 2
    ROUND_CHANGE = 3
