from eth_typing import (
    Address,
    Hash32,
)

#
# Sizes
#
HASH_LENGTH = 32
ADDRESS_LENGTH = 20
BLOOM_BYTE_LENGTH = 256
NONCE_LENGTH = 8

# Recipients on the local chain are 32-byte account ids
ACCOUNT_ID_LENGTH = 32

ZERO_ADDRESS = Address(ADDRESS_LENGTH * b"\x00")
ZERO_HASH32 = Hash32(HASH_LENGTH * b"\x00")
EMPTY_BLOOM = BLOOM_BYTE_LENGTH * b"\x00"
EMPTY_NONCE = NONCE_LENGTH * b"\x00"

UINT_16_MAX = 2**16 - 1
UINT_64_MAX = 2**64 - 1
UINT_128_MAX = 2**128 - 1

#
# Proof limits
#
# Receipt keys are RLP encoded indices, so a proof can never be deeper than
# the number of nibbles in the key plus the leaf.
MAX_KEY_INDEX_LENGTH = 9
MAX_PROOF_NODES = 2 * MAX_KEY_INDEX_LENGTH + 2
