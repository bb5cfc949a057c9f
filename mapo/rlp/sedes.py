from rlp.sedes import (
    Binary,
)

from mapo.constants import (
    ADDRESS_LENGTH,
    BLOOM_BYTE_LENGTH,
    HASH_LENGTH,
    NONCE_LENGTH,
)

address = Binary.fixed_length(ADDRESS_LENGTH)
hash32 = Binary.fixed_length(HASH_LENGTH)
bloom = Binary.fixed_length(BLOOM_BYTE_LENGTH)
nonce = Binary.fixed_length(NONCE_LENGTH)

# BLS keys as carried in Istanbul extra-data
g1_public_key = Binary.fixed_length(64)
bls_public_key = Binary.fixed_length(128)
