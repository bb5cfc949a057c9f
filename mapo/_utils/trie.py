from typing import (
    Sequence,
)

from eth_typing import (
    Hash32,
)
import rlp
from trie import (
    HexaryTrie,
)
from trie.exceptions import (
    BadTrieProof,
    InvalidNibbles,
    InvalidNode,
    ValidationError as TrieValidationError,
)

from mapo.constants import (
    MAX_KEY_INDEX_LENGTH,
    MAX_PROOF_NODES,
)
from mapo.exceptions import (
    ProofError,
)


def verify_trie_proof(
    expected_root: Hash32, key: bytes, proof: Sequence[bytes]
) -> bytes:
    """
    Walk the RLP encoded ``proof`` nodes from ``expected_root`` along ``key``
    and return the value stored at the leaf. Raise ``ProofError`` if the walk
    breaks or the key is not present.
    """
    if not key:
        raise ProofError("Trie key must not be empty")
    if len(key) > MAX_KEY_INDEX_LENGTH:
        raise ProofError(
            f"Trie key of {len(key)} bytes exceeds the limit of {MAX_KEY_INDEX_LENGTH}"
        )
    if not proof:
        raise ProofError("Proof must contain at least one node")
    if len(proof) > MAX_PROOF_NODES:
        raise ProofError(
            f"Proof of {len(proof)} nodes exceeds the limit of {MAX_PROOF_NODES}"
        )

    try:
        raw_nodes = tuple(rlp.decode(node) for node in proof)
    except rlp.DecodingError as err:
        raise ProofError(f"Proof contains an undecodable node: {err}") from err

    try:
        value = HexaryTrie.get_from_proof(expected_root, key, raw_nodes)
    except BadTrieProof as err:
        raise ProofError(f"Proof does not connect to the receipt root: {err}") from err
    except (rlp.DecodingError, InvalidNibbles, InvalidNode, TrieValidationError) as err:
        raise ProofError(f"Malformed proof node: {err}") from err

    if not value:
        raise ProofError("Key is not included in the trie")
    return value
