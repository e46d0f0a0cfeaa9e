"""
Core cryptographic utilities.

Keccak-256 hashing and packed leaf encoding for the airdrop commitment.
"""
from .hashing import (
    UINT256_MAX,
    LEAF_ENCODED_SIZE,
    keccak256,
    encode_leaf,
    hash_leaf,
    hash_sorted_pair,
    to_hex,
    from_hex,
)

__all__ = [
    "UINT256_MAX",
    "LEAF_ENCODED_SIZE",
    "keccak256",
    "encode_leaf",
    "hash_leaf",
    "hash_sorted_pair",
    "to_hex",
    "from_hex",
]
