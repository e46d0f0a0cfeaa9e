"""
Merkle Tree and Commitments
Sorted-pair Merkle tree construction + proof generation/verification.

This module provides:
- MerkleTree / MerkleProof: tree over ordered leaf hashes
- build_merkle_root / build_merkle_proof / verify_proof: functional API
- MerkleCommitment / build_commitment: tree over an allocation, with
  claim records per address

Canonical Commitment Rules:
1. Leaf hashing: keccak256(abi.encodePacked(uint256 index, address, uint256 amount))
2. Parent hashing: keccak256(min(a, b) + max(a, b))
3. Odd node: promoted unchanged to the next level
4. Single leaf: root = leaf, proof = []

Usage:
    from core.allocation import allocate
    from core.merkle import build_commitment, verify_claim

    allocation = allocate(holders, total_amount)
    commitment = build_commitment(allocation)

    proof = commitment.proof(1)
    entry = allocation.entries[1]
    assert verify_claim(commitment.root, entry.index, entry.address, entry.amount, proof)
"""
from .merkle_tree import (
    MerkleProof,
    MerkleTree,
    build_levels,
    build_merkle_root,
    build_merkle_proof,
    process_proof,
    verify_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .commitment import (
    MerkleCommitment,
    build_commitment,
    verify_claim,
    assert_claim,
)


__all__ = [
    # Core types
    "MerkleProof",
    "MerkleTree",
    # Core functions
    "build_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "process_proof",
    "verify_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Allocation commitment
    "MerkleCommitment",
    "build_commitment",
    "verify_claim",
    "assert_claim",
]
