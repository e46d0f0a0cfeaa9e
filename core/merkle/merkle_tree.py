"""
Merkle Tree Implementation
Sorted-pair Merkle tree construction, proof generation, and verification.

This module provides:
- Level-by-level tree construction over an ordered leaf list
- Merkle proof generation for any leaf index
- Merkle proof verification against a root

Canonical Commitment Rules (Hard Contracts):
1. Leaves are taken in the order given and are never sorted
2. Parent hashing: parent = keccak256(min(a, b) + max(a, b))
   - Implemented via core.crypto.hashing.hash_sorted_pair()
3. Odd node rule: a lone trailing node is promoted unchanged
4. Single leaf: root = leaf, proof = []
5. Empty leaves are rejected

Because pairs are sorted before hashing, a proof is just the list of
sibling hashes; the verifier never needs left/right flags. This matches
OpenZeppelin's MerkleProof.verify and merkletreejs with sortPairs=true.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from core.crypto.hashing import hash_sorted_pair
from core.schemas.errors import IndexOutOfRangeException, InvalidInputException


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf in a Merkle tree.

    Attributes:
        leaf: The leaf hash being proven
        index: The 0-based index of the leaf in the original leaf list
        siblings: Sibling hashes from bottom to top of tree
        root: The Merkle root this proof is against
    """
    leaf: bytes
    index: int
    siblings: tuple[bytes, ...]
    root: bytes

    def __post_init__(self) -> None:
        if self.index < 0:
            raise IndexOutOfRangeException(
                f"Leaf index must be non-negative, got {self.index}",
                index=self.index,
            )


def build_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first and root last.

    Example: [a, b, c] -> [[a, b, c], [ab, c], [abc]]
    where c is promoted unchanged on the second level.

    Raises:
        InvalidInputException: If leaves is empty
    """
    if len(leaves) == 0:
        raise InvalidInputException("Cannot build a Merkle tree from an empty leaf list")

    levels: list[list[bytes]] = [list(leaves)]
    current = levels[0]

    while len(current) > 1:
        next_level: list[bytes] = []
        for i in range(0, len(current) - 1, 2):
            next_level.append(hash_sorted_pair(current[i], current[i + 1]))
        if len(current) % 2 == 1:
            next_level.append(current[-1])
        levels.append(next_level)
        current = next_level

    return levels


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """Compute the root of a sorted-pair tree over the given leaves."""
    return build_levels(leaves)[-1][0]


def proof_from_levels(levels: Sequence[Sequence[bytes]], index: int) -> list[bytes]:
    """
    Collect the sibling path for a leaf from pre-built levels.

    A node without a sibling (the promoted tail of an odd level)
    contributes nothing to the proof.

    Raises:
        IndexOutOfRangeException: If index is not a leaf position
    """
    leaf_count = len(levels[0])
    if index < 0 or index >= leaf_count:
        raise IndexOutOfRangeException(
            f"Leaf index {index} out of range for {leaf_count} leaves",
            index=index,
            size=leaf_count,
        )

    siblings: list[bytes] = []
    position = index
    for level in levels[:-1]:
        sibling = position ^ 1
        if sibling < len(level):
            siblings.append(level[sibling])
        position //= 2
    return siblings


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Raises:
        InvalidInputException: If leaves is empty
        IndexOutOfRangeException: If index is out of range
    """
    levels = build_levels(leaves)
    siblings = proof_from_levels(levels, index)
    return MerkleProof(
        leaf=levels[0][index],
        index=index,
        siblings=tuple(siblings),
        root=levels[-1][0],
    )


def process_proof(leaf: bytes, siblings: Sequence[bytes]) -> bytes:
    """Fold the sibling list into a root using the sort-pairs rule."""
    current = leaf
    for sibling in siblings:
        current = hash_sorted_pair(current, sibling)
    return current


def verify_proof(leaf: bytes, siblings: Sequence[bytes], root: bytes) -> bool:
    """Check that leaf and siblings recompute root."""
    return process_proof(leaf, siblings) == root


def verify_merkle_proof(proof: MerkleProof) -> bool:
    """Verify a MerkleProof against its own claimed root."""
    return verify_proof(proof.leaf, proof.siblings, proof.root)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of levels from leaves to root (inclusive).

    A single leaf has depth 1, two leaves depth 2, three leaves depth 3.
    Promotion does not change the level count: ceil(log2(n)) + 1.
    """
    if num_leaves == 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1

    return depth


class MerkleTree:
    """
    A sorted-pair Merkle tree with all levels retained for proof extraction.

    Example:
        >>> tree = MerkleTree([hash_leaf(0, addr, 250), hash_leaf(1, other, 750)])
        >>> proof = tree.proof(1)
        >>> verify_proof(tree.leaves[1], proof, tree.root)
        True
    """

    def __init__(self, leaves: Sequence[bytes]) -> None:
        self._levels = build_levels(leaves)

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return tuple(self._levels[0])

    @property
    def depth(self) -> int:
        return len(self._levels)

    def __len__(self) -> int:
        return len(self._levels[0])

    def proof(self, index: int) -> list[bytes]:
        """Sibling hashes for the leaf at index, leaf to root."""
        return proof_from_levels(self._levels, index)

    def merkle_proof(self, index: int) -> MerkleProof:
        """Proof for the leaf at index bundled with leaf and root."""
        siblings = self.proof(index)
        return MerkleProof(
            leaf=self._levels[0][index],
            index=index,
            siblings=tuple(siblings),
            root=self.root,
        )


__all__ = [
    "MerkleProof",
    "MerkleTree",
    "build_levels",
    "build_merkle_root",
    "proof_from_levels",
    "build_merkle_proof",
    "process_proof",
    "verify_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
