"""
Commitment Builder
Turns an allocation into leaf commitments, a sorted-pair Merkle tree,
and one claim record per address.

Leaf rule: keccak256(abi.encodePacked(uint256 index, address account, uint256 amount))

The index is part of the leaf so that two identical (account, amount)
pairs at different positions hash differently and a proof is bound to
its position.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from core.amounts import format_units
from core.crypto.hashing import hash_leaf, to_hex
from core.merkle.merkle_tree import MerkleProof, MerkleTree, verify_proof
from core.schemas.distribution import ClaimRecord
from core.schemas.errors import (
    IndexOutOfRangeException,
    InvalidInputException,
    MerkleVerificationException,
)
from core.schemas.holders import AllocationEntry, AllocationResult, normalize_address

logger = logging.getLogger(__name__)


def _validate_entries(entries: Sequence[AllocationEntry]) -> None:
    if len(entries) == 0:
        raise InvalidInputException("Cannot build a commitment from an empty allocation list")

    seen: set[str] = set()
    for position, entry in enumerate(entries):
        if entry.index != position:
            raise InvalidInputException(
                f"Allocation indices must be contiguous from 0; "
                f"found index {entry.index} at position {position}",
                field_path=f"entries[{position}].index",
            )
        if entry.address in seen:
            raise InvalidInputException(
                f"Duplicate address in allocation: {entry.address}",
                field_path=f"entries[{position}].address",
            )
        seen.add(entry.address)


class MerkleCommitment:
    """
    Write-once commitment over an allocation.

    Holds the entries, their leaf hashes and the retained tree levels.
    Nothing here is mutated after construction.
    """

    def __init__(self, entries: Iterable[AllocationEntry]) -> None:
        self._entries: tuple[AllocationEntry, ...] = tuple(entries)
        _validate_entries(self._entries)
        self._tree = MerkleTree(
            [hash_leaf(e.index, e.address, e.amount) for e in self._entries]
        )
        self._positions: dict[str, int] = {e.address: e.index for e in self._entries}

    @classmethod
    def from_allocation(cls, allocation: AllocationResult) -> "MerkleCommitment":
        return cls(allocation.entries)

    @property
    def entries(self) -> tuple[AllocationEntry, ...]:
        return self._entries

    @property
    def tree(self) -> MerkleTree:
        return self._tree

    @property
    def root(self) -> bytes:
        return self._tree.root

    @property
    def root_hex(self) -> str:
        return to_hex(self._tree.root)

    def __len__(self) -> int:
        return len(self._entries)

    def leaf(self, index: int) -> bytes:
        self._check_index(index)
        return self._tree.leaves[index]

    def proof(self, index: int) -> list[bytes]:
        """Sibling hashes for the allocation at index."""
        return self._tree.proof(index)

    def merkle_proof(self, index: int) -> MerkleProof:
        return self._tree.merkle_proof(index)

    def index_of(self, address: str) -> int:
        """
        Raises:
            IndexOutOfRangeException: If the address has no allocation
        """
        account = normalize_address(address)
        if account not in self._positions:
            raise IndexOutOfRangeException(
                f"No allocation for address {account}",
                details={"address": account},
            )
        return self._positions[account]

    def proof_for_address(self, address: str) -> list[bytes]:
        return self.proof(self.index_of(address))

    def claim_record(self, index: int, decimals: int = 18) -> ClaimRecord:
        self._check_index(index)
        entry = self._entries[index]
        return ClaimRecord(
            index=entry.index,
            amount=str(entry.amount),
            amount_formatted=format_units(entry.amount, decimals),
            proof=[to_hex(sibling) for sibling in self.proof(index)],
        )

    def claim_records(self, decimals: int = 18) -> dict[str, ClaimRecord]:
        """Claim record per lowercase address, in index order."""
        return {
            entry.address: self.claim_record(entry.index, decimals)
            for entry in self._entries
        }

    def verify_claim(self, index: int, address: str, amount: int, proof: Sequence[bytes]) -> bool:
        """Re-derive the leaf for (index, address, amount) and check it against the root."""
        return verify_claim(self.root, index, address, amount, proof)

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._entries):
            raise IndexOutOfRangeException(
                f"Leaf index {index} out of range for {len(self._entries)} leaves",
                index=index,
                size=len(self._entries),
            )


def build_commitment(allocation: AllocationResult | Sequence[AllocationEntry]) -> MerkleCommitment:
    """
    Build the commitment for an allocation.

    Raises:
        InvalidInputException: If the allocation is empty, indices are not
            contiguous from 0, or an address repeats
    """
    entries = allocation.entries if isinstance(allocation, AllocationResult) else allocation
    commitment = MerkleCommitment(entries)
    logger.debug(
        "Built commitment over %d leaves (depth %d): %s",
        len(commitment), commitment.tree.depth, commitment.root_hex,
    )
    return commitment


def verify_claim(
    root: bytes,
    index: int,
    address: str,
    amount: int,
    proof: Sequence[bytes],
) -> bool:
    """Verify a claim against a published root without the full tree."""
    leaf = hash_leaf(index, address, amount)
    return verify_proof(leaf, proof, root)


def assert_claim(
    root: bytes,
    index: int,
    address: str,
    amount: int,
    proof: Sequence[bytes],
) -> None:
    """
    Like verify_claim, but raises on failure.

    Raises:
        MerkleVerificationException: If the proof does not recompute root
    """
    if not verify_claim(root, index, address, amount, proof):
        raise MerkleVerificationException(
            f"Proof for {normalize_address(address)} does not match root {to_hex(root)}",
            leaf_index=index,
            details={"address": normalize_address(address), "amount": str(amount)},
        )


__all__ = [
    "MerkleCommitment",
    "build_commitment",
    "verify_claim",
    "assert_claim",
]
