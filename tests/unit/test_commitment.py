"""
Commitment Unit Tests
Tests for core/merkle/commitment.py

1. Leaves are hash_leaf(index, address, amount) in allocation order
2. Every claim verifies against the root
3. Wrong index, address or amount fails
4. Claim records carry decimal-string amounts and 0x proofs
5. Invalid allocation lists rejected
"""
import pytest

from core.allocation import allocate
from core.crypto.hashing import hash_leaf, hash_sorted_pair, to_hex
from core.merkle.commitment import (
    MerkleCommitment,
    assert_claim,
    build_commitment,
    verify_claim,
)
from core.schemas.errors import (
    IndexOutOfRangeException,
    InvalidInputException,
    MerkleVerificationException,
)
from core.schemas.holders import AllocationEntry

from fixtures.common import ADDR_A, ADDR_B, ADDR_C, make_commitment

# (0, ADDR_A, 250) and (1, ADDR_B, 750), hashed independently of this package
TWO_HOLDER_LEAF_A = "0x460b87207c8b6415650d4e87465b291b6e2640dc857d873837966ea93a87e921"
TWO_HOLDER_LEAF_B = "0xef9e0775800356d63b3847f8df115c9c6cd885188e113d251216006ca6547c88"
TWO_HOLDER_ROOT = "0xb9fc60a1e28df63c8fca7b6d12c08d5ec412312165bfa9746da2be10be948f85"


class TestCommitmentConstruction:
    """Tests for build_commitment()."""

    def test_two_holder_root(self, scenario_holders):
        commitment = build_commitment(allocate(scenario_holders, 1000))

        leaf_a = hash_leaf(0, ADDR_A, 250)
        leaf_b = hash_leaf(1, ADDR_B, 750)
        assert commitment.root == hash_sorted_pair(leaf_a, leaf_b)
        assert commitment.leaf(0) == leaf_a
        assert commitment.leaf(1) == leaf_b
        assert commitment.proof(0) == [leaf_b]
        assert commitment.proof(1) == [leaf_a]

    def test_two_holder_root_pinned(self, scenario_holders):
        commitment = build_commitment(allocate(scenario_holders, 1000))

        assert to_hex(commitment.leaf(0)) == TWO_HOLDER_LEAF_A
        assert to_hex(commitment.leaf(1)) == TWO_HOLDER_LEAF_B
        assert commitment.root_hex == TWO_HOLDER_ROOT
        assert [to_hex(p) for p in commitment.proof(0)] == [TWO_HOLDER_LEAF_B]
        assert [to_hex(p) for p in commitment.proof(1)] == [TWO_HOLDER_LEAF_A]

    def test_single_entry_root_is_leaf(self):
        commitment = build_commitment(allocate([(ADDR_A, 1)], 500))
        assert commitment.root == hash_leaf(0, ADDR_A, 500)
        assert commitment.proof(0) == []

    def test_root_hex(self, commitment):
        assert commitment.root_hex == to_hex(commitment.root)
        assert len(commitment.root_hex) == 66

    def test_deterministic(self):
        assert make_commitment().root == make_commitment().root

    def test_from_allocation(self, allocation):
        assert MerkleCommitment.from_allocation(allocation).root == build_commitment(allocation).root

    def test_accepts_entry_list(self, allocation):
        assert build_commitment(list(allocation.entries)).root == build_commitment(allocation).root

    def test_amount_changes_root(self):
        assert make_commitment(total_amount=1000).root != make_commitment(total_amount=1001).root

    def test_empty_rejected(self):
        with pytest.raises(InvalidInputException, match="empty"):
            build_commitment([])

    def test_non_contiguous_indices_rejected(self):
        entries = [
            AllocationEntry(index=0, address=ADDR_A, amount=1),
            AllocationEntry(index=2, address=ADDR_B, amount=1),
        ]
        with pytest.raises(InvalidInputException, match="contiguous"):
            build_commitment(entries)

    def test_duplicate_address_rejected(self):
        entries = [
            AllocationEntry(index=0, address=ADDR_A, amount=1),
            AllocationEntry(index=1, address=ADDR_A, amount=2),
        ]
        with pytest.raises(InvalidInputException, match="Duplicate"):
            build_commitment(entries)


class TestClaimVerification:
    """Tests for verify_claim() and assert_claim()."""

    def test_every_claim_verifies(self, allocation, commitment):
        for entry in allocation.entries:
            proof = commitment.proof(entry.index)
            assert verify_claim(commitment.root, entry.index, entry.address, entry.amount, proof)
            assert commitment.verify_claim(entry.index, entry.address, entry.amount, proof)

    def test_wrong_amount_fails(self, allocation, commitment):
        entry = allocation.entries[2]
        proof = commitment.proof(entry.index)
        assert not verify_claim(commitment.root, entry.index, entry.address, entry.amount + 1, proof)

    def test_wrong_index_fails(self, allocation, commitment):
        entry = allocation.entries[1]
        proof = commitment.proof(entry.index)
        assert not verify_claim(commitment.root, entry.index + 1, entry.address, entry.amount, proof)

    def test_wrong_address_fails(self, allocation, commitment):
        entry = allocation.entries[0]
        proof = commitment.proof(entry.index)
        assert not verify_claim(commitment.root, entry.index, ADDR_C, entry.amount, proof)

    def test_proof_of_other_claim_fails(self, allocation, commitment):
        entry = allocation.entries[0]
        assert not verify_claim(
            commitment.root, entry.index, entry.address, entry.amount, commitment.proof(3)
        )

    def test_mixed_case_address_verifies(self, scenario_holders):
        commitment = build_commitment(allocate(scenario_holders, 1000))
        assert verify_claim(commitment.root, 1, "0x" + "BB" * 20, 750, commitment.proof(1))

    def test_assert_claim_raises(self, commitment):
        with pytest.raises(MerkleVerificationException) as exc_info:
            assert_claim(commitment.root, 0, ADDR_C, 1, commitment.proof(0))
        assert exc_info.value.details["leaf_index"] == 0
        assert exc_info.value.code == "MERKLE_PROOF_INVALID"

    def test_assert_claim_passes(self, allocation, commitment):
        entry = allocation.entries[4]
        assert_claim(commitment.root, entry.index, entry.address, entry.amount, commitment.proof(4))


class TestAddressLookup:
    """Tests for index_of() and proof_for_address()."""

    def test_index_of(self, allocation, commitment):
        for entry in allocation.entries:
            assert commitment.index_of(entry.address) == entry.index
            assert commitment.index_of(entry.address.upper().replace("0X", "0x")) == entry.index

    def test_unknown_address(self, commitment):
        with pytest.raises(IndexOutOfRangeException, match="No allocation"):
            commitment.index_of(ADDR_C)

    def test_proof_for_address(self, allocation, commitment):
        entry = allocation.entries[3]
        assert commitment.proof_for_address(entry.address) == commitment.proof(3)

    def test_leaf_out_of_range(self, commitment):
        with pytest.raises(IndexOutOfRangeException):
            commitment.leaf(len(commitment))


class TestClaimRecords:
    """Tests for claim_record() and claim_records()."""

    def test_claim_record_fields(self, scenario_holders):
        commitment = build_commitment(allocate(scenario_holders, 1000 * 10**18))
        record = commitment.claim_record(1)

        assert record.index == 1
        assert record.amount == str(750 * 10**18)
        assert record.amount_int == 750 * 10**18
        assert record.amount_formatted == "750"
        assert record.proof == [to_hex(commitment.leaf(0))]

    def test_claim_records_keyed_by_address_in_index_order(self, allocation, commitment):
        records = commitment.claim_records()
        assert list(records) == [e.address for e in allocation.entries]
        assert [r.index for r in records.values()] == list(range(len(allocation)))

    def test_claim_records_respect_decimals(self, scenario_holders):
        commitment = build_commitment(allocate(scenario_holders, 1000))
        assert commitment.claim_records(decimals=2)[ADDR_A].amount_formatted == "2.5"

    def test_serialized_alias(self, commitment):
        dumped = commitment.claim_record(0).model_dump(by_alias=True)
        assert set(dumped) == {"index", "amount", "amountFormatted", "proof"}

    def test_claim_record_out_of_range(self, commitment):
        with pytest.raises(IndexOutOfRangeException):
            commitment.claim_record(-1)
