"""
Allocator Unit Tests
Tests for core/allocation/allocator.py and core/allocation/remainder.py

1. Proportional floor amounts with exact integers
2. Conservation - achieved <= requested, shortfall < holder count
3. Indices follow input order
4. Empty, duplicate and non-positive input rejected
5. Remainder policies
"""
import pytest
from pydantic import ValidationError

from core.allocation import (
    RemainderPolicy,
    allocate,
    distribute_remainder,
    validate_holders,
)
from core.schemas.errors import InvalidInputException
from core.schemas.holders import AllocationResult, HolderBalance

from fixtures.common import ADDR_A, ADDR_B, ADDR_C, make_address, make_holders


class TestProportionalAllocation:
    """Tests for allocate()."""

    def test_two_holder_scenario(self, scenario_holders):
        result = allocate(scenario_holders, 1000)

        assert [e.amount for e in result.entries] == [250, 750]
        assert [e.index for e in result.entries] == [0, 1]
        assert result.achieved_total == 1000
        assert result.remainder == 0

    def test_accepts_address_balance_pairs(self):
        result = allocate([(ADDR_A, 100), (ADDR_B, 300)], 1000)
        assert [e.address for e in result.entries] == [ADDR_A, ADDR_B]
        assert [e.amount for e in result.entries] == [250, 750]

    def test_floor_division_leaves_remainder(self):
        result = allocate([(ADDR_A, 1), (ADDR_B, 1), (ADDR_C, 1)], 10)

        assert [e.amount for e in result.entries] == [3, 3, 3]
        assert result.achieved_total == 9
        assert result.requested_total == 10
        assert result.remainder == 1

    def test_single_holder_gets_everything(self):
        result = allocate([(ADDR_A, 12345)], 10**24)
        assert result.entries[0].amount == 10**24
        assert result.remainder == 0

    def test_tiny_holder_can_receive_zero(self):
        result = allocate([(ADDR_A, 1), (ADDR_B, 10**30)], 1000)
        assert result.entries[0].amount == 0
        assert result.entries[1].amount == 999

    def test_no_intermediate_overflow(self):
        """balance * total exceeds 2**256 but the quotient is exact."""
        big = 2**200
        result = allocate([(ADDR_A, big), (ADDR_B, big)], 2**100)
        assert [e.amount for e in result.entries] == [2**99, 2**99]

    def test_amount_matches_formula(self, holders):
        total = 1_000_000
        result = allocate(holders, total)
        balance_sum = sum(h.balance for h in holders)

        for holder, entry in zip(holders, result.entries):
            assert entry.amount == holder.balance * total // balance_sum

    def test_mixed_case_address_is_lowercased(self):
        result = allocate([("0x" + "AA" * 20, 5)], 10)
        assert result.entries[0].address == ADDR_A

    def test_result_is_frozen(self, allocation):
        with pytest.raises(ValidationError):
            allocation.entries[0].amount = 1


class TestConservation:
    """Tests for the achieved/requested bound."""

    @pytest.mark.parametrize("total", [1, 7, 999, 10**18, 123_456_789_012_345_678_901])
    def test_achieved_never_exceeds_requested(self, holders, total):
        result = allocate(holders, total)

        assert result.achieved_total == sum(e.amount for e in result.entries)
        assert result.achieved_total <= total
        assert 0 <= result.remainder < len(holders)

    def test_larger_balance_never_gets_less(self, holders):
        result = allocate(holders, 10**21)
        pairs = sorted(zip(holders, result.entries), key=lambda p: p[0].balance)
        amounts = [entry.amount for _, entry in pairs]
        assert amounts == sorted(amounts)

    def test_double_balance_gets_about_double(self):
        result = allocate([(ADDR_A, 2), (ADDR_B, 1), (ADDR_C, 4)], 10**18 + 3)
        a, b = result.entries[0].amount, result.entries[1].amount
        assert abs(a - 2 * b) <= 2

    def test_equal_balances_equal_amounts(self):
        holders = make_holders([50] * 7)
        result = allocate(holders, 1000)
        assert len({e.amount for e in result.entries}) == 1


class TestIndexOrder:
    """Index i is the i-th holder as supplied."""

    def test_indices_follow_input_order(self):
        addresses = [make_address(i) for i in (4, 2, 9)]
        result = allocate(make_holders([5, 6, 7], addresses), 100)

        assert [e.index for e in result.entries] == [0, 1, 2]
        assert [e.address for e in result.entries] == addresses

    def test_reordering_input_changes_indices(self):
        holders = make_holders([10, 20, 30])
        forward = allocate(holders, 600)
        backward = allocate(list(reversed(holders)), 600)

        assert forward.entries[0].address == backward.entries[2].address
        assert forward.entries[0].amount == backward.entries[2].amount

    def test_by_address(self, allocation):
        lookup = allocation.by_address()
        assert len(lookup) == len(allocation)
        for entry in allocation.entries:
            assert lookup[entry.address] is entry


class TestInvalidInput:
    """Tests for rejected allocator input."""

    def test_empty_holders(self):
        with pytest.raises(InvalidInputException, match="empty"):
            allocate([], 1000)

    def test_zero_balance(self):
        with pytest.raises(InvalidInputException, match="non-positive"):
            allocate([(ADDR_A, 0), (ADDR_B, 5)], 1000)

    def test_negative_balance(self):
        with pytest.raises(InvalidInputException):
            allocate([(ADDR_A, -5)], 1000)

    def test_duplicate_address(self):
        with pytest.raises(InvalidInputException, match="Duplicate"):
            allocate([(ADDR_A, 1), ("0x" + "AA" * 20, 2)], 1000)

    @pytest.mark.parametrize("total", [0, -1])
    def test_non_positive_total(self, scenario_holders, total):
        with pytest.raises(InvalidInputException, match="positive"):
            allocate(scenario_holders, total)

    @pytest.mark.parametrize("total", [1.5, "1000", True])
    def test_non_integer_total(self, scenario_holders, total):
        with pytest.raises(InvalidInputException, match="integer"):
            allocate(scenario_holders, total)

    def test_float_balance(self):
        with pytest.raises(InvalidInputException, match="position 0"):
            allocate([(ADDR_A, 1.5)], 1000)

    def test_bad_address(self):
        with pytest.raises(InvalidInputException, match="position 1"):
            allocate([(ADDR_A, 1), ("0xnothex", 1)], 1000)

    def test_malformed_record(self):
        with pytest.raises(InvalidInputException):
            allocate([(ADDR_A,)], 1000)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            allocate([], 1)

    def test_error_carries_field_path(self):
        with pytest.raises(InvalidInputException) as exc_info:
            allocate([(ADDR_A, 1), (ADDR_B, 0)], 10)
        assert exc_info.value.details["field_path"] == "holders[1].balance"
        assert exc_info.value.code == "INVALID_INPUT"
        assert exc_info.value.retryable is False

    def test_validate_holders_returns_models(self):
        validated = validate_holders([(ADDR_B, 3), HolderBalance(address=ADDR_A, balance=4)])
        assert all(isinstance(h, HolderBalance) for h in validated)
        assert [h.address for h in validated] == [ADDR_B, ADDR_A]


class TestRemainderPolicy:
    """Tests for distribute_remainder()."""

    def _uneven(self) -> AllocationResult:
        return allocate([(ADDR_A, 1), (ADDR_B, 1), (ADDR_C, 1)], 10)

    def test_none_returns_same_result(self):
        result = self._uneven()
        assert distribute_remainder(result, RemainderPolicy.NONE) is result

    def test_largest_holder_absorbs_remainder(self):
        result = distribute_remainder(self._uneven(), "largest_holder")

        # tie on 3/3/3: lowest index wins
        assert [e.amount for e in result.entries] == [4, 3, 3]
        assert result.achieved_total == result.requested_total == 10
        assert result.remainder == 0

    def test_largest_holder_targets_largest_amount(self):
        base = allocate([(ADDR_A, 1), (ADDR_B, 5), (ADDR_C, 1)], 100)
        result = distribute_remainder(base, RemainderPolicy.LARGEST_HOLDER)

        assert base.remainder > 0
        assert result.entries[1].amount == base.entries[1].amount + base.remainder
        assert result.entries[0] == base.entries[0]
        assert result.entries[2] == base.entries[2]

    def test_original_is_unchanged(self):
        base = self._uneven()
        distribute_remainder(base, RemainderPolicy.LARGEST_HOLDER)
        assert base.remainder == 1
        assert [e.amount for e in base.entries] == [3, 3, 3]

    def test_zero_remainder_is_noop(self, scenario_holders):
        base = allocate(scenario_holders, 1000)
        assert distribute_remainder(base, RemainderPolicy.LARGEST_HOLDER) is base

    def test_unknown_policy(self):
        with pytest.raises(InvalidInputException, match="Unknown remainder policy"):
            distribute_remainder(self._uneven(), "round_robin")
