"""
Remainder distribution policies.

allocate() leaves the floor-division remainder unassigned. Callers that
need requested_total == achieved_total apply one of these policies
afterwards; the original result is never modified.
"""
from __future__ import annotations

from enum import Enum

from core.schemas.errors import InvalidInputException
from core.schemas.holders import AllocationEntry, AllocationResult


class RemainderPolicy(str, Enum):
    """How to handle the floor-division shortfall."""
    NONE = "none"
    LARGEST_HOLDER = "largest_holder"


def distribute_remainder(
    result: AllocationResult,
    policy: RemainderPolicy | str = RemainderPolicy.NONE,
) -> AllocationResult:
    """
    Apply a remainder policy to an allocation.

    NONE returns the result unchanged. LARGEST_HOLDER adds the whole
    remainder to the entry with the largest amount (lowest index wins a
    tie), so the achieved total equals the requested total.

    Raises:
        InvalidInputException: On an unknown policy name
    """
    try:
        policy = RemainderPolicy(policy)
    except ValueError as e:
        raise InvalidInputException(
            f"Unknown remainder policy: {policy!r}",
            field_path="remainder_policy",
        ) from e

    if policy is RemainderPolicy.NONE or result.remainder == 0:
        return result

    # max() keeps the first maximal element
    target = max(result.entries, key=lambda e: e.amount)
    entries: list[AllocationEntry] = [
        entry.model_copy(update={"amount": entry.amount + result.remainder})
        if entry.index == target.index
        else entry
        for entry in result.entries
    ]
    return AllocationResult(
        entries=tuple(entries),
        requested_total=result.requested_total,
        achieved_total=result.requested_total,
    )


__all__ = [
    "RemainderPolicy",
    "distribute_remainder",
]
