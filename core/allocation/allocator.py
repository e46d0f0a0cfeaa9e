"""
Proportional Allocator

    amount[i] = floor(balance[i] * total_amount / sum(balance))

Exact integer arithmetic: the product is formed in full precision and
divided once, so the only loss is the final floor. The shortfall is not
redistributed here; it is reported as requested_total - achieved_total
and is strictly less than the number of holders.

Precondition: the caller fixes the holder order. Index i is the i-th
holder as supplied; nothing is reordered. Sort the input (for example
with core.snapshot.order_holders) when runs must be reproducible.
"""
from __future__ import annotations

import logging
from typing import Iterable, Tuple, Union

from pydantic import ValidationError

from core.schemas.errors import InvalidInputException
from core.schemas.holders import AllocationEntry, AllocationResult, HolderBalance

logger = logging.getLogger(__name__)

HolderLike = Union[HolderBalance, Tuple[str, int]]


def _coerce_holder(holder: HolderLike, position: int) -> HolderBalance:
    if isinstance(holder, HolderBalance):
        return holder
    try:
        address, balance = holder
        return HolderBalance(address=address, balance=balance)
    except (TypeError, ValueError) as e:
        # ValidationError subclasses ValueError
        message = str(e)
        if isinstance(e, ValidationError):
            message = "; ".join(err["msg"] for err in e.errors())
        raise InvalidInputException(
            f"Invalid holder at position {position}: {message}",
            field_path=f"holders[{position}]",
        ) from e


def validate_holders(holders: Iterable[HolderLike]) -> list[HolderBalance]:
    """
    Coerce and validate the allocator input.

    Raises:
        InvalidInputException: If holders is empty, a balance is not
            positive, or an address appears twice
    """
    validated: list[HolderBalance] = []
    seen: set[str] = set()

    for position, raw in enumerate(holders):
        holder = _coerce_holder(raw, position)
        if holder.balance <= 0:
            raise InvalidInputException(
                f"Holder {holder.address} has non-positive balance {holder.balance}",
                field_path=f"holders[{position}].balance",
            )
        if holder.address in seen:
            raise InvalidInputException(
                f"Duplicate holder address: {holder.address}",
                field_path=f"holders[{position}].address",
            )
        seen.add(holder.address)
        validated.append(holder)

    if not validated:
        raise InvalidInputException("Holder list is empty", field_path="holders")

    return validated


def allocate(holders: Iterable[HolderLike], total_amount: int) -> AllocationResult:
    """
    Split total_amount across holders in proportion to their balances.

    Args:
        holders: HolderBalance records or (address, balance) pairs, in the
            order that defines each holder's index
        total_amount: Base units to distribute

    Returns:
        AllocationResult with one entry per holder (index = input position)
        and the achieved total

    Raises:
        InvalidInputException: On empty/duplicate/non-positive holders or
            a non-positive total_amount

    Example:
        >>> result = allocate([("0x" + "aa" * 20, 100), ("0x" + "bb" * 20, 300)], 1000)
        >>> [e.amount for e in result.entries]
        [250, 750]
    """
    if isinstance(total_amount, bool) or not isinstance(total_amount, int):
        raise InvalidInputException(
            f"total_amount must be an integer number of base units, got {type(total_amount).__name__}",
            field_path="total_amount",
        )
    if total_amount <= 0:
        raise InvalidInputException(
            f"total_amount must be positive, got {total_amount}",
            field_path="total_amount",
        )

    validated = validate_holders(holders)
    balance_sum = sum(h.balance for h in validated)
    if balance_sum == 0:
        raise InvalidInputException("Sum of holder balances is zero", field_path="holders")

    entries: list[AllocationEntry] = []
    achieved = 0
    for index, holder in enumerate(validated):
        amount = holder.balance * total_amount // balance_sum
        achieved += amount
        entries.append(AllocationEntry(index=index, address=holder.address, amount=amount))

    result = AllocationResult(
        entries=tuple(entries),
        requested_total=total_amount,
        achieved_total=achieved,
    )
    logger.info(
        "Allocated %d of %d base units across %d holders (remainder %d)",
        achieved, total_amount, len(entries), result.remainder,
    )
    return result


__all__ = [
    "HolderLike",
    "validate_holders",
    "allocate",
]
