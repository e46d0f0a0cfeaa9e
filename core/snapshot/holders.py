"""
Holder set preparation: de-duplication, ordering, and conversion to and
from the snapshot file records.

Snapshot record layout (one JSON object per holder):

    {"user": "0x...", "balance": "1234.5", "isContract": false}

"balance" is a human decimal string in token units; a JSON integer is
read as raw base units.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, Mapping, Sequence

from pydantic import ValidationError

from core.amounts import DEFAULT_DECIMALS, format_units, parse_units
from core.schemas.errors import InvalidInputException, SnapshotFormatException
from core.schemas.holders import HolderBalance

logger = logging.getLogger(__name__)

HolderOrder = Literal["input", "address", "balance"]


def deduplicate_holders(holders: Iterable[HolderBalance]) -> list[HolderBalance]:
    """
    Drop repeated records for the same address, keeping the first.

    Raises:
        InvalidInputException: If one address carries two different balances
    """
    unique: dict[str, HolderBalance] = {}
    for holder in holders:
        existing = unique.get(holder.address)
        if existing is None:
            unique[holder.address] = holder
        elif existing.balance != holder.balance:
            raise InvalidInputException(
                f"Conflicting balances for {holder.address}: "
                f"{existing.balance} and {holder.balance}",
                field_path="holders",
                details={"address": holder.address},
            )
    return list(unique.values())


def order_holders(holders: Iterable[HolderBalance], by: HolderOrder = "address") -> list[HolderBalance]:
    """
    Put holders in a reproducible order.

    - "input":   unchanged
    - "address": ascending lowercase address
    - "balance": descending balance, ties broken by ascending address
    """
    if by == "input":
        return list(holders)
    if by == "address":
        return sorted(holders, key=lambda h: h.address)
    if by == "balance":
        return sorted(holders, key=lambda h: (-h.balance, h.address))
    raise InvalidInputException(f"Unknown holder order: {by!r}", field_path="order_by")


def holder_from_record(record: Mapping[str, Any], decimals: int = DEFAULT_DECIMALS) -> HolderBalance:
    """
    Parse one snapshot record.

    Raises:
        SnapshotFormatException: On missing keys or unparseable values
    """
    if not isinstance(record, Mapping):
        raise SnapshotFormatException(f"Snapshot record must be an object, got {type(record).__name__}")

    address = record.get("user", record.get("address"))
    raw_balance = record.get("balance")
    if address is None or raw_balance is None:
        raise SnapshotFormatException(
            "Snapshot record needs 'user' (or 'address') and 'balance'",
            details={"record": dict(record)},
        )

    is_contract = record.get("isContract", False)
    if not isinstance(is_contract, bool):
        raise SnapshotFormatException(
            f"isContract must be a JSON boolean for {address}, got {is_contract!r}",
            details={"record": dict(record)},
        )

    try:
        if isinstance(raw_balance, int) and not isinstance(raw_balance, bool):
            balance = raw_balance
        else:
            balance = parse_units(str(raw_balance), decimals)
        return HolderBalance(
            address=address,
            balance=balance,
            is_contract=is_contract,
        )
    except (InvalidInputException, ValidationError) as e:
        raise SnapshotFormatException(
            f"Invalid snapshot record for {address}: {e}",
            details={"record": dict(record)},
        ) from e


def holders_from_records(
    records: Sequence[Mapping[str, Any]],
    decimals: int = DEFAULT_DECIMALS,
    *,
    exclude_contracts: bool = False,
) -> list[HolderBalance]:
    """
    Parse snapshot records into holders ready for allocation.

    Zero balances are dropped, contracts optionally dropped, and
    duplicates removed; the record order is otherwise preserved.
    """
    holders: list[HolderBalance] = []
    skipped_zero = skipped_contracts = 0

    for record in records:
        holder = holder_from_record(record, decimals)
        if holder.balance == 0:
            skipped_zero += 1
            continue
        if exclude_contracts and holder.is_contract:
            skipped_contracts += 1
            continue
        holders.append(holder)

    if skipped_zero or skipped_contracts:
        logger.info(
            "Skipped %d zero-balance and %d contract holders",
            skipped_zero, skipped_contracts,
        )
    return deduplicate_holders(holders)


def holders_to_records(
    holders: Iterable[HolderBalance],
    decimals: int = DEFAULT_DECIMALS,
) -> list[dict[str, Any]]:
    """Inverse of holders_from_records, balances as human decimal strings."""
    return [
        {
            "user": h.address,
            "balance": format_units(h.balance, decimals),
            "isContract": h.is_contract,
        }
        for h in holders
    ]


__all__ = [
    "HolderOrder",
    "deduplicate_holders",
    "order_holders",
    "holder_from_record",
    "holders_from_records",
    "holders_to_records",
]
