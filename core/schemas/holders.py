"""
Schemas
File: holders.py

Purpose: Typed records flowing through the allocator:
HolderBalance (snapshot input), AllocationEntry and AllocationResult
(allocator output).

All amounts are base-unit integers (18-decimal fixed point by default).
Python ints are arbitrary precision, so no intermediate value is ever
truncated; floats are rejected at the model boundary.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from .errors import InvalidInputException

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(address: str) -> str:
    """
    Validate an EVM address and return its lowercase form.

    Args:
        address: 0x-prefixed 40-hex-character address (any case)

    Returns:
        Lowercase address

    Raises:
        InvalidInputException: If the value is not a 20-byte hex address
    """
    if not isinstance(address, str):
        raise InvalidInputException(
            f"Address must be a string, got {type(address).__name__}",
            field_path="address",
        )
    candidate = address.strip()
    if not ADDRESS_RE.match(candidate):
        raise InvalidInputException(
            f"Invalid EVM address: {address!r}",
            field_path="address",
        )
    return candidate.lower()


class HolderBalance(BaseModel):
    """
    One holder's balance at the snapshot block.

    Produced once per snapshot and never mutated.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    address: str = Field(..., description="Lowercase 0x-prefixed holder address")
    balance: StrictInt = Field(..., description="Balance in base units", ge=0)
    is_contract: bool = Field(
        default=False,
        description="Whether the address had bytecode at the snapshot block",
    )

    @field_validator("address", mode="before")
    @classmethod
    def lowercase_address(cls, v: str) -> str:
        return normalize_address(v)


class AllocationEntry(BaseModel):
    """
    A single allocation. The index is embedded in the leaf hash, so it
    must match on both the tree-building and the claiming side.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    index: StrictInt = Field(..., ge=0)
    address: str = Field(...)
    amount: StrictInt = Field(..., ge=0)

    @field_validator("address", mode="before")
    @classmethod
    def lowercase_address(cls, v: str) -> str:
        return normalize_address(v)


class AllocationResult(BaseModel):
    """
    Allocator output.

    achieved_total is reported next to requested_total so that the
    floor-division shortfall stays visible to the caller.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    entries: tuple[AllocationEntry, ...] = Field(...)
    requested_total: StrictInt = Field(..., gt=0)
    achieved_total: StrictInt = Field(..., ge=0)

    @property
    def remainder(self) -> int:
        """Base units requested but not allocated."""
        return self.requested_total - self.achieved_total

    def __len__(self) -> int:
        return len(self.entries)

    def by_address(self) -> dict[str, AllocationEntry]:
        """Index the entries by address."""
        return {entry.address: entry for entry in self.entries}


__all__ = [
    "ADDRESS_RE",
    "normalize_address",
    "HolderBalance",
    "AllocationEntry",
    "AllocationResult",
]
