"""
Schemas
File: distribution.py

Purpose: Published distribution document: the Merkle root plus one claim
record per address, in the JSON shape consumed by merkle-distributor
claim contracts and claim UIs.

Python field names are snake_case; the serialized form uses camelCase
aliases (merkleRoot, tokenTotal, ...).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .holders import normalize_address


class ClaimRecord(BaseModel):
    """Everything one recipient needs to claim: index, amount and proof."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    index: int = Field(..., ge=0)
    # Decimal string: base-unit amounts overflow JSON number precision
    amount: str = Field(..., description="Amount in base units", pattern=r"^\d+$")
    amount_formatted: str = Field(
        ...,
        alias="amountFormatted",
        description="Human-readable token amount",
    )
    proof: list[str] = Field(default_factory=list, description="0x-hex sibling hashes, leaf to root")

    @property
    def amount_int(self) -> int:
        return int(self.amount)


class Distribution(BaseModel):
    """
    The write-once artifact handed to persistence.

    token_total is the achieved (allocated) total; requested_total and
    remainder make the rounding shortfall auditable.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    merkle_root: str = Field(..., alias="merkleRoot", pattern=r"^0x[0-9a-f]{64}$")
    network: str = Field(default="", description="Configured network key")
    chain_id: int | None = Field(default=None, alias="chainId")
    snapshot_block: int | None = Field(default=None, alias="snapshotBlock")
    decimals: int = Field(default=18, ge=0)
    token_total: str = Field(..., alias="tokenTotal", pattern=r"^\d+$")
    requested_total: str = Field(..., alias="requestedTotal", pattern=r"^\d+$")
    remainder: str = Field(..., pattern=r"^\d+$")
    claims: dict[str, ClaimRecord] = Field(default_factory=dict)

    @field_validator("claims", mode="before")
    @classmethod
    def lowercase_claim_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {normalize_address(k): c for k, c in v.items()}
        return v

    @model_validator(mode="after")
    def validate_totals(self) -> "Distribution":
        """token_total + remainder must equal requested_total."""
        if int(self.token_total) + int(self.remainder) != int(self.requested_total):
            raise ValueError(
                f"tokenTotal ({self.token_total}) + remainder ({self.remainder}) "
                f"!= requestedTotal ({self.requested_total})"
            )
        return self

    def get_claim(self, address: str) -> ClaimRecord | None:
        """Look up a claim by address (any case)."""
        return self.claims.get(normalize_address(address))

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "ClaimRecord",
    "Distribution",
]
