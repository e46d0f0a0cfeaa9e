"""
CLI Verify Command

Re-derive the leaf for (index, address, amount) and fold its proof back
to the distribution root, offline.

Usage:
    airdrop verify distributions/token-8453-merkle.json 0x... [--amount N] [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, field

from airdrop_cli.commands import EXIT_SUCCESS, EXIT_VERIFICATION_FAILED
from core.crypto.hashing import from_hex
from core.merkle.commitment import verify_claim
from core.schemas.errors import InvalidInputException
from core.schemas.holders import normalize_address
from orchestrator.artifacts.io import load_distribution


logger = logging.getLogger(__name__)


@dataclass
class VerifySummary:
    """Summary of claim verification for CLI output."""
    address: str = ""
    merkle_root: str = ""
    index: int | None = None
    amount: str = ""
    proof_ok: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        return d


def verify_address(distribution_path: str, address: str, amount: str | None = None) -> VerifySummary:
    """Check one address's claim in a distribution file."""
    distribution = load_distribution(distribution_path)
    account = normalize_address(address)
    summary = VerifySummary(address=account, merkle_root=distribution.merkle_root)

    claim = distribution.get_claim(account)
    if claim is None:
        summary.errors.append("Address not in claims")
        return summary

    summary.index = claim.index
    summary.amount = amount if amount is not None else claim.amount
    if not summary.amount.isdigit():
        raise InvalidInputException(f"Amount must be base units, got {summary.amount!r}")
    if amount is not None and amount != claim.amount:
        summary.errors.append(f"Amount mismatch, distribution has {claim.amount}")

    logger.info("Verifying claim %d for %s", claim.index, account)
    summary.proof_ok = verify_claim(
        from_hex(distribution.merkle_root),
        claim.index,
        account,
        int(summary.amount),
        [from_hex(p) for p in claim.proof],
    )
    if not summary.proof_ok:
        summary.errors.append("Proof does not recompute the merkle root")
    return summary


def verify_cmd(args: Namespace) -> int:
    """Execute the verify command."""
    summary = verify_address(args.distribution, args.address, args.amount)
    ok = summary.proof_ok and not summary.errors

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(f"address: {summary.address}")
        print(f"merkle_root: {summary.merkle_root}")
        if summary.index is not None:
            print(f"index: {summary.index}")
            print(f"amount: {summary.amount}")
        print(f"proof_ok: {str(summary.proof_ok).lower()}")
        for err in summary.errors:
            print(f"  ✗ {err}")

    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED
