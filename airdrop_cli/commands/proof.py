"""
CLI Proof Command

Print the claim record (index, amount, proof) for one address.

Usage:
    airdrop proof distributions/token-8453-merkle.json 0x...
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from airdrop_cli.commands import EXIT_RUNTIME_ERROR, EXIT_SUCCESS
from core.schemas.holders import normalize_address
from orchestrator.artifacts.io import load_distribution


def proof_cmd(args: Namespace) -> int:
    """Execute the proof command."""
    distribution = load_distribution(args.distribution)
    address = normalize_address(args.address)
    claim = distribution.get_claim(address)
    if claim is None:
        print(f"Address not found in claims: {address}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    record = {"address": address, "merkleRoot": distribution.merkle_root}
    record.update(claim.model_dump(mode="json", by_alias=True))
    print(json.dumps(record, indent=2))
    return EXIT_SUCCESS
