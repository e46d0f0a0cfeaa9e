"""
CLI Build Command

Snapshot file -> allocation -> Merkle distribution file.

Usage:
    airdrop build base [--snapshot PATH] [--out PATH] [--total AMOUNT] [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path

from airdrop_cli.commands import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, EXIT_VERIFICATION_FAILED
from core.amounts import format_units
from core.config.runtime import parse_total_amount
from orchestrator.artifacts.io import load_snapshot, save_distribution
from orchestrator.pipeline import AirdropPipeline


logger = logging.getLogger(__name__)


def build_cmd(args: Namespace) -> int:
    """Execute the build command."""
    config = args.airdrop_config
    network = config.get_network(args.network)
    snapshot_path = Path(args.snapshot) if args.snapshot else config.snapshot_path(network)
    out_path = Path(args.out) if args.out else config.distribution_path(network)
    total = parse_total_amount(args.total, config.decimals) if args.total else None

    holders = load_snapshot(snapshot_path, config.decimals)
    logger.info("Loaded %d holders from %s", len(holders), snapshot_path)

    result = AirdropPipeline(config).run(args.network, holders, total_amount=total)
    if result.distribution is None:
        print(f"Error: no distribution produced for {args.network}")
        return EXIT_RUNTIME_ERROR

    if not result.ok:
        summary = result.to_dict()
        if args.json:
            print(json.dumps(summary, indent=2))
        else:
            for err in result.errors[:10]:
                print(f"  ✗ {err}")
        return EXIT_VERIFICATION_FAILED

    save_distribution(result.distribution, out_path)

    if args.json:
        summary = result.to_dict()
        summary["output"] = str(out_path)
        print(json.dumps(summary, indent=2))
    else:
        allocation = result.allocation
        print(f"network: {args.network}")
        print(f"merkle_root: {result.merkle_root}")
        print(f"recipients: {len(allocation)}")
        print(f"requested_total: {format_units(allocation.requested_total, config.decimals)}")
        print(f"token_total: {format_units(allocation.achieved_total, config.decimals)}")
        print(f"remainder: {allocation.remainder} base units")
        print(f"output: {out_path}")
    return EXIT_SUCCESS
