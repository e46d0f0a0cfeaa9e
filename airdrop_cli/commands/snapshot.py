"""
CLI Snapshot Command

Collect holders and balances for one network and write the snapshot file.

Usage:
    airdrop snapshot base [--out PATH] [--no-contract-check] [--timestamp UNIX]
"""

from __future__ import annotations

import dataclasses
import logging
from argparse import Namespace
from pathlib import Path

from airdrop_cli.commands import EXIT_SUCCESS
from core.http.client import HttpClient
from core.snapshot.collect import build_clients, collect_snapshot
from core.snapshot.explorer import resolve_block_number
from orchestrator.artifacts.io import save_snapshot


logger = logging.getLogger(__name__)


def snapshot_cmd(args: Namespace) -> int:
    """Execute the snapshot command."""
    config = args.airdrop_config
    network = config.get_network(args.network)
    out_path = Path(args.out) if args.out else config.snapshot_path(network)

    if args.timestamp is not None:
        with HttpClient(
            timeout=config.http.timeout,
            max_retries=config.http.max_retries,
            retry_delay=config.http.retry_delay,
        ) as http:
            block = resolve_block_number(network.chain_slug, args.timestamp, http=http)
        logger.info("Resolved %s timestamp %d to block %d", network.chain_slug, args.timestamp, block)
        network = dataclasses.replace(network, snapshot_block=block)

    explorer, rpc = build_clients(network, config.http)
    try:
        holders = collect_snapshot(
            network,
            explorer,
            rpc,
            check_contracts=not args.no_contract_check,
        )
    finally:
        explorer.http.close()

    save_snapshot(holders, out_path, config.decimals)
    logger.info("Wrote %d holders to %s", len(holders), out_path)
    print(f"holders: {len(holders)}")
    print(f"snapshot_block: {network.snapshot_block}")
    print(f"snapshot: {out_path}")
    return EXIT_SUCCESS
