"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m airdrop_cli snapshot <network> [--out PATH] [--no-contract-check] [--timestamp UNIX]
    python -m airdrop_cli build <network> [--snapshot PATH] [--out PATH] [--total AMOUNT] [--json]
    python -m airdrop_cli proof <distribution> <address>
    python -m airdrop_cli verify <distribution> <address> [--amount AMOUNT] [--json]
    python -m airdrop_cli networks [--json]
    python -m airdrop_cli config --init

Environment Variables:
    AIRDROP_LOG_LEVEL                   Log level (default: INFO)
    AIRDROP_SNAPSHOT_DIR                Directory for snapshot files
    AIRDROP_OUTPUT_DIR                  Directory for distribution files
    AIRDROP_REMAINDER_POLICY            none | largest_holder
    AIRDROP_<NETWORK>_EXPLORER_API_KEY  Explorer API key per network
    AIRDROP_<NETWORK>_RPC_URL           JSON-RPC endpoint per network
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from airdrop_cli import __version__
from airdrop_cli.commands import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, build, proof, snapshot, verify
from airdrop_cli.config import get_default_config_template, load_config
from core.http.client import HttpError
from core.schemas.errors import AirdropException


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="airdrop",
        description="Proportional airdrop allocation with Merkle claim proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration (default: ./airdrop.yaml or ~/.config/airdrop/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Also write logs to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- snapshot command ---
    snapshot_parser = subparsers.add_parser(
        "snapshot",
        help="Collect holder balances for a network",
        description="Discover holders via the block explorer and read balances at the snapshot block.",
    )
    snapshot_parser.add_argument("network", type=str, help="Configured network key")
    snapshot_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Snapshot file (default: <snapshot_dir>/<symbol>-<chainId>.json)",
    )
    snapshot_parser.add_argument(
        "--no-contract-check",
        action="store_true",
        default=False,
        help="Skip eth_getCode lookups for each holder",
    )
    snapshot_parser.add_argument(
        "--timestamp",
        type=int,
        default=None,
        help="Unix time to snapshot at; overrides snapshot_block with the block at that time",
    )
    snapshot_parser.set_defaults(func=snapshot.snapshot_cmd)

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build the Merkle distribution from a snapshot",
        description="Allocate the airdrop proportionally and write root, claims and proofs.",
    )
    build_parser.add_argument("network", type=str, help="Configured network key")
    build_parser.add_argument(
        "--snapshot", "-s",
        type=str,
        default=None,
        help="Snapshot file (default: <snapshot_dir>/<symbol>-<chainId>.json)",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Distribution file (default: <output_dir>/<symbol>-<chainId>-merkle.json)",
    )
    build_parser.add_argument(
        "--total",
        type=str,
        default=None,
        help="Override total amount: base units, or '<amount> tokens'",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Print the claim record for an address",
    )
    proof_parser.add_argument("distribution", type=str, help="Distribution file")
    proof_parser.add_argument("address", type=str, help="Recipient address")
    proof_parser.set_defaults(func=proof.proof_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a claim against the distribution root",
        description="Re-derive the leaf for an address and check its proof against the root.",
    )
    verify_parser.add_argument("distribution", type=str, help="Distribution file")
    verify_parser.add_argument("address", type=str, help="Recipient address")
    verify_parser.add_argument(
        "--amount",
        type=str,
        default=None,
        help="Expected amount in base units (default: amount from the file)",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- networks command ---
    networks_parser = subparsers.add_parser(
        "networks",
        help="List configured networks",
    )
    networks_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    networks_parser.set_defaults(func=networks_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="airdrop.yaml",
        help="Path for config file (default: airdrop.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your networks.")
        print("Secrets go in environment variables (AIRDROP_* prefix) or .env.")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.airdrop_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: airdrop config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def networks_cmd(args: argparse.Namespace) -> int:
    """Handle networks command."""
    config = args.airdrop_config
    if args.json:
        print(json.dumps({k: n.to_dict() for k, n in config.networks.items()}, indent=2))
        return EXIT_SUCCESS

    if not config.networks:
        print("No networks configured")
        return EXIT_SUCCESS

    for key, network in sorted(config.networks.items()):
        print(f"{key}: chain {network.chain_id}, token {network.token_address}")
        print(f"    blocks {network.block_created} -> {network.snapshot_block}, total {network.total_amount}")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except (OSError, AirdropException) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(level=args.log_level or config.log_level, log_file=args.log_file)

    # Attach config to args for commands to use
    args.airdrop_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except AirdropException as e:
        if getattr(args, "json", False):
            print(json.dumps(e.to_error_model().model_dump(mode="json"), indent=2))
        elif args.log_level == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (HttpError, OSError) as e:
        if args.log_level == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
