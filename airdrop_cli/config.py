"""
CLI Configuration

Locates and loads the YAML configuration for the CLI, then overlays
environment variables.
"""

from __future__ import annotations

from pathlib import Path

from core.config.runtime import AirdropConfig


def default_config_paths() -> list[Path]:
    return [
        Path.cwd() / "airdrop.yaml",
        Path.cwd() / ".airdrop.yaml",
        Path.home() / ".config" / "airdrop" / "config.yaml",
    ]


def load_config(config_path: Path | None = None) -> AirdropConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. An explicit path that
    does not exist is an error; the default locations are optional.
    """
    if config_path is not None:
        config = AirdropConfig.from_yaml(config_path)
    else:
        config = AirdropConfig()
        for default_path in default_config_paths():
            if default_path.exists():
                config = AirdropConfig.from_yaml(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """\
# Airdrop configuration.
# Explorer API keys and RPC URLs are read from the environment:
#   AIRDROP_<NETWORK>_EXPLORER_API_KEY, AIRDROP_<NETWORK>_RPC_URL
token_symbol: token
decimals: 18
snapshot_dir: snapshots
output_dir: distributions
order_by: input            # input | address | balance
remainder_policy: none     # none | largest_holder
log_level: INFO

http:
  timeout: 30
  max_retries: 3
  request_delay: 0.5
  block_step: 50000

networks:
  base:
    chain_id: 8453
    chain_slug: base
    token_address: "0x0000000000000000000000000000000000000000"
    block_created: 0
    snapshot_block: 0
    total_amount: "10000 tokens"
    explorer_url: https://api.basescan.org
    exclude_contracts: false
"""
