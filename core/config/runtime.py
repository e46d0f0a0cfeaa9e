"""
Runtime Configuration

Per-network snapshot parameters and pipeline settings. Network constants
(token address, creation and snapshot blocks, total airdrop amount) live
here rather than in code; explorer API keys and RPC URLs come from the
environment.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.amounts import DEFAULT_DECIMALS, parse_units
from core.schemas.errors import ConfigException, InvalidInputException

load_dotenv()

ENV_PREFIX = "AIRDROP_"

ORDER_CHOICES = ("input", "address", "balance")
REMAINDER_CHOICES = ("none", "largest_holder")


def parse_total_amount(value: Any, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Total airdrop amount in base units.

    An int (or digit string) is taken as base units; a string ending in
    "tokens" is parsed as a decimal token amount, e.g. "25000 tokens".
    """
    if isinstance(value, bool):
        raise ConfigException(f"Invalid total_amount: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        if text.lower().endswith("tokens"):
            return parse_units(text[: -len("tokens")].strip(), decimals)
        if text.isdigit():
            return int(text)
    except InvalidInputException as e:
        raise ConfigException(f"Invalid total_amount: {value!r}: {e.message}") from e
    raise ConfigException(
        f"Invalid total_amount: {value!r} (use base units or '<amount> tokens')"
    )


@dataclass
class HttpConfig:
    """Configuration for the explorer/RPC HTTP clients."""
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    request_delay: float = 0.5
    block_step: int = 50_000
    rpc_batch_size: int = 100


@dataclass
class NetworkConfig:
    """Snapshot parameters for one network."""
    key: str
    chain_id: int
    chain_slug: str = ""
    token_address: str = ""
    block_created: int = 0
    snapshot_block: int = 0
    total_amount: int = 0
    explorer_url: str = ""
    explorer_api_key: Optional[str] = None
    rpc_url: Optional[str] = None
    exclude_contracts: bool = False

    def __post_init__(self):
        # Secrets are only ever read from the environment
        env_key = f"{ENV_PREFIX}{self.key.upper()}_"
        if self.explorer_api_key is None:
            self.explorer_api_key = os.getenv(f"{env_key}EXPLORER_API_KEY")
        if self.rpc_url is None:
            self.rpc_url = os.getenv(f"{env_key}RPC_URL")
        if not self.chain_slug:
            self.chain_slug = self.key

    @classmethod
    def from_dict(cls, key: str, data: dict[str, Any], decimals: int = DEFAULT_DECIMALS) -> "NetworkConfig":
        known = {f for f in cls.__dataclass_fields__ if f != "key"}
        unknown = set(data) - known
        if unknown:
            raise ConfigException(
                f"Unknown keys for network {key!r}: {sorted(unknown)}",
                details={"network": key},
            )
        if "chain_id" not in data:
            raise ConfigException(f"Network {key!r} needs a chain_id", details={"network": key})
        conf = dict(data)
        if "total_amount" in conf:
            conf["total_amount"] = parse_total_amount(conf["total_amount"], decimals)
        return cls(key=key, **conf)

    def validate_for_collection(self) -> None:
        """Raise ConfigException unless the network can be snapshotted."""
        missing = [
            name for name in ("token_address", "explorer_url", "rpc_url")
            if not getattr(self, name)
        ]
        if self.snapshot_block <= self.block_created:
            missing.append("snapshot_block > block_created")
        if missing:
            raise ConfigException(
                f"Network {self.key!r} cannot be snapshotted, missing: {', '.join(missing)}",
                details={"network": self.key, "missing": missing},
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "chain_slug": self.chain_slug,
            "token_address": self.token_address,
            "block_created": self.block_created,
            "snapshot_block": self.snapshot_block,
            "total_amount": str(self.total_amount),
            "explorer_url": self.explorer_url,
            "exclude_contracts": self.exclude_contracts,
        }


@dataclass
class AirdropConfig:
    """
    Complete configuration for the airdrop pipeline.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    networks: dict[str, NetworkConfig] = field(default_factory=dict)
    token_symbol: str = "token"
    decimals: int = DEFAULT_DECIMALS
    snapshot_dir: Path = Path("snapshots")
    output_dir: Path = Path("distributions")
    order_by: str = "input"
    remainder_policy: str = "none"
    http: HttpConfig = field(default_factory=HttpConfig)
    log_level: str = "INFO"

    def __post_init__(self):
        self.snapshot_dir = Path(self.snapshot_dir)
        self.output_dir = Path(self.output_dir)
        if self.order_by not in ORDER_CHOICES:
            raise ConfigException(f"order_by must be one of {ORDER_CHOICES}, got {self.order_by!r}")
        if self.remainder_policy not in REMAINDER_CHOICES:
            raise ConfigException(
                f"remainder_policy must be one of {REMAINDER_CHOICES}, got {self.remainder_policy!r}"
            )

    def get_network(self, key: str) -> NetworkConfig:
        if key not in self.networks:
            raise ConfigException(
                f"Unknown network {key!r}; configured: {sorted(self.networks)}",
                details={"network": key},
            )
        return self.networks[key]

    def snapshot_path(self, network: NetworkConfig) -> Path:
        """snapshots/<symbol>-<chainId>.json"""
        return self.snapshot_dir / f"{self.token_symbol}-{network.chain_id}.json"

    def distribution_path(self, network: NetworkConfig) -> Path:
        return self.output_dir / f"{self.token_symbol}-{network.chain_id}-merkle.json"

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - AIRDROP_LOG_LEVEL: Log level
        - AIRDROP_SNAPSHOT_DIR: Directory for snapshot files
        - AIRDROP_OUTPUT_DIR: Directory for distribution files
        - AIRDROP_ORDER_BY: input, address or balance
        - AIRDROP_REMAINDER_POLICY: none or largest_holder

        Per-network secrets (AIRDROP_<KEY>_EXPLORER_API_KEY,
        AIRDROP_<KEY>_RPC_URL) are read by NetworkConfig itself.
        """
        overrides: dict[str, Any] = {}
        for env_name, key in (
            ("LOG_LEVEL", "log_level"),
            ("SNAPSHOT_DIR", "snapshot_dir"),
            ("OUTPUT_DIR", "output_dir"),
            ("ORDER_BY", "order_by"),
            ("REMAINDER_POLICY", "remainder_policy"),
        ):
            value = os.getenv(f"{ENV_PREFIX}{env_name}")
            if value:
                overrides[key] = value
        return overrides

    @classmethod
    def from_env(cls) -> "AirdropConfig":
        """
        Load configuration purely from environment variables.

        No networks are configured this way; use a YAML file for those.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AirdropConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigException(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AirdropConfig":
        """Load configuration from a dictionary (supports partial data)."""
        decimals = int(data.get("decimals", DEFAULT_DECIMALS))
        http_data = data.get("http", {}) or {}
        networks_data = data.get("networks", {}) or {}

        networks = {
            key: NetworkConfig.from_dict(key, conf or {}, decimals)
            for key, conf in networks_data.items()
        }

        return cls(
            networks=networks,
            token_symbol=data.get("token_symbol", "token"),
            decimals=decimals,
            snapshot_dir=Path(data.get("snapshot_dir", "snapshots")),
            output_dir=Path(data.get("output_dir", "distributions")),
            order_by=data.get("order_by", "input"),
            remainder_policy=data.get("remainder_policy", "none"),
            http=HttpConfig(**http_data),
            log_level=data.get("log_level", "INFO"),
        )

    def with_env_overrides(self) -> "AirdropConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.items():
            setattr(new_config, key, value)
        # Re-run path coercion and choice validation
        new_config.__post_init__()
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary (secrets excluded)."""
        return {
            "token_symbol": self.token_symbol,
            "decimals": self.decimals,
            "snapshot_dir": str(self.snapshot_dir),
            "output_dir": str(self.output_dir),
            "order_by": self.order_by,
            "remainder_policy": self.remainder_policy,
            "log_level": self.log_level,
            "http": {
                "timeout": self.http.timeout,
                "max_retries": self.http.max_retries,
                "request_delay": self.http.request_delay,
                "block_step": self.http.block_step,
            },
            "networks": {key: net.to_dict() for key, net in self.networks.items()},
        }


# Global default configuration
_default_config: Optional[AirdropConfig] = None


def get_default_config() -> AirdropConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = AirdropConfig.from_env()
    return _default_config


def set_default_config(config: AirdropConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
