"""
Runtime Configuration Module

Provides configuration loading for the airdrop pipeline.
"""

from .runtime import (
    AirdropConfig,
    HttpConfig,
    NetworkConfig,
    get_default_config,
    parse_total_amount,
    set_default_config,
)

__all__ = [
    "AirdropConfig",
    "HttpConfig",
    "NetworkConfig",
    "get_default_config",
    "parse_total_amount",
    "set_default_config",
]
