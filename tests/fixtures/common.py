"""
Common test fixtures shared by all modules.

Provides factory functions for the core data structures:
- HolderBalance lists
- AllocationResult
- MerkleCommitment
- AirdropConfig with a single test network
"""

from typing import Optional

from core.allocation import allocate
from core.config.runtime import AirdropConfig, NetworkConfig
from core.merkle.commitment import MerkleCommitment, build_commitment
from core.schemas.holders import AllocationResult, HolderBalance


ADDR_A = "0x" + "aa" * 20
ADDR_B = "0x" + "bb" * 20
ADDR_C = "0x" + "cc" * 20


def make_address(i: int) -> str:
    """Deterministic distinct address for position i."""
    return "0x" + f"{i + 1:040x}"


# =============================================================================
# Holder Factories
# =============================================================================

def make_holders(
    balances: Optional[list[int]] = None,
    addresses: Optional[list[str]] = None,
) -> list[HolderBalance]:
    """
    Create holders for testing.

    Args:
        balances: Balances in base units (default: 5 uneven balances)
        addresses: Addresses (default: make_address(i))
    """
    if balances is None:
        balances = [100, 300, 7, 1_000_003, 42]
    if addresses is None:
        addresses = [make_address(i) for i in range(len(balances))]
    return [
        HolderBalance(address=address, balance=balance)
        for address, balance in zip(addresses, balances)
    ]


def make_scenario_holders() -> list[HolderBalance]:
    """The two-holder scenario: 100 and 300 base units."""
    return make_holders([100, 300], [ADDR_A, ADDR_B])


# =============================================================================
# Allocation / Commitment Factories
# =============================================================================

def make_allocation(
    balances: Optional[list[int]] = None,
    total_amount: int = 1_000_000,
) -> AllocationResult:
    return allocate(make_holders(balances), total_amount)


def make_commitment(
    balances: Optional[list[int]] = None,
    total_amount: int = 1_000_000,
) -> MerkleCommitment:
    return build_commitment(make_allocation(balances, total_amount))


# =============================================================================
# Config Factory
# =============================================================================

def make_network(
    key: str = "testnet",
    chain_id: int = 31337,
    total_amount: int = 1_000_000,
    **kwargs,
) -> NetworkConfig:
    params = dict(
        token_address="0x" + "11" * 20,
        block_created=100,
        snapshot_block=250_000,
        explorer_url="https://explorer.example",
        explorer_api_key="test-key",
        rpc_url="https://rpc.example",
    )
    params.update(kwargs)
    return NetworkConfig(key=key, chain_id=chain_id, total_amount=total_amount, **params)


def make_config(tmp_path=None, **kwargs) -> AirdropConfig:
    """AirdropConfig with one 'testnet' network; dirs under tmp_path when given."""
    network = kwargs.pop("network", None) or make_network()
    params = dict(networks={network.key: network}, token_symbol="tkn")
    if tmp_path is not None:
        params["snapshot_dir"] = tmp_path / "snapshots"
        params["output_dir"] = tmp_path / "distributions"
    params.update(kwargs)
    return AirdropConfig(**params)
