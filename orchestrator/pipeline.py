"""
Pipeline Integration

In-process runner composing the snapshot-to-distribution steps:

    holders -> dedupe -> order -> allocate -> remainder policy
            -> commitment -> distribution -> self-check

Every step is a pure function of its input, so independent networks can
be run concurrently (run_many) without any shared state.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from core.allocation import RemainderPolicy, allocate, distribute_remainder
from core.amounts import format_units
from core.config.runtime import AirdropConfig, NetworkConfig
from core.crypto.hashing import from_hex
from core.merkle.commitment import MerkleCommitment, build_commitment, verify_claim
from core.schemas.distribution import Distribution
from core.schemas.errors import AirdropException, InvalidInputException
from core.schemas.holders import AllocationResult, HolderBalance
from core.snapshot.holders import deduplicate_holders, order_holders


logger = logging.getLogger(__name__)


# =============================================================================
# Result
# =============================================================================

@dataclass
class PipelineResult:
    """Complete result of a pipeline run for one network."""
    network: str
    holders: list[HolderBalance] = field(default_factory=list)
    allocation: Optional[AllocationResult] = None
    commitment: Optional[MerkleCommitment] = None
    distribution: Optional[Distribution] = None
    ok: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def merkle_root(self) -> Optional[str]:
        return self.distribution.merkle_root if self.distribution else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "network": self.network,
            "merkle_root": self.merkle_root,
            "holders": len(self.holders),
            "requested_total": str(self.allocation.requested_total) if self.allocation else None,
            "token_total": str(self.allocation.achieved_total) if self.allocation else None,
            "remainder": str(self.allocation.remainder) if self.allocation else None,
            "errors": self.errors,
        }


# =============================================================================
# Distribution assembly
# =============================================================================

def build_distribution(
    allocation: AllocationResult,
    commitment: MerkleCommitment,
    *,
    network: Optional[NetworkConfig] = None,
    decimals: int = 18,
) -> Distribution:
    """Assemble the publishable document from an allocation and its commitment."""
    return Distribution(
        merkle_root=commitment.root_hex,
        network=network.key if network else "",
        chain_id=network.chain_id if network else None,
        snapshot_block=network.snapshot_block if network and network.snapshot_block else None,
        decimals=decimals,
        token_total=str(allocation.achieved_total),
        requested_total=str(allocation.requested_total),
        remainder=str(allocation.remainder),
        claims=commitment.claim_records(decimals),
    )


def check_distribution(distribution: Distribution) -> list[str]:
    """
    Re-verify every claim in a distribution against its root.

    Returns:
        One message per failing claim; empty when all claims verify
    """
    root = from_hex(distribution.merkle_root)
    failures: list[str] = []
    for address, claim in distribution.claims.items():
        proof = [from_hex(p) for p in claim.proof]
        if not verify_claim(root, claim.index, address, claim.amount_int, proof):
            failures.append(f"Claim {claim.index} for {address} does not verify")
    return failures


# =============================================================================
# Pipeline
# =============================================================================

class AirdropPipeline:
    """
    Snapshot-to-distribution runner.

    Usage:
        pipeline = AirdropPipeline(config)
        result = pipeline.run("base", holders)
        print(result.distribution.merkle_root)
    """

    def __init__(self, config: Optional[AirdropConfig] = None) -> None:
        self.config = config or AirdropConfig()

    def prepare_holders(self, holders: Iterable[HolderBalance], network: NetworkConfig) -> list[HolderBalance]:
        """Dedupe, optionally drop contracts, and apply the configured order."""
        prepared = deduplicate_holders(holders)
        if network.exclude_contracts:
            prepared = [h for h in prepared if not h.is_contract]
        return order_holders(prepared, by=self.config.order_by)

    def run(
        self,
        network_key: str,
        holders: Iterable[HolderBalance],
        *,
        total_amount: Optional[int] = None,
    ) -> PipelineResult:
        """
        Allocate and commit for one network.

        Core errors are deterministic, so they are raised, never retried.

        Raises:
            ConfigException: If the network is not configured
            InvalidInputException: On an invalid holder set or total
            ArithmeticOverflowException: If an amount exceeds uint256
        """
        network = self.config.get_network(network_key)
        total = total_amount if total_amount is not None else network.total_amount
        if not total:
            raise InvalidInputException(
                f"No total_amount configured for network {network_key!r}",
                field_path="total_amount",
            )

        result = PipelineResult(network=network_key)
        result.holders = self.prepare_holders(holders, network)
        logger.info("Running %s with %d holders", network_key, len(result.holders))

        allocation = allocate(result.holders, total)
        result.allocation = distribute_remainder(
            allocation, RemainderPolicy(self.config.remainder_policy),
        )
        result.commitment = build_commitment(result.allocation)
        result.distribution = build_distribution(
            result.allocation,
            result.commitment,
            network=network,
            decimals=self.config.decimals,
        )

        result.errors = check_distribution(result.distribution)
        result.ok = not result.errors
        if result.ok:
            logger.info(
                "%s root %s, allocated %s of %s (remainder %d base units)",
                network_key,
                result.distribution.merkle_root,
                format_units(result.allocation.achieved_total, self.config.decimals),
                format_units(result.allocation.requested_total, self.config.decimals),
                result.allocation.remainder,
            )
        else:
            logger.error("%s distribution failed self-check: %s", network_key, result.errors)
        return result

    def run_many(
        self,
        holders_by_network: Mapping[str, Iterable[HolderBalance]],
        *,
        max_workers: Optional[int] = None,
    ) -> dict[str, PipelineResult]:
        """
        Run several networks concurrently, each on its own holder set.

        A failing network does not stop the others; its result carries the
        error and ok=False.
        """
        def _run_one(key: str, holders: Iterable[HolderBalance]) -> PipelineResult:
            try:
                return self.run(key, list(holders))
            except AirdropException as e:
                logger.error("Network %s failed: %s", key, e.message)
                return PipelineResult(network=key, ok=False, errors=[f"{e.code}: {e.message}"])

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {
                key: pool.submit(_run_one, key, holders)
                for key, holders in holders_by_network.items()
            }
            return {key: future.result() for key, future in futures.items()}


def create_pipeline(config: Optional[AirdropConfig] = None) -> AirdropPipeline:
    """Pipeline over the given (or default) configuration."""
    if config is None:
        from core.config.runtime import get_default_config
        config = get_default_config()
    return AirdropPipeline(config)


__all__ = [
    "PipelineResult",
    "AirdropPipeline",
    "build_distribution",
    "check_distribution",
    "create_pipeline",
]
