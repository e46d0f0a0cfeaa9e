"""
Snapshot collection: explorer discovery, then balances and contract
flags at the snapshot block.
"""
from __future__ import annotations

import logging
from typing import Optional

from core.config.runtime import HttpConfig, NetworkConfig
from core.http.client import HttpClient
from core.schemas.holders import HolderBalance
from core.snapshot.explorer import ExplorerClient
from core.snapshot.holders import order_holders
from core.snapshot.rpc import RpcClient

logger = logging.getLogger(__name__)


def build_clients(
    network: NetworkConfig,
    http_config: Optional[HttpConfig] = None,
) -> tuple[ExplorerClient, RpcClient]:
    """Explorer and RPC clients for a network, sharing one HTTP session."""
    network.validate_for_collection()
    http_config = http_config or HttpConfig()
    http = HttpClient(
        timeout=http_config.timeout,
        max_retries=http_config.max_retries,
        retry_delay=http_config.retry_delay,
    )
    explorer = ExplorerClient(
        network.explorer_url,
        network.explorer_api_key or "",
        http=http,
        block_step=http_config.block_step,
        request_delay=http_config.request_delay,
    )
    rpc = RpcClient(network.rpc_url or "", http=http, batch_size=http_config.rpc_batch_size)
    return explorer, rpc


def collect_snapshot(
    network: NetworkConfig,
    explorer: ExplorerClient,
    rpc: RpcClient,
    *,
    check_contracts: bool = True,
) -> list[HolderBalance]:
    """
    Every holder with a positive balance at network.snapshot_block,
    largest balance first.
    """
    logger.info(
        "Discovering %s holders of %s from block %d to %d",
        network.key, network.token_address, network.block_created, network.snapshot_block,
    )
    addresses = list(
        explorer.iter_transfer_recipients(
            network.token_address, network.block_created, network.snapshot_block,
        )
    )
    logger.info("Found %d distinct recipients on %s", len(addresses), network.key)

    balances = rpc.balances_of(network.token_address, addresses, network.snapshot_block)

    holders: list[HolderBalance] = []
    for address, balance in zip(addresses, balances):
        if balance <= 0:
            continue
        is_contract = check_contracts and rpc.is_contract(address, network.snapshot_block)
        holders.append(HolderBalance(address=address, balance=balance, is_contract=is_contract))

    logger.info("%d holders with a positive balance on %s", len(holders), network.key)
    return order_holders(holders, by="balance")


__all__ = [
    "build_clients",
    "collect_snapshot",
]
