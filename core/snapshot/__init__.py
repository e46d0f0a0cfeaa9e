"""
Snapshot

Holder discovery, balance collection and holder-set preparation.
Everything here feeds the allocator; none of it is part of the
allocation or commitment math.
"""
from .holders import (
    HolderOrder,
    deduplicate_holders,
    order_holders,
    holder_from_record,
    holders_from_records,
    holders_to_records,
)
from .explorer import (
    TRANSFER_TOPIC,
    ExplorerClient,
    ExplorerError,
    recipient_from_log,
    resolve_block_number,
)
from .rpc import RpcClient, RpcError
from .collect import build_clients, collect_snapshot

__all__ = [
    "HolderOrder",
    "deduplicate_holders",
    "order_holders",
    "holder_from_record",
    "holders_from_records",
    "holders_to_records",
    "TRANSFER_TOPIC",
    "ExplorerClient",
    "ExplorerError",
    "recipient_from_log",
    "resolve_block_number",
    "RpcClient",
    "RpcError",
    "build_clients",
    "collect_snapshot",
]
