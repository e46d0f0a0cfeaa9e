"""
Allocation

Proportional split of a total airdrop amount across snapshot holders.
"""
from .allocator import HolderLike, validate_holders, allocate
from .remainder import RemainderPolicy, distribute_remainder

__all__ = [
    "HolderLike",
    "validate_holders",
    "allocate",
    "RemainderPolicy",
    "distribute_remainder",
]
