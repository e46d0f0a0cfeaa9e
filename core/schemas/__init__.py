"""
Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Error models and exceptions
from .errors import (
    AirdropError,
    AirdropException,
    ArithmeticOverflowException,
    ConfigException,
    ErrorCodes,
    IndexOutOfRangeException,
    InvalidInputException,
    MerkleVerificationException,
    SnapshotFormatException,
)

# Allocation records
from .holders import (
    ADDRESS_RE,
    AllocationEntry,
    AllocationResult,
    HolderBalance,
    normalize_address,
)

# Published distribution
from .distribution import ClaimRecord, Distribution

__all__ = [
    # Errors
    "AirdropError",
    "AirdropException",
    "ArithmeticOverflowException",
    "ConfigException",
    "ErrorCodes",
    "IndexOutOfRangeException",
    "InvalidInputException",
    "MerkleVerificationException",
    "SnapshotFormatException",
    # Holders
    "ADDRESS_RE",
    "AllocationEntry",
    "AllocationResult",
    "HolderBalance",
    "normalize_address",
    # Distribution
    "ClaimRecord",
    "Distribution",
]
