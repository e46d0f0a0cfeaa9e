"""
Hashing Utilities
Keccak-256 hashing and Solidity-compatible leaf encoding for Merkle
commitments.

This module provides:
- keccak256 for raw bytes
- Tight (abi.encodePacked) encoding of (uint256 index, address, uint256 amount)
- Leaf hashing and sorted-pair parent hashing
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Leaves and parents hash exactly the bytes a Solidity verifier would hash:
  keccak256(abi.encodePacked(index, account, amount)) and
  keccak256(abi.encodePacked(min(a, b), max(a, b)))
- All operations are deterministic
"""
from __future__ import annotations

from eth_abi.packed import encode_packed
from eth_utils import keccak

from core.schemas.errors import ArithmeticOverflowException, InvalidInputException
from core.schemas.holders import normalize_address

UINT256_MAX: int = 2**256 - 1

# index, account, amount
LEAF_ABI_TYPES: tuple[str, str, str] = ("uint256", "address", "uint256")
LEAF_ENCODED_SIZE: int = 32 + 20 + 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 hash of raw bytes (the EVM's hash, not SHA3-256).

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(data)


def _check_uint256(value: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputException(
            f"{name} must be an integer, got {type(value).__name__}",
            field_path=name,
        )
    if value < 0:
        raise InvalidInputException(f"{name} must be non-negative, got {value}", field_path=name)
    if value > UINT256_MAX:
        raise ArithmeticOverflowException(
            f"{name} does not fit in uint256: {value}",
            details={"field": name, "value": str(value)},
        )


def encode_leaf(index: int, address: str, amount: int) -> bytes:
    """
    Tightly pack a leaf: 32-byte index, 20-byte address, 32-byte amount.

    Args:
        index: Allocation index
        address: 0x-prefixed holder address
        amount: Allocated amount in base units

    Returns:
        84 bytes, big-endian, no padding between fields

    Raises:
        InvalidInputException: On negative values or a malformed address
        ArithmeticOverflowException: If index or amount exceeds uint256
    """
    _check_uint256(index, "index")
    _check_uint256(amount, "amount")
    account = normalize_address(address)
    return encode_packed(LEAF_ABI_TYPES, (index, account, amount))


def hash_leaf(index: int, address: str, amount: int) -> bytes:
    """Leaf commitment: keccak256(encode_leaf(index, address, amount))."""
    return keccak256(encode_leaf(index, address, amount))


def hash_sorted_pair(a: bytes, b: bytes) -> bytes:
    """
    Parent of two nodes under the sort-pairs rule.

    Both inputs are 32-byte big-endian digests, so lexicographic byte
    order equals numeric order.
    """
    if b < a:
        a, b = b, a
    return keccak256(a + b)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        InvalidInputException: If string doesn't start with 0x, has odd
            length, or contains invalid hex characters
    """
    if not isinstance(hex_string, str) or not hex_string.startswith("0x"):
        raise InvalidInputException(
            f"Hex string must start with '0x' prefix, got: {str(hex_string)[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise InvalidInputException(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise InvalidInputException(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "UINT256_MAX",
    "LEAF_ABI_TYPES",
    "LEAF_ENCODED_SIZE",
    "keccak256",
    "encode_leaf",
    "hash_leaf",
    "hash_sorted_pair",
    "to_hex",
    "from_hex",
]
