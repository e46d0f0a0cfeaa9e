"""
Token amount conversion between human-readable decimal strings and
base-unit integers.

Both directions are exact: values are split on the decimal point and
handled as integers, never as floats.
"""
from __future__ import annotations

import re

from core.schemas.errors import InvalidInputException

DEFAULT_DECIMALS = 18

_DECIMAL_RE = re.compile(r"^(\d*)(?:\.(\d*))?$")


def parse_units(value: str | int, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert a decimal token amount to base units.

    Args:
        value: Decimal string such as "1.5" or "250", or an int token count
        decimals: Token decimals

    Returns:
        Amount in base units

    Raises:
        InvalidInputException: If the value is negative, malformed, or has
            more fractional digits than the token supports

    Example:
        >>> parse_units("1.5", 18)
        1500000000000000000
    """
    if decimals < 0:
        raise InvalidInputException(f"decimals must be non-negative, got {decimals}")

    if isinstance(value, bool):
        raise InvalidInputException(f"Invalid token amount: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidInputException(f"Token amount must be non-negative, got {value}")
        return value * 10**decimals
    if not isinstance(value, str):
        raise InvalidInputException(
            f"Token amount must be a decimal string, got {type(value).__name__}"
        )

    text = value.strip().replace("_", "")
    match = _DECIMAL_RE.match(text)
    if not match or text in ("", "."):
        raise InvalidInputException(f"Invalid token amount: {value!r}")

    whole, fraction = match.group(1) or "0", match.group(2) or ""
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InvalidInputException(
            f"Token amount {value!r} has more than {decimals} fractional digits"
        )

    return int(whole) * 10**decimals + int(fraction.ljust(decimals, "0") or "0")


def format_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """
    Convert base units to a decimal string, trailing zeros trimmed.

    Example:
        >>> format_units(1500000000000000000, 18)
        '1.5'
        >>> format_units(250 * 10**18, 18)
        '250'
    """
    if amount < 0:
        raise InvalidInputException(f"Amount must be non-negative, got {amount}")
    if decimals == 0:
        return str(amount)

    whole, fraction = divmod(amount, 10**decimals)
    fraction_text = str(fraction).rjust(decimals, "0").rstrip("0")
    if not fraction_text:
        return str(whole)
    return f"{whole}.{fraction_text}"


__all__ = [
    "DEFAULT_DECIMALS",
    "parse_units",
    "format_units",
]
