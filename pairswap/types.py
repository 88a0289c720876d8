"""Shared type definitions: asset identifiers, pair keys and wire integers."""

from __future__ import annotations

import hashlib
import json
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from pairswap.errors import InvalidAsset, ZeroAmount
from pairswap.safe_int import UINT256_MAX, require_uint256

# Unordered asset pair used as registry key
PairKey = frozenset[str]


def validate_uint256(value: Any) -> str:
    """Validate that a value is a uint256 given as int or decimal string.

    Returns:
        The value as a decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith(("0x", "0X")) or len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def normalize_asset(asset: str) -> str:
    """Normalize an asset identifier.

    Hex addresses are lowercased so that checksummed and plain forms
    compare equal. Any other non-empty string is an opaque symbol and is
    returned unchanged.

    Raises:
        InvalidAsset: If asset is not a non-empty string
    """
    if not isinstance(asset, str) or not asset.strip():
        raise InvalidAsset(f"Invalid asset identifier: {asset!r}")
    if is_valid_address(asset):
        return "0x" + asset[2:].lower()
    return asset


def pair_key(asset_a: str, asset_b: str) -> PairKey:
    """Order-independent key for a pair of normalized assets."""
    return frozenset((asset_a, asset_b))


def derive_pool_id(asset_a: str, asset_b: str) -> str:
    """Deterministic pool identifier for an unordered pair.

    Same shape as an address: 0x + 40 hex chars, taken from the sha256 of
    the sorted pair encoded as a JSON array, so both argument orders give
    the same id and no two distinct pairs share an encoding.
    """
    digest = hashlib.sha256(json.dumps(sorted((asset_a, asset_b))).encode()).hexdigest()
    return "0x" + digest[:40]


def require_positive(amount: int, name: str = "amount") -> int:
    """Validate a strictly positive uint256 amount and return it.

    Raises:
        TypeError: If amount is not an int
        ZeroAmount: If amount is zero or negative
        Uint256Overflow: If amount exceeds 2**256 - 1
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"{name} must be int, got {type(amount).__name__}")
    if amount <= 0:
        raise ZeroAmount(f"{name} must be positive, got {amount}")
    return require_uint256(amount, name)
