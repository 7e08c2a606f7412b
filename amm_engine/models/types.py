"""Shared type definitions for the pool engine.

Accounts are hex identities, assets are opaque identifier strings. A pool is
keyed by its two assets in canonical order.
"""

from __future__ import annotations

import hashlib
import re
from enum import Enum
from typing import Annotated, Any, NamedTuple

from pydantic import BeforeValidator, Field

from amm_engine.errors import IdenticalAssets

U64_MAX = 2**64 - 1

_ACCOUNT_RE = re.compile(r"0x[0-9a-fA-F]{1,64}")


def validate_u64(value: Any) -> int:
    """Validate that a value is a u64 amount.

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"U64 must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"U64 cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"U64 overflow: {value} > 2^64-1")
    return value


# Account identity (0x followed by 1 to 64 hex chars)
Account = Annotated[str, Field(pattern=r"^0x[a-f0-9]{1,64}$")]

# 64-bit unsigned amount
U64 = Annotated[int, BeforeValidator(validate_u64)]

# Basis points
Bps = Annotated[int, Field(ge=0, le=10_000)]


def normalize_account(account: str) -> str:
    """Normalize an account identity to lowercase with 0x prefix.

    Raises:
        ValueError: If the account is empty or not hexadecimal
    """
    acct = account.strip().lower()
    if not acct.startswith("0x"):
        acct = "0x" + acct
    if not is_valid_account(acct):
        raise ValueError(f"Invalid account: {account}")
    return acct


def is_valid_account(account: str) -> bool:
    """Check if a string is a valid 0x-prefixed hex account."""
    if not isinstance(account, str):
        return False
    return _ACCOUNT_RE.fullmatch(account) is not None


class Side(str, Enum):
    """One side of a pool."""

    X = "x"
    Y = "y"

    @property
    def other(self) -> Side:
        return Side.Y if self is Side.X else Side.X


class SwapDirection(str, Enum):
    """Which canonical side is sold into the pool."""

    X_TO_Y = "x_to_y"
    Y_TO_X = "y_to_x"

    @property
    def side_in(self) -> Side:
        return Side.X if self is SwapDirection.X_TO_Y else Side.Y

    @property
    def side_out(self) -> Side:
        return self.side_in.other


class PoolKey(NamedTuple):
    """Canonically ordered asset pair identifying a pool."""

    asset_x: str
    asset_y: str

    @classmethod
    def of(cls, asset_a: str, asset_b: str) -> PoolKey:
        """Build the key for an asset pair given in any order."""
        x, y = sort_assets(asset_a, asset_b)
        return cls(x, y)

    @property
    def lp_asset(self) -> str:
        """Ledger identifier of this pool's LP token."""
        return f"LP<{self.asset_x},{self.asset_y}>"

    @property
    def custody_account(self) -> str:
        """Ledger account holding the pool's assets, derived from the pair."""
        digest = hashlib.sha256(self.lp_asset.encode()).hexdigest()
        return "0x" + digest

    def direction(self, asset_in: str, asset_out: str) -> SwapDirection:
        """Direction of a swap selling asset_in for asset_out.

        Raises:
            ValueError: If the assets are not this pool's pair
        """
        if (asset_in, asset_out) == (self.asset_x, self.asset_y):
            return SwapDirection.X_TO_Y
        if (asset_in, asset_out) == (self.asset_y, self.asset_x):
            return SwapDirection.Y_TO_X
        raise ValueError(f"Assets ({asset_in}, {asset_out}) do not match pool {self}")

    def asset(self, side: Side) -> str:
        return self.asset_x if side is Side.X else self.asset_y

    def __str__(self) -> str:
        return f"{self.asset_x}/{self.asset_y}"


def is_sorted(asset_a: str, asset_b: str) -> bool:
    """True if asset_a orders strictly before asset_b.

    Ordering compares the UTF-8 encoding byte by byte.

    Raises:
        IdenticalAssets: If both assets are identical
    """
    a, b = asset_a.encode(), asset_b.encode()
    if a == b:
        raise IdenticalAssets(f"Identical assets: {asset_a}")
    return a < b


def sort_assets(asset_a: str, asset_b: str) -> tuple[str, str]:
    """Return the pair in canonical (x, y) order."""
    if is_sorted(asset_a, asset_b):
        return asset_a, asset_b
    return asset_b, asset_a
