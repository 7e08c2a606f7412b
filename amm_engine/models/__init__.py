"""Data models for the pool engine."""

from amm_engine.models.events import (
    AdminChanged,
    EngineEvent,
    FeeRecipientChanged,
    FeesUpdated,
    FeesWithdrawn,
    LiquidityAdded,
    LiquidityRemoved,
    PoolCreated,
    PoolEvent,
    Swapped,
)
from amm_engine.models.types import (
    PoolKey,
    Side,
    SwapDirection,
    is_sorted,
    normalize_account,
    sort_assets,
)

__all__ = [
    # Types
    "PoolKey",
    "Side",
    "SwapDirection",
    "is_sorted",
    "normalize_account",
    "sort_assets",
    # Events
    "EngineEvent",
    "PoolEvent",
    "PoolCreated",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swapped",
    "FeesUpdated",
    "FeesWithdrawn",
    "AdminChanged",
    "FeeRecipientChanged",
]
