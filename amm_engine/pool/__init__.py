"""Pool state and the operations that mutate it.

Provides PoolRegistry plus the liquidity, swap and fee functions the engine
runs against staged pools.
"""

from .registry import PoolRegistry
from .state import FeeBalances, FeeClass, FeeParams, HeldBalances, Pool, Reserves

__all__ = [
    "PoolRegistry",
    "Pool",
    "Reserves",
    "HeldBalances",
    "FeeParams",
    "FeeBalances",
    "FeeClass",
]
