"""Reserve and balance primitives.

Every mutating pool operation is built from these three steps: deposit
input into the held balances, extract outputs and fee shares, then settle
the reserves to what is left.
"""

from __future__ import annotations

from amm_engine.errors import InsufficientAmount
from amm_engine.models.types import Side
from amm_engine.pool.state import Pool
from amm_engine.safe_int import S


def deposit(pool: Pool, side: Side, amount: int) -> None:
    """Add amount to the pool's held balance on side.

    Raises:
        U64Overflow: If the balance would exceed u64
    """
    pool.balances.set(side, (S(pool.balances.get(side)) + amount).to_u64())


def extract(pool: Pool, side: Side, amount: int) -> int:
    """Remove amount from the held balance on side and return it.

    The pool must keep a nonzero balance, so amount has to be strictly
    below the current balance.

    Raises:
        InsufficientAmount: If amount >= held balance
    """
    held = pool.balances.get(side)
    if amount >= held:
        raise InsufficientAmount(
            f"Cannot extract {amount} of side {side.value}: pool holds {held}"
        )
    pool.balances.set(side, held - amount)
    return amount


def settle(pool: Pool, now: int) -> None:
    """Sync reserves to the held balances and stamp the sync time."""
    pool.reserves.reserve_x = pool.balances.balance_x
    pool.reserves.reserve_y = pool.balances.balance_y
    pool.reserves.last_sync_time = now
