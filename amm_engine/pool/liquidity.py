"""Liquidity provisioning: proportional LP mint and burn.

These functions mutate a staged Pool only. Moving assets and LP units in the
ledger is the caller's job, done after the pool math succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from amm_engine.constants import MINIMUM_LIQUIDITY
from amm_engine.errors import (
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InvalidAmount,
)
from amm_engine.math.amm_math import constant_product
from amm_engine.models.types import Side
from amm_engine.pool.balances import deposit, extract, settle
from amm_engine.pool.state import Pool
from amm_engine.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class MintResult:
    """Outcome of adding liquidity.

    Attributes:
        amount_x: X actually taken from the provider
        amount_y: Y actually taken from the provider
        liquidity: LP units minted to the provider
        locked: LP units minted to the locked sink (nonzero only on genesis)
    """

    amount_x: int
    amount_y: int
    liquidity: int
    locked: int = 0


@dataclass(frozen=True)
class BurnResult:
    """Outcome of removing liquidity."""

    amount_x: int
    amount_y: int
    liquidity: int


def optimal_amounts(
    amount_x_desired: int,
    amount_y_desired: int,
    reserve_x: int,
    reserve_y: int,
) -> tuple[int, int]:
    """Largest deposit at the pool ratio not exceeding either desired amount.

    An empty pool takes the desired amounts as they are. Otherwise Y is
    matched to all of X first; if that needs more Y than offered, X is
    matched to all of Y instead.

    Raises:
        InvalidAmount: If neither matching fits within the desired amounts
    """
    if reserve_x == 0 and reserve_y == 0:
        return amount_x_desired, amount_y_desired

    amount_y_optimal = constant_product.quote(amount_x_desired, reserve_x, reserve_y)
    if amount_y_optimal <= amount_y_desired:
        return amount_x_desired, amount_y_optimal

    amount_x_optimal = constant_product.quote(amount_y_desired, reserve_y, reserve_x)
    if amount_x_optimal > amount_x_desired:
        raise InvalidAmount(
            f"Deposit ({amount_x_desired}, {amount_y_desired}) cannot match "
            f"pool ratio {reserve_x}:{reserve_y}"
        )
    return amount_x_optimal, amount_y_desired


def mint(pool: Pool, amount_x_desired: int, amount_y_desired: int, now: int) -> MintResult:
    """Deposit liquidity into a staged pool and account for the LP units.

    On the first deposit MINIMUM_LIQUIDITY units are minted to the locked
    sink on top of the provider's share.

    Raises:
        InvalidAmount: If a desired amount is zero or the ratio cannot be met
        InsufficientLiquidityMinted: If the deposit is worth zero LP units
        InsufficientLiquidity: If nothing was minted to the provider
    """
    if amount_x_desired <= 0 or amount_y_desired <= 0:
        raise InvalidAmount(
            f"Desired amounts must be positive: ({amount_x_desired}, {amount_y_desired})"
        )

    reserves = pool.reserves
    amount_x, amount_y = optimal_amounts(
        amount_x_desired, amount_y_desired, reserves.reserve_x, reserves.reserve_y
    )

    supply = pool.lp_supply
    locked = 0
    if supply == 0:
        liquidity = constant_product.initial_liquidity(amount_x, amount_y)
        locked = MINIMUM_LIQUIDITY
    else:
        liquidity = constant_product.proportional_liquidity(
            amount_x, amount_y, reserves.reserve_x, reserves.reserve_y, supply
        )

    deposit(pool, Side.X, amount_x)
    deposit(pool, Side.Y, amount_y)
    pool.lp_supply = (S(supply) + liquidity + locked).to_u64()

    settle(pool, now)
    pool.k_last = (S(pool.reserves.reserve_x) * pool.reserves.reserve_y).to_u128()

    if liquidity == 0:
        raise InsufficientLiquidity("No LP units minted")

    logger.debug(
        "liquidity_minted",
        pool=str(pool.key),
        amount_x=amount_x,
        amount_y=amount_y,
        liquidity=liquidity,
        locked=locked,
    )
    return MintResult(amount_x=amount_x, amount_y=amount_y, liquidity=liquidity, locked=locked)


def burn(pool: Pool, lp_amount: int, now: int) -> BurnResult:
    """Burn LP units against a staged pool and extract the provider's share.

    Payouts are computed from held balances and supply before the burn.

    Raises:
        InsufficientLiquidityBurned: If either payout rounds down to zero
        InsufficientAmount: If a payout would empty the pool
    """
    supply = pool.lp_supply
    if supply == 0:
        raise InsufficientLiquidityBurned("Pool has no LP supply")

    amount_x, amount_y = constant_product.burn_amounts(
        lp_amount, pool.balances.balance_x, pool.balances.balance_y, supply
    )

    extract(pool, Side.X, amount_x)
    extract(pool, Side.Y, amount_y)
    pool.lp_supply = (S(supply) - lp_amount).to_u64()

    settle(pool, now)
    pool.k_last = (S(pool.reserves.reserve_x) * pool.reserves.reserve_y).to_u128()

    logger.debug(
        "liquidity_burned",
        pool=str(pool.key),
        amount_x=amount_x,
        amount_y=amount_y,
        liquidity=lp_amount,
    )
    return BurnResult(amount_x=amount_x, amount_y=amount_y, liquidity=lp_amount)
