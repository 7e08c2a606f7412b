"""Pool fee parameters and accrued fee withdrawals.

Role checks that depend only on the pool (creator) live here. Checks against
the global admin and fee recipient are done by the engine, which owns the
governance record.
"""

from __future__ import annotations

import structlog

from amm_engine.constants import MAX_POOL_FEE_BPS, MAX_TREASURY_FEE_BPS
from amm_engine.errors import ExcessiveFee, InvalidAmount, NoFeeWithdraw, NotCreator, SameFee
from amm_engine.models.types import Side
from amm_engine.pool.state import FeeClass, FeeParams, Pool

logger = structlog.get_logger()


def require_creator(pool: Pool, caller: str) -> None:
    """Raises NotCreator unless caller created the pool."""
    if caller != pool.creator:
        raise NotCreator(f"{caller} is not the creator of pool {pool.key}")


def validate_pool_fees(liquidity_fee_bps: int, team_fee_bps: int, rewards_fee_bps: int) -> None:
    """Check the creator-controlled tiers against their shared ceiling.

    Raises:
        InvalidAmount: If any tier is negative
        ExcessiveFee: If liquidity + team + rewards exceeds MAX_POOL_FEE_BPS
    """
    tiers = (liquidity_fee_bps, team_fee_bps, rewards_fee_bps)
    if any(t < 0 for t in tiers):
        raise InvalidAmount(f"Fee tiers cannot be negative: {tiers}")
    if sum(tiers) > MAX_POOL_FEE_BPS:
        raise ExcessiveFee(f"Pool fees {sum(tiers)} bps exceed {MAX_POOL_FEE_BPS} bps")


def validate_treasury_fee(treasury_fee_bps: int) -> None:
    """Raises InvalidAmount if negative, ExcessiveFee above MAX_TREASURY_FEE_BPS."""
    if treasury_fee_bps < 0:
        raise InvalidAmount(f"Treasury fee cannot be negative: {treasury_fee_bps}")
    if treasury_fee_bps > MAX_TREASURY_FEE_BPS:
        raise ExcessiveFee(
            f"Treasury fee {treasury_fee_bps} bps exceeds {MAX_TREASURY_FEE_BPS} bps"
        )


def set_pool_fees(
    pool: Pool,
    liquidity_fee_bps: int,
    team_fee_bps: int,
    rewards_fee_bps: int,
) -> FeeParams:
    """Replace the liquidity, team and rewards tiers of a staged pool.

    Raises:
        ExcessiveFee: If the tiers exceed their ceiling
        SameFee: If nothing changes
    """
    validate_pool_fees(liquidity_fee_bps, team_fee_bps, rewards_fee_bps)
    params = pool.fee_params
    if (params.liquidity_fee_bps, params.team_fee_bps, params.rewards_fee_bps) == (
        liquidity_fee_bps,
        team_fee_bps,
        rewards_fee_bps,
    ):
        raise SameFee(f"Pool {pool.key} already charges these fees")

    params.liquidity_fee_bps = liquidity_fee_bps
    params.team_fee_bps = team_fee_bps
    params.rewards_fee_bps = rewards_fee_bps
    return params


def set_treasury_fee(pool: Pool, treasury_fee_bps: int) -> FeeParams:
    """Replace the treasury tier of a staged pool.

    Raises:
        ExcessiveFee: If above MAX_TREASURY_FEE_BPS
        SameFee: If nothing changes
    """
    validate_treasury_fee(treasury_fee_bps)
    if pool.fee_params.treasury_fee_bps == treasury_fee_bps:
        raise SameFee(f"Pool {pool.key} treasury fee is already {treasury_fee_bps} bps")
    pool.fee_params.treasury_fee_bps = treasury_fee_bps
    return pool.fee_params


def take_fees(pool: Pool, fee_class: FeeClass) -> tuple[int, int]:
    """Zero out one fee class's accrued balances and return them as (x, y).

    Raises:
        NoFeeWithdraw: If both sides are zero
    """
    amount_x, amount_y = pool.fee_balances.pair(fee_class)
    if amount_x == 0 and amount_y == 0:
        raise NoFeeWithdraw(f"No {fee_class.value} fees accrued in pool {pool.key}")

    pool.fee_balances.set(fee_class, Side.X, 0)
    pool.fee_balances.set(fee_class, Side.Y, 0)
    logger.debug(
        "fees_taken",
        pool=str(pool.key),
        fee_class=fee_class.value,
        amount_x=amount_x,
        amount_y=amount_y,
    )
    return amount_x, amount_y
