"""Swap execution and the constant product invariant check.

A swap deposits the input, pays out the output, skims the treasury, team and
rewards shares off the input side, and then requires that the fee-adjusted
balance product did not fall below the reserve product:

    adj_x = balance_x * PRECISION - amount_x_in * (total_fee_bps + FEE_FLOOR_BPS)
    adj_y = balance_y * PRECISION - amount_y_in * (total_fee_bps + FEE_FLOOR_BPS)
    adj_x * adj_y >= (reserve_x * PRECISION) * (reserve_y * PRECISION)

Both sides of the comparison can exceed u128, so the products are compared
with the double-width helpers in amm_engine.math.u256.

Functions here mutate a staged Pool. On any error the caller discards the
staged copy, so a failed swap leaves the live pool untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from amm_engine.constants import BPS_DENOMINATOR, PRECISION
from amm_engine.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    KInvariantViolation,
)
from amm_engine.math.amm_math import constant_product
from amm_engine.math.u256 import product_ge
from amm_engine.models.types import Side, SwapDirection
from amm_engine.pool.balances import deposit, extract, settle
from amm_engine.pool.state import FeeClass, Pool
from amm_engine.safe_int import S, Underflow

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapResult:
    """Amounts moved by a swap, per canonical side."""

    amount_x_in: int
    amount_y_in: int
    amount_x_out: int
    amount_y_out: int
    # Skimmed shares by fee class, as (x, y)
    fees: dict[FeeClass, tuple[int, int]] = field(default_factory=dict)

    def amount_in(self, direction: SwapDirection) -> int:
        return self.amount_x_in if direction.side_in is Side.X else self.amount_y_in

    def amount_out(self, direction: SwapDirection) -> int:
        return self.amount_x_out if direction.side_out is Side.X else self.amount_y_out

    def payout(self, side: Side) -> int:
        return self.amount_x_out if side is Side.X else self.amount_y_out


def swap_exact_in(pool: Pool, direction: SwapDirection, amount_in: int, now: int) -> SwapResult:
    """Sell exactly amount_in for as much output as the curve gives.

    Raises:
        InsufficientInputAmount: If amount_in is not positive
        InsufficientOutputAmount: If the quote rounds down to zero
        KInvariantViolation: If the trade would shrink the adjusted product
    """
    if amount_in <= 0:
        raise InsufficientInputAmount(f"Input amount must be positive: {amount_in}")

    side_in = direction.side_in
    reserve_in = pool.reserves.get(side_in)
    reserve_out = pool.reserves.get(side_in.other)

    deposit(pool, side_in, amount_in)
    amount_out = constant_product.get_amount_out(
        amount_in, reserve_in, reserve_out, pool.fee_params.swap_fee_bps
    )

    result = _swap(pool, direction, amount_out, now)
    # The input side never pays out; a residual here is a logic defect
    if result.payout(direction.side_in) != 0:
        raise InsufficientOutputAmount("Nonzero payout on the input side")
    return result


def swap_exact_out(
    pool: Pool,
    direction: SwapDirection,
    amount_in: int,
    amount_out: int,
    now: int,
) -> SwapResult:
    """Pay exactly amount_out in exchange for the supplied amount_in.

    No inverse pricing happens here: the caller is expected to have computed
    amount_in (see ConstantProduct.get_amount_in). The invariant check is
    what rejects an insufficient input.

    Raises:
        InsufficientInputAmount: If amount_in is not positive
        InsufficientOutputAmount: If amount_out is zero
        InsufficientLiquidity: If amount_out is not below the reserve
        KInvariantViolation: If amount_in does not cover amount_out plus fees
    """
    if amount_in <= 0:
        raise InsufficientInputAmount(f"Input amount must be positive: {amount_in}")

    deposit(pool, direction.side_in, amount_in)
    result = _swap(pool, direction, amount_out, now)
    if result.payout(direction.side_in) != 0:
        raise InsufficientOutputAmount("Nonzero payout on the input side")
    return result


def check_k_invariant(
    balance_x: int,
    balance_y: int,
    amount_x_in: int,
    amount_y_in: int,
    reserve_x: int,
    reserve_y: int,
    fee_bps: int,
) -> None:
    """Require the fee-adjusted balance product to cover the reserve product.

    Args:
        balance_x: Held X after payouts and fee skimming
        balance_y: Held Y after payouts and fee skimming
        amount_x_in: X that arrived in this swap
        amount_y_in: Y that arrived in this swap
        reserve_x: X reserve before the swap
        reserve_y: Y reserve before the swap
        fee_bps: Fee deducted from the inputs (configured total plus floor)

    Raises:
        KInvariantViolation: If adj_x * adj_y < reserve_x * reserve_y * PRECISION^2
    """
    try:
        adj_x = (S(balance_x) * PRECISION - S(amount_x_in) * fee_bps).to_u128()
        adj_y = (S(balance_y) * PRECISION - S(amount_y_in) * fee_bps).to_u128()
    except Underflow as err:
        raise KInvariantViolation(f"Adjusted balance is negative: {err}") from err

    scaled_x = (S(reserve_x) * PRECISION).to_u128()
    scaled_y = (S(reserve_y) * PRECISION).to_u128()

    if not product_ge(adj_x, adj_y, scaled_x, scaled_y):
        raise KInvariantViolation(
            f"adj_x * adj_y < reserve product: ({adj_x} * {adj_y}) < ({scaled_x} * {scaled_y})"
        )


def _swap(pool: Pool, direction: SwapDirection, amount_out: int, now: int) -> SwapResult:
    """Pay out amount_out on the output side, skim fees, check, settle."""
    amount_x_out = amount_out if direction.side_out is Side.X else 0
    amount_y_out = amount_out if direction.side_out is Side.Y else 0

    if amount_x_out == 0 and amount_y_out == 0:
        raise InsufficientOutputAmount("Swap produces no output")

    reserve_x = pool.reserves.reserve_x
    reserve_y = pool.reserves.reserve_y
    if not (amount_x_out < reserve_x and amount_y_out < reserve_y):
        raise InsufficientLiquidity(
            f"Output ({amount_x_out}, {amount_y_out}) must be below "
            f"reserves ({reserve_x}, {reserve_y})"
        )

    if amount_x_out > 0:
        extract(pool, Side.X, amount_x_out)
    if amount_y_out > 0:
        extract(pool, Side.Y, amount_y_out)

    amount_x_in = _arrived(pool.balances.balance_x, reserve_x, amount_x_out)
    amount_y_in = _arrived(pool.balances.balance_y, reserve_y, amount_y_out)
    if amount_x_in == 0 and amount_y_in == 0:
        raise InsufficientInputAmount("No input arrived")

    fees = {
        fee_class: (
            _skim(pool, fee_class, Side.X, amount_x_in),
            _skim(pool, fee_class, Side.Y, amount_y_in),
        )
        for fee_class in FeeClass
    }

    check_k_invariant(
        pool.balances.balance_x,
        pool.balances.balance_y,
        amount_x_in,
        amount_y_in,
        reserve_x,
        reserve_y,
        pool.fee_params.invariant_fee_bps,
    )

    settle(pool, now)

    logger.debug(
        "swap_executed",
        pool=str(pool.key),
        direction=direction.value,
        amount_x_in=amount_x_in,
        amount_y_in=amount_y_in,
        amount_x_out=amount_x_out,
        amount_y_out=amount_y_out,
    )
    return SwapResult(
        amount_x_in=amount_x_in,
        amount_y_in=amount_y_in,
        amount_x_out=amount_x_out,
        amount_y_out=amount_y_out,
        fees=fees,
    )


def _arrived(balance: int, reserve: int, amount_out: int) -> int:
    """Input on one side: whatever the balance holds above reserve - out."""
    remaining = reserve - amount_out
    return balance - remaining if balance > remaining else 0


def _skim(pool: Pool, fee_class: FeeClass, side: Side, amount_in: int) -> int:
    """Move one fee class's share of amount_in out of the tradable balance."""
    share = (S(amount_in) * pool.fee_params.bps(fee_class) // BPS_DENOMINATOR).to_u64()
    if share > 0:
        extract(pool, side, share)
        pool.fee_balances.set(
            fee_class, side, (S(pool.fee_balances.get(fee_class, side)) + share).to_u64()
        )
    return share
