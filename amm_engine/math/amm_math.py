"""Constant product pricing and LP share math.

Pools follow x * y = k. Fees are charged on the input amount in basis
points, so with a 30 bps fee only 9970/10000 of the input moves the price.
All functions are pure and work on integers with floor rounding.
"""

from __future__ import annotations

from amm_engine.constants import BPS_DENOMINATOR, MINIMUM_LIQUIDITY
from amm_engine.errors import (
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InvalidAmount,
)
from amm_engine.safe_int import S


class ConstantProduct:
    """Constant product AMM math.

    Formula: amount_out = (in * (10000 - fee) * r_out) / (r_in * 10000 + in * (10000 - fee))
    """

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_bps: int,
    ) -> int:
        """Calculate output amount for an exact input.

        Args:
            amount_in: Input asset amount
            reserve_in: Reserve of input asset in pool
            reserve_out: Reserve of output asset in pool
            fee_bps: Fee charged on the input, in basis points

        Returns:
            Output asset amount (0 for empty input or empty reserves)
        """
        if amount_in <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0

        amount_in_with_fee = S(amount_in) * (S(BPS_DENOMINATOR) - fee_bps)
        numerator = amount_in_with_fee * reserve_out
        denominator = S(reserve_in) * BPS_DENOMINATOR + amount_in_with_fee

        return (numerator // denominator).to_u64()

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_bps: int,
    ) -> int:
        """Calculate required input for a desired output.

        Formula: amount_in = (r_in * out * 10000) / ((r_out - out) * (10000 - fee)) + 1

        Raises:
            InvalidAmount: If amount_out is not positive
            InsufficientLiquidity: If reserves are empty or amount_out >= reserve_out
        """
        if amount_out <= 0:
            raise InvalidAmount(f"Output amount must be positive: {amount_out}")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity("Pool has no reserves")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Output {amount_out} must be below reserve {reserve_out}"
            )

        numerator = S(reserve_in) * amount_out * BPS_DENOMINATOR
        denominator = (S(reserve_out) - amount_out) * (S(BPS_DENOMINATOR) - fee_bps)

        return ((numerator // denominator) + 1).to_u64()

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of B matching amount_a of A at the current pool ratio.

        Raises:
            InvalidAmount: If amount_a is not positive
            InsufficientLiquidity: If either reserve is empty
        """
        if amount_a <= 0:
            raise InvalidAmount(f"Quote amount must be positive: {amount_a}")
        if reserve_a <= 0 or reserve_b <= 0:
            raise InsufficientLiquidity("Pool has no reserves")
        return (S(amount_a) * reserve_b // reserve_a).to_u64()

    def initial_liquidity(self, amount_x: int, amount_y: int) -> int:
        """LP units for the caller on the first deposit.

        The first MINIMUM_LIQUIDITY units of sqrt(x * y) are locked, so the
        root must strictly exceed it.

        Raises:
            InsufficientLiquidityMinted: If sqrt(x * y) <= MINIMUM_LIQUIDITY
        """
        root = (S(amount_x) * amount_y).isqrt()
        if root <= MINIMUM_LIQUIDITY:
            raise InsufficientLiquidityMinted(
                f"sqrt({amount_x} * {amount_y}) = {root.value} does not exceed "
                f"the locked minimum of {MINIMUM_LIQUIDITY}"
            )
        return (root - MINIMUM_LIQUIDITY).to_u64()

    def proportional_liquidity(
        self,
        amount_x: int,
        amount_y: int,
        reserve_x: int,
        reserve_y: int,
        lp_supply: int,
    ) -> int:
        """LP units for a deposit into a pool that already has supply.

        Raises:
            InsufficientLiquidityMinted: If the deposit rounds down to zero units
        """
        by_x = S(amount_x) * lp_supply // reserve_x
        by_y = S(amount_y) * lp_supply // reserve_y
        liquidity = by_x.min(by_y)
        if not liquidity:
            raise InsufficientLiquidityMinted(
                f"Deposit ({amount_x}, {amount_y}) mints zero of supply {lp_supply}"
            )
        return liquidity.to_u64()

    def burn_amounts(
        self,
        lp_amount: int,
        balance_x: int,
        balance_y: int,
        lp_supply: int,
    ) -> tuple[int, int]:
        """Assets paid out for burning lp_amount units.

        Raises:
            InsufficientLiquidityBurned: If either payout rounds down to zero
        """
        amount_x = (S(balance_x) * lp_amount // lp_supply).to_u64()
        amount_y = (S(balance_y) * lp_amount // lp_supply).to_u64()
        if amount_x == 0 or amount_y == 0:
            raise InsufficientLiquidityBurned(
                f"Burning {lp_amount} of {lp_supply} pays ({amount_x}, {amount_y})"
            )
        return amount_x, amount_y


# Singleton instance
constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
]
