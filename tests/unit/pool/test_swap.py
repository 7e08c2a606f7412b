"""Tests for swap execution and the invariant check."""

import pytest

from amm_engine.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    KInvariantViolation,
)
from amm_engine.math.amm_math import constant_product
from amm_engine.models.types import Side, SwapDirection
from amm_engine.pool.state import FeeClass, FeeParams
from amm_engine.pool.swap import check_k_invariant, swap_exact_in, swap_exact_out
from tests.helpers import make_pool


class TestCheckKInvariant:
    """Tests for the fee-adjusted product comparison."""

    def test_unchanged_balances_pass(self):
        check_k_invariant(1000, 1000, 0, 0, 1000, 1000, 30)

    def test_shrunk_product_fails(self):
        with pytest.raises(KInvariantViolation):
            check_k_invariant(1000, 999, 0, 0, 1000, 1000, 30)

    def test_fee_deduction_applies_to_input(self):
        """Balances that grow by less than the fee on the input fail."""
        # adj_x = 1001 * 10000 - 10 * 130 = 10_008_700; adj_y = 999 * 10000
        # 10_008_700 * 9_990_000 < 10_000_000 * 10_000_000
        with pytest.raises(KInvariantViolation):
            check_k_invariant(1001, 999, 10, 0, 1000, 1000, 130)

    def test_negative_adjusted_balance(self):
        """Fee deduction larger than the scaled balance is a violation."""
        with pytest.raises(KInvariantViolation):
            check_k_invariant(1, 1000, 1000, 0, 1000, 1000, 30)

    def test_wide_values(self):
        """Scaled values beyond u64 are compared exactly."""
        big = 2**63
        check_k_invariant(big, big, 0, 0, big, big, 30)
        with pytest.raises(KInvariantViolation):
            check_k_invariant(big, big - 1, 0, 0, big, big, 30)


class TestSwapExactIn:
    """Tests for exact-input swaps on a 1M/1M pool with default fees."""

    def test_x_to_y(self):
        pool = make_pool(1_000_000, 1_000_000)

        result = swap_exact_in(pool, SwapDirection.X_TO_Y, 1000, now=9)

        # Priced at swap_fee_bps = 10 + 20 + 10 = 40
        assert result.amount_x_in == 1000
        assert result.amount_y_out == 995
        assert result.amount_x_out == 0
        assert result.amount_out(SwapDirection.X_TO_Y) == 995
        assert result.fees[FeeClass.TREASURY] == (1, 0)
        assert pool.fee_balances.treasury_x == 1
        assert (pool.reserves.reserve_x, pool.reserves.reserve_y) == (1_000_999, 999_005)
        assert pool.reserves.last_sync_time == 9

    def test_y_to_x(self):
        pool = make_pool(1_000_000, 1_000_000)

        result = swap_exact_in(pool, SwapDirection.Y_TO_X, 1000, now=0)

        assert result.amount_y_in == 1000
        assert result.amount_x_out == 995
        assert pool.fee_balances.treasury_y == 1

    def test_custody_conserved(self):
        """Held balances plus fee shares account for every unit moved."""
        pool = make_pool(1_000_000, 1_000_000)

        result = swap_exact_in(pool, SwapDirection.X_TO_Y, 50_000, now=0)

        assert pool.total_custody(Side.X) == 1_050_000
        assert pool.balances.balance_y == 1_000_000 - result.amount_y_out

    def test_all_fee_classes_skimmed(self):
        params = FeeParams(
            liquidity_fee_bps=1000, treasury_fee_bps=10, team_fee_bps=300, rewards_fee_bps=200
        )
        pool = make_pool(1_000_000, 1_000_000, fee_params=params)

        result = swap_exact_in(pool, SwapDirection.X_TO_Y, 10_000, now=0)

        assert result.amount_y_out == 7_897
        assert result.fees == {
            FeeClass.TREASURY: (10, 0),
            FeeClass.TEAM: (300, 0),
            FeeClass.REWARDS: (200, 0),
        }
        assert pool.balances.balance_x == 1_000_000 + 10_000 - 510

    def test_output_rounds_to_zero(self):
        pool = make_pool(1_000_000, 1_000_000)
        with pytest.raises(InsufficientOutputAmount):
            swap_exact_in(pool, SwapDirection.X_TO_Y, 1, now=0)

    def test_zero_input(self):
        pool = make_pool(1_000_000, 1_000_000)
        with pytest.raises(InsufficientInputAmount):
            swap_exact_in(pool, SwapDirection.X_TO_Y, 0, now=0)

    def test_empty_pool(self):
        pool = make_pool(0, 0)
        with pytest.raises(InsufficientOutputAmount):
            swap_exact_in(pool, SwapDirection.X_TO_Y, 1000, now=0)


class TestSwapExactOut:
    """Tests for exact-output swaps."""

    def test_quoted_input_passes(self):
        pool = make_pool(1_000_000, 1_000_000)
        amount_in = constant_product.get_amount_in(
            1000, 1_000_000, 1_000_000, pool.fee_params.swap_fee_bps
        )
        assert amount_in == 1006

        result = swap_exact_out(pool, SwapDirection.X_TO_Y, amount_in, 1000, now=0)

        assert result.amount_y_out == 1000
        assert result.amount_x_in == 1006
        assert pool.reserves.reserve_y == 999_000

    def test_underpaid_input_violates_invariant(self):
        pool = make_pool(1_000_000, 1_000_000)
        with pytest.raises(KInvariantViolation):
            swap_exact_out(pool, SwapDirection.X_TO_Y, 1000, 1000, now=0)

    def test_output_at_reserve(self):
        pool = make_pool(1_000_000, 1_000_000)
        with pytest.raises(InsufficientLiquidity):
            swap_exact_out(pool, SwapDirection.X_TO_Y, 10**9, 1_000_000, now=0)

    def test_zero_output(self):
        pool = make_pool(1_000_000, 1_000_000)
        with pytest.raises(InsufficientOutputAmount):
            swap_exact_out(pool, SwapDirection.X_TO_Y, 1000, 0, now=0)
