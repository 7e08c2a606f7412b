"""Tests for LP mint and burn against staged pools."""

import pytest

from amm_engine.constants import MINIMUM_LIQUIDITY
from amm_engine.errors import (
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InvalidAmount,
)
from amm_engine.pool.liquidity import burn, mint, optimal_amounts
from tests.helpers import make_pool


class TestOptimalAmounts:
    """Tests for matching a deposit to the pool ratio."""

    def test_empty_pool_takes_desired(self):
        assert optimal_amounts(123, 456, 0, 0) == (123, 456)

    def test_matches_y_to_x(self):
        # Pool 1:2, offering 100 X and plenty of Y
        assert optimal_amounts(100, 500, 1000, 2000) == (100, 200)

    def test_matches_x_to_y(self):
        # Offering plenty of X but only 100 Y
        assert optimal_amounts(500, 100, 1000, 2000) == (50, 100)


class TestMint:
    """Tests for adding liquidity."""

    def test_genesis_locks_minimum(self):
        pool = make_pool(0, 0)

        result = mint(pool, 10_000, 40_000, now=7)

        # sqrt(10_000 * 40_000) = 20_000
        assert result.liquidity == 19_000
        assert result.locked == MINIMUM_LIQUIDITY
        assert pool.lp_supply == 20_000
        assert (pool.reserves.reserve_x, pool.reserves.reserve_y) == (10_000, 40_000)
        assert pool.reserves.last_sync_time == 7
        assert pool.k_last == 400_000_000

    def test_genesis_too_small(self):
        pool = make_pool(0, 0)
        with pytest.raises(InsufficientLiquidityMinted):
            mint(pool, 1000, 1000, now=0)

    def test_proportional_mint(self):
        pool = make_pool(1000, 2000, lp_supply=1000)

        result = mint(pool, 100, 500, now=0)

        assert (result.amount_x, result.amount_y) == (100, 200)
        assert result.liquidity == 100
        assert result.locked == 0
        assert pool.lp_supply == 1100
        assert pool.balances.balance_y == 2200

    def test_zero_desired(self):
        pool = make_pool(1000, 2000)
        with pytest.raises(InvalidAmount):
            mint(pool, 0, 100, now=0)


class TestBurn:
    """Tests for removing liquidity."""

    def test_pays_proportional_share(self):
        pool = make_pool(10_000, 20_000, lp_supply=10_000)

        result = burn(pool, 2_500, now=3)

        assert (result.amount_x, result.amount_y) == (2_500, 5_000)
        assert pool.lp_supply == 7_500
        assert (pool.reserves.reserve_x, pool.reserves.reserve_y) == (7_500, 15_000)
        assert pool.k_last == 7_500 * 15_000

    def test_dust_burn(self):
        pool = make_pool(10, 10_000, lp_supply=10_000)
        with pytest.raises(InsufficientLiquidityBurned):
            burn(pool, 1, now=0)

    def test_no_supply(self):
        pool = make_pool(0, 0)
        with pytest.raises(InsufficientLiquidityBurned):
            burn(pool, 1, now=0)
