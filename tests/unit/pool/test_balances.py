"""Tests for deposit, extract and settle."""

import pytest

from amm_engine.errors import InsufficientAmount
from amm_engine.models.types import Side
from amm_engine.pool.balances import deposit, extract, settle
from amm_engine.safe_int import U64_MAX, U64Overflow
from tests.helpers import make_pool


class TestDeposit:
    def test_adds_to_held_only(self):
        """Deposits change held balances, not reserves."""
        pool = make_pool(1000, 2000)
        deposit(pool, Side.X, 50)
        assert pool.balances.balance_x == 1050
        assert pool.reserves.reserve_x == 1000

    def test_overflow(self):
        pool = make_pool(1000, 2000)
        with pytest.raises(U64Overflow):
            deposit(pool, Side.Y, U64_MAX)


class TestExtract:
    def test_returns_amount(self):
        pool = make_pool(1000, 2000)
        assert extract(pool, Side.Y, 1999) == 1999
        assert pool.balances.balance_y == 1

    def test_cannot_empty_side(self):
        """Extracting the whole held balance is rejected."""
        pool = make_pool(1000, 2000)
        with pytest.raises(InsufficientAmount):
            extract(pool, Side.X, 1000)
        assert pool.balances.balance_x == 1000

    def test_cannot_exceed_balance(self):
        pool = make_pool(1000, 2000)
        with pytest.raises(InsufficientAmount):
            extract(pool, Side.X, 5000)


class TestSettle:
    def test_syncs_reserves_and_time(self):
        pool = make_pool(1000, 2000)
        deposit(pool, Side.X, 10)
        extract(pool, Side.Y, 20)

        settle(pool, now=42)

        assert (pool.reserves.reserve_x, pool.reserves.reserve_y) == (1010, 1980)
        assert pool.reserves.last_sync_time == 42
