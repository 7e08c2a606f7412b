"""Tests for fee parameters and fee withdrawal on staged pools."""

import pytest

from amm_engine.errors import ExcessiveFee, InvalidAmount, NoFeeWithdraw, NotCreator, SameFee
from amm_engine.pool import fees
from amm_engine.pool.state import FeeBalances, FeeClass, FeeParams
from tests.helpers import ALICE, CREATOR, make_pool


class TestFeeParams:
    """Tests for derived fee totals."""

    def test_defaults(self):
        params = FeeParams()
        assert params.treasury_fee_bps == 10
        assert params.total_fee_bps == 10
        assert params.invariant_fee_bps == 30
        assert params.swap_fee_bps == 40

    def test_totals(self):
        params = FeeParams(
            liquidity_fee_bps=25, treasury_fee_bps=5, team_fee_bps=3, rewards_fee_bps=2
        )
        assert params.pool_fee_bps == 30
        assert params.total_fee_bps == 35
        assert params.skimmed_fee_bps == 10
        assert params.invariant_fee_bps == 55
        assert params.swap_fee_bps == 65
        assert params.bps(FeeClass.TEAM) == 3


class TestSetPoolFees:
    def test_at_ceiling(self):
        pool = make_pool()
        params = fees.set_pool_fees(pool, 1000, 300, 200)
        assert params.pool_fee_bps == 1500
        assert pool.fee_params.team_fee_bps == 300

    def test_above_ceiling(self):
        pool = make_pool()
        with pytest.raises(ExcessiveFee):
            fees.set_pool_fees(pool, 1100, 300, 200)
        assert pool.fee_params.liquidity_fee_bps == 0

    def test_negative_tier(self):
        with pytest.raises(InvalidAmount):
            fees.validate_pool_fees(-1, 0, 0)

    def test_unchanged(self):
        pool = make_pool()
        with pytest.raises(SameFee):
            fees.set_pool_fees(pool, 0, 0, 0)


class TestSetTreasuryFee:
    def test_within_ceiling(self):
        pool = make_pool()
        assert fees.set_treasury_fee(pool, 0).treasury_fee_bps == 0

    def test_above_ceiling(self):
        pool = make_pool()
        with pytest.raises(ExcessiveFee):
            fees.set_treasury_fee(pool, 11)

    def test_unchanged(self):
        pool = make_pool()
        with pytest.raises(SameFee):
            fees.set_treasury_fee(pool, 10)


class TestTakeFees:
    def test_zeroes_class(self):
        pool = make_pool()
        pool.fee_balances = FeeBalances(treasury_x=4, treasury_y=7, team_x=2)

        assert fees.take_fees(pool, FeeClass.TREASURY) == (4, 7)
        assert pool.fee_balances.pair(FeeClass.TREASURY) == (0, 0)
        # Other classes untouched
        assert pool.fee_balances.team_x == 2

    def test_nothing_accrued(self):
        pool = make_pool()
        with pytest.raises(NoFeeWithdraw):
            fees.take_fees(pool, FeeClass.TEAM)


class TestRequireCreator:
    def test_creator(self):
        fees.require_creator(make_pool(), CREATOR)

    def test_other_account(self):
        with pytest.raises(NotCreator):
            fees.require_creator(make_pool(), ALICE)
