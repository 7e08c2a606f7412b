"""Tests for all-or-nothing ledger transfer plans."""

import pytest

from amm_engine.ledger import InMemoryLedger, InsufficientBalance
from amm_engine.transfers import TransferPlan
from tests.helpers import ALICE, BOB, BTC, USD


class FailingDepositLedger(InMemoryLedger):
    """Ledger that refuses deposits into one account."""

    def __init__(self, blocked: str) -> None:
        super().__init__()
        self.blocked = blocked
        self.armed = False

    def deposit(self, account: str, asset: str, amount: int) -> None:
        if self.armed and account == self.blocked:
            raise RuntimeError(f"deposit to {account} refused")
        super().deposit(account, asset, amount)


class TestTransferPlan:
    def test_applies_all_moves(self):
        ledger = InMemoryLedger()
        ledger.deposit(ALICE, BTC, 100)
        ledger.deposit(BOB, USD, 100)

        (
            TransferPlan(ledger)
            .transfer(ALICE, BOB, BTC, 30)
            .transfer(BOB, ALICE, USD, 60)
            .execute()
        )

        assert ledger.balance(ALICE, BTC) == 70
        assert ledger.balance(BOB, BTC) == 30
        assert ledger.balance(ALICE, USD) == 60
        assert ledger.balance(BOB, USD) == 40

    def test_failed_debit_applies_nothing(self):
        ledger = InMemoryLedger()
        ledger.deposit(ALICE, BTC, 100)

        plan = TransferPlan(ledger).transfer(ALICE, BOB, BTC, 50).transfer(BOB, ALICE, USD, 1)
        with pytest.raises(InsufficientBalance):
            plan.execute()

        assert ledger.balance(ALICE, BTC) == 100
        assert ledger.balance(BOB, BTC) == 0

    def test_failed_credit_reverts_debits(self):
        ledger = FailingDepositLedger(blocked=BOB)
        ledger.deposit(ALICE, BTC, 100)
        ledger.armed = True

        with pytest.raises(RuntimeError):
            TransferPlan(ledger).transfer(ALICE, BOB, BTC, 50).execute()

        assert ledger.balance(ALICE, BTC) == 100
        assert ledger.balance(BOB, BTC) == 0

    def test_mint_and_burn_revert(self):
        ledger = FailingDepositLedger(blocked=BOB)
        caps = ledger.create_asset("LP")
        ledger.mint(caps.mint, ALICE, 10)
        ledger.deposit(ALICE, BTC, 5)
        ledger.armed = True

        plan = (
            TransferPlan(ledger)
            .burn(caps, ALICE, 10)
            .mint(caps, ALICE, 3)
            .transfer(ALICE, BOB, BTC, 5)
        )
        with pytest.raises(RuntimeError):
            plan.execute()

        assert ledger.balance(ALICE, "LP") == 10
        assert ledger.supply("LP") == 10
        assert ledger.balance(ALICE, BTC) == 5

    def test_zero_amounts_skipped(self):
        """Zero moves never reach the ledger."""
        ledger = FailingDepositLedger(blocked=BOB)
        ledger.armed = True
        TransferPlan(ledger).transfer(ALICE, BOB, BTC, 0).execute()
        assert ledger.balance(BOB, BTC) == 0
