"""Staged ledger transfers.

Engine operations first compute everything against a staged pool, then move
assets in the ledger. TransferPlan collects those moves and applies them
debits first. If any move fails, the moves already applied are reversed, so
the ledger ends up as it was before the plan ran.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

import structlog

from amm_engine.ports import AssetCapabilities, AssetLedger

logger = structlog.get_logger()


@dataclass(frozen=True)
class _Withdraw:
    account: str
    asset: str
    amount: int

    def apply(self, ledger: AssetLedger) -> None:
        ledger.withdraw(self.account, self.asset, self.amount)

    def undo(self, ledger: AssetLedger) -> None:
        ledger.deposit(self.account, self.asset, self.amount)


@dataclass(frozen=True)
class _Deposit:
    account: str
    asset: str
    amount: int

    def apply(self, ledger: AssetLedger) -> None:
        ledger.deposit(self.account, self.asset, self.amount)

    def undo(self, ledger: AssetLedger) -> None:
        ledger.withdraw(self.account, self.asset, self.amount)


@dataclass(frozen=True)
class _Burn:
    caps: AssetCapabilities
    account: str
    amount: int

    def apply(self, ledger: AssetLedger) -> None:
        ledger.burn(self.caps.burn, self.account, self.amount)

    def undo(self, ledger: AssetLedger) -> None:
        ledger.mint(self.caps.mint, self.account, self.amount)


@dataclass(frozen=True)
class _Mint:
    caps: AssetCapabilities
    account: str
    amount: int

    def apply(self, ledger: AssetLedger) -> None:
        ledger.mint(self.caps.mint, self.account, self.amount)

    def undo(self, ledger: AssetLedger) -> None:
        ledger.burn(self.caps.burn, self.account, self.amount)


_Move: TypeAlias = _Withdraw | _Deposit | _Burn | _Mint


class TransferPlan:
    """Ordered set of ledger moves applied all-or-nothing.

    Usage:
        plan = TransferPlan(ledger)
        plan.withdraw(trader, asset_in, amount_in)
        plan.deposit(recipient, asset_out, amount_out)
        plan.execute()  # Raises, with nothing applied, if the withdraw fails
    """

    def __init__(self, ledger: AssetLedger) -> None:
        self._ledger = ledger
        self._debits: list[_Move] = []
        self._credits: list[_Move] = []

    def withdraw(self, account: str, asset: str, amount: int) -> TransferPlan:
        if amount > 0:
            self._debits.append(_Withdraw(account, asset, amount))
        return self

    def burn(self, caps: AssetCapabilities, account: str, amount: int) -> TransferPlan:
        if amount > 0:
            self._debits.append(_Burn(caps, account, amount))
        return self

    def deposit(self, account: str, asset: str, amount: int) -> TransferPlan:
        if amount > 0:
            self._credits.append(_Deposit(account, asset, amount))
        return self

    def transfer(self, source: str, destination: str, asset: str, amount: int) -> TransferPlan:
        """Withdraw from source and deposit the same amount to destination."""
        return self.withdraw(source, asset, amount).deposit(destination, asset, amount)

    def mint(self, caps: AssetCapabilities, account: str, amount: int) -> TransferPlan:
        if amount > 0:
            self._credits.append(_Mint(caps, account, amount))
        return self

    def execute(self) -> None:
        """Apply debits, then credits. On failure undo and re-raise."""
        applied: list[_Move] = []
        try:
            for move in (*self._debits, *self._credits):
                move.apply(self._ledger)
                applied.append(move)
        except Exception:
            logger.debug("transfer_plan_reverted", applied=len(applied))
            for move in reversed(applied):
                move.undo(self._ledger)
            raise
