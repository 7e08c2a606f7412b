"""In-memory fungible asset ledger.

Reference implementation of the AssetLedger protocol, used by tests and by
hosts that keep balances in process. Balances are u64 per (account, asset).
"""

from __future__ import annotations

import threading
from collections import defaultdict

import structlog

from amm_engine.ports import (
    AssetCapabilities,
    BurnCapability,
    FreezeCapability,
    MintCapability,
)
from amm_engine.safe_int import S

logger = structlog.get_logger()


class LedgerError(Exception):
    """Base error for ledger operations."""

    pass


class InsufficientBalance(LedgerError):
    """Withdrawal or burn exceeds the account balance."""

    pass


class AccountFrozen(LedgerError):
    """Holding is frozen and cannot move funds."""

    pass


class CapabilityError(LedgerError):
    """Capability does not authorize this asset."""

    pass


class AssetExists(LedgerError):
    """Asset was already created."""

    pass


class InMemoryLedger:
    """Thread-safe ledger keeping balances in a dict.

    Any asset id can be deposited and withdrawn. Minting, burning and
    freezing are only possible for assets created through create_asset,
    using the capabilities returned at creation.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._frozen: set[tuple[str, str]] = set()
        self._supply: dict[str, int] = {}
        # Asset -> identity token shared by its capabilities
        self._authorities: dict[str, object] = {}

    def balance(self, account: str, asset: str) -> int:
        with self._lock:
            return self._balances.get((account, asset), 0)

    def supply(self, asset: str) -> int:
        """Total minted minus burned for a created asset."""
        with self._lock:
            return self._supply.get(asset, 0)

    def is_frozen(self, account: str, asset: str) -> bool:
        with self._lock:
            return (account, asset) in self._frozen

    def deposit(self, account: str, asset: str, amount: int) -> None:
        """Credit an account.

        Raises:
            AccountFrozen: If the holding is frozen
        """
        _check_amount(amount)
        with self._lock:
            key = (account, asset)
            if key in self._frozen:
                raise AccountFrozen(f"{account} holding of {asset} is frozen")
            self._credit(key, amount)

    def withdraw(self, account: str, asset: str, amount: int) -> None:
        """Debit an account.

        Raises:
            InsufficientBalance: If the balance is below amount
            AccountFrozen: If the holding is frozen
        """
        _check_amount(amount)
        with self._lock:
            key = (account, asset)
            if key in self._frozen:
                raise AccountFrozen(f"{account} holding of {asset} is frozen")
            self._debit(key, amount)

    def create_asset(self, asset: str) -> AssetCapabilities:
        """Register a mintable asset and return its capabilities.

        Raises:
            AssetExists: If the asset was already created
        """
        with self._lock:
            if asset in self._authorities:
                raise AssetExists(f"Asset already created: {asset}")
            token = object()
            self._authorities[asset] = token
            self._supply[asset] = 0
        logger.debug("asset_created", asset=asset)
        return AssetCapabilities(
            mint=MintCapability(asset=asset, token=token),
            burn=BurnCapability(asset=asset, token=token),
            freeze=FreezeCapability(asset=asset, token=token),
        )

    def open_holding(self, account: str, asset: str) -> None:
        """Open a zero-balance holding so the account can receive the asset."""
        with self._lock:
            self._balances.setdefault((account, asset), 0)

    def mint(self, cap: MintCapability, account: str, amount: int) -> None:
        """Mint new units into an account. Frozen holdings still receive mints.

        Raises:
            CapabilityError: If cap was not issued for its asset by this ledger
        """
        _check_amount(amount)
        with self._lock:
            self._authorize(cap.asset, cap.token)
            self._credit((account, cap.asset), amount)
            self._supply[cap.asset] = (S(self._supply[cap.asset]) + amount).to_u64()

    def burn(self, cap: BurnCapability, account: str, amount: int) -> None:
        """Burn units held by an account.

        Raises:
            CapabilityError: If cap was not issued for its asset by this ledger
            InsufficientBalance: If the account holds less than amount
            AccountFrozen: If the holding is frozen
        """
        _check_amount(amount)
        with self._lock:
            self._authorize(cap.asset, cap.token)
            key = (account, cap.asset)
            if key in self._frozen:
                raise AccountFrozen(f"{account} holding of {cap.asset} is frozen")
            self._debit(key, amount)
            self._supply[cap.asset] = (S(self._supply[cap.asset]) - amount).to_u64()

    def freeze(self, cap: FreezeCapability, account: str) -> None:
        """Freeze an account's holding of the capability's asset."""
        with self._lock:
            self._authorize(cap.asset, cap.token)
            self._frozen.add((account, cap.asset))
        logger.debug("holding_frozen", account=account, asset=cap.asset)

    # --- Internals (caller holds the lock) ---

    def _authorize(self, asset: str, token: object) -> None:
        if self._authorities.get(asset) is not token:
            raise CapabilityError(f"Capability does not authorize {asset}")

    def _credit(self, key: tuple[str, str], amount: int) -> None:
        self._balances[key] = (S(self._balances[key]) + amount).to_u64()

    def _debit(self, key: tuple[str, str], amount: int) -> None:
        current = self._balances.get(key, 0)
        if current < amount:
            raise InsufficientBalance(
                f"{key[0]} holds {current} of {key[1]}, needs {amount}"
            )
        self._balances[key] = current - amount


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValueError(f"Ledger amount must be a non-negative int: {amount!r}")


__all__ = [
    "InMemoryLedger",
    "LedgerError",
    "InsufficientBalance",
    "AccountFrozen",
    "CapabilityError",
    "AssetExists",
]
