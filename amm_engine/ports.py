"""Interfaces of the engine's external collaborators.

The engine never stores user balances, reads wall-clock time or writes audit
logs itself. It talks to an asset ledger, a clock and an event sink through
the protocols below, so hosts can plug in their own implementations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from amm_engine.models.events import EngineEvent


@dataclass(frozen=True)
class MintCapability:
    """Authority to mint one asset."""

    asset: str
    token: object


@dataclass(frozen=True)
class BurnCapability:
    """Authority to burn one asset."""

    asset: str
    token: object


@dataclass(frozen=True)
class FreezeCapability:
    """Authority to freeze holdings of one asset."""

    asset: str
    token: object


@dataclass(frozen=True)
class AssetCapabilities:
    """Capabilities handed out when an asset is created."""

    mint: MintCapability
    burn: BurnCapability
    freeze: FreezeCapability


@runtime_checkable
class AssetLedger(Protocol):
    """Fungible asset ledger holding account balances.

    ``withdraw`` and ``burn`` must fail when the balance is insufficient.
    ``deposit`` and ``mint`` have no failure mode for valid amounts.
    """

    def balance(self, account: str, asset: str) -> int: ...

    def deposit(self, account: str, asset: str, amount: int) -> None: ...

    def withdraw(self, account: str, asset: str, amount: int) -> None: ...

    def create_asset(self, asset: str) -> AssetCapabilities: ...

    def open_holding(self, account: str, asset: str) -> None: ...

    def mint(self, cap: MintCapability, account: str, amount: int) -> None: ...

    def burn(self, cap: BurnCapability, account: str, amount: int) -> None: ...

    def freeze(self, cap: FreezeCapability, account: str) -> None: ...


@runtime_checkable
class Clock(Protocol):
    """Time source for reserve sync stamps."""

    def now(self) -> int:
        """Current time in whole seconds. Must never go backwards."""
        ...


@runtime_checkable
class EventSink(Protocol):
    """Receiver of engine events. Fire-and-forget."""

    def emit(self, event: EngineEvent) -> None: ...
