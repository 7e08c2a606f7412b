"""Pool state records.

A Pool holds everything the engine knows about one asset pair: the last
synced reserves, the tradable balances it custodies, fee configuration,
accrued fee shares and LP supply.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from enum import Enum

from amm_engine.constants import DEFAULT_TREASURY_FEE_BPS, FEE_FLOOR_BPS
from amm_engine.models.types import PoolKey, Side
from amm_engine.ports import AssetCapabilities


class FeeClass(str, Enum):
    """Recipient class of a skimmed fee share."""

    TREASURY = "treasury"
    TEAM = "team"
    REWARDS = "rewards"


@dataclass
class Reserves:
    """Snapshot of held balances at the last settle."""

    reserve_x: int = 0
    reserve_y: int = 0
    last_sync_time: int = 0

    def get(self, side: Side) -> int:
        return self.reserve_x if side is Side.X else self.reserve_y

    @property
    def is_empty(self) -> bool:
        return self.reserve_x == 0 and self.reserve_y == 0


@dataclass
class HeldBalances:
    """Tradable balances custodied by the pool."""

    balance_x: int = 0
    balance_y: int = 0

    def get(self, side: Side) -> int:
        return self.balance_x if side is Side.X else self.balance_y

    def set(self, side: Side, value: int) -> None:
        if side is Side.X:
            self.balance_x = value
        else:
            self.balance_y = value


@dataclass
class FeeParams:
    """Fee tiers in basis points.

    The liquidity fee stays in the pool for LPs. Treasury, team and rewards
    shares are skimmed out of the input on every swap.
    """

    liquidity_fee_bps: int = 0
    treasury_fee_bps: int = DEFAULT_TREASURY_FEE_BPS
    team_fee_bps: int = 0
    rewards_fee_bps: int = 0

    @property
    def pool_fee_bps(self) -> int:
        """Creator-controlled tiers: liquidity + team + rewards."""
        return self.liquidity_fee_bps + self.team_fee_bps + self.rewards_fee_bps

    @property
    def total_fee_bps(self) -> int:
        """All four tiers."""
        return self.pool_fee_bps + self.treasury_fee_bps

    @property
    def skimmed_fee_bps(self) -> int:
        """Tiers moved out of the tradable balance on each swap."""
        return self.treasury_fee_bps + self.team_fee_bps + self.rewards_fee_bps

    @property
    def invariant_fee_bps(self) -> int:
        """Fee deducted from the input in the invariant check."""
        return self.total_fee_bps + FEE_FLOOR_BPS

    @property
    def swap_fee_bps(self) -> int:
        """Fee charged by forward quotes.

        The invariant deducts invariant_fee_bps from the input after the
        skimmed shares already left the balance, so quotes must charge both
        for a quoted trade to pass the check.
        """
        return self.invariant_fee_bps + self.skimmed_fee_bps

    def bps(self, fee_class: FeeClass) -> int:
        if fee_class is FeeClass.TREASURY:
            return self.treasury_fee_bps
        if fee_class is FeeClass.TEAM:
            return self.team_fee_bps
        return self.rewards_fee_bps


@dataclass
class FeeBalances:
    """Accrued fee shares per recipient class and side."""

    treasury_x: int = 0
    treasury_y: int = 0
    team_x: int = 0
    team_y: int = 0
    rewards_x: int = 0
    rewards_y: int = 0

    def get(self, fee_class: FeeClass, side: Side) -> int:
        return getattr(self, _fee_field(fee_class, side))

    def set(self, fee_class: FeeClass, side: Side, value: int) -> None:
        setattr(self, _fee_field(fee_class, side), value)

    def pair(self, fee_class: FeeClass) -> tuple[int, int]:
        return self.get(fee_class, Side.X), self.get(fee_class, Side.Y)

    def side_total(self, side: Side) -> int:
        return sum(self.get(fee_class, side) for fee_class in FeeClass)


def _fee_field(fee_class: FeeClass, side: Side) -> str:
    return f"{fee_class.value}_{side.value}"


@dataclass
class Pool:
    """State of one pool.

    Attributes:
        key: Canonical asset pair
        creator: Account allowed to set pool fees and withdraw team fees
        lp_caps: Mint/burn/freeze capabilities of the LP asset
        k_last: reserve_x * reserve_y after the last mint or burn
        lp_supply: Outstanding LP units, including the locked minimum
    """

    key: PoolKey
    creator: str
    lp_caps: AssetCapabilities
    reserves: Reserves = field(default_factory=Reserves)
    balances: HeldBalances = field(default_factory=HeldBalances)
    fee_params: FeeParams = field(default_factory=FeeParams)
    fee_balances: FeeBalances = field(default_factory=FeeBalances)
    k_last: int = 0
    lp_supply: int = 0

    @property
    def lp_asset(self) -> str:
        return self.key.lp_asset

    def total_custody(self, side: Side) -> int:
        """All of one asset the pool holds: tradable balance plus fee shares."""
        return self.balances.get(side) + self.fee_balances.side_total(side)

    def staged(self) -> Pool:
        """Independent copy for staging mutations.

        Capabilities are shared, not copied, so they keep authorizing
        the LP asset.
        """
        return replace(
            self,
            reserves=copy.copy(self.reserves),
            balances=copy.copy(self.balances),
            fee_params=copy.copy(self.fee_params),
            fee_balances=copy.copy(self.fee_balances),
        )
