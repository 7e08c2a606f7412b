"""Pool engine: the public operations on pools and governance.

AmmEngine ties the pieces together. Each mutating operation
1. resolves the canonical pool for the caller's asset pair,
2. runs the pool math on a staged copy under the pool lock,
3. applies the resulting ledger moves as one TransferPlan,
4. commits the staged pool, then emits an event.

An exception at any step leaves both the pool and the ledger unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from amm_engine.clock import SystemClock
from amm_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig, configure_logging
from amm_engine.constants import LOCKED_LIQUIDITY_ACCOUNT
from amm_engine.errors import InsufficientLiquidityBurned, InvalidAmount
from amm_engine.event_sinks import LoggingEventSink
from amm_engine.governance import Governance, GovernanceState
from amm_engine.math.amm_math import constant_product
from amm_engine.models.events import (
    AdminChanged,
    EngineEvent,
    FeeRecipientChanged,
    FeesUpdated,
    FeesWithdrawn,
    LiquidityAdded,
    LiquidityRemoved,
    PoolCreated,
    Swapped,
)
from amm_engine.models.types import U64_MAX, PoolKey, Side, SwapDirection, normalize_account
from amm_engine.pool import fees, liquidity, swap
from amm_engine.pool.registry import PoolRegistry
from amm_engine.pool.state import FeeBalances, FeeClass, FeeParams, HeldBalances, Pool, Reserves
from amm_engine.ports import AssetLedger, Clock, EventSink
from amm_engine.transfers import TransferPlan

logger = structlog.get_logger()


@dataclass(frozen=True)
class AddLiquidityResult:
    """Amounts in the caller's asset order."""

    amount_a: int
    amount_b: int
    liquidity: int


@dataclass(frozen=True)
class RemoveLiquidityResult:
    """Amounts in the caller's asset order."""

    amount_a: int
    amount_b: int


class AmmEngine:
    """Constant product exchange over a set of two-asset pools.

    Usage:
        engine = AmmEngine(InMemoryLedger())
        engine.initialize(admin="0xa", fee_recipient="0xfee")
        engine.create_pool("0xc0ffee", "BTC", "USD")
        engine.add_liquidity("0xc0ffee", "BTC", "USD", 10_000, 20_000)
        out = engine.swap_exact_in("0xc0ffee", "BTC", "USD", 100)
    """

    def __init__(
        self,
        ledger: AssetLedger,
        *,
        clock: Clock | None = None,
        events: EventSink | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.ledger = ledger
        self.clock = clock or SystemClock()
        self.events = events or LoggingEventSink()
        self.config = config or DEFAULT_ENGINE_CONFIG
        self.registry = PoolRegistry()
        self.governance = Governance()

    @classmethod
    def from_env(
        cls,
        ledger: AssetLedger,
        *,
        clock: Clock | None = None,
        events: EventSink | None = None,
    ) -> AmmEngine:
        """Build an engine from EngineConfig.from_env() and configure logging at its level."""
        config = EngineConfig.from_env()
        configure_logging(config.log_level)
        return cls(ledger, clock=clock, events=events, config=config)

    # --- Governance ---

    def initialize(self, admin: str, fee_recipient: str) -> GovernanceState:
        """Create the global admin/fee recipient record. Runs once."""
        return self.governance.initialize(
            normalize_account(admin), normalize_account(fee_recipient)
        )

    def set_admin(self, caller: str, new_admin: str) -> None:
        caller = normalize_account(caller)
        old = self.governance.state.admin
        state = self.governance.set_admin(caller, normalize_account(new_admin))
        logger.info("admin_changed", old_admin=old, new_admin=state.admin)
        self._emit(AdminChanged(timestamp=self.clock.now(), old_admin=old, new_admin=state.admin))

    def set_fee_recipient(self, caller: str, new_fee_recipient: str) -> None:
        caller = normalize_account(caller)
        old = self.governance.state.fee_recipient
        state = self.governance.set_fee_recipient(caller, normalize_account(new_fee_recipient))
        logger.info("fee_recipient_changed", old=old, new=state.fee_recipient)
        self._emit(
            FeeRecipientChanged(
                timestamp=self.clock.now(),
                old_fee_recipient=old,
                new_fee_recipient=state.fee_recipient,
            )
        )

    # --- Pool lifecycle ---

    def create_pool(self, caller: str, asset_a: str, asset_b: str) -> PoolKey:
        """Create the pool for an asset pair, owned by caller.

        Registers the LP asset, opens the custody holdings and freezes the
        locked-liquidity holding that receives the genesis minimum.

        Raises:
            AlreadyExists: If the pair already has a pool
            IdenticalAssets: If both assets are the same
        """
        creator = normalize_account(caller)
        key = PoolKey.of(asset_a, asset_b)
        now = self.clock.now()

        def build() -> Pool:
            caps = self.ledger.create_asset(key.lp_asset)
            self.ledger.open_holding(LOCKED_LIQUIDITY_ACCOUNT, key.lp_asset)
            self.ledger.freeze(caps.freeze, LOCKED_LIQUIDITY_ACCOUNT)
            self.ledger.open_holding(key.custody_account, key.asset_x)
            self.ledger.open_holding(key.custody_account, key.asset_y)
            pool = Pool(
                key=key,
                creator=creator,
                lp_caps=caps,
                fee_params=FeeParams(treasury_fee_bps=self.config.default_treasury_fee_bps),
            )
            pool.reserves.last_sync_time = now
            return pool

        self.registry.create(key, build)
        logger.info("pool_created", pool=str(key), creator=creator)
        self._emit(
            PoolCreated(
                timestamp=now,
                asset_x=key.asset_x,
                asset_y=key.asset_y,
                creator=creator,
                lp_asset=key.lp_asset,
            )
        )
        return key

    def pool_exists(self, asset_a: str, asset_b: str) -> bool:
        return PoolKey.of(asset_a, asset_b) in self.registry

    def list_pools(self) -> list[PoolKey]:
        return self.registry.keys()

    # --- Liquidity ---

    def add_liquidity(
        self,
        caller: str,
        asset_a: str,
        asset_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
    ) -> AddLiquidityResult:
        """Deposit both assets at the pool ratio and mint LP units to caller.

        Only the matched amounts are taken from the caller; any surplus of
        either desired amount stays in the caller's balance.
        """
        provider = normalize_account(caller)
        _require_u64(amount_a_desired, "amount_a_desired")
        _require_u64(amount_b_desired, "amount_b_desired")
        key = PoolKey.of(asset_a, asset_b)
        flipped = asset_a != key.asset_x
        x_desired, y_desired = (
            (amount_b_desired, amount_a_desired) if flipped else (amount_a_desired, amount_b_desired)
        )

        with self.registry.transaction(key) as pool:
            now = self.clock.now()
            minted = liquidity.mint(pool, x_desired, y_desired, now)
            (
                TransferPlan(self.ledger)
                .transfer(provider, key.custody_account, key.asset_x, minted.amount_x)
                .transfer(provider, key.custody_account, key.asset_y, minted.amount_y)
                .mint(pool.lp_caps, provider, minted.liquidity)
                .mint(pool.lp_caps, LOCKED_LIQUIDITY_ACCOUNT, minted.locked)
                .execute()
            )

        self._emit(
            LiquidityAdded(
                timestamp=now,
                asset_x=key.asset_x,
                asset_y=key.asset_y,
                provider=provider,
                amount_x=minted.amount_x,
                amount_y=minted.amount_y,
                liquidity=minted.liquidity,
            )
        )
        amount_a, amount_b = (
            (minted.amount_y, minted.amount_x) if flipped else (minted.amount_x, minted.amount_y)
        )
        return AddLiquidityResult(amount_a=amount_a, amount_b=amount_b, liquidity=minted.liquidity)

    def remove_liquidity(
        self,
        caller: str,
        asset_a: str,
        asset_b: str,
        lp_amount: int,
    ) -> RemoveLiquidityResult:
        """Burn caller's LP units and pay out the proportional share of both assets.

        Raises:
            InsufficientLiquidityBurned: If caller is the locked liquidity sink
        """
        provider = normalize_account(caller)
        if provider == LOCKED_LIQUIDITY_ACCOUNT:
            raise InsufficientLiquidityBurned("Locked liquidity cannot be removed")
        _require_u64(lp_amount, "lp_amount")
        key = PoolKey.of(asset_a, asset_b)

        with self.registry.transaction(key) as pool:
            now = self.clock.now()
            burned = liquidity.burn(pool, lp_amount, now)
            (
                TransferPlan(self.ledger)
                .burn(pool.lp_caps, provider, lp_amount)
                .transfer(key.custody_account, provider, key.asset_x, burned.amount_x)
                .transfer(key.custody_account, provider, key.asset_y, burned.amount_y)
                .execute()
            )

        self._emit(
            LiquidityRemoved(
                timestamp=now,
                asset_x=key.asset_x,
                asset_y=key.asset_y,
                provider=provider,
                amount_x=burned.amount_x,
                amount_y=burned.amount_y,
                liquidity=lp_amount,
            )
        )
        if asset_a != key.asset_x:
            return RemoveLiquidityResult(amount_a=burned.amount_y, amount_b=burned.amount_x)
        return RemoveLiquidityResult(amount_a=burned.amount_x, amount_b=burned.amount_y)

    # --- Swaps ---

    def swap_exact_in(
        self,
        caller: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        recipient: str | None = None,
    ) -> int:
        """Sell exactly amount_in of asset_in; returns the asset_out amount paid."""
        sender = normalize_account(caller)
        receiver = normalize_account(recipient) if recipient is not None else sender
        _require_u64(amount_in, "amount_in")
        key = PoolKey.of(asset_in, asset_out)
        direction = key.direction(asset_in, asset_out)

        with self.registry.transaction(key) as pool:
            now = self.clock.now()
            result = swap.swap_exact_in(pool, direction, amount_in, now)
            self._pay_swap(key, sender, receiver, asset_in, asset_out, result, direction)

        self._emit_swap(key, sender, receiver, result, now)
        return result.amount_out(direction)

    def swap_exact_out(
        self,
        caller: str,
        asset_in: str,
        asset_out: str,
        amount_in: int,
        amount_out: int,
        recipient: str | None = None,
    ) -> int:
        """Receive exactly amount_out of asset_out for the supplied amount_in.

        The whole amount_in is consumed; compute it with quote_exact_out.
        Any excess over the curve price stays in the pool. Returns the
        amount of asset_in consumed.
        """
        sender = normalize_account(caller)
        receiver = normalize_account(recipient) if recipient is not None else sender
        _require_u64(amount_in, "amount_in")
        _require_u64(amount_out, "amount_out")
        key = PoolKey.of(asset_in, asset_out)
        direction = key.direction(asset_in, asset_out)

        with self.registry.transaction(key) as pool:
            now = self.clock.now()
            result = swap.swap_exact_out(pool, direction, amount_in, amount_out, now)
            self._pay_swap(key, sender, receiver, asset_in, asset_out, result, direction)

        self._emit_swap(key, sender, receiver, result, now)
        return result.amount_in(direction)

    def quote_exact_in(self, asset_in: str, asset_out: str, amount_in: int) -> int:
        """Output swap_exact_in would pay right now."""
        key = PoolKey.of(asset_in, asset_out)
        direction = key.direction(asset_in, asset_out)
        pool = self.registry.snapshot(key)
        return constant_product.get_amount_out(
            amount_in,
            pool.reserves.get(direction.side_in),
            pool.reserves.get(direction.side_out),
            pool.fee_params.swap_fee_bps,
        )

    def quote_exact_out(self, asset_in: str, asset_out: str, amount_out: int) -> int:
        """Input swap_exact_out needs right now to receive amount_out."""
        key = PoolKey.of(asset_in, asset_out)
        direction = key.direction(asset_in, asset_out)
        pool = self.registry.snapshot(key)
        return constant_product.get_amount_in(
            amount_out,
            pool.reserves.get(direction.side_in),
            pool.reserves.get(direction.side_out),
            pool.fee_params.swap_fee_bps,
        )

    # --- Fees ---

    def set_pool_fees(
        self,
        caller: str,
        asset_a: str,
        asset_b: str,
        liquidity_fee_bps: int,
        team_fee_bps: int,
        rewards_fee_bps: int,
    ) -> FeeParams:
        """Creator sets the liquidity, team and rewards tiers."""
        setter = normalize_account(caller)
        key = PoolKey.of(asset_a, asset_b)
        with self.registry.transaction(key) as pool:
            fees.require_creator(pool, setter)
            params = fees.set_pool_fees(pool, liquidity_fee_bps, team_fee_bps, rewards_fee_bps)
        self._emit_fees_updated(key, params)
        return params

    def set_treasury_fee(
        self,
        caller: str,
        asset_a: str,
        asset_b: str,
        treasury_fee_bps: int,
    ) -> FeeParams:
        """Set a pool's treasury tier.

        Authorized for the admin or the pool creator depending on
        EngineConfig.treasury_fee_authority.
        """
        setter = normalize_account(caller)
        key = PoolKey.of(asset_a, asset_b)
        if self.config.treasury_fee_authority == "admin":
            self.governance.require_admin(setter)
        with self.registry.transaction(key) as pool:
            if self.config.treasury_fee_authority == "creator":
                fees.require_creator(pool, setter)
            params = fees.set_treasury_fee(pool, treasury_fee_bps)
        self._emit_fees_updated(key, params)
        return params

    def withdraw_treasury_fee(self, caller: str, asset_a: str, asset_b: str) -> tuple[int, int]:
        """Fee recipient collects the pool's treasury balances, as (x, y)."""
        recipient = normalize_account(caller)
        self.governance.require_fee_recipient(recipient)
        return self._withdraw_fees(recipient, PoolKey.of(asset_a, asset_b), FeeClass.TREASURY)

    def withdraw_team_fee(self, caller: str, asset_a: str, asset_b: str) -> tuple[int, int]:
        """Pool creator collects the team balances, as (x, y)."""
        recipient = normalize_account(caller)
        key = PoolKey.of(asset_a, asset_b)
        fees.require_creator(self.registry.snapshot(key), recipient)
        return self._withdraw_fees(recipient, key, FeeClass.TEAM)

    # --- Queries ---

    def pool_snapshot(self, asset_a: str, asset_b: str) -> Pool:
        """Independent copy of a pool's full state."""
        return self.registry.snapshot(PoolKey.of(asset_a, asset_b))

    def reserves(self, asset_a: str, asset_b: str) -> Reserves:
        return self.pool_snapshot(asset_a, asset_b).reserves

    def held_balances(self, asset_a: str, asset_b: str) -> HeldBalances:
        return self.pool_snapshot(asset_a, asset_b).balances

    def fee_params(self, asset_a: str, asset_b: str) -> FeeParams:
        return self.pool_snapshot(asset_a, asset_b).fee_params

    def fee_balances(self, asset_a: str, asset_b: str) -> FeeBalances:
        return self.pool_snapshot(asset_a, asset_b).fee_balances

    def lp_supply(self, asset_a: str, asset_b: str) -> int:
        return self.pool_snapshot(asset_a, asset_b).lp_supply

    def k_last(self, asset_a: str, asset_b: str) -> int:
        return self.pool_snapshot(asset_a, asset_b).k_last

    def creator(self, asset_a: str, asset_b: str) -> str:
        return self.pool_snapshot(asset_a, asset_b).creator

    def total_custody(self, asset_a: str, asset_b: str) -> tuple[int, int]:
        """All of each asset the pool holds, tradable plus fees, as (x, y)."""
        pool = self.pool_snapshot(asset_a, asset_b)
        return pool.total_custody(Side.X), pool.total_custody(Side.Y)

    def lp_balance(self, account: str, asset_a: str, asset_b: str) -> int:
        key = self.pool_snapshot(asset_a, asset_b).key
        return self.ledger.balance(normalize_account(account), key.lp_asset)

    # --- Internals ---

    def _pay_swap(
        self,
        key: PoolKey,
        sender: str,
        receiver: str,
        asset_in: str,
        asset_out: str,
        result: swap.SwapResult,
        direction: SwapDirection,
    ) -> None:
        (
            TransferPlan(self.ledger)
            .transfer(sender, key.custody_account, asset_in, result.amount_in(direction))
            .transfer(key.custody_account, receiver, asset_out, result.amount_out(direction))
            .execute()
        )

    def _withdraw_fees(self, recipient: str, key: PoolKey, fee_class: FeeClass) -> tuple[int, int]:
        with self.registry.transaction(key) as pool:
            now = self.clock.now()
            amount_x, amount_y = fees.take_fees(pool, fee_class)
            (
                TransferPlan(self.ledger)
                .transfer(key.custody_account, recipient, key.asset_x, amount_x)
                .transfer(key.custody_account, recipient, key.asset_y, amount_y)
                .execute()
            )
        self._emit(
            FeesWithdrawn(
                timestamp=now,
                asset_x=key.asset_x,
                asset_y=key.asset_y,
                fee_class=fee_class.value,
                recipient=recipient,
                amount_x=amount_x,
                amount_y=amount_y,
            )
        )
        return amount_x, amount_y

    def _emit_swap(
        self,
        key: PoolKey,
        sender: str,
        receiver: str,
        result: swap.SwapResult,
        now: int,
    ) -> None:
        self._emit(
            Swapped(
                timestamp=now,
                asset_x=key.asset_x,
                asset_y=key.asset_y,
                sender=sender,
                recipient=receiver,
                amount_x_in=result.amount_x_in,
                amount_y_in=result.amount_y_in,
                amount_x_out=result.amount_x_out,
                amount_y_out=result.amount_y_out,
            )
        )

    def _emit_fees_updated(self, key: PoolKey, params: FeeParams) -> None:
        self._emit(
            FeesUpdated(
                timestamp=self.clock.now(),
                asset_x=key.asset_x,
                asset_y=key.asset_y,
                liquidity_fee_bps=params.liquidity_fee_bps,
                treasury_fee_bps=params.treasury_fee_bps,
                team_fee_bps=params.team_fee_bps,
                rewards_fee_bps=params.rewards_fee_bps,
            )
        )

    def _emit(self, event: EngineEvent) -> None:
        """Hand an event to the sink. Sink failures never fail the operation."""
        try:
            self.events.emit(event)
        except Exception as err:
            logger.warning("event_sink_failed", kind=event.kind, error=str(err))


def _require_u64(amount: int, name: str) -> None:
    """Raises InvalidAmount unless amount is an int within u64."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{name} must be an int, got {type(amount).__name__}")
    if not 0 <= amount <= U64_MAX:
        raise InvalidAmount(f"{name} out of u64 range: {amount}")
