"""Pydantic models for pool engine events.

Events are emitted after an operation commits. They are audit records only;
nothing in the engine reads them back.
"""

from typing import Literal

from pydantic import BaseModel, Field

from amm_engine.models.types import U64, Account, Bps


class EngineEvent(BaseModel):
    """Common fields of every event."""

    model_config = {"frozen": True}

    kind: str
    timestamp: int = Field(ge=0, description="Clock time of the commit, in seconds.")


class PoolEvent(EngineEvent):
    """Event scoped to one pool."""

    asset_x: str
    asset_y: str


class PoolCreated(PoolEvent):
    kind: Literal["pool_created"] = "pool_created"
    creator: Account
    lp_asset: str


class LiquidityAdded(PoolEvent):
    kind: Literal["liquidity_added"] = "liquidity_added"
    provider: Account
    amount_x: U64
    amount_y: U64
    liquidity: U64


class LiquidityRemoved(PoolEvent):
    kind: Literal["liquidity_removed"] = "liquidity_removed"
    provider: Account
    amount_x: U64
    amount_y: U64
    liquidity: U64


class Swapped(PoolEvent):
    kind: Literal["swapped"] = "swapped"
    sender: Account
    recipient: Account
    amount_x_in: U64
    amount_y_in: U64
    amount_x_out: U64
    amount_y_out: U64


class FeesUpdated(PoolEvent):
    """Fee parameters changed (pool tiers or treasury)."""

    kind: Literal["fees_updated"] = "fees_updated"
    liquidity_fee_bps: Bps
    treasury_fee_bps: Bps
    team_fee_bps: Bps
    rewards_fee_bps: Bps


class FeesWithdrawn(PoolEvent):
    kind: Literal["fees_withdrawn"] = "fees_withdrawn"
    fee_class: Literal["treasury", "team"]
    recipient: Account
    amount_x: U64
    amount_y: U64


class AdminChanged(EngineEvent):
    kind: Literal["admin_changed"] = "admin_changed"
    old_admin: Account
    new_admin: Account


class FeeRecipientChanged(EngineEvent):
    kind: Literal["fee_recipient_changed"] = "fee_recipient_changed"
    old_fee_recipient: Account
    new_fee_recipient: Account


__all__ = [
    "EngineEvent",
    "PoolEvent",
    "PoolCreated",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swapped",
    "FeesUpdated",
    "FeesWithdrawn",
    "AdminChanged",
    "FeeRecipientChanged",
]
