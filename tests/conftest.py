"""Pytest configuration and fixtures."""

import pytest

from amm_engine.clock import ManualClock
from amm_engine.engine import AmmEngine
from amm_engine.event_sinks import RecordingEventSink
from amm_engine.ledger import InMemoryLedger
from amm_engine.models.types import PoolKey
from tests.helpers import (
    ADMIN,
    ALICE,
    BOB,
    BTC,
    CREATOR,
    ETH,
    FEE_RECIPIENT,
    FUNDED_AMOUNT,
    SEED_AMOUNT,
    USD,
    fund,
)


@pytest.fixture
def ledger() -> InMemoryLedger:
    """Ledger with CREATOR, ALICE and BOB funded in every test asset."""
    ledger = InMemoryLedger()
    for account in (CREATOR, ALICE, BOB):
        fund(ledger, account, FUNDED_AMOUNT, BTC, USD, ETH)
    return ledger


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000)


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def engine(ledger: InMemoryLedger, clock: ManualClock, sink: RecordingEventSink) -> AmmEngine:
    """Engine with governance initialized."""
    engine = AmmEngine(ledger, clock=clock, events=sink)
    engine.initialize(admin=ADMIN, fee_recipient=FEE_RECIPIENT)
    return engine


@pytest.fixture
def pool_key(engine: AmmEngine) -> PoolKey:
    """Empty BTC/USD pool owned by CREATOR."""
    return engine.create_pool(CREATOR, BTC, USD)


@pytest.fixture
def seeded_pool(engine: AmmEngine, pool_key: PoolKey, sink: RecordingEventSink) -> PoolKey:
    """BTC/USD pool seeded by CREATOR with SEED_AMOUNT of each asset."""
    engine.add_liquidity(CREATOR, BTC, USD, SEED_AMOUNT, SEED_AMOUNT)
    sink.clear()
    return pool_key
