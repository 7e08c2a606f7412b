"""Tests for PoolRegistry."""

import threading

import pytest

from amm_engine.errors import AlreadyExists, NotInitialized
from amm_engine.models.types import PoolKey
from amm_engine.pool.registry import PoolRegistry
from tests.helpers import BTC, ETH, USD, make_pool


@pytest.fixture
def registry() -> PoolRegistry:
    registry = PoolRegistry()
    registry.create(PoolKey(BTC, USD), lambda: make_pool(1000, 1000))
    return registry


class TestCreate:
    def test_registers(self, registry):
        assert PoolKey(BTC, USD) in registry
        assert len(registry) == 1
        assert registry.keys() == [PoolKey(BTC, USD)]

    def test_duplicate(self, registry):
        with pytest.raises(AlreadyExists):
            registry.create(PoolKey(BTC, USD), lambda: make_pool())

    def test_factory_error_registers_nothing(self, registry):
        def failing():
            raise RuntimeError("ledger down")

        with pytest.raises(RuntimeError):
            registry.create(PoolKey(BTC, ETH), failing)
        assert PoolKey(BTC, ETH) not in registry

    def test_concurrent_creation_single_winner(self):
        registry = PoolRegistry()
        key = PoolKey(BTC, USD)
        errors: list[Exception] = []

        def create():
            try:
                registry.create(key, lambda: make_pool())
            except AlreadyExists as err:
                errors.append(err)

        threads = [threading.Thread(target=create) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 1
        assert len(errors) == 7


class TestTransaction:
    def test_commits_on_success(self, registry):
        key = PoolKey(BTC, USD)
        with registry.transaction(key) as pool:
            pool.reserves.reserve_x = 5

        assert registry.snapshot(key).reserves.reserve_x == 5

    def test_discards_on_error(self, registry):
        key = PoolKey(BTC, USD)
        before = registry.snapshot(key)

        with pytest.raises(ValueError):
            with registry.transaction(key) as pool:
                pool.reserves.reserve_x = 5
                pool.fee_balances.team_x = 9
                raise ValueError("abort")

        assert registry.snapshot(key) == before

    def test_snapshot_is_independent(self, registry):
        key = PoolKey(BTC, USD)
        snap = registry.snapshot(key)
        snap.balances.balance_x = 0

        assert registry.snapshot(key).balances.balance_x == 1000

    def test_missing_pool(self, registry):
        with pytest.raises(NotInitialized):
            registry.snapshot(PoolKey(ETH, USD))
        with pytest.raises(NotInitialized):
            with registry.transaction(PoolKey(ETH, USD)):
                pass
