"""Pool registry keyed by canonical asset pair.

Each pool gets its own re-entrant lock. Mutations go through
``transaction()``: the body works on a staged copy, which replaces the live
record only if the body finishes without raising.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import structlog

from amm_engine.errors import AlreadyExists, NotInitialized
from amm_engine.models.types import PoolKey
from amm_engine.pool.state import Pool

logger = structlog.get_logger()


class PoolRegistry:
    """Table of pools, one per canonical asset pair."""

    def __init__(self) -> None:
        self._pools: dict[PoolKey, Pool] = {}
        self._locks: dict[PoolKey, threading.RLock] = {}
        # Guards the two dicts above, not pool contents
        self._table_lock = threading.Lock()

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._pools)

    def __contains__(self, key: object) -> bool:
        with self._table_lock:
            return key in self._pools

    def keys(self) -> list[PoolKey]:
        """All pool keys, in creation order."""
        with self._table_lock:
            return list(self._pools)

    def create(self, key: PoolKey, factory: Callable[[], Pool]) -> Pool:
        """Build and register the pool for key.

        The factory runs under the table lock, so two concurrent creations
        of one pair cannot both succeed.

        Raises:
            AlreadyExists: If a pool for key is registered
        """
        with self._table_lock:
            if key in self._pools:
                raise AlreadyExists(f"Pool {key} already exists")
            pool = factory()
            self._pools[key] = pool
            self._locks[key] = threading.RLock()
        logger.debug("pool_registered", pool=str(key))
        return pool

    def snapshot(self, key: PoolKey) -> Pool:
        """Independent copy of the pool's current state.

        Raises:
            NotInitialized: If no pool exists for key
        """
        with self._lock_for(key):
            return self._get(key).staged()

    @contextmanager
    def transaction(self, key: PoolKey) -> Iterator[Pool]:
        """Hold the pool lock and yield a staged copy; commit it on success.

        Raises:
            NotInitialized: If no pool exists for key
        """
        with self._lock_for(key):
            staged = self._get(key).staged()
            yield staged
            with self._table_lock:
                self._pools[key] = staged

    def _lock_for(self, key: PoolKey) -> threading.RLock:
        with self._table_lock:
            lock = self._locks.get(key)
        if lock is None:
            raise NotInitialized(f"Pool {key} does not exist")
        return lock

    def _get(self, key: PoolKey) -> Pool:
        with self._table_lock:
            return self._pools[key]
