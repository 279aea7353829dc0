"""
Keyed asyncio locks.

Serializes ledger postings per product and transitions per restock order
within one process. Cross-process safety comes from BEGIN IMMEDIATE
transactions; these locks keep same-key writers from queueing on SQLite's
busy timeout.
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    """Registry of asyncio locks created on demand and dropped when idle."""

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, *keys: Hashable) -> AsyncIterator[None]:
        """
        Hold the locks for ``keys`` in the order given.

        Callers taking several keys must always pass them in the same order
        (order before product) to avoid deadlocks.
        """
        registered: list[Hashable] = []
        held: list[Hashable] = []
        try:
            for key in keys:
                lock = self._locks.setdefault(key, asyncio.Lock())
                self._waiters[key] = self._waiters.get(key, 0) + 1
                registered.append(key)
                await lock.acquire()
                held.append(key)
            yield
        finally:
            for key in reversed(held):
                self._locks[key].release()
            for key in registered:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


# Shared registry for all stores in the process
_registry: KeyedLock | None = None


def get_lock_registry() -> KeyedLock:
    """Get the process-wide keyed lock registry."""
    global _registry
    if _registry is None:
        _registry = KeyedLock()
    return _registry


def product_key(organization_id: int, product_id: int) -> tuple[str, int, int]:
    return ("product", organization_id, product_id)


def order_key(organization_id: int, order_id: int) -> tuple[str, int, int]:
    return ("restock_order", organization_id, order_id)
