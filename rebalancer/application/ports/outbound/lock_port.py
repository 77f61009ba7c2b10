"""
LockPort - Interface for mutual exclusion.

Used to keep two rebalances of the same pair from planning and trading
against the same stale balances at once.

Usage:
    async with lock_port.lock(pair_lock_name("BTCUSDT"), raise_on_failure=True):
        await rebalance()
"""
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncGenerator


def pair_lock_name(symbol: str) -> str:
    """Lock name guarding a single trading pair."""
    return f"rebalance:{symbol.upper()}"


class LockPort(ABC):
    """Port interface for acquiring and releasing named locks."""

    @abstractmethod
    async def acquire(self, lock_name: str, timeout_seconds: int = 300) -> bool:
        """
        Attempt to acquire a lock without waiting.

        Args:
            lock_name: Name of the lock
            timeout_seconds: Maximum time to hold the lock

        Returns:
            True if the lock was acquired, False if it is held elsewhere
        """
        pass

    @abstractmethod
    async def release(self, lock_name: str) -> None:
        """
        Release a held lock.

        Releasing a lock that is not held is a no-op.
        """
        pass

    @abstractmethod
    async def is_locked(self, lock_name: str) -> bool:
        """Check if a lock is currently held."""
        pass

    @asynccontextmanager
    async def lock(
        self,
        lock_name: str,
        timeout_seconds: int = 300,
        raise_on_failure: bool = False
    ) -> AsyncGenerator[bool, None]:
        """
        Context manager for lock acquisition and release.

        Yields:
            True if lock was acquired, False otherwise

        Raises:
            LockAcquisitionError: If raise_on_failure=True and lock unavailable
        """
        acquired = await self.acquire(lock_name, timeout_seconds)

        if not acquired and raise_on_failure:
            raise LockAcquisitionError(f"Could not acquire lock: {lock_name}")

        try:
            yield acquired
        finally:
            if acquired:
                await self.release(lock_name)


class LockAcquisitionError(Exception):
    """Raised when lock cannot be acquired."""
    pass
