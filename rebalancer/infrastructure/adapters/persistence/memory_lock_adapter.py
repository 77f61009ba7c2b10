"""
InMemoryLockAdapter - In-memory implementation of LockPort.

Only works within a single process and a single event loop, which is how
the API server runs.
"""
import asyncio
import time
from typing import Dict, Optional, Set, Tuple

from rebalancer.application.ports.outbound.lock_port import LockPort


class InMemoryLockAdapter(LockPort):
    """
    In-memory named locks owned by the acquiring task.

    A lock held longer than its timeout is treated as abandoned and can be
    taken over. Release is a no-op for any task other than the current
    owner, so a holder whose lock was taken over cannot free the new
    holder's lock.
    """

    def __init__(self):
        """Initialize empty lock table."""
        # name -> (expires_at, owner task)
        self._locks: Dict[str, Tuple[float, Optional[asyncio.Task]]] = {}
        self._lock = asyncio.Lock()

    def clear(self):
        """Clear all held locks. Useful for test cleanup."""
        self._locks.clear()

    async def acquire(self, lock_name: str, timeout_seconds: int = 300) -> bool:
        """
        Attempt to acquire a lock.

        Args:
            lock_name: Name of the lock
            timeout_seconds: Seconds after which a held lock expires

        Returns:
            True if lock was acquired
            False if lock is held
        """
        async with self._lock:
            now = time.monotonic()
            held = self._locks.get(lock_name)
            if held is not None and held[0] > now:
                return False

            self._locks[lock_name] = (now + timeout_seconds, asyncio.current_task())
            return True

    async def release(self, lock_name: str) -> None:
        """Release a lock held by the current task."""
        async with self._lock:
            held = self._locks.get(lock_name)
            if held is not None and held[1] is asyncio.current_task():
                del self._locks[lock_name]

    async def is_locked(self, lock_name: str) -> bool:
        """Check if a lock is currently held."""
        held = self._locks.get(lock_name)
        return held is not None and held[0] > time.monotonic()

    @property
    def held_locks(self) -> Set[str]:
        """Get set of currently held locks (for testing)."""
        now = time.monotonic()
        return {name for name, (expires_at, _) in self._locks.items() if expires_at > now}
