"""In-process state adapters."""
from rebalancer.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter

__all__ = ["InMemoryLockAdapter"]
