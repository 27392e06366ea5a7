"""
Entry lock strategy factory.
Configures which per-booking serialization strategy to use.
"""

from typing import Optional

from passgate.services.interfaces.entry_lock import EntryLockStrategy
from passgate.services.interfaces.optimistic_lock import OptimisticEntryLock
from passgate.services.lock_service import RedisEntryLock
from passgate.core.config import get_settings


def get_entry_lock_strategy() -> EntryLockStrategy:
    """
    Build the configured entry lock strategy.

    - optimistic: OptimisticEntryLock (default, DB version check only)
    - redis: RedisEntryLock (cross-worker lock, fails open)

    Selected via the ENTRY_LOCK_STRATEGY env var.
    """
    settings = get_settings()
    if settings.ENTRY_LOCK_STRATEGY == 'redis' and settings.REDIS_ENABLED:
        return RedisEntryLock()
    return OptimisticEntryLock()


# Singleton instance
_strategy: Optional[EntryLockStrategy] = None


def get_entry_lock() -> EntryLockStrategy:
    """Get entry lock strategy singleton."""
    global _strategy
    if _strategy is None:
        _strategy = get_entry_lock_strategy()
    return _strategy
