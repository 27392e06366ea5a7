"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .entry_lock import EntryLockStrategy
from .optimistic_lock import OptimisticEntryLock

__all__ = ['EntryLockStrategy', 'OptimisticEntryLock']
