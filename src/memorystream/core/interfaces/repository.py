"""Interfaces for the vault's system of record.

The store only needs get/put/scan-by-owner plus two atomic counters, so a
durable backend can replace the in-memory one without touching
``MemoryStore``.
"""

from __future__ import annotations

from typing import Protocol

from memorystream.core.domain.memory import MemoryRecord, User, UserPreferences


class MemoryRepositoryProtocol(Protocol):
    """Protocol for memory record persistence."""

    async def add(self, record: MemoryRecord) -> MemoryRecord:
        """Insert a fully constructed record."""
        ...

    async def get(self, record_id: str) -> MemoryRecord | None:
        """Get a record by ID."""
        ...

    async def scan_by_owner(self, user_id: str) -> list[MemoryRecord]:
        """Return the owner's records in insertion order."""
        ...

    async def increment_access(self, record_id: str) -> int:
        """Atomically bump ``access_count`` and return the new value."""
        ...

    async def count(self) -> int:
        """Number of records across all owners."""
        ...


class UserRepositoryProtocol(Protocol):
    """Protocol for user persistence."""

    async def add(self, user: User) -> User:
        """Insert a user; raises DuplicateUserError on an existing email."""
        ...

    async def get(self, user_id: str) -> User | None:
        """Get a user by ID."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by (normalized) email."""
        ...

    async def increment_stat(self, user_id: str, stat: str, amount: int = 1) -> int:
        """Atomically bump one of the user's counters and return the new value."""
        ...

    async def update_preferences(
        self, user_id: str, preferences: UserPreferences
    ) -> User:
        """Replace the user's preferences block."""
        ...

    async def count(self) -> int:
        """Number of registered users."""
        ...
