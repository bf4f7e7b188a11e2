"""In-memory system of record for users and memories.

Process-lifetime maps guarded by a lock. Records are copied on the way in
and on the way out, so a record becomes visible only once fully built and
callers can never mutate stored state behind the lock's back.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import fields, replace

from memorystream.core.domain.errors import DuplicateUserError, UserNotFoundError
from memorystream.core.domain.memory import (
    MemoryRecord,
    User,
    UserPreferences,
    UserStats,
    normalize_email,
)
from memorystream.core.interfaces.repository import (
    MemoryRepositoryProtocol,
    UserRepositoryProtocol,
)

USER_STATS = frozenset(f.name for f in fields(UserStats))


class InMemoryMemoryRepository(MemoryRepositoryProtocol):
    """Memory records keyed by id, with an owner index kept in insertion order."""

    def __init__(self) -> None:
        self._records: dict[str, MemoryRecord] = {}
        self._by_owner: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    async def add(self, record: MemoryRecord) -> MemoryRecord:
        stored = copy.deepcopy(record)
        with self._lock:
            if stored.id in self._records:
                raise ValueError(f"Memory {stored.id} already exists")
            self._records[stored.id] = stored
            self._by_owner.setdefault(stored.user_id, []).append(stored.id)
        return copy.deepcopy(stored)

    async def get(self, record_id: str) -> MemoryRecord | None:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record else None

    async def scan_by_owner(self, user_id: str) -> list[MemoryRecord]:
        with self._lock:
            ids = list(self._by_owner.get(user_id, ()))
            return [copy.deepcopy(self._records[i]) for i in ids]

    async def increment_access(self, record_id: str) -> int:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise KeyError(record_id)
            record.access_count += 1
            return record.access_count

    async def count(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryUserRepository(UserRepositoryProtocol):
    """Users keyed by id with a unique, case-normalized email index."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._by_email: dict[str, str] = {}
        self._lock = threading.Lock()

    async def add(self, user: User) -> User:
        stored = copy.deepcopy(user)
        with self._lock:
            if stored.email in self._by_email:
                raise DuplicateUserError(stored.email)
            if stored.id in self._users:
                raise ValueError(f"User {stored.id} already exists")
            self._users[stored.id] = stored
            self._by_email[stored.email] = stored.id
        return copy.deepcopy(stored)

    async def get(self, user_id: str) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    async def get_by_email(self, email: str) -> User | None:
        with self._lock:
            user_id = self._by_email.get(normalize_email(email))
            return copy.deepcopy(self._users[user_id]) if user_id else None

    async def increment_stat(self, user_id: str, stat: str, amount: int = 1) -> int:
        if stat not in USER_STATS:
            raise ValueError(f"Unknown user stat: {stat}")
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            value = getattr(user.stats, stat) + amount
            setattr(user.stats, stat, value)
            return value

    async def update_preferences(
        self, user_id: str, preferences: UserPreferences
    ) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            user.preferences = replace(preferences)
            return copy.deepcopy(user)

    async def count(self) -> int:
        with self._lock:
            return len(self._users)
