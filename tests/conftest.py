"""Test configuration and shared fixtures."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from memorystream.application.factory import build_vault_service
from memorystream.application.vault_service import VaultService
from memorystream.core.domain.config_schema import VaultSettings
from memorystream.core.domain.memory import User
from memorystream.core.domain.memory_store import MemoryStore
from memorystream.infrastructure.crypto.codec import CipherCodec
from memorystream.infrastructure.crypto.custody import InMemoryKeyCustody
from memorystream.infrastructure.crypto.keys import KeyManager, KeyPair
from memorystream.infrastructure.persistence.in_memory_repository import (
    InMemoryMemoryRepository,
    InMemoryUserRepository,
)


class FrozenClock:
    """Deterministic clock; call it to read, ``advance`` to move forward."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


class PooledKeyManager(KeyManager):
    """Hands out pre-generated key pairs so tests skip RSA generation."""

    def __init__(self, pairs: list[KeyPair]) -> None:
        super().__init__()
        self._pairs = itertools.cycle(pairs)

    def generate_key_pair(self) -> KeyPair:
        return next(self._pairs)


@pytest.fixture(scope="session")
def key_pairs() -> list[KeyPair]:
    manager = KeyManager()
    return [manager.generate_key_pair() for _ in range(4)]


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@dataclass
class VaultParts:
    """A MemoryStore plus direct handles on its collaborators."""

    store: MemoryStore
    users: InMemoryUserRepository
    memories: InMemoryMemoryRepository
    codec: CipherCodec
    custody: InMemoryKeyCustody
    key_pairs: list[KeyPair]

    async def add_user(self, email: str, key_index: int = 0) -> User:
        pair = self.key_pairs[key_index]
        user = User(email=email, name=email.split("@")[0], public_key_pem=pair.public_key_pem)
        await self.users.add(user)
        self.custody.store(user.id, pair.private_key_pem)
        return user


@pytest.fixture
def parts(key_pairs: list[KeyPair], clock: FrozenClock) -> VaultParts:
    settings = VaultSettings()
    codec = CipherCodec(max_payload_bytes=settings.max_payload_bytes)
    custody = InMemoryKeyCustody(codec)
    users = InMemoryUserRepository()
    memories = InMemoryMemoryRepository()
    store = MemoryStore(
        memories, users, codec, custody, settings=settings, time_provider=clock
    )
    return VaultParts(
        store=store,
        users=users,
        memories=memories,
        codec=codec,
        custody=custody,
        key_pairs=key_pairs,
    )


@pytest.fixture
def make_service(key_pairs: list[KeyPair], clock: FrozenClock):
    def _make(settings: VaultSettings | None = None) -> VaultService:
        return build_vault_service(
            settings, key_manager=PooledKeyManager(key_pairs), time_provider=clock
        )

    return _make


@pytest.fixture
def service(make_service) -> VaultService:
    return make_service()
