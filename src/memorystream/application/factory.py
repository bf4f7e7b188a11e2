"""Wiring for a process-local vault."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from memorystream.application.vault_service import VaultService
from memorystream.core.domain.config_schema import VaultSettings
from memorystream.core.domain.memory_store import MemoryStore
from memorystream.infrastructure.crypto.codec import CipherCodec
from memorystream.infrastructure.crypto.custody import InMemoryKeyCustody
from memorystream.infrastructure.crypto.keys import KeyManager
from memorystream.infrastructure.persistence.in_memory_repository import (
    InMemoryMemoryRepository,
    InMemoryUserRepository,
)


def build_vault_service(
    settings: VaultSettings | None = None,
    *,
    key_manager: KeyManager | None = None,
    time_provider: Callable[[], datetime] | None = None,
) -> VaultService:
    """Create a VaultService backed by in-memory repositories.

    Args:
        settings: Vault settings; defaults apply when omitted
        key_manager: Override for key generation (e.g. to share keys in tests)
        time_provider: Clock used for timestamps and recency scoring
    """
    settings = settings or VaultSettings()
    codec = CipherCodec(max_payload_bytes=settings.max_payload_bytes)
    custody = InMemoryKeyCustody(codec, passphrase=settings.key_passphrase)
    key_manager = key_manager or KeyManager(
        key_size=settings.key_size, passphrase=settings.key_passphrase
    )
    users = InMemoryUserRepository()
    memories = InMemoryMemoryRepository()

    store = MemoryStore(
        memories,
        users,
        codec,
        custody,
        settings=settings,
        time_provider=time_provider,
    )
    return VaultService(
        store=store,
        users=users,
        memories=memories,
        key_manager=key_manager,
        custody=custody,
    )
