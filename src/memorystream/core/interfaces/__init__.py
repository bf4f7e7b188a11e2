"""
Core Protocol Interfaces

Protocols for everything the vault's domain depends on: the system of
record, encryption and key custody, and logging.

Usage:
    from memorystream.core.interfaces import MemoryRepositoryProtocol

    def build_store(memories: MemoryRepositoryProtocol, users: UserRepositoryProtocol):
        ...
"""

from memorystream.core.interfaces.crypto import (
    CipherCodecProtocol,
    DecryptorProtocol,
    KeyCustodyProtocol,
)
from memorystream.core.interfaces.logging import LoggerProtocol
from memorystream.core.interfaces.repository import (
    MemoryRepositoryProtocol,
    UserRepositoryProtocol,
)

__all__ = [
    "CipherCodecProtocol",
    "DecryptorProtocol",
    "KeyCustodyProtocol",
    "LoggerProtocol",
    "MemoryRepositoryProtocol",
    "UserRepositoryProtocol",
]
