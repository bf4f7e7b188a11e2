"""
Domain Models and Business Logic

This package contains the vault's core domain:
- User and memory models
- Error taxonomy
- Entity extraction and relevance scoring
- The per-user memory store
- Settings schema
"""

from memorystream.core.domain.errors import (
    DecryptionError,
    DuplicateUserError,
    EncryptionError,
    InvalidTypeError,
    KeyGenerationError,
    UserNotFoundError,
    ValidationError,
    VaultError,
)
from memorystream.core.domain.memory import (
    ExtractedEntities,
    MemoryPage,
    MemoryRecord,
    MemorySummary,
    MemoryType,
    SearchHit,
    SearchResponse,
    User,
    UserPreferences,
    UserStats,
)

__all__ = [
    "DecryptionError",
    "DuplicateUserError",
    "EncryptionError",
    "ExtractedEntities",
    "InvalidTypeError",
    "KeyGenerationError",
    "MemoryPage",
    "MemoryRecord",
    "MemorySummary",
    "MemoryType",
    "SearchHit",
    "SearchResponse",
    "User",
    "UserNotFoundError",
    "UserPreferences",
    "UserStats",
    "ValidationError",
    "VaultError",
]
