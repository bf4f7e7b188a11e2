"""User and memory persistence implementations."""

from memorystream.infrastructure.persistence.in_memory_repository import (
    InMemoryMemoryRepository,
    InMemoryUserRepository,
)

__all__ = ["InMemoryMemoryRepository", "InMemoryUserRepository"]
