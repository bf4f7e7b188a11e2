"""Memory and user domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


def _utcnow() -> datetime:
    """Return current UTC time."""
    return datetime.now(timezone.utc)


class MemoryType(str, Enum):
    """Classification of a memory record."""

    CONVERSATION = "conversation"
    DOCUMENT = "document"
    NOTE = "note"
    INSIGHT = "insight"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class ExtractedEntities:
    """Structured hints pulled from plaintext at write time."""

    emails: tuple[str, ...] = ()
    urls: tuple[str, ...] = ()
    dates: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "emails": list(self.emails),
            "urls": list(self.urls),
            "dates": list(self.dates),
        }


@dataclass(frozen=True)
class MemoryPermissions:
    """Which AI services may reference a memory."""

    allowed_services: tuple[str, ...] = ()
    share_level: str = "private"

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed_services": list(self.allowed_services),
            "share_level": self.share_level,
        }


@dataclass
class MemoryRecord:
    """A stored memory. Content is only ever held as ciphertext."""

    user_id: str
    ciphertext: str
    type: MemoryType
    source: str
    id: str = field(default_factory=lambda: uuid4().hex)
    tags: tuple[str, ...] = ()
    entities: ExtractedEntities = field(default_factory=ExtractedEntities)
    metadata: dict[str, Any] = field(default_factory=dict)
    permissions: MemoryPermissions = field(default_factory=MemoryPermissions)
    timestamp: datetime = field(default_factory=_utcnow)
    access_count: int = 0


@dataclass(frozen=True)
class MemorySummary:
    """Non-sensitive view of a memory, safe to hand to any caller."""

    id: str
    type: MemoryType
    source: str
    tags: tuple[str, ...]
    entities: ExtractedEntities
    timestamp: datetime
    access_count: int = 0

    @classmethod
    def from_record(cls, record: MemoryRecord) -> "MemorySummary":
        return cls(
            id=record.id,
            type=record.type,
            source=record.source,
            tags=record.tags,
            entities=record.entities,
            timestamp=record.timestamp,
            access_count=record.access_count,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "source": self.source,
            "tags": list(self.tags),
            "entities": self.entities.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "access_count": self.access_count,
        }


@dataclass(frozen=True)
class MemoryPage:
    """One page of a listing plus the size of the filtered set."""

    memories: list[MemorySummary]
    total: int
    limit: int
    offset: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "memories": [m.to_dict() for m in self.memories],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }


@dataclass(frozen=True)
class SearchHit:
    """A decrypted memory returned to its owner, with the score it earned."""

    id: str
    content: Any
    type: MemoryType
    source: str
    tags: tuple[str, ...]
    entities: ExtractedEntities
    timestamp: datetime
    relevance_score: float
    access_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "type": self.type.value,
            "source": self.source,
            "tags": list(self.tags),
            "entities": self.entities.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "relevance_score": self.relevance_score,
            "access_count": self.access_count,
        }


@dataclass(frozen=True)
class SearchResponse:
    """Ranked hits for one search call."""

    query: str
    results: list[SearchHit]

    @property
    def total_found(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "results": [hit.to_dict() for hit in self.results],
            "total_found": self.total_found,
        }


@dataclass
class UserStats:
    """Mutable per-user counters."""

    total_memories: int = 0
    total_interactions: int = 0
    connected_services: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_memories": self.total_memories,
            "total_interactions": self.total_interactions,
            "connected_services": self.connected_services,
        }


@dataclass
class UserPreferences:
    """Privacy and sync settings chosen by the user."""

    privacy_level: str = "high"
    data_retention: str = "1year"
    cross_platform_sync: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "privacy_level": self.privacy_level,
            "data_retention": self.data_retention,
            "cross_platform_sync": self.cross_platform_sync,
        }


def normalize_email(email: str) -> str:
    """Case-normalize an email so it can serve as a unique key."""
    return email.strip().lower()


@dataclass
class User:
    """A registered vault owner.

    Only the public key is kept here. The private key lives in key custody
    and is reachable only through a decryptor issued for this user.
    """

    email: str
    name: str
    public_key_pem: str
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=_utcnow)
    stats: UserStats = field(default_factory=UserStats)
    preferences: UserPreferences = field(default_factory=UserPreferences)

    def __post_init__(self) -> None:
        self.email = normalize_email(self.email)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "public_key": self.public_key_pem,
            "created_at": self.created_at.isoformat(),
            "preferences": self.preferences.to_dict(),
            "stats": self.stats.to_dict(),
        }
