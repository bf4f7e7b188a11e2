"""Per-user encrypted memory store with relevance-ranked search.

``MemoryStore`` owns the vault's rules: hard per-owner isolation, encryption
on the write path, scoring and decryption on the read path, and access
counting as a side effect of search. Persistence and key custody are
injected; the store never touches a private key, only a decryptor issued for
the requesting owner.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from memorystream.core.domain.config_schema import VaultSettings
from memorystream.core.domain.dashboard import MemoryStats, summarize_memories
from memorystream.core.domain.entities import EntityExtractor
from memorystream.core.domain.errors import (
    DecryptionError,
    InvalidTypeError,
    UserNotFoundError,
    ValidationError,
)
from memorystream.core.domain.memory import (
    MemoryPage,
    MemoryPermissions,
    MemoryRecord,
    MemorySummary,
    MemoryType,
    SearchHit,
    SearchResponse,
)
from memorystream.core.domain.scoring import (
    RelevanceScorer,
    ScorableMemory,
    SearchContext,
)
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


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class _Decrypted:
    """Outcome of decrypting one record during a search."""

    readable: bool
    content: Any = None


def _content_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False, sort_keys=True)


def coerce_memory_type(value: Any) -> MemoryType:
    """Validate membership in the fixed type enumeration."""
    if isinstance(value, MemoryType):
        return value
    try:
        return MemoryType(value)
    except ValueError:
        raise InvalidTypeError(value, allowed=MemoryType.values()) from None


def parse_tag_filter(tags: str | Sequence[str] | None) -> list[str]:
    """Accept either a list of tags or the comma-separated query form."""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    return [t.strip() for t in tags if t and t.strip()]


class MemoryStore:
    """System of record for memories, scoped to their owners."""

    def __init__(
        self,
        memories: MemoryRepositoryProtocol,
        users: UserRepositoryProtocol,
        codec: CipherCodecProtocol,
        custody: KeyCustodyProtocol,
        *,
        extractor: EntityExtractor | None = None,
        scorer: RelevanceScorer | None = None,
        settings: VaultSettings | None = None,
        logger: LoggerProtocol | None = None,
        time_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._memories = memories
        self._users = users
        self._codec = codec
        self._custody = custody
        self._settings = settings or VaultSettings()
        self._extractor = extractor or EntityExtractor()
        self._scorer = scorer or RelevanceScorer(self._settings)
        self._logger = logger or structlog.get_logger().bind(component="memory_store")
        self._time_provider = time_provider or _utcnow

    def now(self) -> datetime:
        return self._time_provider()

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def create_memory(
        self,
        user_id: str,
        content: str,
        type: MemoryType | str,
        source: str,
        tags: Sequence[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> MemorySummary:
        """Encrypt and store a memory for ``user_id``.

        Returns only non-sensitive summary fields; the ciphertext is never
        echoed back.

        Raises:
            InvalidTypeError: ``type`` is not a known memory type
            ValidationError: content or source is empty
            UserNotFoundError: ``user_id`` does not resolve
            EncryptionError: the payload cannot be encrypted
        """
        memory_type = coerce_memory_type(type)
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("Memory content must be a non-empty string")
        if not isinstance(source, str) or not source.strip():
            raise ValidationError("Memory source must be a non-empty string")
        if isinstance(tags, str):
            raise ValidationError("Tags must be a list of strings")
        metadata = dict(metadata or {})

        user = await self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        entities = self._extractor.extract(content)
        ciphertext = await asyncio.to_thread(
            self._codec.encrypt, content, user.public_key_pem
        )

        record = MemoryRecord(
            user_id=user.id,
            ciphertext=ciphertext,
            type=memory_type,
            source=source,
            tags=tuple(str(t) for t in (tags or ())),
            entities=entities,
            metadata=metadata,
            permissions=MemoryPermissions(
                allowed_services=tuple(metadata.get("allowedServices") or ()),
            ),
            timestamp=self.now(),
        )
        await self._memories.add(record)
        await self._users.increment_stat(user.id, "total_memories")

        self._logger.info(
            "memory.created",
            user_id=user.id,
            memory_id=record.id,
            type=memory_type.value,
        )
        return MemorySummary.from_record(record)

    # ------------------------------------------------------------------
    # Read paths
    # ------------------------------------------------------------------

    async def list_memories(
        self,
        user_id: str,
        *,
        type: MemoryType | str | None = None,
        source: str | None = None,
        tags: str | Sequence[str] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> MemoryPage:
        """List the owner's memory metadata, newest first.

        Never decrypts and never changes ``access_count``.
        """
        limit = self._settings.default_list_limit if limit is None else limit
        if limit < 0 or offset < 0:
            raise ValidationError("limit and offset must be non-negative")

        type_value = type.value if isinstance(type, MemoryType) else type
        tag_filter = parse_tag_filter(tags)

        records = [
            r
            for r in await self._owned(user_id)
            if (not type_value or r.type.value == type_value)
            and (not source or r.source == source)
            and (not tag_filter or any(tag in r.tags for tag in tag_filter))
        ]
        # sorted() is stable with reverse=True, so equal timestamps keep insertion order.
        records = sorted(records, key=lambda r: r.timestamp, reverse=True)
        page = records[offset : offset + limit]

        return MemoryPage(
            memories=[MemorySummary.from_record(r) for r in page],
            total=len(records),
            limit=limit,
            offset=offset,
        )

    async def search(
        self,
        user_id: str,
        query: str,
        context: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> SearchResponse:
        """Rank the owner's memories against ``query`` and return decrypted hits.

        Every owned record is scored fresh; hits must score above
        ``min_relevance``. Records that cannot be decrypted are dropped from
        the results and logged. Each returned hit has its ``access_count``
        incremented exactly once.
        """
        limit = self._settings.default_search_limit if limit is None else limit
        if limit < 0:
            raise ValidationError("limit must be non-negative")

        search_context = SearchContext.build(query or "", context)
        records = await self._owned(user_id)
        decrypted = await self._decrypt_all(user_id, records)
        now = self.now()

        candidates: list[tuple[float, MemoryRecord, _Decrypted]] = []
        for record, plain in zip(records, decrypted):
            score = self._scorer.score(
                ScorableMemory(
                    content=_content_text(plain.content) if plain.readable else "",
                    tags=record.tags,
                    timestamp=record.timestamp,
                    access_count=record.access_count,
                ),
                search_context,
                now,
            )
            if score > self._settings.min_relevance:
                candidates.append((score, record, plain))

        candidates.sort(key=lambda c: c[0], reverse=True)

        results: list[SearchHit] = []
        for score, record, plain in candidates[:limit]:
            if not plain.readable:
                self._logger.warning(
                    "memory.search.decrypt_failed",
                    user_id=user_id,
                    memory_id=record.id,
                )
                continue
            access_count = await self._memories.increment_access(record.id)
            results.append(
                SearchHit(
                    id=record.id,
                    content=plain.content,
                    type=record.type,
                    source=record.source,
                    tags=record.tags,
                    entities=record.entities,
                    timestamp=record.timestamp,
                    relevance_score=score,
                    access_count=access_count,
                )
            )

        self._logger.info(
            "memory.search",
            user_id=user_id,
            keywords=len(search_context.keywords),
            scanned=len(records),
            results_count=len(results),
        )
        return SearchResponse(query=query, results=results)

    async def memory_stats(self, user_id: str) -> MemoryStats:
        """Aggregate counts over the owner's memories for the dashboard."""
        return summarize_memories(
            await self._owned(user_id),
            now=self.now(),
            recent_days=self._settings.recent_activity_days,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _owned(self, user_id: str) -> list[MemoryRecord]:
        # Re-check ownership on top of the repository's owner index.
        return [r for r in await self._memories.scan_by_owner(user_id) if r.user_id == user_id]

    async def _decrypt_all(
        self, user_id: str, records: list[MemoryRecord]
    ) -> list[_Decrypted]:
        if not records:
            return []
        try:
            decryptor = self._custody.decryptor_for(user_id)
        except DecryptionError as e:
            self._logger.error("memory.search.no_decryptor", user_id=user_id, error=e.message)
            return [_Decrypted(readable=False) for _ in records]

        # gather() keeps results in scan order regardless of completion order.
        return list(
            await asyncio.gather(
                *(asyncio.to_thread(self._try_decrypt, decryptor, r) for r in records)
            )
        )

    def _try_decrypt(self, decryptor: DecryptorProtocol, record: MemoryRecord) -> _Decrypted:
        if decryptor.user_id != record.user_id:
            return _Decrypted(readable=False)
        try:
            return _Decrypted(readable=True, content=decryptor.decrypt(record.ciphertext))
        except DecryptionError as e:
            self._logger.debug(
                "memory.decrypt_failed",
                memory_id=record.id,
                error=e.message,
            )
            return _Decrypted(readable=False)
