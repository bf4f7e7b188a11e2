"""Vault service.

Orchestrates user registration and ``MemoryStore`` operations behind the
interface the HTTP layer consumes. The caller supplies an already
authenticated user id; every operation returns a :class:`VaultOutcome` so
domain failures never escape as exceptions and never carry ciphertext or key
material.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, fields, replace
from typing import Any

import structlog

from memorystream.core.domain.errors import (
    DuplicateUserError,
    UserNotFoundError,
    ValidationError,
    VaultError,
    error_payload,
)
from memorystream.core.domain.memory import (
    MemoryType,
    User,
    UserPreferences,
    normalize_email,
)
from memorystream.core.domain.memory_store import MemoryStore
from memorystream.core.interfaces.crypto import KeyCustodyProtocol
from memorystream.core.interfaces.repository import (
    MemoryRepositoryProtocol,
    UserRepositoryProtocol,
)
from memorystream.infrastructure.crypto.keys import KeyManager

PREFERENCE_FIELDS = frozenset(f.name for f in fields(UserPreferences))


@dataclass
class VaultOutcome:
    """Response-shape-agnostic result of a vault operation."""

    success: bool
    data: Any = None
    error: str | None = None
    error_type: str | None = None
    code: str | None = None
    status_code: int = 200
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, status_code: int = 200) -> "VaultOutcome":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def failure(cls, error: VaultError) -> "VaultOutcome":
        payload = error_payload(error)
        return cls(
            success=False,
            error=payload["error"],
            error_type=payload["error_type"],
            code=payload["code"],
            status_code=error.status_code or 500,
            details=dict(payload["details"]),
        )

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {
            "success": False,
            "error": self.error,
            "error_type": self.error_type,
            "code": self.code,
            "details": self.details,
        }


class VaultService:
    """Entry point for every vault operation."""

    def __init__(
        self,
        store: MemoryStore,
        users: UserRepositoryProtocol,
        memories: MemoryRepositoryProtocol,
        key_manager: KeyManager,
        custody: KeyCustodyProtocol,
    ) -> None:
        self._store = store
        self._users = users
        self._memories = memories
        self._key_manager = key_manager
        self._custody = custody
        self._started = time.monotonic()
        self._logger = structlog.get_logger().bind(component="vault_service")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def register_user(
        self,
        email: str,
        name: str,
        preferences: dict[str, Any] | None = None,
    ) -> VaultOutcome:
        """Create a user with a fresh key pair.

        Nothing is persisted if key generation fails.
        """

        async def _register() -> dict[str, Any]:
            normalized = normalize_email(email)
            if not normalized or not name or not name.strip():
                raise ValidationError("email and name are required")
            if await self._users.get_by_email(normalized) is not None:
                raise DuplicateUserError(normalized)
            prefs = self._apply_preferences(UserPreferences(), preferences or {})

            key_pair = await asyncio.to_thread(self._key_manager.generate_key_pair)

            user = User(
                email=normalized,
                name=name.strip(),
                public_key_pem=key_pair.public_key_pem,
                created_at=self._store.now(),
                preferences=prefs,
            )
            self._custody.store(user.id, key_pair.private_key_pem)
            try:
                user = await self._users.add(user)
            except Exception:
                self._custody.discard(user.id)
                raise
            self._logger.info("user.registered", user_id=user.id)
            return user.to_dict()

        return await self._run("register_user", None, _register, status_code=201)

    async def get_profile(self, user_id: str) -> VaultOutcome:
        async def _profile() -> dict[str, Any]:
            return (await self._require_user(user_id)).to_dict()

        return await self._run("get_profile", user_id, _profile)

    async def update_preferences(self, user_id: str, **changes: Any) -> VaultOutcome:
        async def _update() -> dict[str, Any]:
            user = await self._require_user(user_id)
            prefs = self._apply_preferences(user.preferences, changes)
            updated = await self._users.update_preferences(user.id, prefs)
            self._logger.info(
                "user.preferences_updated", user_id=user.id, fields=sorted(changes)
            )
            return updated.preferences.to_dict()

        return await self._run("update_preferences", user_id, _update)

    # ------------------------------------------------------------------
    # Memories
    # ------------------------------------------------------------------

    async def create_memory(
        self,
        user_id: str,
        content: str,
        type: MemoryType | str,
        source: str,
        tags: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> VaultOutcome:
        async def _create() -> dict[str, Any]:
            await self._require_user(user_id)
            summary = await self._store.create_memory(
                user_id, content, type, source, tags=tags, metadata=metadata
            )
            payload = summary.to_dict()
            payload.pop("access_count", None)
            payload["message"] = "Memory stored successfully"
            return payload

        return await self._run("create_memory", user_id, _create, status_code=201)

    async def list_memories(
        self,
        user_id: str,
        *,
        type: str | None = None,
        source: str | None = None,
        tags: str | list[str] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> VaultOutcome:
        async def _list() -> dict[str, Any]:
            await self._require_user(user_id)
            page = await self._store.list_memories(
                user_id, type=type, source=source, tags=tags, limit=limit, offset=offset
            )
            return page.to_dict()

        return await self._run("list_memories", user_id, _list)

    async def search_memories(
        self,
        user_id: str,
        query: str,
        context: dict[str, Any] | None = None,
        limit: int | None = None,
    ) -> VaultOutcome:
        async def _search() -> dict[str, Any]:
            await self._require_user(user_id)
            response = await self._store.search(user_id, query, context=context, limit=limit)
            return response.to_dict()

        return await self._run("search_memories", user_id, _search)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def dashboard_stats(self, user_id: str) -> VaultOutcome:
        """Aggregate view for the external dashboard."""

        async def _dashboard() -> dict[str, Any]:
            user = await self._require_user(user_id)
            stats = await self._store.memory_stats(user.id)
            return {
                "user": {
                    "id": user.id,
                    "name": user.name,
                    "email": user.email,
                    "joined_at": user.created_at.isoformat(),
                },
                "memories": stats.to_dict(),
                "stats": user.stats.to_dict(),
                "privacy": user.preferences.to_dict(),
            }

        return await self._run("dashboard_stats", user_id, _dashboard)

    async def health(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": self._store.now().isoformat(),
            "uptime_seconds": round(time.monotonic() - self._started, 3),
            "store": {
                "users": await self._users.count(),
                "memories": await self._memories.count(),
            },
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _require_user(self, user_id: str) -> User:
        user = await self._users.get(user_id) if user_id else None
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _apply_preferences(
        self, current: UserPreferences, changes: dict[str, Any]
    ) -> UserPreferences:
        unknown = set(changes) - PREFERENCE_FIELDS
        if unknown:
            raise ValidationError(
                "Unknown preference fields", details={"fields": sorted(unknown)}
            )
        return replace(current, **{k: v for k, v in changes.items() if v is not None})

    async def _run(
        self,
        operation: str,
        user_id: str | None,
        call: Callable[[], Awaitable[Any]],
        *,
        status_code: int = 200,
    ) -> VaultOutcome:
        try:
            data = await call()
        except VaultError as e:
            self._logger.warning(
                "vault.operation_failed",
                operation=operation,
                user_id=user_id,
                error_type=type(e).__name__,
                code=e.code,
            )
            return VaultOutcome.failure(e)
        return VaultOutcome.ok(data, status_code=status_code)
