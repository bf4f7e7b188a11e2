"""
Vault API Schemas
=================

Pydantic models for the payloads the HTTP layer hands to the vault.

Clean Architecture Notes:
- These schemas validate inbound shapes only; the domain re-checks the
  invariants it owns (memory type membership, non-empty content)
- ``to_kwargs()`` converts a request into ``VaultService`` arguments
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from memorystream.core.domain.memory import MemoryType


class UpdatePreferencesRequest(BaseModel):
    """Partial update of a user's privacy preferences."""

    model_config = ConfigDict(extra="forbid")

    privacy_level: Optional[str] = Field(None, pattern="^(low|medium|high)$")
    data_retention: Optional[str] = Field(None, min_length=1)
    cross_platform_sync: Optional[bool] = None

    def to_kwargs(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class RegisterUserRequest(BaseModel):
    """Request schema for registering a vault owner."""

    email: str = Field(..., min_length=3, max_length=320)
    name: str = Field(..., min_length=1, description="Display name")
    preferences: Optional[UpdatePreferencesRequest] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("email must look like name@example.com")
        return v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    def to_kwargs(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "name": self.name,
            "preferences": self.preferences.to_kwargs() if self.preferences else None,
        }


class MemoryMetadata(BaseModel):
    """Free-form metadata; ``allowedServices`` feeds memory permissions."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    allowed_services: list[str] = Field(default_factory=list, alias="allowedServices")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class CreateMemoryRequest(BaseModel):
    """Request schema for storing a memory."""

    content: str = Field(..., min_length=1)
    type: MemoryType
    source: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)
    metadata: MemoryMetadata = Field(default_factory=MemoryMetadata)

    def to_kwargs(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "type": self.type,
            "source": self.source,
            "tags": list(self.tags),
            "metadata": self.metadata.to_dict(),
        }


class ListMemoriesRequest(BaseModel):
    """Query parameters for listing memories. ``tags`` is comma-separated."""

    limit: int = Field(50, ge=0)
    offset: int = Field(0, ge=0)
    type: Optional[str] = None
    source: Optional[str] = None
    tags: Optional[str] = None

    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    def to_kwargs(self) -> dict[str, Any]:
        return {
            "type": self.type or None,
            "source": self.source or None,
            "tags": self.tag_list() or None,
            "limit": self.limit,
            "offset": self.offset,
        }


class SearchMemoriesRequest(BaseModel):
    """Request schema for a relevance-ranked search."""

    query: str = Field(..., min_length=1)
    context: dict[str, Any] = Field(default_factory=dict)
    limit: int = Field(20, ge=1)

    @field_validator("context")
    @classmethod
    def validate_keywords(cls, v: dict[str, Any]) -> dict[str, Any]:
        keywords = v.get("keywords")
        if keywords is not None and not (
            isinstance(keywords, list) and all(isinstance(k, str) for k in keywords)
        ):
            raise ValueError("context.keywords must be a list of strings")
        return v

    def to_kwargs(self) -> dict[str, Any]:
        return {"query": self.query, "context": dict(self.context), "limit": self.limit}

