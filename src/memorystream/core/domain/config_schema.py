"""
Configuration Schema Validation

Pydantic model for the vault settings. Values come from a YAML file and
``MEMORYSTREAM_*`` environment variables (see ``application.config_loader``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_KEY_SIZE = 2048


class VaultSettings(BaseModel):
    """Tunables for key generation, encryption and relevance ranking."""

    model_config = ConfigDict(extra="forbid")

    key_size: int = Field(
        2048,
        description="RSA modulus size in bits",
    )
    max_payload_bytes: int = Field(
        1024 * 1024,
        gt=0,
        description="Largest serialized memory payload accepted for encryption",
    )
    key_passphrase: Optional[str] = Field(
        None,
        description="Passphrase used to re-encrypt private keys held in custody",
    )

    min_relevance: float = Field(
        0.5,
        ge=0.0,
        description="Search hits must score strictly above this value",
    )
    max_score: float = Field(10.0, gt=0.0, description="Upper clamp for a relevance score")
    recency_window_days: float = Field(
        10.0,
        gt=0.0,
        description="Days over which the recency term decays to zero",
    )
    recency_weight: float = Field(0.1, ge=0.0)
    frequency_weight: float = Field(0.05, ge=0.0)
    frequency_cap: Optional[float] = Field(
        None,
        ge=0.0,
        description="Optional upper bound for the frequency term; None means uncapped",
    )
    context_weight: float = Field(5.0, ge=0.0)

    recent_activity_days: int = Field(7, ge=1)
    default_list_limit: int = Field(50, ge=1)
    default_search_limit: int = Field(20, ge=1)

    log_level: str = Field("INFO", description="Log level for structlog and stdlib logging")

    @field_validator("key_size")
    @classmethod
    def validate_key_size(cls, v: int) -> int:
        """Reject keys weaker than 2048-bit RSA."""
        if v < MIN_KEY_SIZE:
            raise ValueError(f"key_size must be at least {MIN_KEY_SIZE} bits")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
