"""Domain-specific exception types for the memory vault."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class VaultError(Exception):
    """Base exception for vault domain errors."""

    message: str
    code: str = "vault_error"
    details: Dict[str, Any] | None = None
    status_code: int | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.details is None:
            self.details = {}


class UserNotFoundError(VaultError):
    """Raised when a user id does not resolve to a registered user."""

    def __init__(self, user_id: str, *, details: Dict[str, Any] | None = None) -> None:
        details = dict(details or {})
        details.setdefault("user_id", user_id)
        self.user_id = user_id
        super().__init__(
            message="User not found",
            code="user_not_found",
            details=details,
            status_code=404,
        )


class InvalidTypeError(VaultError):
    """Raised when a memory type is outside the fixed enumeration."""

    def __init__(self, memory_type: Any, *, allowed: list[str] | None = None) -> None:
        details: Dict[str, Any] = {"type": str(memory_type)}
        if allowed:
            details["allowed"] = list(allowed)
        super().__init__(
            message=f"Invalid memory type: {memory_type!r}",
            code="invalid_type",
            details=details,
            status_code=400,
        )


class ValidationError(VaultError):
    """Raised for malformed input that reaches the core."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message, code="validation_error", details=details, status_code=400
        )


class DuplicateUserError(VaultError):
    """Raised when registering an email that already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(
            message="User already exists",
            code="duplicate_user",
            details={"email": email},
            status_code=400,
        )


class KeyGenerationError(VaultError):
    """Raised when a key pair cannot be produced. Fatal for registration."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code="key_generation_failed",
            details=details,
            status_code=500,
        )


class EncryptionError(VaultError):
    """Raised when a payload cannot be encrypted (oversized, bad key)."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message, code="encryption_failed", details=details, status_code=422
        )


class DecryptionError(VaultError):
    """Raised when a blob is malformed or the key does not match."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message, code="decryption_failed", details=details, status_code=500
        )


def error_payload(error: VaultError, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Convert a VaultError into a standardized response payload."""
    payload = {
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
        "code": error.code,
        "details": error.details or {},
    }
    if extra:
        payload.update(extra)
    return payload
