"""Interfaces for encryption and key custody."""

from __future__ import annotations

from typing import Any, Protocol


class CipherCodecProtocol(Protocol):
    """Encrypts structured payloads under a public key."""

    def encrypt(self, payload: Any, public_key_pem: str) -> str:
        """Serialize and encrypt ``payload``; raises EncryptionError."""
        ...


class DecryptorProtocol(Protocol):
    """Decrypt capability bound to a single owner's private key."""

    @property
    def user_id(self) -> str:
        """Owner this decryptor was issued for."""
        ...

    def decrypt(self, blob: str) -> Any:
        """Decrypt a blob; raises DecryptionError."""
        ...


class KeyCustodyProtocol(Protocol):
    """Holds private keys apart from user records and issues decryptors."""

    def store(self, user_id: str, private_key_pem: str) -> None:
        """Take custody of a user's private key."""
        ...

    def has_key(self, user_id: str) -> bool:
        """Whether a key is held for ``user_id``."""
        ...

    def decryptor_for(self, user_id: str) -> DecryptorProtocol:
        """Issue a decryptor for ``user_id``; raises DecryptionError if no key."""
        ...

    def discard(self, user_id: str) -> None:
        """Drop a user's key, e.g. when registration is rolled back."""
        ...
