"""In-process custody for users' private keys.

Private keys never sit on user or memory records. The store asks custody for
a :class:`Decryptor` bound to the authenticated owner and only ever sees that
narrow capability.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

import structlog
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from memorystream.core.domain.errors import DecryptionError
from memorystream.infrastructure.crypto.codec import CipherCodec

logger = structlog.get_logger(__name__)


class Decryptor:
    """Decrypt capability for one owner's memories."""

    def __init__(self, user_id: str, private_key: rsa.RSAPrivateKey, codec: CipherCodec):
        self._user_id = user_id
        self._private_key = private_key
        self._codec = codec

    @property
    def user_id(self) -> str:
        return self._user_id

    def decrypt(self, blob: str) -> Any:
        return self._codec.decrypt(blob, self._private_key)

    def __repr__(self) -> str:
        return f"Decryptor(user_id={self._user_id!r})"


class InMemoryKeyCustody:
    """Holds PEM private keys per user and hands out cached decryptors.

    Keys are kept in the PEM form produced by ``KeyManager``; when a
    passphrase is configured they stay encrypted at rest and are unlocked
    on first use.
    """

    def __init__(self, codec: CipherCodec, passphrase: Optional[str] = None):
        """Initialize the custody.

        Args:
            codec: Codec used by issued decryptors
            passphrase: Passphrase the stored PEM keys are encrypted with
        """
        self._codec = codec
        self._passphrase = passphrase.encode("utf-8") if passphrase else None
        self._keys: Dict[str, str] = {}
        self._decryptors: Dict[str, Decryptor] = {}
        self._lock = threading.Lock()

    def store(self, user_id: str, private_key_pem: str) -> None:
        with self._lock:
            self._keys[user_id] = private_key_pem
            self._decryptors.pop(user_id, None)
        logger.debug("custody.key_stored", user_id=user_id)

    def has_key(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._keys

    def discard(self, user_id: str) -> None:
        with self._lock:
            self._keys.pop(user_id, None)
            self._decryptors.pop(user_id, None)

    def decryptor_for(self, user_id: str) -> Decryptor:
        """Issue a decryptor for ``user_id``.

        Raises:
            DecryptionError: If no key is held or it cannot be unlocked
        """
        with self._lock:
            cached = self._decryptors.get(user_id)
            if cached is not None:
                return cached
            pem = self._keys.get(user_id)
        if pem is None:
            raise DecryptionError("No private key held for user", details={"user_id": user_id})

        private_key = self._load_private_key(user_id, pem)
        decryptor = Decryptor(user_id, private_key, self._codec)
        with self._lock:
            # Another caller may have unlocked the same key meanwhile.
            return self._decryptors.setdefault(user_id, decryptor)

    def _load_private_key(self, user_id: str, pem: str) -> rsa.RSAPrivateKey:
        try:
            key = serialization.load_pem_private_key(
                pem.encode("ascii"), password=self._passphrase
            )
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            logger.error("custody.key_unlock_failed", user_id=user_id, error_type=type(e).__name__)
            raise DecryptionError(
                "Private key could not be unlocked", details={"user_id": user_id}
            ) from e
        if not isinstance(key, rsa.RSAPrivateKey):
            raise DecryptionError("Private key is not an RSA key", details={"user_id": user_id})
        return key
