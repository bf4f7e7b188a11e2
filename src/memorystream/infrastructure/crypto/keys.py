"""RSA key pair generation for vault owners."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from memorystream.core.domain.config_schema import MIN_KEY_SIZE
from memorystream.core.domain.errors import KeyGenerationError

logger = structlog.get_logger(__name__)

PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class KeyPair:
    """A PEM-encoded RSA key pair.

    Attributes:
        public_key_pem: SubjectPublicKeyInfo PEM, safe to distribute
        private_key_pem: PKCS8 PEM, optionally passphrase-encrypted
    """

    public_key_pem: str
    private_key_pem: str

    def __repr__(self) -> str:
        return "KeyPair(public_key_pem=..., private_key_pem=<redacted>)"


class KeyManager:
    """Generates per-user asymmetric key pairs.

    Holds no state beyond its configuration; every call returns a fresh pair.
    """

    def __init__(self, key_size: int = 2048, passphrase: Optional[str] = None):
        """Initialize the key manager.

        Args:
            key_size: RSA modulus size in bits (at least 2048)
            passphrase: When set, private keys are serialized encrypted
                under this passphrase
        """
        if key_size < MIN_KEY_SIZE:
            raise ValueError(f"key_size must be at least {MIN_KEY_SIZE} bits")
        self.key_size = key_size
        self._passphrase = passphrase

    def generate_key_pair(self) -> KeyPair:
        """Generate a fresh key pair.

        Returns:
            KeyPair with PEM encodings of both halves

        Raises:
            KeyGenerationError: If the underlying primitive fails
        """
        try:
            private_key = rsa.generate_private_key(
                public_exponent=PUBLIC_EXPONENT,
                key_size=self.key_size,
            )
            public_pem = private_key.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
            private_pem = private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=self._private_key_encryption(),
            )
        except Exception as e:
            logger.error("keys.generation_failed", key_size=self.key_size, error=str(e))
            raise KeyGenerationError(f"Key generation failed: {e}") from e

        logger.debug("keys.generated", key_size=self.key_size)
        return KeyPair(
            public_key_pem=public_pem.decode("ascii"),
            private_key_pem=private_pem.decode("ascii"),
        )

    def _private_key_encryption(self) -> serialization.KeySerializationEncryption:
        if self._passphrase:
            return serialization.BestAvailableEncryption(self._passphrase.encode("utf-8"))
        return serialization.NoEncryption()
