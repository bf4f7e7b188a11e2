"""Envelope encryption for memory payloads.

A payload is JSON-serialized and encrypted with a fresh AES-256-GCM key; the
AES key is wrapped with the owner's RSA public key (OAEP, SHA-256). The
resulting blob is plain ASCII::

    v1:<base64 wrapped key>:<base64 nonce || ciphertext>

Only the matching private key can unwrap the AES key, so the blob keeps the
asymmetric guarantee without the RSA payload size limit.
"""

from __future__ import annotations

import base64
import binascii
import json
import secrets
from typing import Any

import structlog
from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from memorystream.core.domain.errors import DecryptionError, EncryptionError

logger = structlog.get_logger(__name__)

BLOB_VERSION = "v1"
NONCE_SIZE = 12
DATA_KEY_SIZE = 32


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def load_public_key(public_key_pem: str) -> rsa.RSAPublicKey:
    """Parse a PEM public key, raising EncryptionError if it is not RSA."""
    try:
        key = serialization.load_pem_public_key(public_key_pem.encode("ascii"))
    except (ValueError, TypeError, UnicodeEncodeError, UnsupportedAlgorithm) as e:
        raise EncryptionError("Malformed public key") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise EncryptionError("Public key is not an RSA key")
    return key


class CipherCodec:
    """Encrypts and decrypts structured payloads. Stateless given keys."""

    def __init__(self, max_payload_bytes: int = 1024 * 1024):
        """Initialize the codec.

        Args:
            max_payload_bytes: Largest serialized payload accepted by encrypt
        """
        self.max_payload_bytes = max_payload_bytes

    def encrypt(self, payload: Any, public_key_pem: str) -> str:
        """Encrypt a JSON-serializable payload under a public key.

        Args:
            payload: Data to encrypt
            public_key_pem: Owner's public key

        Returns:
            Opaque ASCII blob

        Raises:
            EncryptionError: If the payload is too large or not serializable,
                or the key is malformed
        """
        try:
            plaintext = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncryptionError("Payload is not JSON-serializable") from e

        if len(plaintext) > self.max_payload_bytes:
            raise EncryptionError(
                "Payload exceeds maximum size",
                details={"size": len(plaintext), "max_size": self.max_payload_bytes},
            )

        public_key = load_public_key(public_key_pem)

        data_key = AESGCM.generate_key(bit_length=DATA_KEY_SIZE * 8)
        nonce = secrets.token_bytes(NONCE_SIZE)
        try:
            ciphertext = AESGCM(data_key).encrypt(nonce, plaintext, None)
            wrapped_key = public_key.encrypt(data_key, _oaep())
        except ValueError as e:
            logger.error("codec.encrypt_failed", error=str(e))
            raise EncryptionError(f"Encryption failed: {e}") from e

        return ":".join(
            [
                BLOB_VERSION,
                base64.b64encode(wrapped_key).decode("ascii"),
                base64.b64encode(nonce + ciphertext).decode("ascii"),
            ]
        )

    def decrypt(self, blob: str, private_key: rsa.RSAPrivateKey) -> Any:
        """Decrypt a blob produced by :meth:`encrypt`.

        Args:
            blob: Encrypted blob
            private_key: Owner's loaded private key

        Returns:
            The decrypted payload

        Raises:
            DecryptionError: If the blob is malformed or the key does not match
        """
        parts = blob.split(":") if isinstance(blob, str) else []
        if len(parts) != 3 or parts[0] != BLOB_VERSION:
            raise DecryptionError("Invalid encrypted data format")

        try:
            wrapped_key = base64.b64decode(parts[1], validate=True)
            sealed = base64.b64decode(parts[2], validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Invalid encrypted data encoding") from e

        if len(sealed) <= NONCE_SIZE:
            raise DecryptionError("Invalid encrypted data format")
        nonce, ciphertext = sealed[:NONCE_SIZE], sealed[NONCE_SIZE:]

        try:
            data_key = private_key.decrypt(wrapped_key, _oaep())
            plaintext = AESGCM(data_key).decrypt(nonce, ciphertext, None)
        except (ValueError, InvalidTag) as e:
            raise DecryptionError("Decryption failed: invalid key or corrupted data") from e

        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecryptionError("Decrypted payload is not valid JSON") from e
