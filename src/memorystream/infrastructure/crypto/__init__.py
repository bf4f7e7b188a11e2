"""Key generation, envelope encryption and private-key custody."""

from memorystream.infrastructure.crypto.codec import CipherCodec
from memorystream.infrastructure.crypto.custody import Decryptor, InMemoryKeyCustody
from memorystream.infrastructure.crypto.keys import KeyManager, KeyPair

__all__ = ["CipherCodec", "Decryptor", "InMemoryKeyCustody", "KeyManager", "KeyPair"]
