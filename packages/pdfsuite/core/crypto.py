"""Authenticated encryption envelope for arbitrary byte buffers.

The envelope is ``IV || ciphertext`` where the ciphertext carries the
AES-GCM authentication tag. Keys are the SHA-256 digest of the UTF-8
password; no salt is mixed in so that existing ``.aes256`` files keep
decrypting.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from typing import Callable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import AuthenticationError, ValidationError
from .utils import get_logger

LOGGER = get_logger("pdfsuite.crypto")

IV_LENGTH = 12
KEY_LENGTH = 32
ENVELOPE_EXTENSION = ".aes256"

RandomSource = Callable[[int], bytes]


@dataclass(frozen=True)
class EncryptedPayload:
    iv: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        return self.iv + self.ciphertext


def derive_key(password: str) -> bytes:
    if not password:
        raise ValidationError("A non-empty password is required")
    return hashlib.sha256(password.encode("utf-8")).digest()


def encrypt_bytes(
    plaintext: bytes,
    password: str,
    *,
    random_bytes: RandomSource | None = None,
) -> EncryptedPayload:
    """Encrypt ``plaintext`` with a key derived from ``password``."""

    source = random_bytes or secrets.token_bytes
    iv = source(IV_LENGTH)
    if len(iv) != IV_LENGTH:
        raise ValueError(f"Random source returned {len(iv)} bytes, expected {IV_LENGTH}")
    ciphertext = AESGCM(derive_key(password)).encrypt(iv, bytes(plaintext), None)
    LOGGER.debug("Encrypted %d bytes into %d byte payload", len(plaintext), len(ciphertext))
    return EncryptedPayload(iv=iv, ciphertext=ciphertext)


def decrypt_bytes(iv: bytes, ciphertext: bytes, password: str) -> bytes:
    """Decrypt ``ciphertext``; a wrong password fails the integrity check.

    Raises:
        AuthenticationError: If the tag does not verify.
    """

    if len(iv) != IV_LENGTH:
        raise AuthenticationError("Encrypted data is truncated or malformed")
    try:
        return AESGCM(derive_key(password)).decrypt(iv, bytes(ciphertext), None)
    except InvalidTag as exc:
        LOGGER.debug("Authentication tag mismatch while decrypting")
        raise AuthenticationError("Incorrect password. The file could not be decrypted.") from exc


def seal(plaintext: bytes, password: str, *, random_bytes: RandomSource | None = None) -> bytes:
    """Return the self-describing ``IV || ciphertext`` envelope."""

    return encrypt_bytes(plaintext, password, random_bytes=random_bytes).to_bytes()


def open_sealed(envelope: bytes, password: str) -> bytes:
    """Reverse :func:`seal`."""

    if len(envelope) <= IV_LENGTH:
        raise AuthenticationError("Encrypted data is truncated or malformed")
    return decrypt_bytes(envelope[:IV_LENGTH], envelope[IV_LENGTH:], password)


__all__ = [
    "EncryptedPayload",
    "RandomSource",
    "ENVELOPE_EXTENSION",
    "IV_LENGTH",
    "KEY_LENGTH",
    "derive_key",
    "encrypt_bytes",
    "decrypt_bytes",
    "seal",
    "open_sealed",
]
