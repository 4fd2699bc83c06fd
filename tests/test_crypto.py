from __future__ import annotations

import pytest

from pdfsuite.core.crypto import (
    IV_LENGTH,
    decrypt_bytes,
    derive_key,
    encrypt_bytes,
    open_sealed,
    seal,
)
from pdfsuite.core.exceptions import AuthenticationError, ValidationError


def test_seal_round_trip(fixed_random) -> None:
    payload = b"%PDF-1.7 secret body"
    envelope = seal(payload, "CorrectHorse1", random_bytes=fixed_random)

    assert envelope[:IV_LENGTH] == bytes(range(IV_LENGTH))
    assert payload not in envelope
    assert open_sealed(envelope, "CorrectHorse1") == payload


def test_seal_is_deterministic_with_injected_randomness(fixed_random) -> None:
    first = seal(b"data", "password", random_bytes=fixed_random)
    second = seal(b"data", "password", random_bytes=fixed_random)
    assert first == second


def test_seal_uses_fresh_iv_by_default() -> None:
    assert seal(b"data", "password") != seal(b"data", "password")


def test_wrong_password_fails_authentication(fixed_random) -> None:
    envelope = seal(b"data", "password", random_bytes=fixed_random)
    with pytest.raises(AuthenticationError):
        open_sealed(envelope, "passw0rd")


def test_tampered_ciphertext_fails_authentication(fixed_random) -> None:
    payload = encrypt_bytes(b"data", "password", random_bytes=fixed_random)
    tampered = bytes([payload.ciphertext[0] ^ 1]) + payload.ciphertext[1:]
    with pytest.raises(AuthenticationError):
        decrypt_bytes(payload.iv, tampered, "password")


def test_truncated_envelope_is_rejected() -> None:
    with pytest.raises(AuthenticationError):
        open_sealed(b"short", "password")


def test_derive_key_requires_password() -> None:
    assert len(derive_key("pw")) == 32
    assert derive_key("pw") == derive_key("pw")
    with pytest.raises(ValidationError):
        derive_key("")


def test_random_source_must_return_iv_length() -> None:
    with pytest.raises(ValueError):
        encrypt_bytes(b"data", "password", random_bytes=lambda length: b"\x00" * (length - 1))
