"""Secret Codec: symmetric encryption for credentials at rest (AES-256-CBC).

Envelope format is ``ivHex:cipherHex``; a fresh 16-byte IV is drawn for every
call so the envelope is self-contained given only the shared key.
"""

from __future__ import annotations

import binascii
import os

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from app.core.config import get_settings
from app.domain.exceptions import DecryptionError

_KEY_LENGTH = 32
_IV_LENGTH = 16
_KEY_INFO = b"adconnect-secret-codec"

DECRYPTION_ERROR_MSG = "Failed to decrypt credentials - invalid key or corrupted data"


def derive_codec_key(secret: str | bytes) -> bytes:
    """Return a 32-byte AES key.

    A 32-byte secret is used as-is (compatible with envelopes written by
    earlier deployments that used a raw 32-character ENCRYPTION_KEY). Any
    other length is stretched with HKDF-SHA256.
    """
    raw = secret.encode() if isinstance(secret, str) else secret
    if not raw:
        raise ValueError("Encryption key must not be empty")
    if len(raw) == _KEY_LENGTH:
        return raw
    hkdf = HKDF(algorithm=hashes.SHA256(), length=_KEY_LENGTH, salt=None, info=_KEY_INFO)
    return hkdf.derive(raw)


class SecretCodec:
    """Encrypt/decrypt single string values with AES-256-CBC and PKCS7 padding."""

    def __init__(self, key: str | bytes | None = None) -> None:
        if key is None:
            key = get_settings().encryption_key.get_secret_value()
        self._key = derive_codec_key(key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt plaintext and return the ``ivHex:cipherHex`` envelope."""
        iv = os.urandom(_IV_LENGTH)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}:{ciphertext.hex()}"

    def decrypt(self, envelope: str) -> str:
        """Decrypt an envelope produced by encrypt().

        Raises:
            DecryptionError: Malformed envelope, wrong key or corrupted ciphertext.
        """
        parts = envelope.split(":") if isinstance(envelope, str) else []
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise DecryptionError("Malformed encrypted envelope")
        try:
            iv = binascii.unhexlify(parts[0])
            ciphertext = binascii.unhexlify(parts[1])
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Malformed encrypted envelope") from e
        if len(iv) != _IV_LENGTH or not ciphertext or len(ciphertext) % _IV_LENGTH:
            raise DecryptionError("Malformed encrypted envelope")
        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            data = unpadder.update(padded) + unpadder.finalize()
            return data.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise DecryptionError(DECRYPTION_ERROR_MSG) from e

    def encrypt_optional(self, plaintext: str | None) -> str | None:
        """Encrypt when a value is present; None stays None."""
        return self.encrypt(plaintext) if plaintext is not None else None

    def decrypt_optional(self, envelope: str | None) -> str | None:
        """Decrypt when an envelope is present; None stays None."""
        return self.decrypt(envelope) if envelope is not None else None
