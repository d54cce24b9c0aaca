"""
Decryption of ITS OneLogin identities.

The ITS single sign-on hands the API an attendee identifier encrypted
with AES-256-CBC.  The wire format is ``base64(IV || ciphertext)`` where
the IV is 16 bytes and the ciphertext carries PKCS#7 padding.  The key
is the raw ``ITS_ENCRYPTION_KEY`` string, NUL padded or truncated to 32
bytes, which is how OpenSSL treats a short passphrase-less key.
"""

import base64
import binascii
import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .config import settings

logger = logging.getLogger(__name__)

IV_LENGTH = 16
KEY_LENGTH = 32


def _key_bytes(key: Optional[str] = None) -> bytes:
    raw = (key if key is not None else settings.its_encryption_key).encode("utf-8")
    return raw[:KEY_LENGTH].ljust(KEY_LENGTH, b"\0")


def encrypt_its_id(its_id: str, key: Optional[str] = None) -> str:
    """Encrypt an ITS id into the OneLogin wire format.

    Used by tooling and tests to produce the same payload the SSO
    gateway sends.
    """
    iv = os.urandom(IV_LENGTH)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    data = padder.update(str(its_id).encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(_key_bytes(key)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(data) + encryptor.finalize()
    return base64.b64encode(iv + ciphertext).decode("ascii")


def decrypt_its_id(encrypted: str, key: Optional[str] = None) -> Optional[str]:
    """Decrypt an ITS OneLogin payload.

    Returns the plain text identifier, or ``None`` when the payload is
    empty, not base64, too short, or fails to decrypt.
    """
    if not encrypted:
        return None
    try:
        decoded = base64.b64decode(encrypted, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("ITS decryption failed: invalid base64 encoding")
        return None
    if len(decoded) <= IV_LENGTH:
        logger.warning("ITS decryption failed: data too short")
        return None

    iv, ciphertext = decoded[:IV_LENGTH], decoded[IV_LENGTH:]
    if len(ciphertext) % IV_LENGTH:
        logger.warning("ITS decryption failed: ciphertext is not block aligned")
        return None
    decryptor = Cipher(algorithms.AES(_key_bytes(key)), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("ITS decryption failed: %s", e)
        return None
