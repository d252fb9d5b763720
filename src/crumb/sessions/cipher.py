"""Crypto options and the AES-256-CBC primitive used for encrypted cookies."""

import os
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from crumb.errors import ConfigurationError

KEY_SIZE = 32  # AES-256
IV_SIZE = 16  # one AES block


@dataclass(frozen=True, slots=True)
class CryptoOptions:
    """How a session cookie is protected.

    ``encrypt=True`` requires a 32 byte ``encryption_key``; anything else
    raises ``ConfigurationError`` immediately.
    """

    signed: bool = True
    encrypt: bool = False
    encryption_key: bytes | None = None

    def __post_init__(self) -> None:
        if not self.encrypt:
            return
        if self.encryption_key is None:
            msg = "CryptoOptions.encryption_key is required when encrypt=True."
            raise ConfigurationError(msg)
        if not isinstance(self.encryption_key, bytes) or len(self.encryption_key) != KEY_SIZE:
            msg = f"CryptoOptions.encryption_key must be exactly {KEY_SIZE} bytes."
            raise ConfigurationError(msg)


def encrypt(key: bytes, plaintext: bytes) -> tuple[bytes, bytes]:
    """Encrypt under a fresh random IV. Returns ``(iv, ciphertext)``."""
    iv = os.urandom(IV_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return iv, encryptor.update(padded) + encryptor.finalize()


def decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Decrypt and unpad.

    Raises ``ValueError`` for a bad IV length, a ciphertext that is not
    whole blocks, or invalid padding (e.g. wrong key).
    """
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return unpadder.update(padded) + unpadder.finalize()
