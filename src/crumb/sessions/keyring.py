"""Ordered signing keys with rotation support.

The first key signs. Every key verifies, so a new key can be put in
front without invalidating cookies signed under the old one.
"""

import hashlib
from collections.abc import Iterable

from itsdangerous import BadSignature, Signer

from crumb.errors import ConfigurationError


def _want_bytes(key: str | bytes) -> bytes:
    return key.encode("utf-8") if isinstance(key, str) else bytes(key)


class KeyRing:
    """Immutable key ring backed by an ``itsdangerous.Signer``.

    Signatures are raw HMAC-SHA256 over the message (``key_derivation="none"``),
    rendered as URL-safe base64 without padding. Verification tries the keys
    in order, comparing in constant time, and stops at the first match.

    Usage::

        ring = KeyRing(["new-secret", "old-secret"])
        cookie = ring.sign_value("payload")
        ring.unsign_value(cookie)  # "payload"
    """

    __slots__ = ("_keys", "_signer")

    def __init__(self, keys: Iterable[str | bytes]) -> None:
        keys = tuple(_want_bytes(key) for key in keys)
        if not keys:
            msg = "KeyRing requires at least one key."
            raise ConfigurationError(msg)
        if not all(keys):
            msg = "KeyRing keys must not be empty."
            raise ConfigurationError(msg)

        self._keys = keys
        # itsdangerous signs with the last key and verifies newest-first
        self._signer = Signer(
            list(reversed(keys)),
            sep=".",
            key_derivation="none",
            digest_method=hashlib.sha256,
        )

    @property
    def keys(self) -> tuple[bytes, ...]:
        return self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def sign(self, message: str | bytes) -> str:
        """Signature of *message* under the current (first) key."""
        return self._signer.get_signature(message).decode("ascii")

    def verify(self, signature: str | bytes, message: str | bytes) -> bool:
        """True if any key in the ring produced *signature* for *message*."""
        return self._signer.verify_signature(message, signature)

    def sign_value(self, value: str) -> str:
        """Return ``value + "." + signature``."""
        return self._signer.sign(value).decode("ascii")

    def unsign_value(self, signed_value: str) -> str | None:
        """Strip and check the signature; ``None`` if it does not verify."""
        try:
            return self._signer.unsign(signed_value).decode("ascii")
        except (BadSignature, UnicodeDecodeError):
            return None
