"""Session codec: mapping <-> cookie value.

``encode`` serializes to compact JSON, then either encrypts
(``base64(iv) + ":" + base64(ciphertext)``) or base64-encodes it, then
optionally appends ``"." + signature``. Base64 keeps cookie syntax
characters such as ``;`` out of the value.

``decode`` reverses those steps and never raises for untrusted input:
a bad signature, bad base64, a failed decryption, invalid JSON, or a
JSON value that is not an object all come back as ``None``.
"""

import base64
import json
import logging
from collections.abc import Mapping
from typing import Any

from crumb.errors import CookieOverflowError, SessionSerializationError
from crumb.sessions import cipher
from crumb.sessions.cipher import CryptoOptions
from crumb.sessions.keyring import KeyRing

logger = logging.getLogger("crumb.sessions")

# Practical ceiling for a single cookie value
MAX_COOKIE_SIZE = 4093


def serialize(value: Mapping[str, Any]) -> str:
    """Compact JSON for *value*.

    Raises ``SessionSerializationError`` for values JSON cannot represent,
    including NaN, infinities and strings that are not valid UTF-8 (lone
    surrogates).
    """
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        # UnicodeEncodeError is a ValueError
        text.encode("utf-8")
    except (TypeError, ValueError, RecursionError) as exc:
        msg = f"Session value is not JSON serializable: {exc}"
        raise SessionSerializationError(msg) from exc
    return text


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text.encode("ascii"), validate=True)


def encode(
    value: Mapping[str, Any],
    keyring: KeyRing | None,
    options: CryptoOptions,
) -> str:
    """Encode *value* as a cookie value.

    Raises ``CookieOverflowError`` if the result is longer than
    ``MAX_COOKIE_SIZE`` and ``SessionSerializationError`` if *value*
    is not JSON serializable.
    """
    payload = serialize(value).encode("utf-8")

    if options.encrypt:
        iv, ciphertext = cipher.encrypt(options.encryption_key, payload)
        body = f"{_b64encode(iv)}:{_b64encode(ciphertext)}"
    else:
        body = _b64encode(payload)

    if options.signed:
        if keyring is None:
            msg = "A KeyRing is required to encode a signed session."
            raise ValueError(msg)
        body = keyring.sign_value(body)

    if len(body) > MAX_COOKIE_SIZE:
        raise CookieOverflowError(len(body), MAX_COOKIE_SIZE)
    return body


def decode(
    cookie: str | None,
    keyring: KeyRing | None,
    options: CryptoOptions,
) -> dict[str, Any] | None:
    """Decode a cookie value, or ``None`` if it is absent or invalid."""
    if not cookie:
        return None

    body: str | None = cookie
    if options.signed:
        body = keyring.unsign_value(cookie) if keyring is not None else None
        if body is None:
            logger.debug("Session cookie signature did not verify")
            return None

    try:
        if options.encrypt:
            iv_text, sep, ciphertext_text = body.partition(":")
            if not sep:
                return None
            payload = cipher.decrypt(
                options.encryption_key,
                _b64decode(iv_text),
                _b64decode(ciphertext_text),
            )
        else:
            payload = _b64decode(body)
        # JSONDecodeError, UnicodeDecodeError and binascii.Error are ValueErrors
        data = json.loads(payload.decode("utf-8"))
    except (ValueError, RecursionError):
        logger.debug("Session cookie could not be decoded")
        return None

    if not isinstance(data, dict):
        return None
    # Parses, but would not survive re-encoding (NaN, 1e400, "\ud800")
    try:
        serialize(data)
    except SessionSerializationError:
        logger.debug("Session cookie holds values that cannot be re-encoded")
        return None
    return data


class SessionCodec:
    """One codec configuration: a key ring plus crypto options.

    Immutable and shared by every request the middleware handles.
    """

    __slots__ = ("keyring", "options")

    def __init__(self, keyring: KeyRing | None, options: CryptoOptions) -> None:
        self.keyring = keyring
        self.options = options

    def encode(self, value: Mapping[str, Any]) -> str:
        return encode(value, self.keyring, self.options)

    def decode(self, cookie: str | None) -> dict[str, Any] | None:
        return decode(cookie, self.keyring, self.options)
