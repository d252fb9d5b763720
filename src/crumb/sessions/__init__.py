"""Session codec and state tracking.

    KeyRing -- ordered signing keys (first signs, all verify)
    CryptoOptions -- signed / encrypt / encryption_key, validated on construction
    SessionCodec, encode, decode -- mapping <-> cookie value
    Session, SessionState, CookieAction -- per-request change tracking
"""

from crumb.sessions.cipher import CryptoOptions
from crumb.sessions.codec import MAX_COOKIE_SIZE, SessionCodec, decode, encode
from crumb.sessions.keyring import KeyRing
from crumb.sessions.state import CookieAction, Session, SessionState

__all__ = [
    "MAX_COOKIE_SIZE",
    "CookieAction",
    "CryptoOptions",
    "KeyRing",
    "Session",
    "SessionCodec",
    "SessionState",
    "decode",
    "encode",
]
