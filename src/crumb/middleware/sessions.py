"""Session middleware: stateless cookie sessions.

The whole session lives in one cookie: compact JSON, optionally encrypted
with AES-256-CBC, optionally signed with HMAC-SHA256. There is no
server-side store.

The session is held in a ContextVar for the duration of the request and is
accessible via ``get_session()`` from any handler or middleware. A cookie is
only sent back when the session actually changed:

- new session that stayed empty: nothing
- loaded session read but not modified: nothing
- session modified or populated: ``Set-Cookie`` with the new value
- session set to ``None`` (``destroy_session()``): an expired, empty cookie

Forged, corrupt or undecryptable cookies are treated as "no cookie" and the
request starts with a fresh, empty session.
"""

import logging
from collections.abc import Sequence
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from crumb.errors import ConfigurationError
from crumb.http.cookies import EPOCH, SAMESITE_POLICIES, SetCookie, is_valid_name
from crumb.http.request import Request
from crumb.http.response import Response
from crumb.middleware.protocol import Next
from crumb.sessions.cipher import CryptoOptions
from crumb.sessions.codec import SessionCodec
from crumb.sessions.keyring import KeyRing
from crumb.sessions.state import CookieAction, Session, SessionState

logger = logging.getLogger("crumb.sessions")


# -- Configuration --


@dataclass(slots=True)
class CookieOptions:
    """Attributes of the outgoing session cookie.

    Every request gets its own copy (``get_session_options()``), so a
    handler can change them for the current response only::

        if remember_me:
            get_session_options().max_age = 30 * 86400
    """

    name: str
    max_age: int | None = None
    expires: datetime | None = None
    path: str | None = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "lax"
    overwrite: bool = True

    def expiry(self, now: datetime | None = None) -> datetime | None:
        """``Expires`` for the cookie: ``max_age`` wins over a fixed ``expires``."""
        if self.max_age is not None:
            return (now or datetime.now(UTC)) + timedelta(seconds=self.max_age)
        return self.expires


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``keys`` is required while ``signed`` is true. The first key signs new
    cookies; the rest are only used to verify, so keys can be rotated by
    putting a new one in front.

    ``encrypt=True`` requires a 32 byte ``encryption_key``.

    ``max_age`` is in seconds. Leave both ``max_age`` and ``expires`` unset
    for a browser-session cookie.
    """

    keys: Sequence[str | bytes] = ()
    cookie_name: str = "crumb_session"
    signed: bool = True
    encrypt: bool = False
    encryption_key: bytes | None = None
    max_age: int | None = None
    expires: datetime | None = None
    path: str | None = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "lax"
    overwrite: bool = True
    trust_proxy: bool = False

    def cookie_options(self) -> CookieOptions:
        """A fresh, mutable copy of the cookie attributes."""
        return CookieOptions(
            name=self.cookie_name,
            max_age=self.max_age,
            expires=self.expires,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
            overwrite=self.overwrite,
        )


# -- Session ContextVar --


@dataclass(slots=True)
class _ActiveSession:
    state: SessionState
    options: CookieOptions


_session_var: ContextVar[_ActiveSession | None] = ContextVar("crumb_session", default=None)


def _active_session() -> _ActiveSession:
    active = _session_var.get()
    if active is None:
        msg = (
            "No active session. Ensure SessionMiddleware is added "
            "to the app before accessing the session."
        )
        raise LookupError(msg)
    return active


def get_session() -> Session | None:
    """Return the current session.

    Returns ``None`` once the session has been destroyed in this request.
    Raises ``LookupError`` if called outside a request with
    ``SessionMiddleware`` active.
    """
    return _active_session().state.session


def set_session(value: Any) -> Session | None:
    """Replace the whole session.

    A mapping becomes the new session content. ``None`` or any other falsy
    value destroys the session and expires the cookie. Anything else is a
    programming error: the request fails with ``SessionUsageError`` when
    the response is finalized.
    """
    return _active_session().state.replace(value)


def destroy_session() -> None:
    """Drop the session; the response expires the cookie."""
    set_session(None)


def get_session_options() -> CookieOptions:
    """Return this request's cookie attributes (mutable, per request)."""
    return _active_session().options


# -- Middleware --


class SessionMiddleware:
    """Stateless cookie session middleware.

    Reads the session cookie, verifies and decodes it, makes the session
    available via ``get_session()``, then decides after the handler has run
    whether to set, expire, or leave the cookie alone.

    Usage::

        from crumb.middleware.sessions import SessionConfig, SessionMiddleware

        app.add_middleware(SessionMiddleware(SessionConfig(
            keys=["current-secret", "previous-secret"],
        )))

        # In a handler:
        from crumb.middleware.sessions import get_session

        @app.route("/count")
        def count():
            session = get_session()
            session["visits"] = session.get("visits", 0) + 1
            return f"Visits: {session['visits']}"

    Encoding errors are fatal for the response: an oversized session raises
    ``CookieOverflowError`` and an unserializable one raises
    ``SessionSerializationError``. Neither ever produces a truncated cookie.
    """

    __slots__ = ("_codec", "_config")

    def __init__(self, config: SessionConfig) -> None:
        if not config.cookie_name:
            msg = "SessionConfig.cookie_name must not be empty."
            raise ConfigurationError(msg)
        if not is_valid_name(config.cookie_name):
            msg = f"SessionConfig.cookie_name {config.cookie_name!r} is not a valid cookie name."
            raise ConfigurationError(msg)
        if config.samesite is not None and config.samesite.lower() not in SAMESITE_POLICIES:
            msg = f"SessionConfig.samesite must be one of {sorted(SAMESITE_POLICIES)}."
            raise ConfigurationError(msg)
        if config.signed and not config.keys:
            msg = "SessionConfig.keys must not be empty when signed=True."
            raise ConfigurationError(msg)

        options = CryptoOptions(
            signed=config.signed,
            encrypt=config.encrypt,
            encryption_key=config.encryption_key,
        )
        keyring = KeyRing(config.keys) if config.signed else None

        self._config = config
        self._codec = SessionCodec(keyring, options)

    @property
    def codec(self) -> SessionCodec:
        return self._codec

    def _load_state(self, request: Request) -> SessionState:
        """Decode the inbound cookie; anything invalid starts a new session."""
        cookie_value = request.cookies.get(self._config.cookie_name)
        data = self._codec.decode(cookie_value)
        if cookie_value and data is None:
            logger.debug("Ignoring invalid %r cookie", self._config.cookie_name)
        return SessionState(data)

    def _connection_is_secure(self, request: Request) -> bool:
        if request.is_secure:
            return True
        if self._config.trust_proxy:
            return request.headers.first_value("x-forwarded-proto") == "https"
        return False

    def _commit(
        self,
        request: Request,
        response: Response,
        state: SessionState,
        options: CookieOptions,
    ) -> Response:
        """Apply at most one cookie action to the response."""
        action = state.classify()
        if action is CookieAction.NONE:
            return response

        if options.secure and not self._connection_is_secure(request):
            logger.warning(
                "Not sending secure cookie %r over an insecure connection (%s %s)",
                options.name,
                request.method,
                request.path,
            )
            return response

        if action is CookieAction.EXPIRE:
            cookie = SetCookie(
                name=options.name,
                value="",
                max_age=0,
                expires=EPOCH,
                path=options.path,
                domain=options.domain,
                secure=options.secure,
                httponly=options.httponly,
                samesite=options.samesite,
            )
        else:
            cookie = SetCookie(
                name=options.name,
                value=self._codec.encode(state.value),
                max_age=options.max_age,
                expires=options.expiry(),
                path=options.path,
                domain=options.domain,
                secure=options.secure,
                httponly=options.httponly,
                samesite=options.samesite,
            )
        return response.with_set_cookie(cookie, overwrite=options.overwrite)

    async def __call__(self, request: Request, next: Next) -> Response:
        """Load the session, dispatch, then write back only what changed."""
        state = self._load_state(request)
        options = self._config.cookie_options()
        token = _session_var.set(_ActiveSession(state, options))

        try:
            response = await next(request)
        finally:
            _session_var.reset(token)

        return self._commit(request, response, state, options)
