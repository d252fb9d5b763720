"""Crumb: stateless cookie sessions for ASGI applications.

The whole session lives in a single cookie. It is serialized as JSON,
optionally encrypted (AES-256-CBC), optionally signed (HMAC-SHA256 with
key rotation), and only re-issued when it actually changed.

Basic usage::

    from crumb import App
    from crumb.middleware.sessions import SessionConfig, SessionMiddleware, get_session

    app = App()
    app.add_middleware(SessionMiddleware(SessionConfig(keys=["current", "previous"])))

    @app.route("/")
    def index():
        session = get_session()
        session["visits"] = session.get("visits", 0) + 1
        return f"visits={session['visits']}"

The codec is usable on its own::

    from crumb.sessions import CryptoOptions, KeyRing, decode, encode

    ring = KeyRing(["secret"])
    value = encode({"user": 1}, ring, CryptoOptions())
    decode(value, ring, CryptoOptions())  # {"user": 1}
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "ConfigurationError",
    "CookieOverflowError",
    "CrumbError",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "SessionConfig",
    "SessionError",
    "SessionMiddleware",
    "SessionSerializationError",
    "SessionUsageError",
    "get_session",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import crumb`` fast while providing a clean top-level API.
    """
    if name == "App":
        from crumb.app import App

        return App

    if name == "Request":
        from crumb.http.request import Request

        return Request

    if name == "Response":
        from crumb.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from crumb.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("SessionConfig", "SessionMiddleware", "get_session"):
        from crumb.middleware import sessions as _sessions

        return getattr(_sessions, name)

    if name in (
        "ConfigurationError",
        "CookieOverflowError",
        "CrumbError",
        "HTTPError",
        "NotFound",
        "SessionError",
        "SessionSerializationError",
        "SessionUsageError",
    ):
        from crumb import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
