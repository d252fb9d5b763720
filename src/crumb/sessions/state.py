"""Per-request session tracking.

Change detection is snapshot-and-diff: the compact JSON of the session is
captured when it is loaded and compared with the final value once the
handler has returned. No proxies, no observers.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from crumb.errors import SessionUsageError
from crumb.sessions.codec import serialize


class CookieAction(Enum):
    """What the middleware does to the session cookie on the way out."""

    NONE = "none"
    SAVE = "save"
    EXPIRE = "expire"


class Session(dict[str, Any]):
    """The session mapping handed to request handlers.

    A plain ``dict`` plus two read-only facts:

    - ``is_new``: no valid cookie came in with the request.
    - ``populated``: the session holds at least one key.
    """

    __slots__ = ("_is_new",)

    def __init__(self, data: Mapping[str, Any] | None = None, *, is_new: bool = False) -> None:
        super().__init__(data or {})
        self._is_new = is_new

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def populated(self) -> bool:
        return len(self) > 0

    def __repr__(self) -> str:
        return f"Session({dict.__repr__(self)}, is_new={self._is_new})"


class SessionState:
    """Load-time snapshot plus whatever the handler left behind.

    The handler may mutate ``session`` in place, or call ``replace()``
    with a new mapping, with ``None`` (or any falsy value) to destroy
    the session, or, by mistake, with something else entirely. The
    mistake is reported by ``classify()``.
    """

    __slots__ = ("_value", "initial_hash", "is_new")

    def __init__(self, data: Mapping[str, Any] | None) -> None:
        self.is_new: bool = data is None
        self._value: Any = Session(data, is_new=self.is_new)
        self.initial_hash: str = serialize(self._value)

    @property
    def value(self) -> Any:
        """The current session holder, exactly as the handler left it."""
        return self._value

    @property
    def session(self) -> Session | None:
        """The current ``Session``, or ``None`` once it has been replaced by a non-mapping."""
        return self._value if isinstance(self._value, Session) else None

    @property
    def populated(self) -> bool:
        return isinstance(self._value, Mapping) and len(self._value) > 0

    @property
    def destroyed(self) -> bool:
        return not isinstance(self._value, Mapping) and not self._value

    def replace(self, value: Any) -> Session | None:
        """Swap the whole session holder.

        Mappings are copied into a fresh ``Session`` that keeps this
        request's ``is_new``. Anything else is stored as given.
        """
        if isinstance(value, Mapping):
            value = Session(value, is_new=self.is_new)
        self._value = value
        return self.session

    def classify(self) -> CookieAction:
        """Decide the cookie action for the response.

        Raises ``SessionUsageError`` if the holder is a truthy non-mapping
        and ``SessionSerializationError`` if the session cannot be
        serialized.
        """
        value = self._value
        if not isinstance(value, Mapping):
            if not value:
                return CookieAction.EXPIRE
            msg = (
                "The session can only be replaced with a mapping or None, "
                f"not {type(value).__name__}."
            )
            raise SessionUsageError(msg)

        # A session nobody ever populated never gets a cookie
        if self.is_new and not value:
            return CookieAction.NONE
        if serialize(value) == self.initial_hash:
            return CookieAction.NONE
        return CookieAction.SAVE
