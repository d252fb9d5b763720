"""Cookie parsing and SetCookie serialization.

The read side (``parse_cookies``, used by Request) and the write side
(``SetCookie``, used by Response and the session middleware). Names,
values and attributes are checked against RFC 6265 when a ``SetCookie``
is built, so a bad header is never emitted.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime

# Expires value used when deleting a cookie
EPOCH: datetime = datetime(1970, 1, 1, tzinfo=UTC)

# RFC 6265 cookie-name (an RFC 7230 token) and cookie-octets
_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_VALUE_RE = re.compile(r"[\x21\x23-\x2B\x2D-\x3A\x3C-\x5B\x5D-\x7E]*")
# Path and Domain may hold anything printable except ";"
_ATTRIBUTE_RE = re.compile(r"[\x20-\x3A\x3C-\x7E]+")

SAMESITE_POLICIES = frozenset({"lax", "strict", "none"})


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Pairs without ``=`` are skipped, a quoted value loses its quotes, and
    the last of several same-name pairs wins. Returns an empty dict for
    empty or missing headers.
    """
    cookies: dict[str, str] = {}
    for pair in header.split(";") if header else ():
        name, sep, value = pair.partition("=")
        if not sep:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies[name.strip()] = value
    return cookies


def is_valid_name(name: str) -> bool:
    """True if *name* can be used as a cookie name."""
    return bool(_NAME_RE.fullmatch(name))


def http_date(moment: datetime) -> str:
    """Format an aware datetime as an IMF-fixdate (``Thu, 01 Jan 1970 00:00:00 GMT``)."""
    return format_datetime(moment.astimezone(UTC), usegmt=True)


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive attached to a Response.

    Raises ``ValueError`` on construction for a name, value, path or
    domain that cannot appear in the header, and for an unknown
    ``samesite`` policy.
    """

    name: str
    value: str
    max_age: int | None = None
    expires: datetime | None = None
    path: str | None = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "lax"

    def __post_init__(self) -> None:
        if not is_valid_name(self.name):
            msg = f"Invalid cookie name: {self.name!r}"
            raise ValueError(msg)
        if not _VALUE_RE.fullmatch(self.value):
            msg = f"Invalid value for cookie {self.name!r}"
            raise ValueError(msg)
        for label, attribute in (("path", self.path), ("domain", self.domain)):
            if attribute is not None and not _ATTRIBUTE_RE.fullmatch(attribute):
                msg = f"Invalid {label} for cookie {self.name!r}: {attribute!r}"
                raise ValueError(msg)
        if self.samesite is not None and self.samesite.lower() not in SAMESITE_POLICIES:
            msg = f"Invalid samesite for cookie {self.name!r}: {self.samesite!r}"
            raise ValueError(msg)

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        parts = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.expires is not None:
            parts.append(f"Expires={http_date(self.expires)}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        parts.extend(flag for flag, on in (("Secure", self.secure), ("HttpOnly", self.httponly)) if on)
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        return "; ".join(parts)
