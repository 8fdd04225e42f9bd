"""Cookie header parsing and ``Set-Cookie`` serialization."""

from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime
from urllib.parse import quote, unquote


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header into a name-value dict.

    Values are percent-decoded, mirroring ``SetCookie`` which encodes
    them. Pairs without ``=`` are ignored.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep and key:
            cookies[key.strip()] = unquote(value.strip().strip('"'))
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive queued on a Response.

    ``expires`` is a Unix timestamp; ``0`` or ``None`` makes a session
    cookie. A negative ``max_age`` or an ``expires`` in the past deletes
    the cookie on the client.
    """

    name: str
    value: str
    expires: int | None = None
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "Lax"

    def to_header_value(self) -> str:
        parts = [f"{self.name}={quote(self.value, safe='')}"]
        if self.expires:
            when = datetime.fromtimestamp(self.expires, tz=UTC)
            parts.append(f"Expires={format_datetime(when, usegmt=True)}")
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        return "; ".join(parts)
