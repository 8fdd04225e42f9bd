"""HTTP response.

Unlike the request, the response is mutable: middleware and handlers
share one working response per request and shape it in place through
chainable setters. A response is sent exactly once.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote

from perch.errors import ResponseAlreadySent
from perch.http.cookies import SetCookie

DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"


def _default_headers() -> dict[str, str]:
    return {"Content-Type": DEFAULT_CONTENT_TYPE}


@dataclass(slots=True)
class Response:
    """A mutable HTTP response.

    Usage::

        response = Response()
        response.set_status(201).set_header("X-Id", "42").set_body("created")
    """

    body: str | bytes = ""
    status: int = 200
    headers: dict[str, str] = field(default_factory=_default_headers)
    cookies: dict[str, SetCookie] = field(default_factory=dict)
    _sent: bool = field(default=False, repr=False)

    # -- Setters --

    def set_status(self, status: int) -> Response:
        self.status = status
        return self

    def set_header(self, name: str, value: str) -> Response:
        """Set *name*, replacing any existing value regardless of case."""
        for existing in [key for key in self.headers if key.lower() == name.lower()]:
            del self.headers[existing]
        self.headers[name] = str(value)
        return self

    def header(self, name: str, default: str | None = None) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return default

    def set_body(self, body: str | bytes) -> Response:
        self.body = body
        return self

    def set_cookie(
        self,
        name: str,
        value: str,
        expires: int = 0,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        *,
        max_age: int | None = None,
        samesite: str | None = "Lax",
    ) -> Response:
        """Queue a ``Set-Cookie``. A later call for the same name replaces it."""
        self.cookies[name] = SetCookie(
            name=name,
            value=value,
            expires=expires or None,
            max_age=max_age,
            path=path,
            domain=domain,
            secure=secure,
            httponly=httponly,
            samesite=samesite,
        )
        return self

    def remove_cookie(self, name: str, path: str = "/", domain: str | None = None) -> Response:
        """Expire *name* on the client."""
        return self.set_cookie(
            name, "", int(time.time()) - 3600, path, domain, max_age=0
        )

    # -- Shortcuts --

    def redirect(self, url: str, status: int = 302) -> Response:
        self.status = status
        self.set_header("Location", url)
        self.body = ""
        return self

    def json(self, data: Any, status: int = 200) -> Response:
        self.status = status
        self.set_header("Content-Type", "application/json")
        self.body = json.dumps(data, default=str)
        return self

    def download(self, path: str | Path, filename: str | None = None) -> Response:
        """Send the file at *path* as an attachment.

        A missing file turns the response into a plain 404.
        """
        source = Path(path)
        if not source.is_file():
            self.status = 404
            self.set_header("Content-Type", "text/plain; charset=utf-8")
            self.body = "File not found"
            return self

        content = source.read_bytes()
        name = filename or source.name
        self.set_header("Content-Description", "File Transfer")
        self.set_header("Content-Type", "application/octet-stream")
        if name.isascii():
            disposition = f'attachment; filename="{name}"'
        else:
            disposition = f"attachment; filename*=UTF-8''{quote(name, safe='')}"
        self.set_header("Content-Disposition", disposition)
        self.set_header("Expires", "0")
        self.set_header("Cache-Control", "must-revalidate")
        self.set_header("Pragma", "public")
        self.body = content
        return self

    # -- Inspection --

    @property
    def content_type(self) -> str:
        return self.header("Content-Type") or DEFAULT_CONTENT_TYPE

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @property
    def text(self) -> str:
        if isinstance(self.body, str):
            return self.body
        return self.body.decode("utf-8", errors="replace")

    @property
    def sent(self) -> bool:
        return self._sent

    def mark_sent(self) -> None:
        """Record that the response has gone out.

        Raises:
            ResponseAlreadySent: On a second call.
        """
        if self._sent:
            msg = "Response has already been sent."
            raise ResponseAlreadySent(msg)
        self._sent = True

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        """Headers and cookies encoded for the ASGI ``http.response.start`` message."""
        body = self.body_bytes
        raw = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self.headers.items()
            if name.lower() != "content-length"
        ]
        raw.append((b"content-length", str(len(body)).encode("latin-1")))
        for cookie in self.cookies.values():
            raw.append((b"set-cookie", cookie.to_header_value().encode("latin-1")))
        return raw
