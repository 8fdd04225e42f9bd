"""HTTP request.

Metadata is frozen at creation. The body arrives fully read from the
transport, so ``form()``, ``json()`` and ``params`` parse lazily and
synchronously, caching their result.

Two pieces of per-request mutable state live beside the frozen fields:
``state`` (a plain dict middleware may use to hand data to handlers) and
the response hooks registered with ``on_response``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from perch._internal.asgi import Scope
from perch.http.cookies import parse_cookies
from perch.http.forms import FormData, UploadFile, media_type, parse_form_data
from perch.http.headers import Headers
from perch.http.query import QueryParams

if TYPE_CHECKING:
    from perch.http.response import Response

# Methods an HTML form may tunnel through POST with a ``_method`` field.
OVERRIDABLE_METHODS = frozenset({"PUT", "PATCH", "DELETE"})


def normalize_path(path: str, base_path: str = "") -> str:
    """Turn a raw request target into the path the router sees.

    Drops the query string, strips *base_path* when the path lives under
    it, and normalises to one leading slash with no trailing slash::

        normalize_path("/blog/articles/?page=2", "/blog")  -> "/articles"
        normalize_path("", "")                              -> "/"
    """
    path = path.split("?", 1)[0]
    base = "/" + base_path.strip("/") if base_path.strip("/") else ""
    if base and (path == base or path.startswith(base + "/")):
        path = path[len(base) :]
    return "/" + path.strip("/")


def raw_target(scope: Scope) -> str:
    """The request path exactly as sent, percent-escapes intact.

    Servers percent-decode ``scope["path"]``, which would turn ``a%2Fb``
    into two segments. ``raw_path`` keeps the bytes from the request line;
    ``path`` is only used when the server does not provide it.
    """
    raw = scope.get("raw_path")
    if raw:
        return raw.decode("latin-1")
    return scope.get("path", "/")


@dataclass(frozen=True, slots=True)
class Request:
    """An HTTP request as seen by middleware and handlers."""

    method: str
    path: str
    headers: Headers
    query: QueryParams
    cookies: Mapping[str, str]
    body: bytes = b""
    http_version: str = "1.1"
    client: tuple[str, int] | None = None
    server: tuple[str, int] | None = None
    # Mount prefix stripped from ``path``, e.g. ``"/blog"``.
    base_path: str = ""

    # Explicit per-request storage, e.g. the session.
    state: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    _hooks: list[Callable[[Response], Any]] = field(
        default_factory=list, repr=False, compare=False
    )

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw.decode('latin-1')}"
        return self.path

    @property
    def full_url(self) -> str:
        """``url`` as the browser sees it, mount prefix included."""
        if not self.base_path:
            return self.url
        if self.path == "/":
            return self.base_path + self.url[1:]
        return self.base_path + self.url

    @property
    def is_ajax(self) -> bool:
        return self.headers.get("x-requested-with") == "XMLHttpRequest"

    @property
    def is_json(self) -> bool:
        return "application/json" in (self.content_type or "")

    # -- Body access --

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON. Returns ``None`` if it is not valid JSON."""
        if "_json" not in self._cache:
            try:
                self._cache["_json"] = json.loads(self.body) if self.body else None
            except ValueError:
                self._cache["_json"] = None
        return self._cache["_json"]

    def form(self) -> FormData:
        """Parsed form fields. Empty for bodies that are not form-encoded."""
        if "_form" not in self._cache:
            self._cache["_form"] = parse_form_data(self.body, self.content_type)
        return self._cache["_form"]

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self.form().files

    @property
    def params(self) -> dict[str, Any]:
        """Query, form and JSON-object values merged. Later sources win."""
        if "_params" not in self._cache:
            merged: dict[str, Any] = self.query.to_dict()
            merged.update({key: self.form()[key] for key in self.form()})
            if self.is_json:
                payload = self.json()
                if isinstance(payload, dict):
                    merged.update(payload)
            self._cache["_params"] = merged
        return self._cache["_params"]

    def param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name, default)

    def cookie(self, name: str, default: str | None = None) -> str | None:
        return self.cookies.get(name, default)

    # -- Response hooks --

    def on_response(self, hook: Callable[[Response], Any]) -> None:
        """Run *hook* on the final response just before it is sent."""
        self._hooks.append(hook)

    @property
    def response_hooks(self) -> tuple[Callable[[Response], Any], ...]:
        return tuple(self._hooks)

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Scope, body: bytes = b"", base_path: str = "") -> Request:
        """Create a Request from an ASGI HTTP scope and the full body."""
        headers = Headers(tuple(scope.get("headers", ())))
        query = QueryParams(scope.get("query_string", b""))
        method = scope.get("method", "GET").upper()

        if method == "POST":
            override = _method_override(headers, body)
            if override:
                method = override

        target = raw_target(scope)
        base = "/" + base_path.strip("/") if base_path.strip("/") else ""
        mounted = bool(base) and (target == base or target.startswith(base + "/"))

        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=method,
            path=normalize_path(target, base_path),
            headers=headers,
            query=query,
            cookies=parse_cookies(headers.get("cookie", "")),
            body=body,
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            base_path=base if mounted else "",
        )

    @classmethod
    def build(
        cls,
        method: str = "GET",
        target: str = "/",
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | str = b"",
        base_path: str = "",
    ) -> Request:
        """Build a request without a server, e.g. for ``App.handle``.

        *target* may carry a query string: ``Request.build("GET", "/a?x=1")``.
        """
        path, _, query_string = target.partition("?")
        raw = body.encode("utf-8") if isinstance(body, str) else body
        scope: Scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string.encode("latin-1"),
            "headers": list(Headers.from_dict(headers or {}).raw),
        }
        return cls.from_asgi(scope, raw, base_path)


def _method_override(headers: Headers, body: bytes) -> str | None:
    if media_type(headers.get("content-type")) not in (
        "application/x-www-form-urlencoded",
        "multipart/form-data",
    ):
        return None
    try:
        form = parse_form_data(body, headers.get("content-type"))
    except ValueError:
        return None
    value = (form.get("_method") or "").upper()
    return value if value in OVERRIDABLE_METHODS else None
