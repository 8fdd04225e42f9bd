"""Immutable, case-insensitive HTTP request headers.

Stores raw byte pairs as received from the ASGI scope and decodes on
access. Lookup accepts CGI-style names too, so ``header("content_type")``
and ``header("Content-Type")`` find the same value.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping


def _key(name: str) -> bytes:
    return name.replace("_", "-").lower().encode("latin-1")


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> Headers:
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )

    def __getitem__(self, key: str) -> str:
        wanted = _key(key)
        for name, value in self._raw:
            if name.lower() == wanted:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        wanted = _key(key)
        return any(name.lower() == wanted for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return every value sent for *key*."""
        wanted = _key(key)
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == wanted]

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        return self._raw
