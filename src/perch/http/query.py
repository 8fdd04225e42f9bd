"""Query string parameters.

Repeated keys keep every value; plain lookup returns the first one.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes | str = b"") -> None:
        raw = query_string.encode("latin-1") if isinstance(query_string, str) else query_string
        object.__setattr__(self, "_raw", raw)
        parsed = parse_qs(raw.decode("latin-1"), keep_blank_values=True, encoding="utf-8")
        object.__setattr__(self, "_data", parsed)

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({self.to_dict()!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def to_dict(self) -> dict[str, str]:
        """First value per key, as a plain dict."""
        return {key: values[0] for key, values in self._data.items()}

    @property
    def raw(self) -> bytes:
        return self._raw
