"""Form body parsing: URL-encoded and multipart.

URL-encoded bodies go through stdlib ``urllib.parse``. Multipart bodies
are parsed with ``python-multipart``'s callback parser, collecting string
fields into ``FormData`` and file parts into ``UploadFile``.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs

from python_multipart.multipart import MultipartParser, parse_options_header

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file, held in memory."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def save(self, path: str | Path) -> Path:
        """Write the content to *path*. Parent directories must exist."""
        target = Path(path)
        target.write_bytes(self.content)
        return target

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Immutable parsed form fields plus uploaded files.

    Usage::

        form = request.form()
        title = form["title"]
        avatar = form.files.get("avatar")  # UploadFile or None
    """

    __slots__ = ("_data", "_files")

    def __init__(
        self,
        data: dict[str, list[str]] | None = None,
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        object.__setattr__(self, "_data", data or {})
        object.__setattr__(self, "_files", files or {})

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"FormData({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (checkboxes, multi-selects)."""
        return list(self._data.get(key, []))


def media_type(content_type: str | None) -> str:
    """``"text/html; charset=utf-8"`` -> ``"text/html"``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def parse_form_data(body: bytes, content_type: str | None) -> FormData:
    """Parse a request body into ``FormData``.

    Bodies that are neither URL-encoded nor multipart yield an empty
    ``FormData``; a JSON request simply has no form fields.

    Raises:
        ValueError: If a multipart body has no boundary.
    """
    kind = media_type(content_type)
    if kind == FORM_URLENCODED:
        return FormData(parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True))
    if kind == MULTIPART:
        return _parse_multipart(body, content_type or "")
    return FormData()


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    data: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    part_headers: dict[str, str] = {}
    header_field = bytearray()
    header_value = bytearray()
    chunk = bytearray()

    def on_part_begin() -> None:
        part_headers.clear()
        chunk.clear()

    def on_header_field(buf: bytes, start: int, end: int) -> None:
        header_field.extend(buf[start:end])

    def on_header_value(buf: bytes, start: int, end: int) -> None:
        header_value.extend(buf[start:end])

    def on_header_end() -> None:
        part_headers[header_field.decode("latin-1").lower()] = header_value.decode("latin-1")
        header_field.clear()
        header_value.clear()

    def on_part_data(buf: bytes, start: int, end: int) -> None:
        chunk.extend(buf[start:end])

    def on_part_end() -> None:
        disposition = part_headers.get("content-disposition")
        if disposition is None:
            return
        _, params = parse_options_header(disposition.encode("latin-1"))
        name = params.get(b"name")
        if name is None:
            return
        field = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is not None:
            files[field] = UploadFile(
                filename=filename.decode("utf-8"),
                content_type=part_headers.get("content-type", "application/octet-stream"),
                content=bytes(chunk),
            )
        else:
            data.setdefault(field, []).append(chunk.decode("utf-8", errors="replace"))

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
        "on_header_end": on_header_end,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
    }
    parser = MultipartParser(boundary, callbacks)
    parser.write(body)
    parser.finalize()
    return FormData(data, files)
