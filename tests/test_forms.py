"""Tests for perch.http.forms: urlencoded and multipart bodies."""

import pytest

from perch.http.forms import FormData, UploadFile, media_type, parse_form_data

BOUNDARY = "----perchboundary"


def _multipart(*parts: bytes) -> bytes:
    body = b""
    for part in parts:
        body += f"--{BOUNDARY}\r\n".encode() + part + b"\r\n"
    return body + f"--{BOUNDARY}--\r\n".encode()


class TestMediaType:
    def test_strips_parameters(self) -> None:
        assert media_type("Text/HTML; charset=utf-8") == "text/html"

    def test_empty(self) -> None:
        assert media_type(None) == ""


class TestUrlEncoded:
    def test_fields(self) -> None:
        form = parse_form_data(b"a=1&b=hello+world&a=2", "application/x-www-form-urlencoded")
        assert form["a"] == "1"
        assert form.get_list("a") == ["1", "2"]
        assert form["b"] == "hello world"
        assert form.files == {}

    def test_unknown_type_is_empty(self) -> None:
        assert len(parse_form_data(b"{}", "application/json")) == 0


class TestMultipart:
    def test_fields_and_files(self) -> None:
        body = _multipart(
            b'Content-Disposition: form-data; name="title"\r\n\r\nHello',
            b'Content-Disposition: form-data; name="avatar"; filename="me.png"\r\n'
            b"Content-Type: image/png\r\n\r\n\x89PNG",
        )
        form = parse_form_data(body, f"multipart/form-data; boundary={BOUNDARY}")
        assert form["title"] == "Hello"
        upload = form.files["avatar"]
        assert upload.filename == "me.png"
        assert upload.content_type == "image/png"
        assert upload.content == b"\x89PNG"
        assert upload.size == 4

    def test_missing_boundary(self) -> None:
        with pytest.raises(ValueError, match="boundary"):
            parse_form_data(b"", "multipart/form-data")


class TestUploadFile:
    def test_save(self, tmp_path) -> None:
        upload = UploadFile("a.txt", "text/plain", b"data")
        target = upload.save(tmp_path / "a.txt")
        assert target.read_bytes() == b"data"


class TestFormData:
    def test_get_default(self) -> None:
        form = FormData({"a": ["1"]})
        assert form.get("a") == "1"
        assert form.get("b", "x") == "x"
        assert "a" in form
