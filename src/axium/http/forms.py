"""Form data parsing: URL-encoded and multipart.

URL-encoded bodies use stdlib ``urllib.parse``; multipart bodies use
``python-multipart``. ``FormData`` keeps every value per key;
``to_params`` flattens it into the map handed to PUT/DELETE actions.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl

from python_multipart.multipart import MultipartParser, parse_options_header


@dataclass(frozen=True, slots=True)
class UploadFile:
    """A multipart file part, held in memory."""

    filename: str
    content_type: str
    size: int
    content: bytes = b""


class FormData(Mapping[str, str]):
    """Parsed form fields, every value kept per key.

    Indexing gives the first value of a field, ``get_list`` all of them.
    Uploaded files only surface through ``to_params()``.
    """

    __slots__ = ("_data", "_files")

    def __init__(
        self,
        data: dict[str, list[str]],
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        self._data = data
        self._files = files or {}

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, []))

    def to_params(self) -> dict[str, Any]:
        """Flatten into a handler parameter map.

        A repeated key keeps its last value; a key written ``name[]``
        collects every value into a list under ``name``. Uploaded files
        are included by field name.
        """
        params: dict[str, Any] = {}
        for key, values in self._data.items():
            if key.endswith("[]"):
                params[key[:-2]] = list(values)
            else:
                params[key] = values[-1]
        params.update(self._files)
        return params


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body into FormData.

    Supports ``application/x-www-form-urlencoded`` and
    ``multipart/form-data``. Any other content type is treated as
    URL-encoded, matching how PUT/DELETE bodies without a JSON content
    type are read.
    """
    ct_lower = content_type.lower().split(";")[0].strip()

    if ct_lower == "multipart/form-data":
        return _parse_multipart(body, content_type)
    return _parse_urlencoded(body)


def _parse_urlencoded(body: bytes) -> FormData:
    data: dict[str, list[str]] = {}
    for key, value in parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True):
        data.setdefault(key, []).append(value)
    return FormData(data)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    collector = _PartCollector()
    parser = MultipartParser(boundary, collector.callbacks())
    parser.write(body)
    parser.finalize()
    return FormData(collector.fields, collector.files)


class _PartCollector:
    """Accumulates multipart parts into field lists and uploaded files.

    Parts without a ``name`` in their Content-Disposition are dropped.
    """

    def __init__(self) -> None:
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, UploadFile] = {}
        self._part_headers: dict[str, str] = {}
        self._header_name = ""
        self._chunks = bytearray()

    def callbacks(self) -> dict[str, Any]:
        return {
            "on_part_begin": self._begin,
            "on_header_field": self._header_field,
            "on_header_value": self._header_value,
            "on_part_data": self._data,
            "on_part_end": self._end,
        }

    def _begin(self) -> None:
        self._part_headers = {}
        self._chunks = bytearray()

    def _header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name = data[start:end].decode("latin-1").lower()

    def _header_value(self, data: bytes, start: int, end: int) -> None:
        self._part_headers[self._header_name] = data[start:end].decode("latin-1")

    def _data(self, data: bytes, start: int, end: int) -> None:
        self._chunks.extend(data[start:end])

    def _end(self) -> None:
        disposition = self._part_headers.get("content-disposition", "")
        _, params = parse_options_header(disposition.encode("latin-1"))
        name = params.get(b"name")
        if name is None:
            return
        field = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is None:
            self.fields.setdefault(field, []).append(self._chunks.decode("utf-8", errors="replace"))
            return
        content = bytes(self._chunks)
        self.files[field] = UploadFile(
            filename=filename.decode("utf-8"),
            content_type=self._part_headers.get("content-type", "application/octet-stream"),
            size=len(content),
            content=content,
        )
