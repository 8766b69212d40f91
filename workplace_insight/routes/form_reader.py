from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import Request

from workplace_insight.core.errors import InvalidInputError
from workplace_insight.schemas.inputs import (
    DEFAULT_MIME_TYPE,
    MAX_FILE_SIZE,
    MAX_FILES,
    FormFields,
    ImageUpload,
    UploadSet,
)

IMAGES_FIELD = "images"
MAX_FIELD_SIZE = 1024 * 1024  # text fields, same cap Starlette applies
FORM_FIELD_NAMES = tuple(FormFields.model_fields)


@dataclass
class _Part:
    headers: dict[bytes, bytes] = field(default_factory=dict)
    name: str = ""
    filename: Optional[str] = None
    content_type: Optional[str] = None
    data: bytearray = field(default_factory=bytearray)

    @property
    def is_file(self) -> bool:
        return self.filename is not None


class AnalyzeFormReader:
    """
    Streams a multipart body straight into memory.

    Parts never spill to disk, and size/count limits are checked as bytes
    arrive so an oversized upload is rejected without being buffered whole.
    """

    def __init__(self, boundary: bytes):
        self.uploads: UploadSet = []
        self.values: dict[str, str] = {}
        self._part = _Part()
        self._header_field = bytearray()
        self._header_value = bytearray()
        self._parser = MultipartParser(boundary, {
            "on_part_begin": self._on_part_begin,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
        })

    def _on_part_begin(self) -> None:
        self._part = _Part()

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field.extend(data[start:end])

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value.extend(data[start:end])

    def _on_header_end(self) -> None:
        self._part.headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        part = self._part
        _, options = parse_options_header(part.headers.get(b"content-disposition", b""))
        part.name = options.get(b"name", b"").decode("utf-8", errors="replace")
        if b"filename" in options:
            part.filename = options[b"filename"].decode("utf-8", errors="replace")
            content_type = part.headers.get(b"content-type", b"").decode("latin-1").strip()
            part.content_type = content_type or None

        if part.is_file:
            if part.name != IMAGES_FIELD:
                raise InvalidInputError(f"Unexpected file field: {part.name}")
            if len(self.uploads) >= MAX_FILES:
                raise InvalidInputError(f"Too many files: at most {MAX_FILES} images per request")
        elif part.name == IMAGES_FIELD:
            raise InvalidInputError("images must be uploaded as files")

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        part = self._part
        part.data.extend(data[start:end])
        if part.is_file and len(part.data) > MAX_FILE_SIZE:
            raise InvalidInputError(
                f"File too large: {part.filename or 'upload'} exceeds {MAX_FILE_SIZE // (1024 * 1024)} MiB"
            )
        if not part.is_file and len(part.data) > MAX_FIELD_SIZE:
            raise InvalidInputError(f"Field too large: {part.name}")

    def _on_part_end(self) -> None:
        part = self._part
        if part.is_file:
            # Browsers send an empty, unnamed part for an untouched file input
            if not part.filename and not part.data:
                return
            self.uploads.append(ImageUpload(
                data=bytes(part.data),
                mime_type=part.content_type or DEFAULT_MIME_TYPE,
                filename=part.filename,
            ))
        elif part.name in FORM_FIELD_NAMES:
            self.values[part.name] = part.data.decode("utf-8", errors="replace")

    def feed(self, chunk: bytes) -> None:
        self._parser.write(chunk)

    def finish(self) -> tuple[UploadSet, FormFields]:
        self._parser.finalize()
        return self.uploads, FormFields(**self.values)


async def read_analyze_form(request: Request) -> tuple[UploadSet, FormFields]:
    content_type, params = parse_options_header(request.headers.get("content-type", ""))
    content_type = content_type.strip().lower()

    if content_type == b"multipart/form-data":
        boundary = params.get(b"boundary")
        if not boundary:
            raise InvalidInputError("Malformed multipart body: missing boundary")
        reader = AnalyzeFormReader(boundary)
        try:
            async for chunk in request.stream():
                reader.feed(chunk)
            return reader.finish()
        except MultipartParseError as e:
            raise InvalidInputError(f"Malformed multipart body: {e}") from e

    if content_type == b"application/x-www-form-urlencoded":
        form = await request.form()
        if IMAGES_FIELD in form:
            raise InvalidInputError("images must be uploaded as files")
        values = {k: v for k, v in form.items() if k in FORM_FIELD_NAMES and isinstance(v, str)}
        return [], FormFields(**values)

    return [], FormFields()
