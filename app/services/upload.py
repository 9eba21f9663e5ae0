# app/services/upload.py
from __future__ import annotations

import logging
from typing import AsyncIterator, BinaryIO, Optional
from urllib.parse import unquote_to_bytes

from fastapi import HTTPException
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from app.core.config import UPLOAD_FIELD
from app.utils.storage import open_destination

log = logging.getLogger("upload")


class UploadError(RuntimeError):
    ...


def multipart_boundary(content_type: Optional[str]) -> bytes:
    ctype, params = parse_options_header(content_type)
    if ctype.strip().lower() != b"multipart/form-data":
        raise HTTPException(status_code=400, detail="Content-Type not multipart/form-data")
    boundary = params.get(b"boundary")
    if not boundary:
        raise HTTPException(
            status_code=400,
            detail="`Content-Type: multipart/form-data` boundary param not provided",
        )
    return boundary


def _part_filename(options: dict[bytes, bytes]) -> Optional[str]:
    """
    Original filename of a part. Falls back to the RFC 2231 form
    `filename*=charset''pct-encoded` when no plain `filename` was sent.
    """
    raw = options.get(b"filename")
    charset = "utf-8"
    if raw is None:
        raw = options.get(b"filename*")
        if raw is None:
            return None
        if raw.count(b"'") >= 2:
            declared, _, encoded = raw.split(b"'", 2)
            charset = declared.decode("ascii", errors="replace") or charset
            raw = unquote_to_bytes(encoded)
    try:
        return raw.decode(charset)
    except (UnicodeDecodeError, LookupError):
        raise UploadError(f"filename not valid {charset.upper()}")


class UploadReceiver:
    """
    Push-style multipart scanner. Body chunks go in through write(); the first
    part named `field` is streamed into a freshly named file under
    `storage_dir` as its bytes arrive. Every other part is skipped.

    After the matching part ends, `complete` is set and the caller can stop
    reading the body. finish() returns the stored path or raises UploadError.
    """

    def __init__(self, boundary: bytes, storage_dir: str, field: str = UPLOAD_FIELD):
        self.storage_dir = storage_dir
        self.field = field
        self.path: Optional[str] = None
        self.size = 0
        self.complete = False

        self._file: Optional[BinaryIO] = None
        self._headers: dict[bytes, bytes] = {}
        self._header_field = b""
        self._header_value = b""

        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
            },
        )

    # -- parser callbacks -------------------------------------------------

    def _on_part_begin(self) -> None:
        self._headers = {}

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        if self.path is not None:
            return  # first match only
        _, options = parse_options_header(self._headers.get(b"content-disposition"))
        name = options.get(b"name", b"").decode("utf-8", errors="replace")
        if name != self.field:
            return

        filename = _part_filename(options)

        self.path, self._file = open_destination(self.storage_dir, filename)
        log.info("Receiving %r into %s", filename, self.path)

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._file is not None:
            self._file.write(data[start:end])
            self.size += end - start

    def _on_part_end(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self.complete = True

    # -- driving ----------------------------------------------------------

    def write(self, chunk: bytes) -> None:
        try:
            self._parser.write(chunk)
        except (MultipartParseError, OSError) as e:
            self._abort()
            raise UploadError(str(e)) from e
        except UploadError:
            self._abort()
            raise

    def finish(self) -> str:
        if self.complete:
            log.info("Stored %s (%d bytes)", self.path, self.size)
            return self.path
        if self._file is not None:
            self._abort()
            raise UploadError("found partial")
        raise UploadError(f"no {self.field} field found")

    def _abort(self) -> None:
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as e:
            log.warning("Closing %s failed: %s", self.path, e)
        self._file = None
        log.warning("Partial upload left at %s (%d bytes written)", self.path, self.size)


async def receive_upload(
    stream: AsyncIterator[bytes],
    boundary: bytes,
    storage_dir: str,
) -> str:
    """
    Consume `stream` until the upload field has been fully written (or the
    body ends) and return the stored file path.
    """
    receiver = UploadReceiver(boundary, storage_dir)
    try:
        async for chunk in stream:
            await run_in_threadpool(receiver.write, chunk)
            if receiver.complete:
                break
    except ClientDisconnect:
        log.warning("Client disconnected during upload")
    return receiver.finish()
