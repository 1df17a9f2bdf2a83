"""
Response body decoding: content-encoding removal and charset negotiation.

Every operation returns ``None`` for a missing response or one whose
``Content-Length`` is unknown, instead of raising.
"""

import codecs
import gzip
import io
import logging
import zlib
from typing import BinaryIO

from .models import Response

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "iso-8859-1"

_BYTE_ORDER_MARKS = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


class _GzipStream(gzip.GzipFile):
    """GzipFile that also releases the stream it reads from."""

    def close(self) -> None:
        fileobj = self.fileobj
        try:
            super().close()
        finally:
            if fileobj is not None:
                fileobj.close()


class _RawInflateReader(io.RawIOBase):
    """Raw (headerless) deflate decoder over a readable binary stream."""

    def __init__(self, fileobj: BinaryIO, chunk_size: int = 8192):
        self._fileobj = fileobj
        self._chunk_size = chunk_size
        self._decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
        self._pending = b""
        self._offset = 0
        self._eof = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while self._offset >= len(self._pending) and not self._eof:
            chunk = self._fileobj.read(self._chunk_size)
            if chunk:
                self._pending = self._decompressor.decompress(chunk)
            else:
                self._pending = self._decompressor.flush()
                self._eof = True
            self._offset = 0
        available = self._pending[self._offset : self._offset + len(buffer)]
        buffer[: len(available)] = available
        self._offset += len(available)
        return len(available)

    def close(self) -> None:
        if not self.closed:
            self._fileobj.close()
        super().close()


def _is_valid(response: Response | None) -> bool:
    return response is not None and response.content_length >= 0


def as_uncompressed_stream(response: Response | None) -> BinaryIO | None:
    """Return the body as a readable stream with any content-encoding removed."""
    if not _is_valid(response):
        return None
    stream = response.open_stream()
    encoding = response.content_encoding
    if encoding is None:
        return stream
    if encoding.strip().lower() == "gzip":
        return _GzipStream(fileobj=stream, mode="rb")
    return io.BufferedReader(_RawInflateReader(stream))


def as_binary(response: Response | None) -> bytes | None:
    """
    Return the uncompressed body.

    At most ``Content-Length`` bytes are returned. The bound is the length
    reported by the server, i.e. before decompression, so a compressed body
    that inflates past it is truncated.
    """
    if not _is_valid(response):
        return None
    with as_uncompressed_stream(response) as stream:
        return stream.read(response.content_length)


def resolve_charset(content_type: str | None) -> str:
    """Pick the codec named by a ``Content-Type`` header, falling back to ISO-8859-1."""
    parts = (content_type or "").split(";")
    if len(parts) != 2:
        return DEFAULT_CHARSET
    pair = parts[1].split("=")
    if len(pair) != 2 or pair[0].lstrip() != "charset":
        return DEFAULT_CHARSET
    name = pair[1]
    try:
        # rejects non-text codecs (base64) and codecs that cannot decode with replacement (idna, undefined)
        b"\x00".decode(name, errors="replace")
        return codecs.lookup(name).name
    except (LookupError, UnicodeError):
        if name == "utf8":
            return "utf-8"
        logger.debug(f"Unknown charset {name!r}, using {DEFAULT_CHARSET}")
        return DEFAULT_CHARSET


def decode_text(data: bytes, charset: str) -> str:
    for bom, encoding in _BYTE_ORDER_MARKS:
        if data.startswith(bom):
            return data[len(bom) :].decode(encoding, errors="replace")
    try:
        return data.decode(charset, errors="replace")
    except UnicodeError:
        logger.debug(f"Cannot decode body as {charset}, using {DEFAULT_CHARSET}")
        return data.decode(DEFAULT_CHARSET)


def as_string(response: Response | None) -> str | None:
    """Return the uncompressed body decoded with its declared (or default) charset."""
    if not _is_valid(response):
        return None
    charset = resolve_charset(response.content_type)
    with as_uncompressed_stream(response) as stream:
        data = stream.read()
    return decode_text(data, charset)
