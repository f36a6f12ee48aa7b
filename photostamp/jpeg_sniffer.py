"""Read JPEG pixel dimensions from the marker stream without decoding."""

from __future__ import annotations

import io
import os
from typing import BinaryIO

from .errors import ImageFormatError

MARKER_PREFIX = 0xFF
# RSTn, SOI and EOI carry no payload.
_NO_PAYLOAD = range(0xD0, 0xDA)
# The whole 0xC0..0xCF range is treated as size-bearing, including DHT (0xC4),
# JPG (0xC8) and DAC (0xCC). Existing callers rely on this exact range.
_SIZE_BEARING = range(0xC0, 0xD0)


def _read_byte(stream: BinaryIO) -> int:
    data = stream.read(1)
    if not data:
        raise ImageFormatError("Stream ended before a frame header was found")
    return data[0]


def _read_be_ushort(stream: BinaryIO) -> int:
    data = stream.read(2)
    if len(data) < 2:
        raise ImageFormatError("Stream ended before a frame header was found")
    return (data[0] << 8) | data[1]


def _skip(stream: BinaryIO, count: int) -> None:
    if stream.seekable():
        stream.seek(count, os.SEEK_CUR)
    elif len(stream.read(count)) < count:
        raise ImageFormatError("Stream ended before a frame header was found")


def sniff_jpeg_size(source: BinaryIO | bytes) -> tuple[int, int]:
    """Return (width, height) of a JPEG stream.

    Reads markers until the first size-bearing segment. Raises
    ImageFormatError when a marker does not start with 0xFF or the stream ends
    first.
    """
    stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray, memoryview)) else source

    while True:
        if _read_byte(stream) != MARKER_PREFIX:
            raise ImageFormatError("Unexpected marker value. Ensure the stream is JPEG format.")
        code = _read_byte(stream)
        # Fill bytes: each extra 0xFF acts as the prefix of the next marker.
        while code == MARKER_PREFIX:
            code = _read_byte(stream)

        if code in _NO_PAYLOAD:
            continue
        if code in _SIZE_BEARING:
            _read_be_ushort(stream)  # segment length
            _read_byte(stream)  # sample precision
            height = _read_be_ushort(stream)
            width = _read_be_ushort(stream)
            return width, height

        length = _read_be_ushort(stream)
        if length < 2:
            raise ImageFormatError(f"Invalid segment length {length} for marker 0x{code:02X}")
        _skip(stream, length - 2)


def sniff_jpeg_file(path: str) -> tuple[int, int]:
    with open(path, "rb") as f:
        try:
            return sniff_jpeg_size(f)
        except ImageFormatError as exc:
            raise ImageFormatError(f"{path}: {exc}") from exc
