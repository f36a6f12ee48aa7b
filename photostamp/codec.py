"""Decode/encode boundary between bytes and RasterImage."""

from __future__ import annotations

import logging
import os
import struct
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from . import metadata
from .config import DEFAULT_DPI, DEFAULT_JPEG_QUALITY
from .errors import EncodeError, ImageFormatError
from .raster import RasterImage
from .scaling import to_truecolor

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "JPEG"
_JPEG_MODES = frozenset({"RGB", "L", "CMYK"})
# Raised by Pillow when tag values can't be serialized into an EXIF block.
_METADATA_ERRORS = (ValueError, TypeError, struct.error)


def decode(data: bytes, upright: bool = False) -> RasterImage:
    """Decode image bytes into a RasterImage.

    Args:
        data: Encoded image bytes
        upright: Apply the EXIF orientation tag to the pixels

    Raises:
        ValueError: If data is empty.
        ImageFormatError: If the bytes are not a decodable image.
    """
    if not data:
        raise ValueError("Image data was empty.")
    try:
        pil_image = Image.open(BytesIO(data))
        pil_image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageFormatError(f"Invalid image: {exc}") from exc

    tags = metadata.tags_from_exif(pil_image.getexif())
    dpi = pil_image.info.get("dpi") or (DEFAULT_DPI, DEFAULT_DPI)
    if upright:
        pil_image = ImageOps.exif_transpose(pil_image)
        tags.pop(0x0112, None)  # orientation now baked into the pixels
    return RasterImage(pil_image, tags=tags, dpi=dpi)


def _save(image: RasterImage, fmt: str, quality: int) -> bytes:
    pil_image = image.pixels
    if fmt == DEFAULT_FORMAT and pil_image.mode not in _JPEG_MODES:
        pil_image = to_truecolor(pil_image)

    params: dict[str, object] = {"dpi": tuple(round(v) for v in image.dpi)}
    if fmt == DEFAULT_FORMAT:
        params["quality"] = quality
    if image.tags:
        params["exif"] = metadata.tags_to_exif(image.tags).tobytes()

    buf = BytesIO()
    pil_image.save(buf, fmt, **params)
    return buf.getvalue()


def encode(
    image: RasterImage, fmt: str = DEFAULT_FORMAT, quality: int = DEFAULT_JPEG_QUALITY
) -> bytes:
    """Encode the image, JPEG by default.

    Corrupt capture metadata occasionally cannot be written back. In that case
    all tags are cleared from the image and the encode is retried once.
    """
    try:
        return _save(image, fmt, quality)
    except _METADATA_ERRORS as exc:
        if not image.tags:
            raise EncodeError(f"Failed to encode image: {exc}") from exc
        logger.warning(f"Encode failed ({exc}), retrying without {len(image.tags)} metadata tags")

    metadata.clear(image.tags)
    try:
        return _save(image, fmt, quality)
    except _METADATA_ERRORS as exc:
        raise EncodeError(f"Failed to encode image without metadata: {exc}") from exc


def get_encoded_size(image: RasterImage) -> int:
    """Size in bytes of the image once encoded as JPEG."""
    return len(encode(image))


def read_image(path: str, upright: bool = False) -> RasterImage:
    with open(path, "rb") as f:
        data = f.read()
    try:
        return decode(data, upright=upright)
    except ImageFormatError as exc:
        raise ImageFormatError(f"Error reading image {path}: {exc}") from exc


def save_file(path: str, content: RasterImage | bytes) -> None:
    """Write encoded image bytes to path, creating parent directories."""
    data = encode(content) if isinstance(content, RasterImage) else content
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    logger.debug(f"Saved {len(data)} bytes to {path}")
