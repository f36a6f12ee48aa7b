"""Exception types raised by the imaging pipeline."""

from __future__ import annotations


class ImagingError(Exception):
    """Base class for pipeline errors."""


class ImageFormatError(ImagingError, ValueError):
    """Input bytes are not a recognizable image (or not a JPEG when sniffing)."""


class ImageConsumedError(ImagingError, RuntimeError):
    """A RasterImage was used after a transform took ownership of it."""


class EncodeError(ImagingError):
    """Encoding failed even after stripping all metadata tags."""
