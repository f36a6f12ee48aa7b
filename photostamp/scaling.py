"""Aspect-preserving resizing with metadata propagation.

Every entry point takes ownership of the RasterImage it is given. When work is
needed a new RasterImage is returned and the input is released; when the input
already satisfies the request it is returned untouched.
"""

from __future__ import annotations

import logging

from PIL import Image

from . import metadata
from .config import DEFAULT_DPI, DEFAULT_PHOTO_LONGEST_SIDE, DEFAULT_THUMB_LONGEST_SIDE
from .geometry import compute_scaled_size
from .raster import TRUECOLOR_MODE, RasterImage

logger = logging.getLogger(__name__)

EXACT_FIT_RESAMPLE = Image.Resampling.LANCZOS
FAST_RESAMPLE = Image.Resampling.BILINEAR
# Pre-reduce by whole factors before the bilinear pass; much faster on large photos.
FAST_REDUCING_GAP = 1.5


def to_truecolor(pil_image: Image.Image) -> Image.Image:
    if pil_image.mode == TRUECOLOR_MODE:
        return pil_image
    if pil_image.mode in ("RGBA", "LA", "PA") or (
        pil_image.mode == "P" and "transparency" in pil_image.info
    ):
        rgba = pil_image.convert("RGBA")
        bg = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(bg, rgba).convert(TRUECOLOR_MODE)
    return pil_image.convert(TRUECOLOR_MODE)


def scale(image: RasterImage, longest_side: int) -> RasterImage:
    """Exact-fit resize: the longest side of the result equals longest_side.

    May enlarge or shrink. The result is always RGB, drawn with Lanczos.
    """
    target = compute_scaled_size(image.width, image.height, longest_side)
    if image.is_truecolor and image.size == target:
        return image

    source = to_truecolor(image.pixels)
    pixels = source.resize(target, EXACT_FIT_RESAMPLE)

    scaled = RasterImage(
        pixels, tags=metadata.carry_forward(image.tags), dpi=(DEFAULT_DPI, DEFAULT_DPI)
    )
    logger.debug(f"Scaled {image.size} {image.mode} -> {target} RGB")
    image.release()
    return scaled


def resize(image: RasterImage, longest_side: int = DEFAULT_PHOTO_LONGEST_SIDE) -> RasterImage:
    """Shrink-only resize so neither side exceeds longest_side.

    Images already within bounds are returned as-is. This is the high-volume
    path, so it trades some fidelity for speed compared to scale().
    """
    if longest_side <= 0:
        raise ValueError(f"longest_side must be positive, got {longest_side}")
    if image.width <= longest_side and image.height <= longest_side:
        return image

    target = compute_scaled_size(image.width, image.height, longest_side)

    source = image.pixels
    # Palette images can't be drawn onto directly; promote them to RGB.
    if image.is_indexed:
        source = to_truecolor(source)

    pixels = source.resize(target, FAST_RESAMPLE, reducing_gap=FAST_REDUCING_GAP)

    resized = RasterImage(
        pixels, tags=metadata.carry_forward(image.tags), dpi=(DEFAULT_DPI, DEFAULT_DPI)
    )
    logger.debug(f"Resized {image.size} {image.mode} -> {target} {pixels.mode}")
    image.release()
    return resized


def to_thumbnail(image: RasterImage, longest_side: int = DEFAULT_THUMB_LONGEST_SIDE) -> RasterImage:
    x_dpi, y_dpi = image.dpi
    if (
        x_dpi <= DEFAULT_DPI
        and y_dpi <= DEFAULT_DPI
        and image.width <= longest_side
        and image.height <= longest_side
    ):
        return image
    return resize(image, longest_side)


def copy_image(image: RasterImage) -> RasterImage:
    """Return an independent copy; palette images are redrawn as RGB.

    The source stays valid.
    """
    if image.is_indexed:
        pixels = to_truecolor(image.pixels)
    else:
        pixels = image.pixels.copy()
    return RasterImage(pixels, tags=dict(image.tags), dpi=image.dpi)
