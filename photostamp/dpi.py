"""Display DPI discovery and point/pixel conversion."""

from __future__ import annotations

import logging
import os

from .config import DEFAULT_DPI, ImagingConfig

logger = logging.getLogger(__name__)

DISPLAY_DPI_ENV_VAR = "PHOTOSTAMP_DISPLAY_DPI"
POINTS_PER_INCH = 72.0


def current_display_dpi(config: ImagingConfig | None = None) -> int:
    """Return the display DPI used to convert font points to pixels.

    Resolution order: config.display_dpi, the PHOTOSTAMP_DISPLAY_DPI env var,
    then config.default_dpi (96).
    """
    fallback = config.default_dpi if config is not None else DEFAULT_DPI
    if config is not None and config.display_dpi:
        return int(config.display_dpi)

    raw = os.environ.get(DISPLAY_DPI_ENV_VAR)
    if not raw:
        return fallback
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {DISPLAY_DPI_ENV_VAR}={raw!r}, using {fallback}")
        return fallback
    if value <= 0:
        logger.warning(f"Ignoring non-positive {DISPLAY_DPI_ENV_VAR}={value}, using {fallback}")
        return fallback
    return value


def points_to_pixels(points: float, dpi: int) -> float:
    # pixels = points / 72 points-per-inch * dots-per-inch
    return points / POINTS_PER_INCH * dpi


def pixels_to_points(pixels: float, dpi: int) -> float:
    return pixels * POINTS_PER_INCH / dpi
