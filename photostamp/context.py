"""Process-wide render context: fonts, palette and DPI, built once."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from .config import Color, ImagingConfig, load_config
from .dpi import current_display_dpi, points_to_pixels
from .text_layout import Font, TextMeasurer, load_font

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderContext:
    config: ImagingConfig
    dpi: int
    measurer: TextMeasurer
    details_font: Font
    branding_font: Font
    product_font: Font
    camera_date_font: Font

    def color(self, name: str) -> Color:
        return self.config.color(name)

    def sort_order_font(self, size_px: float) -> Font:
        return load_font(self.config.font_paths["bold"], size_px)


_context: RenderContext | None = None
_context_lock = threading.Lock()


def build_context(config: ImagingConfig, measurer: TextMeasurer | None = None) -> RenderContext:
    dpi = current_display_dpi(config)
    fonts = config.font_paths

    def px(points: float) -> float:
        return points_to_pixels(points, dpi)

    return RenderContext(
        config=config,
        dpi=dpi,
        measurer=measurer or TextMeasurer(),
        details_font=load_font(fonts["bold"], px(config.details_font_points)),
        branding_font=load_font(fonts["bold"], px(config.branding_font_points)),
        product_font=load_font(fonts["bold_italic"], px(config.branding_font_points)),
        camera_date_font=load_font(fonts["bold"], px(config.camera_date_font_points)),
    )


def init_context(config: ImagingConfig | None = None) -> RenderContext:
    """Build and install the process-wide context.

    Call once during process setup. Calling again replaces the context, which
    is only meant for tests and reconfiguration at startup.
    """
    global _context
    with _context_lock:
        _context = build_context(config if config is not None else load_config())
        logger.info(f"Render context initialized (display dpi {_context.dpi})")
        return _context


def get_context() -> RenderContext:
    global _context
    with _context_lock:
        if _context is None:
            _context = build_context(load_config())
            logger.info(f"Render context initialized (display dpi {_context.dpi})")
        return _context
