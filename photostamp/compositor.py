"""Caption header, camera-date and sort-order overlays.

Overlays are drawn at a fixed working size (config.scale_longest_side) so a
given font size looks the same on every photo, then the result is shrunk back
to the size the photo came in with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

import numpy as np
from PIL import Image, ImageDraw

from . import metadata
from .config import Color, DEFAULT_DPI
from .context import RenderContext, get_context
from .dpi import pixels_to_points, points_to_pixels
from .raster import RasterImage
from .scaling import resize, scale, to_truecolor

logger = logging.getLogger(__name__)

TEXT_INSET = 5
DETAILS_WIDTH_PADDING = 10
CAPTION_WIDTH_PADDING = 20
HEADER_PADDING = 10
# Single-line branding needs this much slack beyond its measured width.
BRANDING_SLACK = 15
BRANDING_PADDING = 4
# The bright sort-order pass is offset by this fraction of the font's pixel size.
SORT_ORDER_OFFSET_DIVISOR = 20
SORT_ORDER_BRIGHT_SCALE = 0.9

_ESCAPE_PLACEHOLDER = "\x00"

Bounds = tuple[int, int, int, int]  # (left, top, width, height)


@dataclass(frozen=True)
class CaptionSpec:
    loan_number: str
    loan_type: str
    work_order_number: str
    bank: str
    address_display: str
    order_number: str  # unique order #, not the sort order
    caption: str
    date: datetime
    include_camera_date: bool = False
    include_time: bool = False
    # Keep the composite at working width instead of shrinking it back to the original size.
    full_sized_caption: bool = False


@dataclass(frozen=True)
class CaptionLayout:
    width: int
    details_text: str
    caption_text: str
    details_height: int
    caption_height: int
    header_height: int
    branding_lines: tuple[str, ...]
    branding_height: int
    photo_height: int

    @property
    def two_line_branding(self) -> bool:
        return len(self.branding_lines) == 2

    @property
    def photo_top(self) -> int:
        return self.header_height + self.branding_height

    @property
    def total_height(self) -> int:
        return self.photo_top + self.photo_height


@dataclass(frozen=True)
class PassOutcome:
    name: str
    drawn: bool
    error: str | None = None


@dataclass(frozen=True)
class OverlayResult:
    image: RasterImage
    passes: tuple[PassOutcome, ...]

    @property
    def degraded(self) -> bool:
        return any(not outcome.drawn for outcome in self.passes)


def format_short_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def format_short_time(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_date(value: datetime, include_time: bool) -> str:
    if include_time:
        return f"{format_short_date(value)} {format_short_time(value)}"
    return format_short_date(value)


def normalize_caption(text: str) -> str:
    r"""Turn typed "\n" sequences into line breaks; "\\n" stays a literal "\n"."""
    return (
        text.replace("\\\\n", _ESCAPE_PLACEHOLDER)
        .replace("\\n", "\n")
        .replace(_ESCAPE_PLACEHOLDER, "\\n")
    )


def format_details(spec: CaptionSpec, product: str) -> str:
    return (
        f"Property ID: {spec.loan_number}    Loan Type: {spec.loan_type}    "
        f"W/O #: {spec.work_order_number}    Bank: {spec.bank}\n"
        f"Address: {spec.address_display}\n"
        f"Date: {format_date(spec.date, spec.include_time)}    "
        f"{product} Order #: {spec.order_number}"
    )


def _gradient(size: tuple[int, int], start: Color, end: Color, diagonal: bool) -> Image.Image:
    width, height = size
    xs = np.linspace(0.0, 1.0, width) if width > 1 else np.zeros(1)
    ys = np.linspace(0.0, 1.0, height) if height > 1 else np.zeros(1)
    if diagonal:
        # Top-left to bottom-right.
        t = (xs[np.newaxis, :] + ys[:, np.newaxis]) / 2.0
    else:
        t = np.broadcast_to(xs[np.newaxis, :], (height, width))
    start_rgb = np.asarray(start, dtype=np.float64)
    end_rgb = np.asarray(end, dtype=np.float64)
    rgb = start_rgb + (end_rgb - start_rgb) * t[..., np.newaxis]
    return Image.fromarray(np.rint(rgb).astype(np.uint8))


def _draw_camera_date_on(
    draw: ImageDraw.ImageDraw, size: tuple[int, int], text: str, context: RenderContext
) -> None:
    width, height = size
    font = context.camera_date_font
    text_width, text_height = context.measurer.measure(text, font)
    margin = context.config.camera_date_margin
    draw.text(
        (width - text_width - margin, height - text_height - margin),
        text,
        font=font,
        fill=context.color("camera_date"),
    )


def draw_camera_date(
    image: RasterImage,
    date: datetime,
    show_time: bool = False,
    context: RenderContext | None = None,
) -> RasterImage:
    """Stamp the camera date in the bottom-right corner.

    The photo is scaled to the working size, stamped, and resized back down
    to its original longest side. Takes ownership of image.
    """
    context = context or get_context()
    text = format_date(date, show_time)
    original_longest = image.longest_side

    working = scale(image, context.config.scale_longest_side)
    canvas = working.pixels.copy()
    draw = ImageDraw.Draw(canvas)
    draw.fontmode = "L"  # antialiased
    _draw_camera_date_on(draw, canvas.size, text, context)

    stamped = RasterImage(canvas, tags=metadata.carry_forward(working.tags), dpi=working.dpi)
    working.release()
    return resize(stamped, original_longest)


def draw_sort_order_number(
    image: RasterImage,
    number: int,
    bounds: Bounds,
    context: RenderContext | None = None,
) -> OverlayResult:
    """Draw an outlined sort-order number at the top-left of bounds.

    A dark pass is drawn at the origin and a smaller bright pass slightly
    offset on top of it. A failed pass is recorded in the result instead of
    aborting the overlay. Takes ownership of image.
    """
    context = context or get_context()
    left, top, _, bounds_height = bounds
    text = str(number)

    font_points = pixels_to_points(bounds_height, context.dpi) / 2
    font_px = points_to_pixels(font_points, context.dpi)
    delta = font_px / SORT_ORDER_OFFSET_DIVISOR

    # Palette and single-band images can't take an RGB fill.
    canvas = image.pixels.copy() if image.is_truecolor else to_truecolor(image.pixels)
    draw = ImageDraw.Draw(canvas)

    passes = (
        ("dark", (left, top), font_px, context.color("sort_order_dark")),
        (
            "bright",
            (left + delta, top + delta),
            font_px * SORT_ORDER_BRIGHT_SCALE,
            context.color("sort_order_bright"),
        ),
    )
    outcomes: list[PassOutcome] = []
    for name, origin, size_px, color in passes:
        try:
            font = context.sort_order_font(size_px)
            draw.text(origin, text, font=font, fill=color)
        except (OSError, ValueError) as exc:
            # Extreme font sizes can fail inside FreeType; the other pass still stands.
            logger.warning(f"Sort-order {name} pass failed for #{number} at {size_px:.1f}px: {exc}")
            outcomes.append(PassOutcome(name=name, drawn=False, error=str(exc)))
        else:
            outcomes.append(PassOutcome(name=name, drawn=True))

    result = RasterImage(canvas, tags=dict(image.tags), dpi=image.dpi)
    image.release()
    return OverlayResult(image=result, passes=tuple(outcomes))


def compute_caption_layout(
    spec: CaptionSpec,
    width: int,
    photo_height: int,
    context: RenderContext,
) -> CaptionLayout:
    """Compute band geometry from measured text extents at the given width."""
    measurer = context.measurer
    config = context.config

    details = format_details(spec, config.branding_product)
    caption = f"Caption: {normalize_caption(spec.caption)}"

    details_wrap = max(1, width - DETAILS_WIDTH_PADDING)
    caption_wrap = max(1, width - CAPTION_WIDTH_PADDING)
    details_text = measurer.wrap(details, context.details_font, details_wrap)
    caption_text = measurer.wrap(caption, context.details_font, caption_wrap)
    _, details_height = measurer.measure(details, context.details_font, details_wrap)
    _, caption_height = measurer.measure(caption, context.details_font, caption_wrap)

    header_height = details_height + caption_height + HEADER_PADDING

    single_line = f"{config.branding_message} {config.branding_product}"
    single_width, single_height = measurer.measure(single_line, context.branding_font)
    if single_width + BRANDING_SLACK < width:
        branding_lines: tuple[str, ...] = (single_line,)
        branding_height = single_height + BRANDING_PADDING
    else:
        _, message_height = measurer.measure(config.branding_message, context.branding_font)
        _, product_height = measurer.measure(config.branding_product, context.product_font)
        branding_lines = (config.branding_message, config.branding_product)
        branding_height = message_height + product_height + BRANDING_PADDING * 2

    return CaptionLayout(
        width=width,
        details_text=details_text,
        caption_text=caption_text,
        details_height=details_height,
        caption_height=caption_height,
        header_height=header_height,
        branding_lines=branding_lines,
        branding_height=branding_height,
        photo_height=photo_height,
    )


def _draw_branding(
    draw: ImageDraw.ImageDraw, layout: CaptionLayout, context: RenderContext
) -> None:
    measurer = context.measurer
    fill = context.color("branding_text")
    top = layout.header_height
    if not layout.two_line_branding:
        draw.text(
            (TEXT_INSET, top + BRANDING_PADDING // 2),
            layout.branding_lines[0],
            font=context.branding_font,
            fill=fill,
        )
        return

    message, product = layout.branding_lines
    y = top + BRANDING_PADDING
    for text, font in ((message, context.branding_font), (product, context.product_font)):
        text_width, text_height = measurer.measure(text, font)
        draw.text((layout.width - text_width - TEXT_INSET, y), text, font=font, fill=fill)
        y += text_height


def draw_caption_header(
    image: RasterImage,
    spec: CaptionSpec,
    context: RenderContext | None = None,
) -> RasterImage:
    """Composite the photo under a details/caption header and a branding band.

    Bands, top to bottom: details and caption text on a diagonal gradient,
    branding on a horizontal gradient, then the photo. Takes ownership of
    image.
    """
    context = context or get_context()
    original_longest = image.longest_side

    photo = scale(image, context.config.scale_longest_side)
    layout = compute_caption_layout(spec, photo.width, photo.height, context)

    canvas = Image.new("RGB", (layout.width, layout.total_height))
    canvas.paste(
        _gradient((layout.width, layout.header_height), context.color("header_dark"),
                  context.color("header_light"), diagonal=True),
        (0, 0),
    )
    canvas.paste(
        _gradient((layout.width, layout.branding_height), context.color("branding_light"),
                  context.color("branding_dark"), diagonal=False),
        (0, layout.header_height),
    )
    canvas.paste(photo.pixels, (0, layout.photo_top))

    draw = ImageDraw.Draw(canvas)
    draw.fontmode = "L"
    text_fill = context.color("header_text")
    spacing = context.measurer.spacing
    draw.multiline_text((TEXT_INSET, TEXT_INSET), layout.details_text,
                        font=context.details_font, fill=text_fill, spacing=spacing)
    draw.multiline_text((TEXT_INSET, TEXT_INSET + layout.details_height), layout.caption_text,
                        font=context.details_font, fill=text_fill, spacing=spacing)
    _draw_branding(draw, layout, context)

    if spec.include_camera_date:
        _draw_camera_date_on(draw, canvas.size, format_date(spec.date, spec.include_time), context)

    composite = RasterImage(
        canvas, tags=metadata.carry_forward(photo.tags), dpi=(DEFAULT_DPI, DEFAULT_DPI)
    )
    photo.release()
    logger.debug(
        f"Caption header composited at {canvas.size}, branding lines={len(layout.branding_lines)}"
    )

    if spec.full_sized_caption:
        return composite
    return resize(composite, original_longest)
