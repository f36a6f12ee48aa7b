"""Font loading and text measurement for the compositor."""

from __future__ import annotations

import logging

from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont

LINE_SPACING = 2


def load_font(font_path: str, size_px: float) -> Font:
    """Load a TrueType font, falling back to Pillow's bundled font.

    Not every system has the configured font installed; the fallback keeps
    rendering going at the requested size.
    """
    size = max(1, round(size_px))
    try:
        return ImageFont.truetype(font_path, size)
    except OSError as exc:
        logger.warning(f"Font {font_path!r} unavailable ({exc}), using Pillow default font")
        return ImageFont.load_default(size=size)


class TextMeasurer:
    """Measures (and wraps) text the same way ImageDraw renders it."""

    def __init__(self, spacing: int = LINE_SPACING) -> None:
        self.spacing = spacing
        self._draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))

    def text_width(self, text: str, font: Font) -> int:
        left, _, right, _ = self._draw.textbbox((0, 0), text, font=font)
        return int(right - left)

    def wrap(self, text: str, font: Font, max_width: int) -> str:
        """Word-wrap every paragraph of text so each line fits max_width.

        Words wider than max_width are left on a line of their own.
        """
        wrapped: list[str] = []
        for paragraph in text.split("\n"):
            current = ""
            for word in paragraph.split(" "):
                candidate = f"{current} {word}" if current else word
                if not current or self.text_width(candidate, font) <= max_width:
                    current = candidate
                else:
                    wrapped.append(current)
                    current = word
            wrapped.append(current)
        return "\n".join(wrapped)

    def measure(self, text: str, font: Font, max_width: int | None = None) -> tuple[int, int]:
        """Return the (width, height) of text drawn at the origin.

        With max_width the text is wrapped first, as it will be when drawn.
        """
        if max_width is not None:
            text = self.wrap(text, font, max_width)
        if not text:
            return 0, 0
        _, _, right, bottom = self._draw.multiline_textbbox(
            (0, 0), text, font=font, spacing=self.spacing
        )
        return int(right), int(bottom)
