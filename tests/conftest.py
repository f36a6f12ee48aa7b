from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from photostamp.config import ImagingConfig  # noqa: E402
from photostamp.context import build_context  # noqa: E402
from photostamp.raster import RasterImage, TagId  # noqa: E402


class FakeMeasurer:
    """Fixed-pitch text metrics so layout tests don't depend on installed fonts."""

    def __init__(self, char_width: int = 10, line_height: int = 12, spacing: int = 2) -> None:
        self.char_width = char_width
        self.line_height = line_height
        self.spacing = spacing

    def wrap(self, text: str, font, max_width: int) -> str:
        max_chars = max(1, max_width // self.char_width)
        lines: list[str] = []
        for paragraph in text.split("\n"):
            current = ""
            for word in paragraph.split(" "):
                candidate = f"{current} {word}" if current else word
                if not current or len(candidate) <= max_chars:
                    current = candidate
                else:
                    lines.append(current)
                    current = word
            lines.append(current)
        return "\n".join(lines)

    def measure(self, text: str, font, max_width: int | None = None) -> tuple[int, int]:
        if max_width is not None:
            text = self.wrap(text, font, max_width)
        lines = text.split("\n")
        width = max(len(line) for line in lines) * self.char_width
        return width, len(lines) * self.line_height


def gradient_pixels(width: int, height: int) -> Image.Image:
    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    red = np.broadcast_to(xs[np.newaxis, :], (height, width))
    green = np.broadcast_to(ys[:, np.newaxis], (height, width))
    blue = np.full((height, width), 128.0)
    return Image.fromarray(np.stack([red, green, blue], axis=2).astype(np.uint8))


@pytest.fixture
def make_image():
    def _make(
        width: int = 1200,
        height: int = 800,
        mode: str = "RGB",
        tags: dict[int, object] | None = None,
        dpi: tuple[float, float] = (96.0, 96.0),
    ) -> RasterImage:
        pixels = gradient_pixels(width, height)
        if mode == "P":
            pixels = pixels.convert("P", palette=Image.Palette.ADAPTIVE)
        elif mode != "RGB":
            pixels = pixels.convert(mode)
        return RasterImage(pixels, tags=tags, dpi=dpi)

    return _make


@pytest.fixture
def exif_tags() -> dict[int, object]:
    return {
        TagId.EQUIPMENT_MANUFACTURER: "Acme",
        TagId.HORIZONTAL_RESOLUTION: 300.0,
        TagId.VERTICAL_RESOLUTION: 300.0,
        TagId.ORIGINAL_DATE_TIME: "2012:01:01 12:34:56",
    }


@pytest.fixture
def fake_measurer() -> FakeMeasurer:
    return FakeMeasurer()


@pytest.fixture
def fake_context(fake_measurer):
    return build_context(ImagingConfig(display_dpi=96), measurer=fake_measurer)


@pytest.fixture
def jpeg_bytes():
    def _encode(width: int = 64, height: int = 48) -> bytes:
        buf = BytesIO()
        gradient_pixels(width, height).save(buf, "JPEG", quality=90)
        return buf.getvalue()

    return _encode
