"""Owned image handle passed between pipeline stages."""

from __future__ import annotations

from enum import IntEnum

from PIL import Image

from . import geometry
from .errors import ImageConsumedError

DEFAULT_DPI = 96.0
INDEXED_MODES = frozenset({"P", "PA"})
TRUECOLOR_MODE = "RGB"

Tags = dict[int, object]


class TagId(IntEnum):
    """EXIF tag identifiers the pipeline knows about."""

    THUMBNAIL_DATA = 0x501B
    THUMBNAIL_IMAGE_WIDTH = 0x5020
    THUMBNAIL_IMAGE_HEIGHT = 0x5021
    IMAGE_DESCRIPTION = 0x010E
    EQUIPMENT_MANUFACTURER = 0x010F
    EQUIPMENT_MODEL = 0x0110
    HORIZONTAL_RESOLUTION = 0x011A
    VERTICAL_RESOLUTION = 0x011B
    # Modified date; not guaranteed to be the capture time. Use ORIGINAL_DATE_TIME.
    DATE_TIME_MODIFIED = 0x0132
    ARTIST = 0x013B
    COPYRIGHT = 0x8298
    EXPOSURE_TIME = 0x829A
    F_NUMBER = 0x829D
    ISO_SPEED = 0x8827
    ORIGINAL_DATE_TIME = 0x9003
    SHUTTER_SPEED = 0x9201
    APERTURE = 0x9202
    USER_COMMENT = 0x9286


RESOLUTION_TAGS = frozenset({TagId.HORIZONTAL_RESOLUTION, TagId.VERTICAL_RESOLUTION})


class RasterImage:
    """A Pillow image plus its resolution pair and metadata tags.

    Transforms take ownership of the RasterImage they are given. Once a
    transform succeeds it calls release(), after which the handle is no longer
    valid and touching its pixels or tags raises ImageConsumedError.
    """

    def __init__(
        self,
        pixels: Image.Image,
        tags: Tags | None = None,
        dpi: tuple[float, float] = (DEFAULT_DPI, DEFAULT_DPI),
    ) -> None:
        self._pixels: Image.Image | None = pixels
        self._tags: Tags = dict(tags) if tags else {}
        self.dpi = (float(dpi[0]), float(dpi[1]))
        self.valid = True

    def __repr__(self) -> str:
        if not self.valid:
            return "<RasterImage released>"
        return f"<RasterImage {self.width}x{self.height} mode={self.mode} tags={len(self._tags)}>"

    def _check_valid(self) -> None:
        if not self.valid:
            raise ImageConsumedError("RasterImage was released by a previous transform")

    @property
    def pixels(self) -> Image.Image:
        self._check_valid()
        return self._pixels

    @property
    def tags(self) -> Tags:
        self._check_valid()
        return self._tags

    @property
    def width(self) -> int:
        return self.pixels.width

    @property
    def height(self) -> int:
        return self.pixels.height

    @property
    def size(self) -> tuple[int, int]:
        return self.pixels.size

    @property
    def mode(self) -> str:
        return self.pixels.mode

    @property
    def longest_side(self) -> int:
        return geometry.longest_side(*self.size)

    @property
    def is_indexed(self) -> bool:
        return self.mode in INDEXED_MODES

    @property
    def is_truecolor(self) -> bool:
        return self.mode == TRUECOLOR_MODE

    def release(self) -> None:
        """Invalidate this handle and drop its pixel buffer."""
        self._check_valid()
        self.valid = False
        self._pixels = None
        self._tags = {}
