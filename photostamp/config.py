from __future__ import annotations

import json
import os
from dataclasses import dataclass, field

Color = tuple[int, int, int]

CONFIG_ENV_VAR = "PHOTOSTAMP_CONFIG"

# Working size photos are scaled to before text is drawn, so overlays look the same on every photo.
DEFAULT_SCALE_LONGEST_SIDE = 640
DEFAULT_PHOTO_LONGEST_SIDE = 600
DEFAULT_THUMB_LONGEST_SIDE = 320
DEFAULT_DPI = 96
DEFAULT_JPEG_QUALITY = 90
DEFAULT_CAMERA_DATE_MARGIN = 25

DEFAULT_DETAILS_FONT_POINTS = 8
DEFAULT_BRANDING_FONT_POINTS = 12
DEFAULT_CAMERA_DATE_FONT_POINTS = 16

DEFAULT_FONT_PATHS = {
    "regular": "DejaVuSans.ttf",
    "bold": "DejaVuSans-Bold.ttf",
    "bold_italic": "DejaVuSans-BoldOblique.ttf",
}

DEFAULT_BRANDING_MESSAGE = "Image generated by:"
DEFAULT_BRANDING_PRODUCT = "Field-Comm.net"

DEFAULT_COLORS: dict[str, Color] = {
    "header_dark": (59, 97, 156),
    "header_light": (117, 166, 241),
    "branding_light": (255, 255, 220),
    "branding_dark": (247, 192, 91),
    "header_text": (255, 255, 255),
    "branding_text": (0, 0, 0),
    "camera_date": (255, 255, 0),
    "sort_order_dark": (0, 0, 139),
    "sort_order_bright": (255, 255, 0),
}


@dataclass(frozen=True)
class ImagingConfig:
    scale_longest_side: int = DEFAULT_SCALE_LONGEST_SIDE
    photo_longest_side: int = DEFAULT_PHOTO_LONGEST_SIDE
    thumb_longest_side: int = DEFAULT_THUMB_LONGEST_SIDE
    default_dpi: int = DEFAULT_DPI
    display_dpi: int | None = None  # None = discover from the environment, falling back to default_dpi
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    camera_date_margin: int = DEFAULT_CAMERA_DATE_MARGIN
    details_font_points: float = DEFAULT_DETAILS_FONT_POINTS
    branding_font_points: float = DEFAULT_BRANDING_FONT_POINTS
    camera_date_font_points: float = DEFAULT_CAMERA_DATE_FONT_POINTS
    font_paths: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FONT_PATHS))
    branding_message: str = DEFAULT_BRANDING_MESSAGE
    branding_product: str = DEFAULT_BRANDING_PRODUCT
    colors: dict[str, Color] = field(default_factory=lambda: dict(DEFAULT_COLORS))

    def color(self, name: str) -> Color:
        return self.colors[name]


def _positive_int(raw: dict, key: str, default: int) -> int:
    value = int(raw.get(key, default))
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


def _normalize_colors(raw_colors: dict) -> dict[str, Color]:
    colors = dict(DEFAULT_COLORS)
    for name, value in raw_colors.items():
        if name not in DEFAULT_COLORS:
            raise ValueError(f"Unknown color name: {name}")
        rgb = tuple(int(part) for part in value)
        if len(rgb) != 3 or any(part < 0 or part > 255 for part in rgb):
            raise ValueError(f"Color {name} must be three 0-255 values, got {value}")
        colors[name] = rgb
    return colors


def load_config(config_path: str | None = None) -> ImagingConfig:
    """Load imaging configuration.

    Args:
        config_path: Optional path to a JSON config file. If None, uses the
            PHOTOSTAMP_CONFIG env var; if that is unset too, defaults are used.

    Returns:
        ImagingConfig with file values layered over the defaults.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
        ValueError: If a configured value is out of range.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR) or None
        if config_path is None:
            return ImagingConfig()

    with open(config_path, encoding="utf-8") as f:
        raw = json.load(f)

    display_dpi = raw.get("display_dpi")
    if display_dpi is not None:
        display_dpi = int(display_dpi)

    jpeg_quality = int(raw.get("jpeg_quality", DEFAULT_JPEG_QUALITY))
    if not 1 <= jpeg_quality <= 95:
        raise ValueError(f"jpeg_quality must be within 1..95, got {jpeg_quality}")

    font_paths = dict(DEFAULT_FONT_PATHS)
    font_paths.update(raw.get("font_paths") or {})

    return ImagingConfig(
        scale_longest_side=_positive_int(raw, "scale_longest_side", DEFAULT_SCALE_LONGEST_SIDE),
        photo_longest_side=_positive_int(raw, "photo_longest_side", DEFAULT_PHOTO_LONGEST_SIDE),
        thumb_longest_side=_positive_int(raw, "thumb_longest_side", DEFAULT_THUMB_LONGEST_SIDE),
        default_dpi=_positive_int(raw, "default_dpi", DEFAULT_DPI),
        display_dpi=display_dpi,
        jpeg_quality=jpeg_quality,
        camera_date_margin=int(raw.get("camera_date_margin", DEFAULT_CAMERA_DATE_MARGIN)),
        details_font_points=float(raw.get("details_font_points", DEFAULT_DETAILS_FONT_POINTS)),
        branding_font_points=float(raw.get("branding_font_points", DEFAULT_BRANDING_FONT_POINTS)),
        camera_date_font_points=float(
            raw.get("camera_date_font_points", DEFAULT_CAMERA_DATE_FONT_POINTS)
        ),
        font_paths=font_paths,
        branding_message=str(raw.get("branding_message", DEFAULT_BRANDING_MESSAGE)),
        branding_product=str(raw.get("branding_product", DEFAULT_BRANDING_PRODUCT)),
        colors=_normalize_colors(raw.get("colors") or {}),
    )
