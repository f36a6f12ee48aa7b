from __future__ import annotations

import numpy as np
from PIL import Image

from .scaling import to_truecolor

HASH_TYPE = "ahash"
HASH_VERSION = 1
GRID_SIZE = 8
HASH_BITS = GRID_SIZE * GRID_SIZE
# Not the usual /3: existing fingerprints were computed with /12 and must stay bit-identical.
LUMA_DIVISOR = 12

_GRID_RESAMPLE = Image.Resampling.BILINEAR


def get_hash_meta() -> dict[str, object]:
    return {
        "type": HASH_TYPE,
        "version": HASH_VERSION,
        "grid_size": GRID_SIZE,
        "luma_divisor": LUMA_DIVISOR,
    }


def _luma_grid(pil_image: Image.Image) -> np.ndarray:
    squeezed = to_truecolor(pil_image).resize((GRID_SIZE, GRID_SIZE), _GRID_RESAMPLE)
    rgb = np.asarray(squeezed, dtype=np.uint32)
    return rgb.sum(axis=2) // LUMA_DIVISOR


def create_hash(pil_image: Image.Image) -> int:
    """Create a 64-bit average hash of the image.

    Sample k of the 8x8 grid (row-major) sets bit 63 - k when its luma is at
    least the integer mean of all 64 samples.
    """
    luma = _luma_grid(pil_image).flatten()
    average = int(luma.sum()) // HASH_BITS

    value = 0
    for k, sample in enumerate(luma):
        if int(sample) >= average:
            value |= 1 << (HASH_BITS - 1 - k)
    return value


def format_hash(value: int) -> str:
    return f"{value:016x}"
