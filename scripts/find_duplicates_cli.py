from __future__ import annotations

import argparse
import json
import sys
from collections import defaultdict
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from photostamp.ahash_engine import format_hash
from photostamp.codec import read_image
from photostamp.errors import ImageFormatError
from photostamp.hasher import fingerprint
from photostamp.jpeg_sniffer import sniff_jpeg_file

JPEG_EXTENSIONS = {".jpg", ".jpeg"}
IMAGE_EXTENSIONS = JPEG_EXTENSIONS | {".png", ".tif", ".tiff", ".webp"}


def _iter_images(base: Path):
    if base.is_file():
        yield base
        return
    for entry in sorted(base.rglob("*")):
        if entry.is_file() and entry.suffix.lower() in IMAGE_EXTENSIONS:
            yield entry


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Group photos whose fingerprints are identical (perceptual duplicates)."
    )
    parser.add_argument("path", help="Image file or directory to scan")
    parser.add_argument(
        "--min-side",
        type=int,
        default=0,
        help="Skip JPEGs whose longest side (read from the header) is below this",
    )
    args = parser.parse_args()

    base = Path(args.path)
    if not base.exists():
        raise SystemExit(f"Input path not found: {base}")

    groups: dict[int, list[str]] = defaultdict(list)
    errors: list[str] = []
    for path in _iter_images(base):
        try:
            if args.min_side and path.suffix.lower() in JPEG_EXTENSIONS:
                width, height = sniff_jpeg_file(str(path))
                if max(width, height) < args.min_side:
                    continue
            groups[fingerprint(read_image(str(path)))].append(str(path))
        except (ImageFormatError, OSError) as exc:
            errors.append(f"{path}: {exc}")

    duplicates = {
        format_hash(value): paths for value, paths in groups.items() if len(paths) > 1
    }
    print(json.dumps({"duplicates": duplicates, "errors": errors}, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
