from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from photostamp.codec import read_image, save_file
from photostamp.compositor import (
    CaptionSpec,
    draw_camera_date,
    draw_caption_header,
    draw_sort_order_number,
)
from photostamp.config import load_config
from photostamp.context import init_context
from photostamp.scaling import resize


def _parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid ISO date: {value}") from exc


def main() -> int:
    parser = argparse.ArgumentParser(description="Resize and annotate an inspection photo.")
    parser.add_argument("image", help="Path to the source image")
    parser.add_argument("output", help="Path for the annotated JPEG")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--longest-side", type=int, help="Shrink the photo to this longest side")
    parser.add_argument("--date", type=_parse_date, help="Camera date (ISO format)")
    parser.add_argument("--include-time", action="store_true", help="Include time with the date")
    parser.add_argument("--sort-order", type=int, help="Draw this sort-order number")
    parser.add_argument("--caption", help="Draw a caption header with this caption text")
    parser.add_argument("--loan-number", default="")
    parser.add_argument("--loan-type", default="")
    parser.add_argument("--work-order", default="")
    parser.add_argument("--bank", default="")
    parser.add_argument("--address", default="")
    parser.add_argument("--order-number", default="")
    parser.add_argument(
        "--full-sized-caption",
        action="store_true",
        help="Keep the captioned photo at working width instead of the original size",
    )
    args = parser.parse_args()

    src_path = Path(args.image)
    if not src_path.exists():
        raise SystemExit(f"Input path not found: {src_path}")

    config = load_config(args.config)
    context = init_context(config)

    image = read_image(str(src_path), upright=True)
    image = resize(image, args.longest_side or config.photo_longest_side)

    if args.caption is not None:
        spec = CaptionSpec(
            loan_number=args.loan_number,
            loan_type=args.loan_type,
            work_order_number=args.work_order,
            bank=args.bank,
            address_display=args.address,
            order_number=args.order_number,
            caption=args.caption,
            date=args.date or datetime.now(),
            include_camera_date=args.date is not None,
            include_time=args.include_time,
            full_sized_caption=args.full_sized_caption,
        )
        image = draw_caption_header(image, spec, context=context)
    elif args.date is not None:
        image = draw_camera_date(image, args.date, show_time=args.include_time, context=context)

    if args.sort_order is not None:
        bounds = (0, 0, image.width // 4, image.height // 4)
        result = draw_sort_order_number(image, args.sort_order, bounds, context=context)
        if result.degraded:
            failed = ", ".join(p.name for p in result.passes if not p.drawn)
            print(f"Warning: sort-order pass failed: {failed}", file=sys.stderr)
        image = result.image

    save_file(args.output, image)
    print(f"{args.output} ({image.width}x{image.height})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
