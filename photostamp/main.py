from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from . import ahash_engine, hasher
from .codec import decode, encode
from .compositor import CaptionSpec, draw_camera_date, draw_caption_header, draw_sort_order_number
from .config import ImagingConfig, load_config
from .context import init_context
from .errors import ImageFormatError
from .jpeg_sniffer import sniff_jpeg_size
from .raster import RasterImage
from .scaling import resize, scale, to_thumbnail

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


app = FastAPI(title="PhotoStamp", version="0.1.0")

VERSION_FILE = os.path.join(os.path.dirname(__file__), "..", "VERSION")
JPEG_MEDIA_TYPE = "image/jpeg"


def _read_version() -> str:
    """Read version from VERSION file."""
    try:
        with open(VERSION_FILE, encoding="utf-8") as f:
            return f.read().strip()
    except OSError as exc:
        logger.warning(f"Failed to read VERSION file: {exc}")
        return "unknown"


_VERSION = _read_version()


class SizeResponse(BaseModel):
    width: int
    height: int


class FingerprintResponse(BaseModel):
    fingerprint: str
    width: int
    height: int
    hash_meta: dict[str, Any]


class CompareResponse(BaseModel):
    similar: bool
    same: bool
    fingerprint_a: str
    fingerprint_b: str


_CONFIG: ImagingConfig = load_config()
_CONTEXT = init_context(_CONFIG)


@app.on_event("startup")
def _log_startup() -> None:
    logger.info(
        f"PhotoStamp {_VERSION} ready: working size {_CONFIG.scale_longest_side}px, "
        f"display dpi {_CONTEXT.dpi}"
    )


def _read_upload(file: UploadFile) -> bytes:
    data = file.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty upload.")
    return data


def _open_uploaded_image(file: UploadFile) -> RasterImage:
    try:
        return decode(_read_upload(file))
    except ImageFormatError as exc:
        logger.error(f"Failed to open uploaded image: {exc}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _jpeg_response(image: RasterImage, headers: dict[str, str] | None = None) -> Response:
    return Response(content=encode(image), media_type=JPEG_MEDIA_TYPE, headers=headers)


def _parse_bounds(bounds: str) -> tuple[int, int, int, int]:
    try:
        parts = [int(part.strip()) for part in bounds.split(",")]
        if len(parts) != 4:
            raise ValueError("Expected 4 integers.")
        if parts[2] <= 0 or parts[3] <= 0:
            raise ValueError("Width and height must be positive.")
        return (parts[0], parts[1], parts[2], parts[3])
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid bounds: {exc}") from exc


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/config")
def get_config() -> JSONResponse:
    return JSONResponse(
        {
            "version": _VERSION,
            "scale_longest_side": _CONFIG.scale_longest_side,
            "photo_longest_side": _CONFIG.photo_longest_side,
            "thumb_longest_side": _CONFIG.thumb_longest_side,
            "display_dpi": _CONTEXT.dpi,
            "hash_meta": hasher.get_metadata(),
        }
    )


@app.post("/api/sniff", response_model=SizeResponse)
async def sniff_size(file: UploadFile = File(...)) -> SizeResponse:
    """Read JPEG dimensions from the header without decoding pixels."""
    try:
        width, height = sniff_jpeg_size(_read_upload(file))
    except ImageFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SizeResponse(width=width, height=height)


@app.post("/api/fingerprint", response_model=FingerprintResponse)
async def fingerprint_image(file: UploadFile = File(...)) -> FingerprintResponse:
    image = _open_uploaded_image(file)
    value = hasher.fingerprint(image)
    return FingerprintResponse(
        fingerprint=ahash_engine.format_hash(value),
        width=image.width,
        height=image.height,
        hash_meta=hasher.get_metadata(),
    )


@app.post("/api/compare", response_model=CompareResponse)
async def compare_images(
    file_a: UploadFile = File(...),
    file_b: UploadFile = File(...),
) -> CompareResponse:
    a = _open_uploaded_image(file_a)
    b = _open_uploaded_image(file_b)
    return CompareResponse(
        similar=hasher.is_similar_to(a, b),
        same=hasher.is_same_as(a, b),
        fingerprint_a=ahash_engine.format_hash(hasher.fingerprint(a)),
        fingerprint_b=ahash_engine.format_hash(hasher.fingerprint(b)),
    )


@app.post("/api/resize")
async def resize_image(
    file: UploadFile = File(...),
    longest_side: int = Query(None, ge=1, le=10000),
) -> Response:
    image = _open_uploaded_image(file)
    target = longest_side if longest_side is not None else _CONFIG.photo_longest_side
    return _jpeg_response(resize(image, target))


@app.post("/api/thumbnail")
async def thumbnail_image(
    file: UploadFile = File(...),
    longest_side: int = Query(None, ge=1, le=10000),
) -> Response:
    image = _open_uploaded_image(file)
    target = longest_side if longest_side is not None else _CONFIG.thumb_longest_side
    return _jpeg_response(to_thumbnail(image, target))


@app.post("/api/scale")
async def scale_image(
    file: UploadFile = File(...),
    longest_side: int = Query(None, ge=1, le=10000),
) -> Response:
    image = _open_uploaded_image(file)
    target = longest_side if longest_side is not None else _CONFIG.scale_longest_side
    return _jpeg_response(scale(image, target))


@app.post("/api/camera-date")
async def camera_date(
    file: UploadFile = File(...),
    date: datetime = Form(...),
    include_time: bool = Form(False),
) -> Response:
    image = _open_uploaded_image(file)
    return _jpeg_response(draw_camera_date(image, date, show_time=include_time, context=_CONTEXT))


@app.post("/api/sort-order")
async def sort_order(
    file: UploadFile = File(...),
    number: int = Form(...),
    bounds: str = Form(..., description="Target rectangle as 'left,top,width,height'."),
) -> Response:
    image = _open_uploaded_image(file)
    result = draw_sort_order_number(image, number, _parse_bounds(bounds), context=_CONTEXT)
    headers = {"X-Overlay-Degraded": "true" if result.degraded else "false"}
    return _jpeg_response(result.image, headers=headers)


@app.post("/api/caption")
async def caption_header(
    file: UploadFile = File(...),
    loan_number: str = Form(""),
    loan_type: str = Form(""),
    work_order_number: str = Form(""),
    bank: str = Form(""),
    address_display: str = Form(""),
    order_number: str = Form(""),
    caption: str = Form(""),
    date: datetime = Form(...),
    include_camera_date: bool = Form(False),
    include_time: bool = Form(False),
    full_sized_caption: bool = Form(False),
) -> Response:
    image = _open_uploaded_image(file)
    spec = CaptionSpec(
        loan_number=loan_number,
        loan_type=loan_type,
        work_order_number=work_order_number,
        bank=bank,
        address_display=address_display,
        order_number=order_number,
        caption=caption,
        date=date,
        include_camera_date=include_camera_date,
        include_time=include_time,
        full_sized_caption=full_sized_caption,
    )
    return _jpeg_response(draw_caption_header(image, spec, context=_CONTEXT))
