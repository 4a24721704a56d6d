from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from instafix.errors import DecodeError

log = logging.getLogger("instafix.codec")

RAW_EXTENSIONS = (".dng", ".raw")

JPEG_SOI = b"\xff\xd8"
JPEG_EOI = b"\xff\xd9"


def decode_image(data: bytes, filename: str = "") -> Image.Image:
    """
    Decode image bytes, applying EXIF orientation.

    DNG/RAW files are not decoded directly: the largest embedded JPEG preview
    is used instead. Other inputs that fail to decode get the same preview
    scan as a fallback before the original error is raised.
    """
    ext = Path(filename).suffix.lower()
    if ext in RAW_EXTENSIONS:
        return decode_dng_preview(data)

    try:
        return _open(data)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        try:
            preview = decode_dng_preview(data)
        except DecodeError:
            raise DecodeError(f"decode image: {e}") from e
        log.info("Decoded embedded JPEG preview from %s", filename or "<body>")
        return preview


def decode_dng_preview(data: bytes) -> Image.Image:
    candidates = extract_jpegs(data)
    if not candidates:
        raise DecodeError("no embedded JPEG preview found in DNG")

    best: Optional[Image.Image] = None
    best_area = 0
    for candidate in candidates:
        try:
            im = _open(candidate)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            log.debug(f"Skipping undecodable JPEG candidate ({len(candidate)} bytes): {e}")
            continue
        area = im.width * im.height
        if area > best_area:
            best_area = area
            best = im
    if best is None:
        raise DecodeError("failed to decode embedded JPEG preview")
    return best


def extract_jpegs(data: bytes) -> List[bytes]:
    """Every FFD8 ... FFD9 byte span, scanning left to right without overlap."""
    results: List[bytes] = []
    i = 0
    while True:
        start = data.find(JPEG_SOI, i)
        if start == -1:
            break
        end = data.find(JPEG_EOI, start + 2)
        if end == -1:
            break
        end += 2
        results.append(data[start:end])
        i = end
    return results


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    image.convert("RGB").save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def _open(data: bytes) -> Image.Image:
    im = Image.open(io.BytesIO(data))
    im.load()
    return ImageOps.exif_transpose(im)
