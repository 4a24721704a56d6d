from __future__ import annotations
import re
import logging
from typing import Tuple

from PIL import Image, ImageStat

from .fit import RESAMPLE_LANCZOS

log = logging.getLogger("instafix.imaging")

RGB = Tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)

AVERAGE_SAMPLE_SIZE = (32, 32)

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


def parse_hex_color(value: str) -> RGB:
    """
    Parse '#rgb' or '#rrggbb'. Raises ValueError for anything else.
    """
    hex_str = (value or "").strip()
    if not hex_str:
        raise ValueError("empty color")
    if not hex_str.startswith("#"):
        raise ValueError(f"invalid color: {hex_str}")
    digits = hex_str[1:]
    if len(digits) not in (3, 6):
        raise ValueError(f"invalid color length: {hex_str}")
    if not _HEX_DIGITS.fullmatch(digits):
        raise ValueError(f"invalid color: {hex_str}")
    if len(digits) == 3:
        return tuple(int(d, 16) * 17 for d in digits)  # type: ignore[return-value]
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def color_or_white(value: str) -> RGB:
    """Lenient variant: a malformed color becomes opaque white instead of failing."""
    try:
        return parse_hex_color(value)
    except ValueError as e:
        log.warning("%s; using white", e)
        return WHITE


def average_color(src: Image.Image) -> RGB:
    """Mean color of a 32x32 Lanczos thumbnail, averaged in 16-bit channel space."""
    thumb = src.convert("RGB").resize(AVERAGE_SAMPLE_SIZE, resample=RESAMPLE_LANCZOS)
    total = thumb.width * thumb.height
    if total == 0:
        return BLACK
    sums = ImageStat.Stat(thumb).sum
    return tuple((int(round(s)) * 257 // total) >> 8 for s in sums[:3])  # type: ignore[return-value]
