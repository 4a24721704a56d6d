from __future__ import annotations
from typing import Tuple

from PIL import Image

RESAMPLE_LANCZOS = Image.Resampling.LANCZOS
RESAMPLE_NEAREST = Image.Resampling.NEAREST

def available_box(target_w: int, target_h: int, padding_percent: float) -> Tuple[float, float]:
    padding = max(padding_percent, 0.0)
    factor = 1.0 - (padding * 2 / 100.0)
    return (max(1.0, target_w * factor), max(1.0, target_h * factor))

def contained_size(src_w: int, src_h: int, box_w: int, box_h: int) -> Tuple[int, int]:
    """Largest size with the source aspect that fits the box; each side is at least 1px."""
    src_ratio = src_w / src_h
    if src_ratio > box_w / box_h:
        return box_w, max(1, round(box_w / src_ratio))
    return max(1, round(box_h * src_ratio)), box_h

def fit_image(
    src: Image.Image,
    target_w: int,
    target_h: int,
    padding_percent: float,
    no_upscale: bool,
) -> Tuple[Image.Image, int, int]:
    """
    Scale src into the padded box of a target_w x target_h canvas and center it.
    Returns (fitted, x, y). With no_upscale a small source keeps its native
    pixels and may overflow the padded box; x/y are then possibly negative.
    """
    avail_w, avail_h = available_box(target_w, target_h, padding_percent)
    scale = min(avail_w / src.width, avail_h / src.height)

    if no_upscale and scale > 1.0:
        fitted = src
    else:
        size = contained_size(src.width, src.height, max(1, int(avail_w)), max(1, int(avail_h)))
        fitted = src.resize(size, RESAMPLE_LANCZOS)

    x = int((target_w - fitted.width) / 2)
    y = int((target_h - fitted.height) / 2)
    return fitted, x, y
