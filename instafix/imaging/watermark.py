from __future__ import annotations

import math
import logging
from pathlib import Path
from typing import Iterator, Tuple

from PIL import Image, ImageDraw, ImageFont

from instafix.errors import RenderError
from instafix.models.profiles import Watermark
from .colors import color_or_white

log = logging.getLogger("instafix.imaging")

DEFAULT_ALIGN = "bottom-center"
DEFAULT_OUTLINE_WIDTH = 2.0

_VERTICAL = ("top", "bottom")
_HORIZONTAL = ("left", "right")
_CENTER = ("center", "middle")


def anchor_for_align(
    width: int,
    height: int,
    align: str,
    offset_x: float,
    offset_y: float,
) -> Tuple[float, float, float, float]:
    """
    Map an alignment keyword to (x, y, ax, ay).

    x/y is the anchor point on the canvas, ax/ay the fraction of the text box
    placed on it (0 = left/top edge, 0.5 = centered, 1 = right/bottom edge).
    Unknown keywords never fail: they degrade to the bottom/center defaults.
    """
    align = (align or "").strip().lower() or DEFAULT_ALIGN

    h_anchor = "center"
    v_anchor = "bottom"
    parts = align.split("-")
    if len(parts) == 2:
        v_anchor, h_anchor = parts
    elif len(parts) == 1:
        word = parts[0]
        if word in _VERTICAL:
            v_anchor, h_anchor = word, "center"
        elif word in _HORIZONTAL:
            v_anchor, h_anchor = "center", word
        elif word in _CENTER:
            v_anchor, h_anchor = "center", "center"
        else:
            h_anchor = word

    if h_anchor == "left":
        x, ax = offset_x, 0.0
    elif h_anchor == "right":
        x, ax = width - offset_x, 1.0
    else:
        x, ax = width / 2 + offset_x, 0.5

    if v_anchor == "top":
        y, ay = offset_y, 0.0
    elif v_anchor in _CENTER:
        y, ay = height / 2 + offset_y, 0.5
    else:
        y, ay = height - offset_y, 1.0

    return x, y, ax, ay


def outline_offsets(outline_width: float) -> Iterator[Tuple[int, int]]:
    """Integer offsets strictly inside a disc of radius outline_width."""
    reach = int(math.ceil(outline_width))
    limit = outline_width * outline_width
    for dy in range(-reach, reach + 1):
        for dx in range(-reach, reach + 1):
            if dx * dx + dy * dy < limit:
                yield dx, dy


def resolve_font_path(font: str, assets_path: str) -> Path:
    p = Path(font)
    if p.is_absolute():
        return p
    return Path(assets_path) / font


def load_font(path: Path, size: float) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(str(path), size=size)
    except OSError as e:
        raise RenderError(f"load watermark font {path}: {e}") from e


def draw_watermark(canvas: Image.Image, text: str, wm: Watermark, assets_path: str) -> None:
    font = load_font(resolve_font_path(wm.font, assets_path), wm.size)
    x, y, ax, ay = anchor_for_align(canvas.width, canvas.height, wm.align, wm.offset_x, wm.offset_y)
    log.debug(f"Watermark anchor: ({x:.1f}, {y:.1f}) ax={ax} ay={ay}")

    if wm.outline:
        outline_width = wm.outline_width or DEFAULT_OUTLINE_WIDTH
        stamps = [(x + dx, y + dy) for dx, dy in outline_offsets(outline_width)]
        _draw_text(canvas, text, font, stamps, ax, ay, color_or_white(wm.outline_color), wm.opacity)

    _draw_text(canvas, text, font, [(x, y)], ax, ay, color_or_white(wm.color), wm.opacity)


def _draw_text(canvas, text, font, points, ax, ay, color, opacity) -> None:
    # Each point is composited on its own, so overlapping stamps build up alpha.
    left, top, right, bottom = ImageDraw.Draw(canvas).textbbox((0, 0), text, font=font)
    text_w, text_h = int(math.ceil(right - left)), int(math.ceil(bottom - top))
    if text_w <= 0 or text_h <= 0:
        return
    mask = Image.new("L", (text_w, text_h), 0)
    ImageDraw.Draw(mask).text((-left, -top), text, font=font, fill=255)
    if opacity < 1.0:
        mask = mask.point(lambda v: int(round(v * opacity)))
    for px, py in points:
        x0 = int(round(px - ax * text_w))
        y0 = int(round(py - ay * text_h))
        canvas.paste(color, (x0, y0, x0 + text_w, y0 + text_h), mask)
