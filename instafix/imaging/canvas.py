from __future__ import annotations
from typing import Tuple

from PIL import Image

from .colors import RGB, BLACK

CANVAS_MODE = "RGB"

def new_canvas(width: int, height: int, color: RGB = BLACK) -> Image.Image:
    return Image.new(CANVAS_MODE, (width, height), color)

def has_alpha(im: Image.Image) -> bool:
    return im.mode in ("RGBA", "LA", "PA") or (im.mode == "P" and "transparency" in im.info)

def draw_image(canvas: Image.Image, im: Image.Image, x: int, y: int) -> None:
    """Paste im at (x, y), blending over the canvas where im is transparent. Offsets may be negative."""
    if has_alpha(im):
        rgba = im.convert("RGBA")
        canvas.paste(rgba.convert(CANVAS_MODE), (x, y), rgba)
    else:
        canvas.paste(im.convert(CANVAS_MODE), (x, y))

def fill_rect(canvas: Image.Image, box: Tuple[int, int, int, int], color: RGB) -> None:
    left, top, right, bottom = box
    if right <= left or bottom <= top:
        return
    canvas.paste(color, (left, top, right, bottom))
