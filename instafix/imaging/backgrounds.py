# instafix/imaging/backgrounds.py
# Purpose: canvas-sized backdrops drawn behind the fitted photo.
# - solid: flat hex color (malformed hex -> white)
# - average: flat mean color of the photo
# - blur: cover-fit, Gaussian blur, optional black veil
# - stretch: edge pixels of the fitted photo smeared out to the canvas border
# Unknown background types render an opaque black canvas.

from __future__ import annotations

import logging
from typing import Tuple

from PIL import Image, ImageFilter, ImageOps

from instafix.errors import RenderError
from instafix.models.enums import BackgroundType
from instafix.models.profiles import Background
from .canvas import draw_image, fill_rect, new_canvas
from .colors import BLACK, RGB, average_color, color_or_white
from .fit import RESAMPLE_LANCZOS, RESAMPLE_NEAREST

log = logging.getLogger("instafix.imaging")


def synthesize_background(
    bg: Background,
    src: Image.Image,
    width: int,
    height: int,
    fitted: Image.Image,
    fit_x: int,
    fit_y: int,
) -> Image.Image:
    kind = BackgroundType.lookup(bg.type)

    if kind is BackgroundType.SOLID:
        return new_canvas(width, height, color_or_white(bg.color))

    if kind is BackgroundType.AVERAGE:
        return new_canvas(width, height, average_color(src))

    if kind is BackgroundType.BLUR:
        return blur_background(src, width, height, bg.blur_radius, bg.darken)

    if kind is BackgroundType.STRETCH:
        try:
            return stretch_background(src, fitted, width, height, fit_x, fit_y)
        except RenderError as e:
            log.error("Stretch background failed (%s); using black", e)
            return new_canvas(width, height, BLACK)

    log.warning("Unknown background type %r; using black", bg.type)
    return new_canvas(width, height, BLACK)


def blur_background(src: Image.Image, width: int, height: int, radius: float, darken: float) -> Image.Image:
    canvas = ImageOps.fit(src.convert("RGB"), (width, height), method=RESAMPLE_LANCZOS, centering=(0.5, 0.5))
    if radius > 0:
        canvas = canvas.filter(ImageFilter.GaussianBlur(radius=radius))
    if darken > 0:
        veil = new_canvas(width, height, BLACK)
        canvas = Image.blend(canvas, veil, min(darken, 1.0))
    return canvas


def stretch_background(
    src: Image.Image,
    fitted: Image.Image,
    width: int,
    height: int,
    x0: int,
    y0: int,
) -> Image.Image:
    """
    Fill the canvas around the fitted photo by stretching its 1px edge strips
    outwards (nearest neighbour). The four outer corners get a flat color
    taken from the ends of the top/bottom rows of a cover-fit edge sample.
    """
    if width <= 0 or height <= 0:
        raise RenderError(f"invalid stretch size: {width}x{height}")
    fit_w, fit_h = fitted.size
    if fit_w == 0 or fit_h == 0:
        raise RenderError("invalid fitted size")

    edge_sample = ImageOps.fit(src.convert("RGB"), (fit_w, fit_h), method=RESAMPLE_NEAREST, centering=(0.5, 0.5))
    top_left, top_right = _row_ends(edge_sample, 0)
    bottom_left, bottom_right = _row_ends(edge_sample, fit_h - 1)

    bg = new_canvas(width, height, BLACK)
    draw_image(bg, fitted, x0, y0)

    strip_src = fitted.convert("RGB")
    right_pad = width - (x0 + fit_w)
    bottom_pad = height - (y0 + fit_h)

    if x0 > 0:
        strip = strip_src.crop((0, 0, 1, fit_h)).resize((x0, fit_h), resample=RESAMPLE_NEAREST)
        bg.paste(strip, (0, y0))
    if right_pad > 0:
        strip = strip_src.crop((fit_w - 1, 0, fit_w, fit_h)).resize((right_pad, fit_h), resample=RESAMPLE_NEAREST)
        bg.paste(strip, (x0 + fit_w, y0))
    if y0 > 0:
        strip = strip_src.crop((0, 0, fit_w, 1)).resize((fit_w, y0), resample=RESAMPLE_NEAREST)
        bg.paste(strip, (x0, 0))
    if bottom_pad > 0:
        strip = strip_src.crop((0, fit_h - 1, fit_w, fit_h)).resize((fit_w, bottom_pad), resample=RESAMPLE_NEAREST)
        bg.paste(strip, (x0, y0 + fit_h))

    fill_rect(bg, (0, 0, x0, y0), top_left)
    fill_rect(bg, (x0 + fit_w, 0, width, y0), top_right)
    fill_rect(bg, (0, y0 + fit_h, x0, height), bottom_left)
    fill_rect(bg, (x0 + fit_w, y0 + fit_h, width, height), bottom_right)

    return bg


def _row_ends(im: Image.Image, y: int) -> Tuple[RGB, RGB]:
    return im.getpixel((0, y)), im.getpixel((im.width - 1, y))
