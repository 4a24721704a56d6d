# instafix/imaging/pipeline.py
# Purpose: compose a photo onto a profile-sized canvas.
# Order of work:
# - target size (fixed format, or closest-ratio auto candidate)
# - fit + center the photo inside the padded area
# - background behind it (solid / average / blur / stretch)
# - optional border frame, then the photo itself
# - optional text watermark

from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image

from instafix.config import resolve_profile, validate_config
from instafix.errors import InstafixError, RenderError, UserError
from instafix.models.profiles import Config, ResolvedProfile
from .backgrounds import synthesize_background
from .canvas import draw_image, fill_rect
from .colors import color_or_white
from .fit import fit_image
from .formats import select_format
from .watermark import draw_watermark

log = logging.getLogger("instafix.pipeline")


def draw_border(canvas: Image.Image, x: int, y: int, w: int, h: int, border_width: int, border_color: str) -> None:
    """Fill the photo box grown by border_width on every side; the photo is pasted over it afterwards."""
    if border_width <= 0:
        return
    bw = border_width
    fill_rect(canvas, (x - bw, y - bw, x + w + bw, y + h + bw), color_or_white(border_color))


def compose(resolved: ResolvedProfile, src: Image.Image, watermark_text: str = "") -> Tuple[Image.Image, int]:
    """
    Render src with a resolved profile.
    Returns the canvas and the JPEG quality the caller should encode it with.
    """
    if watermark_text and resolved.watermark is None:
        raise UserError("watermark text provided, but profile has no watermark_ref")
    if src.width <= 0 or src.height <= 0:
        raise UserError(f"invalid source size: {src.width}x{src.height}")

    target_w, target_h = select_format(dict(resolved.candidates), resolved.format, src.width, src.height)
    if target_w <= 0 or target_h <= 0:
        raise RenderError(f"invalid target size: {target_w}x{target_h}")
    log.info(
        f"Profile '{resolved.name}': source {src.width}x{src.height} -> "
        f"{target_w}x{target_h} ({resolved.format_name}), background={resolved.background.type}"
    )

    try:
        fitted, x, y = fit_image(src, target_w, target_h, resolved.padding_percent, resolved.no_upscale)
        log.debug(f"Fitted photo {fitted.width}x{fitted.height} at ({x}, {y})")
        canvas = synthesize_background(resolved.background, src, target_w, target_h, fitted, x, y)
    except InstafixError:
        raise
    except (ValueError, OSError, MemoryError) as e:
        raise RenderError(f"render {target_w}x{target_h}: {e}") from e

    draw_border(canvas, x, y, fitted.width, fitted.height, resolved.border_width, resolved.border_color)
    draw_image(canvas, fitted, x, y)

    if watermark_text:
        draw_watermark(canvas, watermark_text, resolved.watermark, resolved.assets_path)

    return canvas, resolved.jpeg_quality


class Processor:
    """Applies profiles from one validated, read-only Config."""

    def __init__(self, config: Config):
        validate_config(config)
        self.config = config

    def resolve(self, profile_name: str) -> ResolvedProfile:
        return resolve_profile(self.config, profile_name)

    def process(self, src: Image.Image, profile_name: str, watermark_text: Optional[str] = "") -> Tuple[Image.Image, int]:
        resolved = self.resolve(profile_name)
        return compose(resolved, src, watermark_text or "")
