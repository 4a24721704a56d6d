from __future__ import annotations
from typing import Mapping, Tuple

from instafix.errors import ConfigError, UserError
from instafix.models.enums import FormatType
from instafix.models.profiles import Format

def aspect_ratio(width: float, height: float) -> float:
    return width / height

def select_format(formats: Mapping[str, Format], fmt: Format, src_w: int, src_h: int) -> Tuple[int, int]:
    """Target (width, height) for a fixed format, or the auto candidate closest to the source ratio."""
    kind = fmt.kind
    if kind is FormatType.FIXED:
        return (fmt.width, fmt.height)
    if kind is not FormatType.AUTO:
        raise ConfigError(f"unknown format type: {fmt.type}")
    if not fmt.from_list:
        raise ConfigError("auto format requires from_list")
    if src_w <= 0 or src_h <= 0:
        raise UserError(f"invalid source size: {src_w}x{src_h}")

    src_ratio = aspect_ratio(src_w, src_h)
    best = None
    best_diff = float("inf")
    for name in fmt.from_list:
        candidate = formats.get(name)
        if candidate is None:
            raise ConfigError(f"auto format references unknown format: {name}")
        if candidate.kind is not FormatType.FIXED:
            raise ConfigError(f"auto format references non-fixed format: {name}")
        diff = abs(src_ratio - aspect_ratio(candidate.width, candidate.height))
        # strict '<' keeps the first listed candidate on ties
        if diff < best_diff:
            best_diff = diff
            best = candidate
    return (best.width, best.height)
