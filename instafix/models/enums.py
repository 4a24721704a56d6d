from __future__ import annotations
from enum import Enum

class _Keyword(Enum):
    @classmethod
    def lookup(cls, value: str):
        key = (value or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return None

class FormatType(_Keyword):
    FIXED = "fixed"     # explicit width x height
    AUTO = "auto"       # closest aspect ratio from a candidate list

class BackgroundType(_Keyword):
    SOLID = "solid"       # flat hex color
    AVERAGE = "average"   # flat average color of the photo
    BLUR = "blur"         # cover-fit, blurred, optionally darkened
    STRETCH = "stretch"   # photo edge pixels smeared outwards
