from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from instafix.errors import ConfigError
from .enums import FormatType

DEFAULT_JPEG_QUALITY = 90
DEFAULT_ASSETS_PATH = "assets"


@dataclass(frozen=True)
class Format:
    type: str
    width: int = 0
    height: int = 0
    from_list: Tuple[str, ...] = ()
    padding_percent: float = 0.0

    @property
    def kind(self) -> Optional[FormatType]:
        return FormatType.lookup(self.type)

    def validate(self, name: str) -> None:
        kind = self.kind
        if kind is FormatType.FIXED:
            if self.width <= 0 or self.height <= 0:
                raise ConfigError(f"formats.{name} fixed format requires width and height")
            if self.from_list:
                raise ConfigError(f"formats.{name} fixed format must not have from_list")
        elif kind is FormatType.AUTO:
            if not self.from_list:
                raise ConfigError(f"formats.{name} auto format requires from_list")
            if self.width != 0 or self.height != 0:
                raise ConfigError(f"formats.{name} auto format must not have width/height")
        else:
            raise ConfigError(f"formats.{name} has unknown type: {self.type}")
        if not 0 <= self.padding_percent <= 50:
            raise ConfigError(f"formats.{name}.padding_percent must be 0..50")


@dataclass(frozen=True)
class Background:
    type: str
    color: str = ""
    blur_radius: float = 0.0
    darken: float = 0.0

    def validate(self, name: str) -> None:
        # Unknown types are not rejected here: they render as a black canvas.
        if self.blur_radius < 0:
            raise ConfigError(f"backgrounds.{name}.blur_radius must be >= 0")
        if not 0 <= self.darken <= 1:
            raise ConfigError(f"backgrounds.{name}.darken must be 0..1")


@dataclass(frozen=True)
class Watermark:
    font: str
    size: float
    color: str = "#ffffff"
    opacity: float = 1.0
    align: str = ""
    offset_x: float = 0.0
    offset_y: float = 0.0
    outline: bool = False
    outline_color: str = "#000000"
    outline_width: float = 0.0

    def validate(self, name: str) -> None:
        if not self.font.strip():
            raise ConfigError(f"watermarks.{name}.font is required")
        if self.size <= 0:
            raise ConfigError(f"watermarks.{name}.size must be > 0")
        if not 0 <= self.opacity <= 1:
            raise ConfigError(f"watermarks.{name}.opacity must be 0..1")
        if self.outline_width < 0:
            raise ConfigError(f"watermarks.{name}.outline_width must be >= 0")


@dataclass(frozen=True)
class Profile:
    background_ref: str
    format_ref: str
    watermark_ref: str = ""
    padding_percent: Optional[float] = None
    border_width: int = 0
    border_color: str = ""
    no_upscale: bool = False
    jpeg_quality: Optional[int] = None


@dataclass(frozen=True)
class Settings:
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    assets_path: str = DEFAULT_ASSETS_PATH


@dataclass(frozen=True)
class Config:
    settings: Settings = field(default_factory=Settings)
    backgrounds: Mapping[str, Background] = field(default_factory=dict)
    watermarks: Mapping[str, Watermark] = field(default_factory=dict)
    formats: Mapping[str, Format] = field(default_factory=dict)
    profiles: Mapping[str, Profile] = field(default_factory=dict)

    def __post_init__(self):
        # Tables are read-only views over private copies.
        for name in ("backgrounds", "watermarks", "formats", "profiles"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))


@dataclass(frozen=True)
class ResolvedProfile:
    name: str
    background: Background
    watermark: Optional[Watermark]
    format: Format
    format_name: str
    # Dereferenced fixed candidates of an auto format, in from_list order.
    candidates: Tuple[Tuple[str, Format], ...]
    padding_percent: float
    border_width: int
    border_color: str
    no_upscale: bool
    jpeg_quality: int
    assets_path: str
