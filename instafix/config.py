# instafix/config.py
# Purpose: load profiles.toml into an immutable Config and resolve profiles.

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import tomlkit
from tomlkit.exceptions import TOMLKitError

from instafix.errors import ConfigError, ProfileNotFoundError
from instafix.models.enums import BackgroundType, FormatType
from instafix.models.profiles import (
    DEFAULT_ASSETS_PATH,
    DEFAULT_JPEG_QUALITY,
    Background,
    Config,
    Format,
    Profile,
    ResolvedProfile,
    Settings,
    Watermark,
)

log = logging.getLogger("instafix.config")

CONFIG_ENV = "INSTAFIX_CONFIG"
CONFIG_FILENAME = "profiles.toml"


# ---------------------------- loading ----------------------------
def load_config(path: str | Path) -> Config:
    """Read a TOML file and return a validated Config."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"read config: {e}") from e
    try:
        raw = tomlkit.parse(text).unwrap()
    except TOMLKitError as e:
        raise ConfigError(f"read config {p}: {e}") from e
    cfg = config_from_dict(raw)
    log.info("Loaded %d profile(s) from %s", len(cfg.profiles), p)
    return cfg


def load_default_config() -> Tuple[Config, Path]:
    path = find_default_path()
    return load_config(path), path


def find_default_path() -> Path:
    """
    Locate profiles.toml without an explicit path:
    $INSTAFIX_CONFIG, then ./profiles.toml, ./config/profiles.toml,
    then profiles.toml next to the running script.
    """
    env_path = os.environ.get(CONFIG_ENV, "").strip()
    if env_path:
        if Path(env_path).is_file():
            return Path(env_path)
        raise ConfigError(f"config path from {CONFIG_ENV} not found: {env_path}")

    cwd = Path.cwd()
    for candidate in (cwd / CONFIG_FILENAME, cwd / "config" / CONFIG_FILENAME):
        if candidate.is_file():
            return candidate

    if sys.argv and sys.argv[0]:
        beside_script = Path(sys.argv[0]).resolve().parent / CONFIG_FILENAME
        if beside_script.is_file():
            return beside_script

    raise ConfigError(f"default config not found (looked for {CONFIG_FILENAME})")


def config_from_dict(raw: Dict[str, Any]) -> Config:
    settings_raw = _table(raw, "settings")
    jpeg_quality = _int(settings_raw, "jpeg_quality", "settings") or DEFAULT_JPEG_QUALITY
    if not 1 <= jpeg_quality <= 100:
        raise ConfigError(f"settings.jpeg_quality out of range: {jpeg_quality}")
    assets_path = _str(settings_raw, "assets_path", "settings").strip() or DEFAULT_ASSETS_PATH

    cfg = Config(
        settings=Settings(jpeg_quality=jpeg_quality, assets_path=assets_path),
        backgrounds={n: _background(n, d) for n, d in _table(raw, "backgrounds").items()},
        watermarks={n: _watermark(n, d) for n, d in _table(raw, "watermarks").items()},
        formats={n: _format(n, d) for n, d in _table(raw, "formats").items()},
        profiles={n: _profile(n, d) for n, d in _table(raw, "profiles").items()},
    )
    validate_config(cfg)
    return cfg


def validate_config(cfg: Config) -> None:
    """Raise ConfigError for the first problem found."""
    if not 1 <= cfg.settings.jpeg_quality <= 100:
        raise ConfigError(f"settings.jpeg_quality out of range: {cfg.settings.jpeg_quality}")

    for name, fmt in cfg.formats.items():
        fmt.validate(name)
    for name, fmt in cfg.formats.items():
        if fmt.kind is FormatType.AUTO:
            _fixed_candidates(cfg.formats, name, fmt)

    for name, bg in cfg.backgrounds.items():
        bg.validate(name)
        if BackgroundType.lookup(bg.type) is None:
            log.warning("backgrounds.%s has unknown type %r; it will render as black", name, bg.type)

    for name, wm in cfg.watermarks.items():
        wm.validate(name)

    for name, profile in cfg.profiles.items():
        _validate_profile(cfg, name, profile)


def _validate_profile(cfg: Config, name: str, profile: Profile) -> None:
    if not profile.background_ref.strip():
        raise ConfigError(f"profiles.{name}.background_ref is required")
    if not profile.format_ref.strip():
        raise ConfigError(f"profiles.{name}.format_ref is required")
    if profile.background_ref not in cfg.backgrounds:
        raise ConfigError(f"profiles.{name}.background_ref not found: {profile.background_ref}")
    if profile.format_ref not in cfg.formats:
        raise ConfigError(f"profiles.{name}.format_ref not found: {profile.format_ref}")
    if profile.watermark_ref and profile.watermark_ref not in cfg.watermarks:
        raise ConfigError(f"profiles.{name}.watermark_ref not found: {profile.watermark_ref}")
    if profile.jpeg_quality is not None and not 1 <= profile.jpeg_quality <= 100:
        raise ConfigError(f"profiles.{name}.jpeg_quality out of range: {profile.jpeg_quality}")
    if profile.padding_percent is not None and not 0 <= profile.padding_percent <= 50:
        raise ConfigError(f"profiles.{name}.padding_percent must be 0..50")
    if profile.border_width < 0:
        raise ConfigError(f"profiles.{name}.border_width must be >= 0")


# ---------------------------- resolution ----------------------------
def resolve_profile(cfg: Config, name: str) -> ResolvedProfile:
    """Merge a profile with its references and overrides. Nothing is partially built."""
    profile = cfg.profiles.get(name)
    if profile is None:
        raise ProfileNotFoundError(name)

    fmt = cfg.formats.get(profile.format_ref)
    if fmt is None:
        raise ConfigError(f"format not found: {profile.format_ref}")
    fmt.validate(profile.format_ref)
    candidates: Tuple[Tuple[str, Format], ...] = ()
    if fmt.kind is FormatType.AUTO:
        candidates = _fixed_candidates(cfg.formats, profile.format_ref, fmt)

    background = cfg.backgrounds.get(profile.background_ref)
    if background is None:
        raise ConfigError(f"background not found: {profile.background_ref}")
    background.validate(profile.background_ref)

    watermark: Optional[Watermark] = None
    if profile.watermark_ref:
        watermark = cfg.watermarks.get(profile.watermark_ref)
        if watermark is None:
            raise ConfigError(f"watermark not found: {profile.watermark_ref}")
        watermark.validate(profile.watermark_ref)

    jpeg_quality = cfg.settings.jpeg_quality
    if profile.jpeg_quality:
        jpeg_quality = profile.jpeg_quality

    padding_percent = fmt.padding_percent
    if profile.padding_percent is not None:
        padding_percent = profile.padding_percent

    return ResolvedProfile(
        name=name,
        background=background,
        watermark=watermark,
        format=fmt,
        format_name=profile.format_ref,
        candidates=candidates,
        padding_percent=padding_percent,
        border_width=profile.border_width,
        border_color=profile.border_color,
        no_upscale=profile.no_upscale,
        jpeg_quality=jpeg_quality,
        assets_path=cfg.settings.assets_path.strip() or DEFAULT_ASSETS_PATH,
    )


def _fixed_candidates(formats: Mapping[str, Format], name: str, fmt: Format) -> Tuple[Tuple[str, Format], ...]:
    out = []
    for ref in fmt.from_list:
        candidate = formats.get(ref)
        if candidate is None:
            raise ConfigError(f"formats.{name} references unknown format: {ref}")
        if candidate.kind is not FormatType.FIXED:
            raise ConfigError(f"formats.{name} references non-fixed format: {ref}")
        out.append((ref, candidate))
    return tuple(out)


# ---------------------------- raw table helpers ----------------------------
def _table(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a table")
    return value


def _entry(section: str, name: str, data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError(f"{section}.{name} must be a table")
    return data


def _str(data: Dict[str, Any], key: str, where: str, default: str = "") -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ConfigError(f"{where}.{key} must be a string")
    return value


def _int(data: Dict[str, Any], key: str, where: str, default: int = 0) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}.{key} must be an integer")
    return value


def _float(data: Dict[str, Any], key: str, where: str, default: float = 0.0) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{where}.{key} must be a number")
    return float(value)


def _bool(data: Dict[str, Any], key: str, where: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"{where}.{key} must be true or false")
    return value


def _format(name: str, data: Any) -> Format:
    where = f"formats.{name}"
    data = _entry("formats", name, data)
    from_list = data.get("from_list", [])
    if not isinstance(from_list, list) or not all(isinstance(r, str) for r in from_list):
        raise ConfigError(f"{where}.from_list must be a list of format names")
    return Format(
        type=_str(data, "type", where),
        width=_int(data, "width", where),
        height=_int(data, "height", where),
        from_list=tuple(from_list),
        padding_percent=_float(data, "padding_percent", where),
    )


def _background(name: str, data: Any) -> Background:
    where = f"backgrounds.{name}"
    data = _entry("backgrounds", name, data)
    return Background(
        type=_str(data, "type", where),
        color=_str(data, "color", where),
        blur_radius=_float(data, "blur_radius", where),
        darken=_float(data, "darken", where),
    )


def _watermark(name: str, data: Any) -> Watermark:
    where = f"watermarks.{name}"
    data = _entry("watermarks", name, data)
    return Watermark(
        font=_str(data, "font", where),
        size=_float(data, "size", where),
        color=_str(data, "color", where, "#ffffff"),
        opacity=_float(data, "opacity", where, 1.0),
        align=_str(data, "align", where),
        offset_x=_float(data, "offset_x", where),
        offset_y=_float(data, "offset_y", where),
        outline=_bool(data, "outline", where),
        outline_color=_str(data, "outline_color", where, "#000000"),
        outline_width=_float(data, "outline_width", where),
    )


def _profile(name: str, data: Any) -> Profile:
    where = f"profiles.{name}"
    data = _entry("profiles", name, data)
    padding = _float(data, "padding_percent", where) if "padding_percent" in data else None
    quality = _int(data, "jpeg_quality", where) or None
    return Profile(
        background_ref=_str(data, "background_ref", where),
        format_ref=_str(data, "format_ref", where),
        watermark_ref=_str(data, "watermark_ref", where),
        padding_percent=padding,
        border_width=_int(data, "border_width", where),
        border_color=_str(data, "border_color", where),
        no_upscale=_bool(data, "no_upscale", where),
        jpeg_quality=quality,
    )
