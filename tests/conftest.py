from __future__ import annotations
from pathlib import Path

import pytest
from PIL import ImageFont

import instafix.imaging.watermark as watermark_module


@pytest.fixture
def default_font(monkeypatch):
    """Use Pillow's bundled font instead of a font file from assets."""
    def _load(path: Path, size: float):
        return ImageFont.load_default(size=int(size))
    monkeypatch.setattr(watermark_module, "load_font", _load)


@pytest.fixture
def write_config(tmp_path: Path):
    def _write(text: str, name: str = "profiles.toml") -> Path:
        p = tmp_path / name
        p.write_text(text, encoding="utf-8")
        return p
    return _write
