import pytest
from PIL import Image

from instafix.errors import RenderError
from instafix.imaging.backgrounds import stretch_background, synthesize_background
from instafix.models.profiles import Background

def _gradient(w: int, h: int) -> Image.Image:
    im = Image.new("RGB", (w, h))
    im.putdata([(x * 2 % 256, y * 5 % 256, 7) for y in range(h) for x in range(w)])
    return im

def _colors(im: Image.Image):
    return {c for _, c in im.getcolors(maxcolors=im.width * im.height)}

def test_solid_background():
    src = Image.new("RGB", (10, 10), (255, 0, 0))
    bg = synthesize_background(Background(type="solid", color="#000000"), src, 40, 30, src, 15, 10)
    assert bg.size == (40, 30)
    assert _colors(bg) == {(0, 0, 0)}

def test_solid_background_with_bad_color_is_white():
    src = Image.new("RGB", (10, 10))
    bg = synthesize_background(Background(type="solid", color="navy"), src, 20, 20, src, 5, 5)
    assert _colors(bg) == {(255, 255, 255)}

def test_average_background():
    src = Image.new("RGB", (50, 80), (40, 80, 120))
    bg = synthesize_background(Background(type="Average"), src, 30, 30, src, 0, 0)
    assert _colors(bg) == {(40, 80, 120)}

def test_blur_background_covers_canvas():
    src = Image.new("RGB", (50, 80), (40, 80, 120))
    bg = synthesize_background(Background(type="blur", blur_radius=5), src, 120, 60, src, 0, 0)
    assert bg.size == (120, 60)
    assert _colors(bg) == {(40, 80, 120)}

def test_blur_background_darken():
    src = Image.new("RGB", (50, 50), (200, 100, 50))
    bg = synthesize_background(Background(type="blur", darken=0.5), src, 20, 20, src, 0, 0)
    assert _colors(bg) == {(100, 50, 25)}
    bg = synthesize_background(Background(type="blur", darken=1.0), src, 20, 20, src, 0, 0)
    assert _colors(bg) == {(0, 0, 0)}

def test_unknown_background_is_black():
    src = Image.new("RGB", (10, 10), (255, 255, 255))
    bg = synthesize_background(Background(type="gradient"), src, 20, 20, src, 5, 5)
    assert _colors(bg) == {(0, 0, 0)}

def test_stretch_extends_edges_vertically():
    fitted = _gradient(100, 50)
    bg = synthesize_background(Background(type="stretch"), fitted, 100, 100, fitted, 0, 25)
    assert bg.getpixel((50, 0)) == fitted.getpixel((50, 0))
    assert bg.getpixel((50, 24)) == fitted.getpixel((50, 0))
    assert bg.getpixel((50, 60)) == fitted.getpixel((50, 35))
    assert bg.getpixel((50, 99)) == fitted.getpixel((50, 49))
    assert bg.getpixel((99, 80)) == fitted.getpixel((99, 49))

def test_stretch_skips_zero_gaps():
    fitted = _gradient(60, 40)
    bg = stretch_background(fitted, fitted, 60, 40, 0, 0)
    assert bg.tobytes() == fitted.tobytes()

def test_stretch_sides_and_corners():
    src = _gradient(20, 20)
    bg = stretch_background(src, src, 40, 40, 10, 10)
    # sides
    assert bg.getpixel((0, 15)) == src.getpixel((0, 5))
    assert bg.getpixel((39, 15)) == src.getpixel((19, 5))
    assert bg.getpixel((15, 0)) == src.getpixel((5, 0))
    assert bg.getpixel((15, 39)) == src.getpixel((5, 19))
    # corners are flat
    assert _colors(bg.crop((0, 0, 10, 10))) == {src.getpixel((0, 0))}
    assert _colors(bg.crop((30, 0, 40, 10))) == {src.getpixel((19, 0))}
    assert _colors(bg.crop((0, 30, 10, 40))) == {src.getpixel((0, 19))}
    assert _colors(bg.crop((30, 30, 40, 40))) == {src.getpixel((19, 19))}
    # photo itself
    assert bg.crop((10, 10, 30, 30)).tobytes() == src.tobytes()

def test_stretch_rejects_bad_sizes():
    src = _gradient(10, 10)
    with pytest.raises(RenderError):
        stretch_background(src, src, 0, 10, 0, 0)
    with pytest.raises(RenderError):
        stretch_background(src, Image.new("RGB", (0, 10)), 10, 10, 0, 0)

def test_stretch_failure_degrades_to_black():
    src = _gradient(10, 10)
    bg = synthesize_background(Background(type="stretch"), src, 10, 10, Image.new("RGB", (0, 10)), 0, 0)
    assert _colors(bg) == {(0, 0, 0)}
