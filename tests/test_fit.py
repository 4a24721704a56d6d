import pytest
from PIL import Image

from instafix.imaging.fit import available_box, fit_image

def test_available_box_padding_and_clamp():
    assert available_box(500, 400, 10) == pytest.approx((400.0, 320.0))
    assert available_box(500, 400, 50) == (1.0, 1.0)
    assert available_box(500, 400, -5) == (500.0, 400.0)

def test_no_upscale_keeps_native_pixels():
    src = Image.new("RGB", (100, 100), (255, 0, 0))
    fitted, x, y = fit_image(src, 500, 500, 0, no_upscale=True)
    assert fitted.size == (100, 100)
    assert (x, y) == (200, 200)

def test_upscale_when_allowed():
    src = Image.new("RGB", (100, 50), (255, 0, 0))
    fitted, x, y = fit_image(src, 500, 500, 0, no_upscale=False)
    assert fitted.size == (500, 250)
    assert (x, y) == (0, 125)

def test_downscale_with_padding():
    src = Image.new("RGB", (1000, 1000), (0, 255, 0))
    fitted, x, y = fit_image(src, 500, 500, 10, no_upscale=True)
    assert fitted.size == (400, 400)
    assert (x, y) == (50, 50)

def test_portrait_source_in_landscape_canvas():
    src = Image.new("RGB", (300, 600), (0, 0, 255))
    fitted, x, y = fit_image(src, 400, 300, 0, no_upscale=False)
    assert fitted.size == (150, 300)
    assert (x, y) == (125, 0)

def test_full_padding_collapses_to_single_pixel():
    src = Image.new("RGB", (100, 100), (0, 0, 255))
    fitted, x, y = fit_image(src, 500, 500, 50, no_upscale=False)
    assert fitted.size == (1, 1)
    assert (x, y) == (249, 249)

@pytest.mark.parametrize("size, fitted_size, offset", [
    ((10000, 4), (1080, 1), (0, 539)),
    ((4, 10000), (1, 1080), (539, 0)),
])
def test_extreme_aspect_keeps_one_pixel_side(size, fitted_size, offset):
    src = Image.new("RGB", size, (10, 20, 30))
    fitted, x, y = fit_image(src, 1080, 1080, 0, no_upscale=False)
    assert fitted.size == fitted_size
    assert (x, y) == offset
