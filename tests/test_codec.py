import io

import pytest
from PIL import Image

from instafix.errors import DecodeError, UserError
from instafix.imaging.codec import decode_image, encode_jpeg, extract_jpegs

def _jpeg(w: int, h: int, color=(200, 10, 20), **save_kw) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (w, h), color).save(buf, format="JPEG", quality=80, **save_kw)
    return buf.getvalue()

def test_dng_preview_is_extracted():
    payload = b"DNGFAKE" + _jpeg(32, 24) + b"TRAILER"
    decoded = decode_image(payload, "test.dng")
    assert decoded.size == (32, 24)

def test_dng_picks_largest_preview():
    payload = b"II*\x00" + _jpeg(16, 16) + b"\x00" * 64 + _jpeg(40, 30) + b"\x00" * 8 + _jpeg(20, 10)
    assert len(extract_jpegs(payload)) == 3
    assert decode_image(payload, "IMG_0001.DNG").size == (40, 30)

def test_dng_without_preview():
    with pytest.raises(DecodeError, match="no embedded JPEG"):
        decode_image(b"no jpeg in here", "photo.raw")
    with pytest.raises(DecodeError, match="failed to decode"):
        decode_image(b"\xff\xd8 broken \xff\xd9", "photo.dng")

def test_fallback_to_embedded_jpeg_for_other_names():
    payload = b"upload-prefix" + _jpeg(12, 8)
    assert decode_image(payload, "").size == (12, 8)

def test_garbage_is_user_error():
    with pytest.raises(DecodeError) as exc:
        decode_image(b"definitely not an image", "x.png")
    assert isinstance(exc.value, UserError)

def test_exif_orientation_is_applied():
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 CW
    data = _jpeg(32, 24, exif=exif.tobytes())
    assert decode_image(data, "portrait.jpg").size == (24, 32)

def test_png_round_trip_keeps_mode():
    buf = io.BytesIO()
    Image.new("RGBA", (5, 6), (1, 2, 3, 128)).save(buf, format="PNG")
    im = decode_image(buf.getvalue(), "a.png")
    assert im.size == (5, 6)
    assert im.mode == "RGBA"

def test_encode_jpeg():
    data = encode_jpeg(Image.new("RGBA", (30, 20), (10, 20, 30, 255)), 75)
    assert data[:2] == b"\xff\xd8"
    with Image.open(io.BytesIO(data)) as im:
        assert im.format == "JPEG"
        assert im.size == (30, 20)
