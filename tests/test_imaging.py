from io import BytesIO

from PIL import Image
import pytest

from thumbnail_service.errors import TransformError
from thumbnail_service.imaging import ImageBytes, detect_format, make_thumbnail, resize

from conftest import make_image_bytes, make_noisy_jpeg


def test_detect_format_recognizes_common_images():
    assert detect_format(make_image_bytes(fmt="JPEG")) == "JPEG"
    assert detect_format(make_image_bytes(fmt="PNG")) == "PNG"
    assert detect_format(make_image_bytes(fmt="GIF", mode="P", color=3)) == "GIF"


def test_detect_format_returns_none_for_non_images():
    assert detect_format(b"<!doctype html><html></html>") is None
    assert detect_format(b"") is None


def test_resize_outputs_fixed_box_jpeg():
    thumb = resize(make_image_bytes(size=(640, 120), fmt="PNG"))
    with Image.open(BytesIO(thumb)) as image:
        assert image.format == "JPEG"
        assert image.size == (150, 150)
        assert image.mode == "RGB"


def test_resize_honours_custom_dimensions():
    thumb = resize(make_image_bytes(size=(50, 80)), width=64, height=32)
    with Image.open(BytesIO(thumb)) as image:
        assert image.size == (64, 32)


def test_resize_is_byte_for_byte_deterministic():
    source = make_noisy_jpeg()
    assert resize(source) == resize(source)


def test_resize_flattens_transparency_onto_white():
    source = make_image_bytes(fmt="PNG", mode="RGBA", color=(0, 0, 0, 0))
    thumb = resize(source)
    with Image.open(BytesIO(thumb)) as image:
        r, g, b = image.getpixel((75, 75))
    assert min(r, g, b) > 240


def test_resize_rejects_truncated_data_that_passes_sniffing():
    source = make_noisy_jpeg()
    truncated = source[: len(source) // 2]
    assert detect_format(truncated) == "JPEG"
    with pytest.raises(TransformError):
        resize(truncated)


def test_make_thumbnail_wraps_artifact_metadata():
    artifact = make_thumbnail(ImageBytes(make_image_bytes(), "JPEG"), 120, 90)
    assert artifact.content_type == "image/jpeg"
    assert (artifact.width, artifact.height) == (120, 90)
    assert artifact.payload.startswith(b"\xff\xd8")
