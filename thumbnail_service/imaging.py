"""
Image sniffing and thumbnail rendering.

Thumbnails are a center cover-crop into a fixed box, always re-encoded as
baseline JPEG. Every step is deterministic so the same source bytes always
produce the same thumbnail bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image, ImageOps

from .errors import TransformError

JPEG_CONTENT_TYPE = "image/jpeg"
DEFAULT_SIZE = 150
DEFAULT_QUALITY = 85
_BACKGROUND = (255, 255, 255)


@dataclass(frozen=True)
class ImageBytes:
    payload: bytes
    format: Optional[str]  # Pillow format name, None when unrecognized


@dataclass(frozen=True)
class ThumbnailArtifact:
    payload: bytes
    width: int
    height: int
    content_type: str = JPEG_CONTENT_TYPE


def detect_format(image_bytes: bytes) -> Optional[str]:
    """Return the Pillow format name from the header, or None for non-images."""
    try:
        with Image.open(BytesIO(image_bytes)) as image:
            return image.format
    except Image.DecompressionBombError as exc:
        raise TransformError("Image dimensions exceed the decoder limit") from exc
    except (OSError, ValueError, SyntaxError):
        return None


def _flatten(image: Image.Image) -> Image.Image:
    """Composite any transparency onto white; JPEG has no alpha channel."""
    has_alpha = image.mode in ("RGBA", "LA") or (
        image.mode == "P" and "transparency" in image.info
    )
    if not has_alpha:
        return image.convert("RGB")
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, _BACKGROUND)
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def resize(
    image_bytes: bytes,
    width: int = DEFAULT_SIZE,
    height: int = DEFAULT_SIZE,
    quality: int = DEFAULT_QUALITY,
) -> bytes:
    """
    Render a `width`x`height` JPEG thumbnail from any decodable image.

    Raises:
        TransformError: when the payload cannot be decoded.
    """
    try:
        with Image.open(BytesIO(image_bytes)) as source:
            image = ImageOps.exif_transpose(source)
            image = _flatten(image)
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise TransformError("Invalid image data") from exc

    thumb = ImageOps.fit(
        image,
        (width, height),
        method=Image.Resampling.LANCZOS,
        centering=(0.5, 0.5),
    )
    out = BytesIO()
    thumb.save(out, format="JPEG", quality=quality, optimize=False, progressive=False)
    return out.getvalue()


def make_thumbnail(
    image: ImageBytes,
    width: int = DEFAULT_SIZE,
    height: int = DEFAULT_SIZE,
    quality: int = DEFAULT_QUALITY,
) -> ThumbnailArtifact:
    return ThumbnailArtifact(
        payload=resize(image.payload, width, height, quality),
        width=width,
        height=height,
    )
