"""Resize and transcode uploaded images to WebP."""
from __future__ import annotations

from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from agora.core.settings import settings
from agora.errors import InvalidImageError

__all__ = ["convert_avatar", "convert_post_image"]


def _open(data: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as err:
        raise InvalidImageError() from err
    # Respect camera orientation before any geometry change.
    image = ImageOps.exif_transpose(image)
    if image.mode not in ("RGB", "RGBA"):
        has_alpha = "A" in image.getbands() or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
    return image


def _to_webp(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="WEBP")
    return buffer.getvalue()


def convert_avatar(data: bytes) -> bytes:
    """Crop-resize an avatar to a square of ``AVATAR_SIZE`` pixels."""
    size = settings.avatar_size
    image = ImageOps.fit(_open(data), (size, size))
    return _to_webp(image)


def convert_post_image(data: bytes) -> bytes:
    """Shrink a post image to fit the configured box, never enlarging it."""
    image = _open(data)
    image.thumbnail((settings.post_image_max_width, settings.post_image_max_height))
    return _to_webp(image)
