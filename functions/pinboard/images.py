"""
Image helpers for pins: type checks, compression, previews and fitting.
"""

from __future__ import annotations

import base64
import io
import logging
from typing import Optional

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

JPEG_QUALITY_STEPS = (85, 75, 65, 55, 45, 35)
DOWNSCALE_FACTOR = 0.75
MIN_DIMENSION = 16

FIT_MAX_WIDTH = "max-width"
FIT_MAX_HEIGHT = "max-height"


def is_image_media_type(media_type: Optional[str]) -> bool:
    if not media_type:
        return False
    return media_type.split(";", 1)[0].strip().lower().startswith("image/")


def to_data_url(data: bytes, media_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def _encode_jpeg(img: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def compress_image(data: bytes, max_size_mb: float = 1.0) -> tuple[bytes, str]:
    """
    Shrinks an image until it fits under ``max_size_mb``.

    Images already under the ceiling are returned untouched. Larger ones are
    re-encoded as JPEG at decreasing quality and then downscaled until they
    fit.

    Args:
        data (bytes): The raw image file.
        max_size_mb (float): Size ceiling in megabytes.

    Returns:
        tuple[bytes, str]: The (possibly) compressed bytes and their media type.

    Raises:
        PIL.UnidentifiedImageError: If the data is not a readable image.
    """
    max_bytes = int(max_size_mb * 1024 * 1024)
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        media_type = Image.MIME.get(img.format or "", "application/octet-stream")
        if len(data) <= max_bytes:
            return data, media_type

        working = ImageOps.exif_transpose(img).convert("RGB")

    for quality in JPEG_QUALITY_STEPS:
        encoded = _encode_jpeg(working, quality)
        if len(encoded) <= max_bytes:
            logger.info(
                "Compressed image from %d to %d bytes (quality=%d)",
                len(data),
                len(encoded),
                quality,
            )
            return encoded, "image/jpeg"

    quality = JPEG_QUALITY_STEPS[-1]
    while len(encoded) > max_bytes and min(working.size) > MIN_DIMENSION:
        width = max(MIN_DIMENSION, int(working.width * DOWNSCALE_FACTOR))
        height = max(MIN_DIMENSION, int(working.height * DOWNSCALE_FACTOR))
        working = working.resize((width, height), Image.Resampling.LANCZOS)
        encoded = _encode_jpeg(working, quality)

    logger.info(
        "Compressed image from %d to %d bytes (%dx%d)",
        len(data),
        len(encoded),
        working.width,
        working.height,
    )
    return encoded, "image/jpeg"


def fit_mode(
    image_size: tuple[float, float], container_size: tuple[float, float]
) -> str:
    """
    Chooses how a preview fills its container.

    The image is first fitted to the container width (never upscaled). If
    that leaves it narrower or shorter than the container, it is fitted by
    height instead.
    """
    image_w, image_h = image_size
    container_w, container_h = container_size
    if image_w <= 0 or image_h <= 0:
        return FIT_MAX_WIDTH
    scale = min(1.0, container_w / image_w)
    rendered_w, rendered_h = image_w * scale, image_h * scale
    if rendered_w < container_w or rendered_h < container_h:
        return FIT_MAX_HEIGHT
    return FIT_MAX_WIDTH


def image_dimensions(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as img:
        return img.width, img.height
