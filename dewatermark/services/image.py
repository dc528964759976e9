"""Image inspection and downsampling ahead of upload.

The erase endpoint rejects images wider than ``Settings.target_width``. Wider
images are resized preserving the aspect ratio and re-encoded in their
original format; anything else is passed through untouched.
"""
from __future__ import annotations

import asyncio
import io
import logging

from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError

from dewatermark.config import get_settings
from dewatermark.errors import DimensionError
from dewatermark.models import ImageInfo
from dewatermark.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


def read_dimensions(image: bytes) -> ImageInfo:
    """Read width, height and format from the header without decoding pixels."""

    try:
        with Image.open(io.BytesIO(image)) as img:
            width, height = img.size
            fmt = img.format
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DimensionError(f"Unable to retrieve image dimensions: {exc}") from exc
    try:
        return ImageInfo(width=width, height=height, format=fmt)
    except ValidationError as exc:
        raise DimensionError(f"Unable to retrieve image dimensions: {width}x{height}") from exc


def scaled_height(width: int, height: int, target_width: int) -> int:
    return round_half_up(target_width / width * height)


async def resize_to_width(image: bytes, target_width: int | None = None) -> bytes:
    """Return *image* unchanged if it fits, else a re-encoded downscaled copy.

    The returned object is *image* itself when no resize is needed.
    ``target_width`` defaults to ``Settings.target_width``.
    """

    if target_width is None:
        target_width = get_settings().target_width
    info = read_dimensions(image)
    if info.width <= target_width:
        return image

    target_height = scaled_height(info.width, info.height, target_width)
    logger.info(
        "Resizing %s image %dx%d -> %dx%d",
        info.format, info.width, info.height, target_width, target_height,
    )
    return await asyncio.to_thread(_resize, image, target_width, target_height)


def _resize(image: bytes, width: int, height: int) -> bytes:
    try:
        with Image.open(io.BytesIO(image)) as img:
            fmt = img.format or "PNG"
            resized = img.resize((width, height), Image.Resampling.LANCZOS)
            buffer = io.BytesIO()
            resized.save(buffer, format=fmt)
            return buffer.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DimensionError(f"Unable to re-encode image: {exc}") from exc
