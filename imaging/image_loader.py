from __future__ import annotations

import io
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from imaging.strip_errors import ImageDecodeError

MIN_UPLOAD_COUNT = 2
MAX_UPLOAD_COUNT = 4


def validate_upload_count(n: int) -> bool:
    return MIN_UPLOAD_COUNT <= n <= MAX_UPLOAD_COUNT


def _decoded(img: Image.Image) -> Image.Image:
    # Force the full decode now so a truncated file fails here, not mid-render.
    img.load()
    img = ImageOps.exif_transpose(img)
    if img.mode in ("RGB", "RGBA"):
        return img
    if img.mode in ("LA", "PA") or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def decode_image(data: bytes, *, name: str = "image") -> Image.Image:
    """Decode uploaded bytes into a fully loaded RGB/RGBA image."""
    if not data:
        raise ImageDecodeError(f"Failed to load {name}: empty file")
    try:
        return _decoded(Image.open(io.BytesIO(data)))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to load {name}") from e


def load_image(path: Path) -> Image.Image:
    try:
        with Image.open(path) as img:
            return _decoded(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to load image: {path}") from e
