from __future__ import annotations

import io
import time
from dataclasses import dataclass
from typing import Optional

from PIL import Image

EXPORT_FILENAME_PREFIX = "RiesBeads-Photostrip"


@dataclass(frozen=True)
class StripExport:
    filename: str
    data: bytes
    mimetype: str = "image/png"


def export_filename(now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{EXPORT_FILENAME_PREFIX}-{now_ms}.png"


def encode_png(strip: Image.Image) -> bytes:
    buf = io.BytesIO()
    strip.save(buf, format="PNG")
    return buf.getvalue()
