from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from PIL import Image

from imaging.strip_errors import StripConfigError

# Brand palette
BLUE = (167, 216, 255)  # #A7D8FF
BLUE_SOFT = (216, 238, 255)  # #D8EEFF
WHITE = (255, 255, 255)
INK = (15, 23, 42)  # #0F172A

DEFAULT_CANVAS_SIZE = (3000, 10000)
DEFAULT_FOOTER_TEXT = "riesbeads.com • Singapore"

LOGO_SCALE_RANGE = (0.3, 0.9)
WATERMARK_OPACITY_RANGE = (0.2, 1.0)
VALID_FRAME_COUNTS = (2, 3, 4)


class Theme(Enum):
    BLUE = "blue"
    WHITE = "white"

    @property
    def header_fill(self) -> Tuple[int, int, int]:
        return BLUE if self is Theme.BLUE else WHITE

    @property
    def header_text(self) -> Tuple[int, int, int]:
        return WHITE if self is Theme.BLUE else INK


class StripBackground(Enum):
    WHITE = "white"
    BLUE_SOFT = "blueSoft"

    @property
    def fill(self) -> Tuple[int, int, int]:
        return BLUE_SOFT if self is StripBackground.BLUE_SOFT else WHITE


# The strip background selector historically called the soft blue just "blue".
_BACKGROUND_ALIASES = {"blue": StripBackground.BLUE_SOFT}


@dataclass(frozen=True)
class StripConfig:
    """Everything a single render depends on apart from the captures."""

    canvas_size: Tuple[int, int] = DEFAULT_CANVAS_SIZE  # (width, height)
    frame_count: int = 4
    theme: Theme = Theme.BLUE
    strip_background: StripBackground = StripBackground.WHITE

    border_radius: float = 28
    gap: float = 24
    footer_text: str = DEFAULT_FOOTER_TEXT

    logo: Optional[Image.Image] = None
    logo_scale: float = 0.7
    watermark_opacity: float = 1.0
    # When False, header logo and watermarks never grow past native pixels.
    upscale_logo: bool = True

    # Typography (best-effort; font loading falls back to PIL default)
    font_path: Optional[str] = None

    @property
    def has_logo(self) -> bool:
        return self.logo is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: Optional[StripConfig] = None) -> StripConfig:
        """Apply user-editable settings on top of `base` (or the defaults)."""
        if not isinstance(data, Mapping):
            raise StripConfigError("Config must be a mapping")

        unknown = sorted(set(data) - set(EDITABLE_FIELDS))
        if unknown:
            raise StripConfigError(f"Unknown config field(s): {', '.join(unknown)}")

        changes: dict[str, Any] = {}
        if "frame_count" in data:
            changes["frame_count"] = _parse_frame_count(data["frame_count"])
        if "theme" in data:
            changes["theme"] = _parse_theme(data["theme"])
        if "strip_background" in data:
            changes["strip_background"] = _parse_background(data["strip_background"])
        if "border_radius" in data:
            changes["border_radius"] = _parse_number("border_radius", data["border_radius"], low=0)
        if "gap" in data:
            changes["gap"] = _parse_number("gap", data["gap"], low=0)
        if "footer_text" in data:
            if not isinstance(data["footer_text"], str):
                raise StripConfigError("footer_text must be a string")
            changes["footer_text"] = data["footer_text"]
        if "logo_scale" in data:
            changes["logo_scale"] = _parse_number("logo_scale", data["logo_scale"], *LOGO_SCALE_RANGE)
        if "watermark_opacity" in data:
            changes["watermark_opacity"] = _parse_number(
                "watermark_opacity", data["watermark_opacity"], *WATERMARK_OPACITY_RANGE
            )
        if "upscale_logo" in data:
            if not isinstance(data["upscale_logo"], bool):
                raise StripConfigError("upscale_logo must be true or false")
            changes["upscale_logo"] = data["upscale_logo"]

        return dataclasses.replace(base or cls(), **changes)

    def to_dict(self) -> dict:
        return {
            "canvas_size": list(self.canvas_size),
            "frame_count": self.frame_count,
            "theme": self.theme.value,
            "strip_background": self.strip_background.value,
            "border_radius": self.border_radius,
            "gap": self.gap,
            "footer_text": self.footer_text,
            "logo_scale": self.logo_scale,
            "watermark_opacity": self.watermark_opacity,
            "upscale_logo": self.upscale_logo,
            "has_logo": self.has_logo,
        }


EDITABLE_FIELDS = (
    "frame_count",
    "theme",
    "strip_background",
    "border_radius",
    "gap",
    "footer_text",
    "logo_scale",
    "watermark_opacity",
    "upscale_logo",
)


def _parse_frame_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value not in VALID_FRAME_COUNTS:
        raise StripConfigError(f"frame_count must be one of 2, 3 or 4 (got {value!r})")
    return value


def _parse_theme(value: Any) -> Theme:
    try:
        return Theme(value)
    except ValueError:
        raise StripConfigError(f"theme must be 'blue' or 'white' (got {value!r})") from None


def _parse_background(value: Any) -> StripBackground:
    if isinstance(value, str) and value in _BACKGROUND_ALIASES:
        return _BACKGROUND_ALIASES[value]
    try:
        return StripBackground(value)
    except ValueError:
        raise StripConfigError(
            f"strip_background must be 'white' or 'blueSoft' (got {value!r})"
        ) from None


def _parse_number(
        name: str,
        value: Any,
        low: float | None = None,
        high: float | None = None,
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StripConfigError(f"{name} must be a number (got {value!r})")
    if isinstance(value, float) and not math.isfinite(value):
        raise StripConfigError(f"{name} must be finite (got {value})")
    if low is not None and value < low:
        raise StripConfigError(f"{name} must be >= {low} (got {value})")
    if high is not None and value > high:
        raise StripConfigError(f"{name} must be <= {high} (got {value})")
    return value
