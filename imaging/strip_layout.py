"""Region geometry for a strip, computed from the canvas size and style config.

All proportional measurements come from the canvas dimensions; the few fixed
values (radii, frame inset) are in canvas units.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from imaging.geometry import Rect, aspect_for_frame_count, fit_within
from imaging.strip_config import StripConfig

CARD_MARGIN_RATIO = 0.04  # of canvas width, each side
INNER_PADDING_RATIO = 0.02  # of canvas width
HEADER_HEIGHT_RATIO = 0.12  # of canvas height
FOOTER_BAND_RATIO = 0.06  # of canvas height
HEADER_FONT_RATIO = 0.028  # of canvas width
FOOTER_FONT_RATIO = 0.018  # of canvas width

HEADER_RADIUS = 20
FRAME_INSET = 12
PHOTO_RADIUS = 18

WATERMARK_MAX_WIDTH = 0.5  # of the photo rectangle
WATERMARK_MAX_HEIGHT = 0.2
WATERMARK_TOP_OFFSET = 10


@dataclass(frozen=True)
class FrameSlot:
    index: int
    frame: Rect
    photo: Rect  # frame inset by FRAME_INSET; what the capture covers


@dataclass(frozen=True)
class StripLayout:
    canvas_size: Tuple[int, int]
    card: Rect
    header: Rect
    inner_padding: int
    gap: float

    frame_count: int
    aspect_ratio: float
    frame_area_width: float
    reserved_height: float
    frame_width: float
    frame_height: float
    slots: Tuple[FrameSlot, ...]

    footer_anchor: Tuple[float, float]
    header_font_size: int
    footer_font_size: int

    @property
    def stack_height(self) -> float:
        """Height taken by all frames plus the gaps between them."""
        return self.frame_count * self.frame_height + self.gap * (self.frame_count - 1)


def effective_frame_count(frame_count: int, capture_count: int) -> int:
    """Frames to draw: always the configured count, whatever was captured."""
    return min(frame_count, max(capture_count, frame_count))


def compute_strip_layout(config: StripConfig, frame_count: Optional[int] = None) -> StripLayout:
    if frame_count is None:
        frame_count = config.frame_count
    aspect = aspect_for_frame_count(frame_count)

    canvas_w, canvas_h = config.canvas_size
    margin = round(canvas_w * CARD_MARGIN_RATIO)
    card = Rect(margin, margin, canvas_w - margin * 2, canvas_h - margin * 2)

    pad = round(canvas_w * INNER_PADDING_RATIO)
    header_h = round(canvas_h * HEADER_HEIGHT_RATIO)
    header = Rect(card.x + pad, card.y + pad, card.w - pad * 2, header_h)

    footer_band = round(canvas_h * FOOTER_BAND_RATIO)
    reserved_h = card.h - header_h - pad * 3 - footer_band
    frame_area_w = card.w - pad * 2

    # Frames share the reserved band evenly but never get wider than the card.
    height_by_band = (reserved_h - config.gap * (frame_count - 1)) / frame_count
    frame_h = max(0.0, min(height_by_band, frame_area_w / aspect))
    frame_w = frame_h * aspect

    x = card.x + pad + (frame_area_w - frame_w) / 2
    y = card.y + pad * 2 + header_h
    slots = []
    for i in range(frame_count):
        frame = Rect(x, y, frame_w, frame_h)
        slots.append(FrameSlot(index=i, frame=frame, photo=frame.inset(FRAME_INSET)))
        y += frame_h + config.gap

    return StripLayout(
        canvas_size=(canvas_w, canvas_h),
        card=card,
        header=header,
        inner_padding=pad,
        gap=config.gap,
        frame_count=frame_count,
        aspect_ratio=aspect,
        frame_area_width=frame_area_w,
        reserved_height=reserved_h,
        frame_width=frame_w,
        frame_height=frame_h,
        slots=tuple(slots),
        footer_anchor=(canvas_w / 2, card.bottom - pad * 2),
        header_font_size=max(1, round(canvas_w * HEADER_FONT_RATIO)),
        footer_font_size=max(1, round(canvas_w * FOOTER_FONT_RATIO)),
    )


def header_logo_box(
        layout: StripLayout,
        logo_size: Tuple[int, int],
        logo_scale: float,
        allow_upscale: bool = True,
) -> Rect:
    header = layout.header
    logo_w, logo_h = fit_within(
        logo_size,
        header.w * logo_scale,
        header.h * logo_scale,
        allow_upscale=allow_upscale,
    )
    center_x = layout.canvas_size[0] / 2
    center_y = header.y + header.h / 2
    return Rect(center_x - logo_w / 2, center_y - logo_h / 2, logo_w, logo_h)


def watermark_box(photo: Rect, logo_size: Tuple[int, int], allow_upscale: bool = True) -> Rect:
    """Watermark sits centred near the top of the photo, not in its middle."""
    logo_w, logo_h = fit_within(
        logo_size,
        photo.w * WATERMARK_MAX_WIDTH,
        photo.h * WATERMARK_MAX_HEIGHT,
        allow_upscale=allow_upscale,
    )
    return Rect(photo.x + (photo.w - logo_w) / 2, photo.y + WATERMARK_TOP_OFFSET, logo_w, logo_h)
