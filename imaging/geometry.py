"""Pure geometry helpers shared by every region of the strip.

Rounded rectangles are always produced from :func:`rounded_rect_path`, whether
they are filled (card, header) or used as a clip (photos), so corners look
the same at every nesting level.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from PIL import Image, ImageChops, ImageDraw

from imaging.strip_errors import InvalidFrameCount, StripCreationError

Point = Tuple[float, float]

# Frame aspect ratio (width / height) by number of frames on the strip.
ASPECT_BY_FRAME_COUNT = {
    2: 3 / 4,
    3: 1.0,
    4: 4 / 3,
}

ARC_SEGMENTS = 16


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> Point:
        return self.x + self.w / 2, self.y + self.h / 2

    def inset(self, amount: float) -> "Rect":
        return Rect(self.x + amount, self.y + amount, self.w - 2 * amount, self.h - 2 * amount)

    def snapped(self) -> Tuple[int, int, int, int]:
        """Integer (left, top, right, bottom) pixel bounds, right/bottom exclusive."""
        return round(self.x), round(self.y), round(self.right), round(self.bottom)


@dataclass(frozen=True)
class CoverPlacement:
    """Where a source image lands when it "covers" a target box.

    Offsets are relative to the target origin and are negative on the axis
    that overflows (that overflow is cropped, never padded).
    """

    scale: float
    width: float
    height: float
    offset_x: float
    offset_y: float
    target_w: float
    target_h: float

    def source_box(self) -> Tuple[float, float, float, float]:
        """Region of the source image that stays visible inside the target."""
        left = -self.offset_x / self.scale
        top = -self.offset_y / self.scale
        return (
            left,
            top,
            left + self.target_w / self.scale,
            top + self.target_h / self.scale,
        )


def aspect_for_frame_count(n: int) -> float:
    try:
        return ASPECT_BY_FRAME_COUNT[n]
    except (KeyError, TypeError):
        raise InvalidFrameCount(n) from None


def clamp_radius(w: float, h: float, radius: float) -> float:
    return max(0.0, min(radius, w / 2, h / 2))


def rounded_rect_path(
        x: float,
        y: float,
        w: float,
        h: float,
        radius: float,
        segments: int = ARC_SEGMENTS,
) -> List[Point]:
    """Closed outline of a rounded rectangle, clockwise on screen.

    Each corner is a quarter circle of the clamped radius; consecutive arcs are
    joined by the straight edges. The first point is repeated at the end.
    """
    r = clamp_radius(w, h, radius)
    if r == 0:
        points = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
    else:
        # (center x, center y, start angle in degrees) for TR, BR, BL, TL
        corners = [
            (x + w - r, y + r, -90),
            (x + w - r, y + h - r, 0),
            (x + r, y + h - r, 90),
            (x + r, y + r, 180),
        ]
        points = []
        for cx, cy, start in corners:
            for i in range(segments + 1):
                angle = math.radians(start + 90 * i / segments)
                points.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))

    points.append(points[0])
    return points


def rounded_rect_mask(size: Tuple[int, int], radius: float) -> Image.Image:
    w, h = size
    mask = Image.new("L", (w, h), 0)
    ImageDraw.Draw(mask).polygon(rounded_rect_path(0, 0, w, h, radius), fill=255)
    return mask


def fill_rounded_rect(
        canvas: Image.Image,
        rect: Rect,
        radius: float,
        fill: Tuple[int, int, int],
) -> None:
    if rect.w <= 0 or rect.h <= 0:
        return
    path = rounded_rect_path(rect.x, rect.y, rect.w, rect.h, radius)
    ImageDraw.Draw(canvas).polygon(path, fill=fill)


def fill_rect(canvas: Image.Image, rect: Rect, fill: Tuple[int, int, int]) -> None:
    left, top, right, bottom = rect.snapped()
    if right <= left or bottom <= top:
        return
    # ImageDraw rectangles include their far edge.
    ImageDraw.Draw(canvas).rectangle((left, top, right - 1, bottom - 1), fill=fill)


def cover_placement(image_size: Tuple[int, int], target_size: Tuple[float, float]) -> CoverPlacement:
    src_w, src_h = image_size
    target_w, target_h = target_size

    if src_w <= 0 or src_h <= 0:
        raise StripCreationError("Invalid image dimensions")

    scale = max(target_w / src_w, target_h / src_h)
    scaled_w = src_w * scale
    scaled_h = src_h * scale
    return CoverPlacement(
        scale=scale,
        width=scaled_w,
        height=scaled_h,
        offset_x=(target_w - scaled_w) / 2,
        offset_y=(target_h - scaled_h) / 2,
        target_w=target_w,
        target_h=target_h,
    )


def fit_within(
        size: Tuple[int, int],
        max_w: float,
        max_h: float,
        allow_upscale: bool = True,
) -> Tuple[float, float]:
    """Uniformly scale `size` so it fits inside (max_w, max_h).

    The tighter of the two ratios wins, so one bound is met exactly. With
    `allow_upscale=False` the result never exceeds the native size.
    """
    src_w, src_h = size
    if src_w <= 0 or src_h <= 0:
        raise StripCreationError("Invalid image dimensions")

    scale = max(0.0, min(max_w / src_w, max_h / src_h))
    if not allow_upscale:
        scale = min(scale, 1.0)
    return src_w * scale, src_h * scale


def _drawable_source(image: Image.Image) -> Image.Image:
    if image.mode in ("RGB", "RGBA"):
        return image
    return image.convert("RGBA")


def _paste_tile(canvas: Image.Image, tile: Image.Image, origin: Tuple[int, int], mask: Image.Image) -> None:
    canvas.paste(tile.convert("RGB"), origin, mask)


def draw_cover(
        canvas: Image.Image,
        image: Image.Image,
        x: float,
        y: float,
        w: float,
        h: float,
        radius: float = 0,
) -> None:
    """Paint `image` over the box so it is fully covered, cropping the overflow.

    With a nonzero `radius` the paint is clipped to the rounded box. The clip
    is a per-call mask, so nothing drawn afterwards is affected.
    """
    left, top, right, bottom = Rect(x, y, w, h).snapped()
    target_w = right - left
    target_h = bottom - top
    if target_w <= 0 or target_h <= 0:
        return

    placement = cover_placement(image.size, (target_w, target_h))
    src_w, src_h = image.size
    box_left, box_top, box_right, box_bottom = placement.source_box()
    # Float error must not push the box past the source edges; Pillow rejects that.
    box = (
        max(0.0, box_left),
        max(0.0, box_top),
        min(float(src_w), box_right),
        min(float(src_h), box_bottom),
    )
    tile = _drawable_source(image).resize(
        (target_w, target_h),
        resample=Image.Resampling.LANCZOS,
        box=box,
    ).convert("RGBA")

    mask = tile.getchannel("A")
    if radius:
        mask = ImageChops.multiply(mask, rounded_rect_mask((target_w, target_h), radius))
    _paste_tile(canvas, tile, (left, top), mask)


def draw_scaled(
        canvas: Image.Image,
        image: Image.Image,
        rect: Rect,
        opacity: float = 1.0,
) -> None:
    """Paint `image` stretched to `rect`, alpha blended at `opacity`.

    Callers size `rect` with :func:`fit_within`, so the aspect ratio holds.
    """
    # Floor the size so the drawn pixels never exceed the fitted bounds.
    left, top = round(rect.x), round(rect.y)
    target_w = math.floor(rect.w)
    target_h = math.floor(rect.h)
    if target_w <= 0 or target_h <= 0:
        return

    tile = _drawable_source(image).resize(
        (target_w, target_h),
        resample=Image.Resampling.LANCZOS,
    ).convert("RGBA")

    mask = tile.getchannel("A")
    if opacity < 1.0:
        mask = mask.point(lambda a: round(a * opacity))
    _paste_tile(canvas, tile, (left, top), mask)
