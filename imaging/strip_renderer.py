from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from imaging.geometry import (
    draw_cover,
    draw_scaled,
    fill_rect,
    fill_rounded_rect,
)
from imaging.strip_config import BLUE_SOFT, INK, WHITE, StripConfig
from imaging.strip_errors import StripCreationError
from imaging.strip_layout import (
    HEADER_RADIUS,
    PHOTO_RADIUS,
    StripLayout,
    compute_strip_layout,
    effective_frame_count,
    header_logo_box,
    watermark_box,
)

logger = logging.getLogger(__name__)

HEADER_PLACEHOLDER_TEXT = "Upload RiesBeads logo to brand header and frames"
PLACEHOLDER_TILE_COLOR = BLUE_SOFT
CARD_COLOR = WHITE
FOOTER_TEXT_COLOR = INK


def _load_font(font_path: str | None, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            logger.warning("Could not load font %s, falling back", font_path)

    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default(size)


def _draw_centered_text(
        *,
        draw: ImageDraw.ImageDraw,
        center: Tuple[float, float],
        text: str,
        font: ImageFont.ImageFont,
        fill: Tuple[int, int, int],
) -> None:
    # Centre the ink box itself, which also works for bitmap fonts without anchors.
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    cx, cy = center
    x = cx - (left + right) / 2
    y = cy - (top + bottom) / 2
    draw.text((round(x), round(y)), text, fill=fill, font=font)


def _draw_header(canvas: Image.Image, layout: StripLayout, config: StripConfig) -> None:
    fill_rounded_rect(canvas, layout.header, HEADER_RADIUS, config.theme.header_fill)

    if config.logo is not None:
        box = header_logo_box(
            layout,
            config.logo.size,
            config.logo_scale,
            allow_upscale=config.upscale_logo,
        )
        draw_scaled(canvas, config.logo, box)
        return

    font = _load_font(config.font_path, layout.header_font_size)
    _draw_centered_text(
        draw=ImageDraw.Draw(canvas),
        center=layout.header.center,
        text=HEADER_PLACEHOLDER_TEXT,
        font=font,
        fill=config.theme.header_text,
    )


def _draw_frames(
        canvas: Image.Image,
        layout: StripLayout,
        config: StripConfig,
        captures: Sequence[Image.Image],
) -> None:
    for slot in layout.slots:
        photo = slot.photo
        capture = captures[slot.index] if slot.index < len(captures) else None

        if capture is not None:
            draw_cover(canvas, capture, photo.x, photo.y, photo.w, photo.h, PHOTO_RADIUS)
        else:
            fill_rect(canvas, photo, PLACEHOLDER_TILE_COLOR)

        if config.logo is not None:
            box = watermark_box(photo, config.logo.size, allow_upscale=config.upscale_logo)
            draw_scaled(canvas, config.logo, box, opacity=config.watermark_opacity)


def _draw_footer(canvas: Image.Image, layout: StripLayout, config: StripConfig) -> None:
    font = _load_font(config.font_path, layout.footer_font_size)
    _draw_centered_text(
        draw=ImageDraw.Draw(canvas),
        center=layout.footer_anchor,
        text=config.footer_text,
        font=font,
        fill=FOOTER_TEXT_COLOR,
    )


def compose_strip(
        config: StripConfig,
        captures: Sequence[Image.Image],
        canvas: Optional[Image.Image] = None,
) -> Image.Image:
    """Render the whole strip from scratch.

    - `captures` are drawn in order, one per frame; missing ones become
      placeholder tiles and extra ones are ignored.
    - Without a logo the header shows instructions and frames get no watermark.
    - When `canvas` is given it must be an RGB image of `config.canvas_size`;
      it is repainted completely and returned.

    Raises InvalidFrameCount when `config.frame_count` is not 2, 3 or 4.
    """
    frame_count = effective_frame_count(config.frame_count, len(captures))
    layout = compute_strip_layout(config, frame_count)

    if canvas is None:
        canvas = Image.new("RGB", layout.canvas_size, config.strip_background.fill)
    else:
        if canvas.mode != "RGB" or canvas.size != layout.canvas_size:
            raise StripCreationError(
                f"Canvas must be an RGB image of exactly "
                f"{layout.canvas_size[0]}x{layout.canvas_size[1]}"
            )
        canvas.paste(config.strip_background.fill, (0, 0) + canvas.size)

    logger.debug(
        "Composing strip: %d frame(s), %d capture(s), logo=%s",
        frame_count,
        len(captures),
        config.has_logo,
    )

    fill_rounded_rect(canvas, layout.card, config.border_radius, CARD_COLOR)
    _draw_header(canvas, layout, config)
    _draw_frames(canvas, layout, config, captures)
    _draw_footer(canvas, layout, config)
    return canvas
