import io
from typing import Tuple

from PIL import Image

SMALL_CANVAS = (300, 1000)


def solid_image(size=(400, 300), color=(255, 0, 0), mode="RGB") -> Image.Image:
    return Image.new(mode, size, color)


def striped_image(
        size=(400, 300),
        edge_color=(255, 0, 0),
        middle_color=(0, 255, 0),
        stripe=30,
) -> Image.Image:
    """Middle colour with a `stripe`-wide band of `edge_color` on the left and right."""
    img = Image.new("RGB", size, middle_color)
    w, h = size
    img.paste(edge_color, (0, 0, stripe, h))
    img.paste(edge_color, (w - stripe, 0, w, h))
    return img


def image_bytes(img: Image.Image, fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def close_to(actual: Tuple[int, ...], expected: Tuple[int, ...], tol: int = 3) -> bool:
    return all(abs(a - e) <= tol for a, e in zip(actual, expected))


def pixel(img: Image.Image, x: float, y: float):
    return img.getpixel((int(round(x)), int(round(y))))
