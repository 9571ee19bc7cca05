"""Rasterization of freehand mask points into black/white inpainting masks."""

from __future__ import annotations

import base64
import math
from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Sequence

from PIL import Image

BACKGROUND = 0
FOREGROUND = 255
DEFAULT_RADIUS = 20


@dataclass(frozen=True, slots=True)
class MaskPoint:
    """A single click on the drawing canvas, in canvas pixel coordinates."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class MaskBuffer:
    """Row-major grid of ``FOREGROUND``/``BACKGROUND`` bytes."""

    width: int
    height: int
    pixels: bytes

    def __post_init__(self) -> None:
        if len(self.pixels) != self.width * self.height:
            raise ValueError(
                f"Mask data holds {len(self.pixels)} pixels, expected {self.width}x{self.height}.",
            )

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def foreground_count(self) -> int:
        return self.pixels.count(FOREGROUND)

    def is_foreground(self, x: int, y: int) -> bool:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) is outside a {self.width}x{self.height} mask.")
        return self.pixels[y * self.width + x] == FOREGROUND

    def to_image(self) -> Image.Image:
        """Return a greyscale image holding only pure black and pure white."""

        return Image.frombytes("L", self.size, self.pixels)

    def to_png(self) -> bytes:
        buffer = BytesIO()
        self.to_image().save(buffer, format="PNG")
        return buffer.getvalue()

    def to_data_uri(self) -> str:
        return png_data_uri(self.to_png())


def png_data_uri(payload: bytes, mime_type: str = "image/png") -> str:
    """Wrap encoded image bytes into a ``data:`` URI accepted by the prediction API."""

    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def rasterize(
    points: Iterable[MaskPoint],
    width: int,
    height: int,
    radius: int = DEFAULT_RADIUS,
) -> MaskBuffer:
    """Stamp a filled disk of ``radius`` pixels around every point.

    A pixel becomes foreground when its distance to the rounded point is at
    most ``radius``; disks are clipped to the mask bounds. The result is the
    union of all disks, so point order and duplicates do not matter.
    """

    if width <= 0 or height <= 0:
        raise ValueError(f"Mask dimensions must be positive, got {width}x{height}.")
    if radius < 0:
        raise ValueError(f"Mask radius must not be negative, got {radius}.")

    grid = bytearray(width * height)
    for point in points:
        cx = _round_half_up(point.x)
        cy = _round_half_up(point.y)
        if cx + radius < 0 or cx - radius >= width or cy + radius < 0 or cy - radius >= height:
            continue

        for y in range(max(cy - radius, 0), min(cy + radius, height - 1) + 1):
            dy = y - cy
            half_span = math.isqrt(radius * radius - dy * dy)
            x_start = max(cx - half_span, 0)
            x_end = min(cx + half_span, width - 1)
            if x_start > x_end:
                continue
            row = y * width
            grid[row + x_start : row + x_end + 1] = bytes([FOREGROUND]) * (x_end - x_start + 1)

    return MaskBuffer(width=width, height=height, pixels=bytes(grid))


def scale_points(
    points: Sequence[MaskPoint],
    from_size: tuple[int, int],
    to_size: tuple[int, int],
) -> list[MaskPoint]:
    """Map points recorded on a scaled preview canvas onto source image pixels."""

    from_width, from_height = from_size
    to_width, to_height = to_size
    if from_width <= 0 or from_height <= 0:
        raise ValueError(f"Canvas dimensions must be positive, got {from_width}x{from_height}.")

    sx = to_width / from_width
    sy = to_height / from_height
    return [MaskPoint(x=point.x * sx, y=point.y * sy) for point in points]
