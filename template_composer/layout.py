"""
Layout geometry for Template Composer.

This module handles:
- Fitting the product image inside its area without cropping (contain fit)
- Centering the fitted image in the area
- Snapping fractional placements to pixel boxes
- Clipping boxes to the canvas
"""

import math
from typing import Optional, Tuple

from .render_config import Rect


Box = Tuple[int, int, int, int]


class Placement:
    """Where a scaled image lands on the canvas, in fractional pixels."""

    def __init__(self, x: float, y: float, width: float, height: float):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_pixel_box(self) -> Box:
        """Round each edge to the nearest pixel, as (left, top, right, bottom)."""
        return (round(self.x), round(self.y), round(self.right), round(self.bottom))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Placement):
            return NotImplemented
        return (self.x, self.y, self.width, self.height) == (other.x, other.y, other.width, other.height)

    def __repr__(self) -> str:
        return f"Placement({self.x}, {self.y}, {self.width}, {self.height})"


def _usable(*values: float) -> bool:
    return all(math.isfinite(v) and v > 0 for v in values)


def fit_and_center(image_size: Tuple[float, float], area: Rect) -> Optional[Placement]:
    """
    Scale an image to the largest size that fits inside area, keeping its
    aspect ratio, and center it there.

    Returns None when either the image or the area has no usable size,
    in which case the caller skips the layer.
    """
    image_width, image_height = image_size
    if not _usable(image_width, image_height) or not _usable(area.width, area.height):
        return None
    if not (math.isfinite(area.x) and math.isfinite(area.y)):
        return None

    image_aspect = image_width / image_height
    area_aspect = area.width / area.height

    if image_aspect == area_aspect:
        scaled_width, scaled_height = area.width, area.height
    elif image_aspect > area_aspect:
        # wider than the area, fit by width
        scaled_width = area.width
        scaled_height = area.width / image_aspect
    else:
        scaled_height = area.height
        scaled_width = area.height * image_aspect

    draw_x = area.x + (area.width - scaled_width) / 2
    draw_y = area.y + (area.height - scaled_height) / 2

    return Placement(draw_x, draw_y, scaled_width, scaled_height)


def visible_box(box: Box, canvas_size: Tuple[int, int]) -> Optional[Box]:
    """Intersect a pixel box with the canvas; None when nothing is visible."""
    canvas_width, canvas_height = canvas_size
    left, top, right, bottom = box

    visible = (max(left, 0), max(top, 0), min(right, canvas_width), min(bottom, canvas_height))
    if visible[2] <= visible[0] or visible[3] <= visible[1]:
        return None
    return visible


def source_box(placement_box: Box, visible: Box, image_size: Tuple[int, int]) -> Tuple[float, float, float, float]:
    """Map the visible part of a placement back to source image coordinates."""
    left, top, right, bottom = placement_box
    image_width, image_height = image_size
    scale_x = image_width / (right - left)
    scale_y = image_height / (bottom - top)

    # Pillow rejects boxes that overshoot the image by a rounding error
    return (
        max(0.0, (visible[0] - left) * scale_x),
        max(0.0, (visible[1] - top) * scale_y),
        min(float(image_width), (visible[2] - left) * scale_x),
        min(float(image_height), (visible[3] - top) * scale_y),
    )
