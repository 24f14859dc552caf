"""
Composite module for Template Composer.

This module handles:
- Drawing the template background stretched to the canvas (white when absent)
- Placing the product image with a contain fit inside its area
- Drawing the product name and item number labels on top
- Producing one flattened RGBA raster per render

Draw order is fixed: background, product image, product name, item number.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from PIL import Image
from loguru import logger

from .errors import ConfigurationError
from .layout import fit_and_center, source_box, visible_box
from .render_config import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DEFAULT_RENDER_CONFIG,
    Position,
    Rect,
    RenderConfig,
)
from .text import BLACK, FontProvider, draw_label


WHITE = (255, 255, 255, 255)


@dataclass(frozen=True)
class RenderInputs:
    """Everything one render needs. Built fresh for each render and then discarded."""

    template_image: Optional[Image.Image] = None
    product_image: Optional[Image.Image] = None
    product_name: str = ""
    item_number: str = ""
    config: RenderConfig = DEFAULT_RENDER_CONFIG

    @property
    def product_image_area(self) -> Rect:
        return self.config.product_image_area

    @property
    def product_name_position(self) -> Position:
        return self.config.product_name_position

    @property
    def item_number_position(self) -> Position:
        return self.config.item_number_position

    @property
    def product_name_font_size(self) -> float:
        return self.config.product_name_font_size

    @property
    def item_number_font_size(self) -> float:
        return self.config.item_number_font_size

    @property
    def missing(self) -> List[str]:
        """Names of the inputs still absent or blank."""
        missing = [name for name in ('template_image', 'product_image') if getattr(self, name) is None]
        missing.extend(name for name in ('product_name', 'item_number')
                       if not (getattr(self, name) or '').strip())
        return missing

    @property
    def is_complete(self) -> bool:
        """Both images present and both labels non-blank."""
        return not self.missing


def _validate_canvas_size(canvas_size) -> Tuple[int, int]:
    try:
        width, height = canvas_size
    except (TypeError, ValueError):
        raise ConfigurationError(f"Canvas size must be a (width, height) pair, got {canvas_size!r}")

    if not (isinstance(width, int) and isinstance(height, int)) or width <= 0 or height <= 0:
        raise ConfigurationError(
            f"Canvas size must be two positive integers, got {canvas_size!r}",
            details={'canvas_size': str(canvas_size)}
        )
    return width, height


def _image_size(image: Image.Image) -> Tuple[int, int]:
    width, height = image.size
    if width <= 0 or height <= 0:
        raise ValueError(f"image has no pixels: {image.size}")
    return width, height


class Compositor:
    """Renders RenderInputs onto a fixed-size canvas.

    Holds no state between renders; every call builds a fresh canvas.
    """

    def __init__(self,
                 canvas_size: Tuple[int, int] = (CANVAS_WIDTH, CANVAS_HEIGHT),
                 fonts: FontProvider = None,
                 background_color: Tuple[int, int, int, int] = WHITE,
                 text_color: Tuple[int, int, int, int] = BLACK,
                 resample: Image.Resampling = Image.Resampling.LANCZOS):
        self.canvas_size = _validate_canvas_size(canvas_size)
        self.fonts = fonts or FontProvider()
        self.background_color = background_color
        self.text_color = text_color
        self.resample = resample

    def render(self, inputs: RenderInputs) -> Image.Image:
        """Composite all layers and return the finished RGBA raster."""
        canvas = Image.new('RGBA', self.canvas_size, (0, 0, 0, 0))

        if not self._draw_background(canvas, inputs.template_image):
            canvas.paste(self.background_color, (0, 0) + self.canvas_size)

        self._draw_product_image(canvas, inputs.product_image, inputs.product_image_area)

        draw_label(canvas, inputs.product_name, inputs.product_name_position,
                   self.fonts.get(inputs.product_name_font_size), self.text_color)
        draw_label(canvas, inputs.item_number, inputs.item_number_position,
                   self.fonts.get(inputs.item_number_font_size), self.text_color)

        logger.debug(f"Rendered {self.canvas_size} canvas "
                     f"(template={inputs.template_image is not None}, "
                     f"product={inputs.product_image is not None})")
        return canvas

    def _draw_background(self, canvas: Image.Image, template: Optional[Image.Image]) -> bool:
        """Stretch the template over the whole canvas. Returns False when there is none to draw."""
        if template is None:
            return False

        try:
            _image_size(template)
            background = template.convert('RGBA')
            if background.size != self.canvas_size:
                # Templates are authored at the canvas aspect ratio, so stretch
                background = background.resize(self.canvas_size, self.resample)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping template layer: {e}")
            return False

        canvas.paste(background, (0, 0))
        return True

    def _draw_product_image(self, canvas: Image.Image, image: Optional[Image.Image], area: Rect) -> bool:
        """Contain-fit the product image into area, clipped to the canvas."""
        if image is None:
            return False

        try:
            image_size = _image_size(image)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping product image layer: {e}")
            return False

        placement = fit_and_center(image_size, area)
        if placement is None:
            logger.warning(f"Skipping product image layer: cannot fit {image_size} into {area}")
            return False

        box = placement.to_pixel_box()
        if box[2] <= box[0] or box[3] <= box[1]:
            logger.debug(f"Product image rounds to an empty box: {placement}")
            return False

        visible = visible_box(box, self.canvas_size)
        if visible is None:
            logger.debug(f"Product image is outside the canvas: {placement}")
            return False

        try:
            layer = image.convert('RGBA').resize(
                (visible[2] - visible[0], visible[3] - visible[1]),
                self.resample,
                box=source_box(box, visible, image_size),
            )
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping product image layer: {e}")
            return False

        canvas.alpha_composite(layer, dest=(visible[0], visible[1]))
        return True


def create_compositor(app_config=None) -> Compositor:
    """Factory function to create a Compositor from application settings."""
    if app_config is None:
        return Compositor()

    return Compositor(
        canvas_size=(app_config.CANVAS_WIDTH, app_config.CANVAS_HEIGHT),
        fonts=FontProvider(font_path=app_config.FONT_PATH),
    )


_default_compositor: Optional[Compositor] = None


def render(inputs: RenderInputs, canvas_size: Tuple[int, int] = None) -> Image.Image:
    """Render inputs with default settings, on canvas_size if given."""
    global _default_compositor
    if _default_compositor is None:
        _default_compositor = Compositor()

    if canvas_size is None or tuple(canvas_size) == _default_compositor.canvas_size:
        return _default_compositor.render(inputs)

    return Compositor(canvas_size=canvas_size, fonts=_default_compositor.fonts).render(inputs)
