"""
Layout configuration model for Template Composer.

Holds the canvas constants and the placement parameters of a render:
the product image area, the two label positions and the two font sizes.
Every model is frozen; edits return a new RenderConfig so that concurrent
edits from several inputs never share a mutable object.
"""

import math
from typing import Any, Dict, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import ValidationError


# A4 landscape at 96 DPI
CANVAS_WIDTH = 1122
CANVAS_HEIGHT = 794

MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 72

DEFAULT_PRODUCT_NAME = "Product Name"
DEFAULT_ITEM_NUMBER = "Item Number: #001"

POSITION_KEYS = ('product_name_position', 'item_number_position')
POSITION_COORDS = ('x', 'y')
RECT_KEYS = ('product_image_area',)
RECT_FIELDS = ('x', 'y', 'width', 'height')
FONT_SIZE_KEYS = ('product_name_font_size', 'item_number_font_size')


def clamp_font_size(value: Any) -> float:
    """Clamp a font size into [MIN_FONT_SIZE, MAX_FONT_SIZE].

    Missing, unparsable and non-finite values map to MIN_FONT_SIZE.
    """
    try:
        size = float(value)
    except (TypeError, ValueError):
        return float(MIN_FONT_SIZE)

    if not math.isfinite(size):
        return float(MIN_FONT_SIZE)

    return float(max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, size)))


class Position(BaseModel):
    """Top-left anchor of a text label."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Rect(BaseModel):
    """Product image placement area in canvas pixels."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_degenerate(self) -> bool:
        return not (self.width > 0 and self.height > 0
                    and math.isfinite(self.width) and math.isfinite(self.height))


class RenderConfig(BaseModel):
    """Placement parameters for a single render."""
    model_config = ConfigDict(frozen=True)

    product_image_area: Rect
    product_name_position: Position
    item_number_position: Position
    product_name_font_size: float
    item_number_font_size: float

    @field_validator('product_name_font_size', 'item_number_font_size', mode='before')
    @classmethod
    def _clamp_font_size(cls, value: Any) -> float:
        return clamp_font_size(value)


DEFAULT_RENDER_CONFIG = RenderConfig(
    product_image_area=Rect(x=300, y=150, width=500, height=400),
    product_name_position=Position(x=100, y=100),
    item_number_position=Position(x=100, y=650),
    product_name_font_size=36,
    item_number_font_size=24,
)


def _coerce_number(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid number for {name}: {value!r}",
            details={'field': name, 'value': str(value)},
            suggestions=["Enter a plain number such as 120 or 45.5"]
        )
    if not math.isfinite(number):
        raise ValidationError(
            f"Invalid number for {name}: {value!r}",
            details={'field': name, 'value': str(value)},
            suggestions=["Enter a finite number"]
        )
    return number


def _check_choice(value: str, choices: Tuple[str, ...], kind: str) -> None:
    if value not in choices:
        raise ValidationError(
            f"Unknown {kind}: {value}",
            details={kind: value, 'allowed': list(choices)}
        )


def set_position(config: RenderConfig, key: str, coord: str, value: Any) -> RenderConfig:
    """Return a copy of config with one coordinate of one label position replaced."""
    _check_choice(key, POSITION_KEYS, 'position')
    _check_choice(coord, POSITION_COORDS, 'coordinate')
    position = getattr(config, key)
    updated = position.model_copy(update={coord: _coerce_number(value, f"{key}.{coord}")})
    return config.model_copy(update={key: updated})


def set_rect(config: RenderConfig, key: str, field: str, value: Any) -> RenderConfig:
    """Return a copy of config with one field of the image area replaced."""
    _check_choice(key, RECT_KEYS, 'rect')
    _check_choice(field, RECT_FIELDS, 'field')
    rect = getattr(config, key)
    updated = rect.model_copy(update={field: _coerce_number(value, f"{key}.{field}")})
    return config.model_copy(update={key: updated})


def set_font_size(config: RenderConfig, key: str, value: Any) -> RenderConfig:
    """Return a copy of config with one font size replaced, clamped to the allowed range."""
    _check_choice(key, FONT_SIZE_KEYS, 'font size')
    return config.model_copy(update={key: clamp_font_size(value)})


def form_fields() -> Dict[str, Tuple[str, str, str]]:
    """Map flat form field names to (kind, key, field)."""
    fields = {}
    for key in RECT_KEYS:
        for field in RECT_FIELDS:
            fields[f"{key}_{field}"] = ('rect', key, field)
    for key in POSITION_KEYS:
        for coord in POSITION_COORDS:
            fields[f"{key}_{coord}"] = ('position', key, coord)
    for key in FONT_SIZE_KEYS:
        fields[key] = ('font_size', key, '')
    return fields


FORM_FIELDS = form_fields()


def apply_form_values(config: RenderConfig, values: Mapping[str, Any]) -> RenderConfig:
    """Apply flat form or command-line values to config.

    Unknown names are ignored, blank values leave the field unchanged.
    """
    for name, (kind, key, field) in FORM_FIELDS.items():
        if name not in values:
            continue
        raw = values[name]
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue

        if kind == 'rect':
            config = set_rect(config, key, field, raw)
        elif kind == 'position':
            config = set_position(config, key, field, raw)
        else:
            config = set_font_size(config, key, raw)

    return config
