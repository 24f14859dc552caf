"""
PNG export for Template Composer.

A thin adapter between the finished raster and bytes or files. Failures are
reported as ExportError and never retried here.
"""

import io
from pathlib import Path
from typing import Union

from PIL import Image
from loguru import logger

from .errors import ExportError


OUTPUT_FILENAME = "final-template.png"
DEFAULT_COMPRESS_LEVEL = 6


def encode_png(image: Image.Image, compress_level: int = DEFAULT_COMPRESS_LEVEL) -> bytes:
    """Encode image as lossless PNG bytes."""
    buffer = io.BytesIO()
    try:
        image.save(buffer, format='PNG', compress_level=compress_level)
    except (OSError, ValueError) as e:
        raise ExportError(f"Failed to encode PNG: {e}")
    return buffer.getvalue()


def save_png(image: Image.Image,
             output_path: Union[str, Path],
             compress_level: int = DEFAULT_COMPRESS_LEVEL) -> Path:
    """Write image to output_path as PNG, creating parent folders."""
    path = Path(output_path)
    data = encode_png(image, compress_level)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise ExportError(f"Failed to save {path}: {e}", target=str(path))

    logger.info(f"Saved composite image: {path} ({len(data):,} bytes)")
    return path
