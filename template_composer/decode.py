"""
Image acquisition for Template Composer.

Decodes user supplied files into Pillow images. A failed decode means
"no image available" for that slot, never an error. Decodes for a slot can
run in the background; a newer request supersedes older ones so a slow,
stale decode can never overwrite a newer selection.
"""

import concurrent.futures
import io
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from PIL import Image
from loguru import logger


ImageSource = Union[bytes, bytearray, str, Path, BinaryIO]


def _describe(source: ImageSource) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, 'name', None) or repr(source)


def decode_image(source: ImageSource) -> Optional[Image.Image]:
    """
    Decode source into a fully loaded image.

    Args:
        source: raw bytes, a file path or a binary file object

    Returns:
        The decoded image, or None when the source cannot be read as an image
    """
    if source is None:
        return None

    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        with Image.open(source) as opened:
            opened.load()
            image = opened.copy()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.warning(f"Could not decode image {_describe(source)}: {e}")
        return None

    if image.width <= 0 or image.height <= 0:
        logger.warning(f"Decoded image has no pixels: {_describe(source)}")
        return None

    logger.debug(f"Decoded image {_describe(source)}: {image.size} {image.mode}")
    return image


class ImageSlot:
    """The latest decoded image for one input (template or product photo)."""

    def __init__(self, name: str, executor: ThreadPoolExecutor):
        self.name = name
        self._executor = executor
        self._lock = threading.Lock()
        self._generation = 0
        self._image: Optional[Image.Image] = None
        self._pending: Optional[Future] = None

    @property
    def image(self) -> Optional[Image.Image]:
        with self._lock:
            return self._image

    @property
    def pending(self) -> Optional[Future]:
        with self._lock:
            return self._pending

    def request_decode(self, source: ImageSource) -> Future:
        """
        Start decoding source for this slot.

        Any earlier request still queued is cancelled; one already running
        finishes but its result is discarded. The returned future resolves
        to the decoded image (or None) once it has been applied to the slot.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            previous = self._pending
            future = self._executor.submit(self._decode_and_apply, generation, source)
            self._pending = future

        if previous is not None and previous.cancel():
            logger.debug(f"Cancelled superseded {self.name} decode")
        return future

    def clear(self) -> None:
        """Drop the current image and supersede any in-flight decode."""
        with self._lock:
            self._generation += 1
            previous = self._pending
            self._pending = None
            self._image = None

        if previous is not None:
            previous.cancel()

    def _decode_and_apply(self, generation: int, source: ImageSource) -> Optional[Image.Image]:
        image = decode_image(source)

        with self._lock:
            if generation != self._generation:
                logger.debug(f"Discarding stale {self.name} decode (generation {generation})")
                return image
            self._image = image

        if image is None:
            logger.info(f"No {self.name} image available")
        return image


class ImageDecoder:
    """Decodes the template and product images on a small thread pool."""

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='decode')
        self.template = ImageSlot('template', self._executor)
        self.product = ImageSlot('product', self._executor)

    def wait(self, timeout: float = None) -> None:
        """Block until the current request of every slot has been applied."""
        futures = [f for f in (self.template.pending, self.product.pending) if f is not None]
        concurrent.futures.wait(futures, timeout=timeout)

    def snapshot(self) -> Tuple[Optional[Image.Image], Optional[Image.Image]]:
        """Current (template, product) images."""
        return self.template.image, self.product.image

    def close(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
