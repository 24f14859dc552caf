"""
Pytest configuration and fixtures for Template Composer tests.

Provides shared fixtures, synthetic images and helpers used across
the whole test suite.
"""

import io
import shutil
import tempfile
from pathlib import Path

import pytest
from PIL import Image

from template_composer import create_app
from template_composer.composite import Compositor
from template_composer.render_config import Position, Rect, RenderConfig
from template_composer.text import FontProvider


RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)

SMALL_CANVAS = (200, 100)


def solid_image(size, color=RED, mode='RGBA') -> Image.Image:
    """Create a single-color image."""
    return Image.new(mode, size, color[:len(mode)])


def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def assert_pixel_close(actual, expected, tolerance=3):
    """Compare RGBA pixels allowing for resampling round-off."""
    assert len(actual) == len(expected), f"{actual} vs {expected}"
    for a, e in zip(actual, expected):
        assert abs(a - e) <= tolerance, f"{actual} differs from {expected}"


class BrokenImage:
    """Image handle that reports no pixels."""

    def __init__(self, size=(0, 0)):
        self.size = size

    def convert(self, mode):
        raise OSError("cannot read image data")


@pytest.fixture(scope='session')
def shared_fonts():
    """One font provider for the whole run; font lookup touches the file system."""
    return FontProvider()


@pytest.fixture
def small_compositor(shared_fonts):
    """Compositor on a 200x100 canvas."""
    return Compositor(canvas_size=SMALL_CANVAS, fonts=shared_fonts)


@pytest.fixture
def small_config():
    """Layout sized for the small canvas, labels parked in the corners."""
    return RenderConfig(
        product_image_area=Rect(x=50, y=10, width=100, height=80),
        product_name_position=Position(x=2, y=2),
        item_number_position=Position(x=2, y=80),
        product_name_font_size=12,
        item_number_font_size=12,
    )


@pytest.fixture
def temp_work_dir():
    """Create a temporary work directory."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def sample_template_path(temp_work_dir):
    """A canvas-sized light gray template on disk."""
    path = temp_work_dir / "template.png"
    solid_image((1122, 794), (240, 240, 240, 255), mode='RGB').save(path)
    return path


@pytest.fixture
def sample_product_path(temp_work_dir):
    """A wide 800x400 red product photo on disk."""
    path = temp_work_dir / "product.jpg"
    solid_image((800, 400), RED, mode='RGB').save(path, 'JPEG', quality=95)
    return path


@pytest.fixture(scope='session')
def app():
    """Create and configure a test Flask application."""
    log_dir = tempfile.mkdtemp()
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-key',
        'LOG_FILE': str(Path(log_dir) / 'app.log'),
        'MAX_UPLOAD_SIZE': 200 * 1024,
    })

    yield app

    shutil.rmtree(log_dir, ignore_errors=True)


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()
